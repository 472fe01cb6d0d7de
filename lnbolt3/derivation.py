#! /usr/bin/python3
"""BIP32 derivation of per-channel basepoint secrets.

Every channel secret lives at the fixed path

    m/1017'/0'/<key_family>'/0/<channel_index>

so that the same seed always reproduces the same channel keys.
"""
import coincurve
import hashlib
import hmac
import logging
import struct
from abc import ABC, abstractmethod
from coincurve.context import Context, GLOBAL_CONTEXT
from enum import IntEnum
from typing import List, Optional
from .chainparams import chainparams
from .errors import InvalidInputError, CryptoImpossibilityError
from .keyset import ChannelKeyMaterial
from .utils import check_bytes, ripemd160, sha256

logger = logging.getLogger(__name__)

HARDENED = 0x80000000
PURPOSE = 1017
COIN_TYPE = 0


class KeyFamily(IntEnum):
    multisig = 0
    revocation_base = 1
    htlc_base = 2
    payment_base = 3
    delay_base = 4
    commitment_seed = 5
    node_key = 6


class ExtendedKey(object):
    """A BIP32 extended private key"""

    def __init__(
        self,
        secret: bytes,
        chain_code: bytes,
        depth: int = 0,
        parent_fingerprint: bytes = bytes(4),
        child_number: int = 0,
        context: Context = GLOBAL_CONTEXT,
    ):
        self.privkey = coincurve.PrivateKey(secret, context)
        self.chain_code = check_bytes(chain_code, 32, "chain code")
        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.child_number = child_number
        self.context = context

    @staticmethod
    def from_seed(seed: bytes, context: Context = GLOBAL_CONTEXT) -> "ExtendedKey":
        # BIP32: Generate a seed byte sequence S of a chosen length
        # (between 128 and 512 bits)
        if not 16 <= len(seed) <= 64:
            raise InvalidInputError(
                "BIP32 seed must be 16 to 64 bytes, not {}".format(len(seed))
            )
        i = hmac.new(b"Bitcoin seed", seed, hashlib.sha512).digest()
        try:
            return ExtendedKey(i[:32], i[32:], context=context)
        except ValueError:
            raise CryptoImpossibilityError("Master key for seed is invalid")

    @property
    def secret(self) -> bytes:
        return self.privkey.secret

    def public_key(self) -> coincurve.PublicKey:
        return coincurve.PublicKey.from_secret(self.privkey.secret, self.context)

    def fingerprint(self) -> bytes:
        return ripemd160(sha256(self.public_key().format()))[:4]

    def derive_child(self, index: int) -> "ExtendedKey":
        if not 0 <= index <= 0xFFFFFFFF:
            raise InvalidInputError("child index {} out of range".format(index))
        if index & HARDENED:
            data = b"\x00" + self.privkey.secret + struct.pack(">I", index)
        else:
            data = self.public_key().format() + struct.pack(">I", index)
        i = hmac.new(self.chain_code, data, hashlib.sha512).digest()

        # BIP32: In case parse256(IL) >= n or ki = 0, the resulting key is
        # invalid, and one should proceed with the next value for i.
        # Callers use fixed indices, so we cannot skip: that is fatal.
        try:
            child = self.privkey.add(i[:32], update=False)
        except ValueError:
            raise CryptoImpossibilityError(
                "BIP32 child {} is not a valid key".format(index)
            )
        return ExtendedKey(
            child.secret,
            i[32:],
            self.depth + 1,
            self.fingerprint(),
            index,
            self.context,
        )

    @staticmethod
    def parse_path(path: str) -> List[int]:
        """Parse a path like m/1017'/0'/1'/0/7 into child numbers"""
        parts = path.strip().split("/")
        if parts[0] != "m":
            raise InvalidInputError("{} does not start with m/".format(path))
        indices = []
        for part in parts[1:]:
            hardened = part.endswith(("'", "h", "H"))
            num = part.rstrip("'hH")
            if not num.isdigit() or int(num) >= HARDENED:
                raise InvalidInputError("bad path component {} in {}".format(part, path))
            indices.append(int(num) + (HARDENED if hardened else 0))
        return indices

    def derive_path(self, path: str) -> "ExtendedKey":
        key = self
        for index in self.parse_path(path):
            key = key.derive_child(index)
        return key


def derivation_path(key_family: KeyFamily, channel_index: int) -> str:
    return "m/{}'/{}'/{}'/0/{}".format(
        PURPOSE, COIN_TYPE, int(key_family), channel_index
    )


class KeysManager(object):
    """Owns the master key for one seed, and derives channel keys from it"""

    def __init__(
        self,
        seed: bytes,
        network: str = "regtest",
        context: Context = GLOBAL_CONTEXT,
        funding_key_provider: Optional["FundingKeyProvider"] = None,
    ):
        check_bytes(seed, 32, "seed")
        # Rejects unknown networks.
        chainparams(network)
        self.context = context
        self.master_key = ExtendedKey.from_seed(seed, context)
        if funding_key_provider is None:
            funding_key_provider = DerivedFundingKeyProvider(self)
        self.funding_key_provider = funding_key_provider

    def derive_key(self, key_family: KeyFamily, channel_index: int) -> bytes:
        """Derive the 32-byte secret for @key_family of channel @channel_index"""
        if not 0 <= channel_index < HARDENED:
            raise InvalidInputError(
                "channel index {} out of range".format(channel_index)
            )
        path = derivation_path(key_family, channel_index)
        logger.debug("Deriving {} key at {}".format(key_family.name, path))
        return self.master_key.derive_path(path).secret

    def node_key(self) -> coincurve.PrivateKey:
        return coincurve.PrivateKey(
            self.derive_key(KeyFamily.node_key, 0), self.context
        )

    def derive_channel_keys(self, channel_index: int) -> ChannelKeyMaterial:
        """All the basepoint secrets and commitment seed for one channel"""
        return ChannelKeyMaterial(
            funding_secret=self.funding_key_provider.funding_key(channel_index),
            revocation_base_secret=self.derive_key(
                KeyFamily.revocation_base, channel_index
            ),
            payment_base_secret=self.derive_key(KeyFamily.payment_base, channel_index),
            delayed_payment_base_secret=self.derive_key(
                KeyFamily.delay_base, channel_index
            ),
            htlc_base_secret=self.derive_key(KeyFamily.htlc_base, channel_index),
            commitment_seed=self.derive_key(KeyFamily.commitment_seed, channel_index),
            context=self.context,
        )


class FundingKeyProvider(ABC):
    """Where a channel's funding (2-of-2 multisig) secret comes from.

    BOLT 3 does not mandate this: some wallets derive it next to the
    basepoints, others take it from their on-chain wallet.
    """

    @abstractmethod
    def funding_key(self, channel_index: int) -> bytes:
        pass


class DerivedFundingKeyProvider(FundingKeyProvider):
    def __init__(self, keys_manager: KeysManager):
        self.keys_manager = keys_manager

    def funding_key(self, channel_index: int) -> bytes:
        return self.keys_manager.derive_key(KeyFamily.multisig, channel_index)


class StaticFundingKeyProvider(FundingKeyProvider):
    """Use the same externally-supplied secret for every channel"""

    def __init__(self, secret: bytes):
        self.secret = check_bytes(secret, 32, "funding secret")

    def funding_key(self, channel_index: int) -> bytes:
        return self.secret


def derive_basepoint_secret(
    master: KeysManager, key_family: KeyFamily, channel_index: int
) -> bytes:
    return master.derive_key(key_family, channel_index)


def derive_channel_key_material(
    master: KeysManager, channel_index: int
) -> ChannelKeyMaterial:
    return master.derive_channel_keys(channel_index)
