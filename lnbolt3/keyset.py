#! /usr/bin/python3
import coincurve
from coincurve.context import Context, GLOBAL_CONTEXT
from .shachain import build_commitment_secret
from .tweak import CommitmentKeys, derive_private_key
from .utils import check_bytes, privkey_from_scalar


class ChannelPublicKeys(object):
    """The basepoints we send to the counterparty in open/accept_channel"""

    def __init__(
        self,
        funding_pubkey: coincurve.PublicKey,
        revocation_basepoint: coincurve.PublicKey,
        payment_basepoint: coincurve.PublicKey,
        delayed_payment_basepoint: coincurve.PublicKey,
        htlc_basepoint: coincurve.PublicKey,
    ):
        self.funding_pubkey = funding_pubkey
        self.revocation_basepoint = revocation_basepoint
        self.payment_basepoint = payment_basepoint
        self.delayed_payment_basepoint = delayed_payment_basepoint
        self.htlc_basepoint = htlc_basepoint

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChannelPublicKeys):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "funding_pubkey": self.funding_pubkey.format().hex(),
            "revocation_basepoint": self.revocation_basepoint.format().hex(),
            "payment_basepoint": self.payment_basepoint.format().hex(),
            "delayed_payment_basepoint": self.delayed_payment_basepoint.format().hex(),
            "htlc_basepoint": self.htlc_basepoint.format().hex(),
        }


class ChannelKeyMaterial(object):
    """The secrets for one side of one channel: never leaves this node"""

    def __init__(
        self,
        funding_secret: bytes,
        revocation_base_secret: bytes,
        payment_base_secret: bytes,
        delayed_payment_base_secret: bytes,
        htlc_base_secret: bytes,
        commitment_seed: bytes,
        context: Context = GLOBAL_CONTEXT,
    ):
        self.context = context
        self.funding_privkey = privkey_from_scalar(funding_secret, context)
        self.revocation_base_secret = privkey_from_scalar(
            revocation_base_secret, context
        )
        self.payment_base_secret = privkey_from_scalar(payment_base_secret, context)
        self.delayed_payment_base_secret = privkey_from_scalar(
            delayed_payment_base_secret, context
        )
        self.htlc_base_secret = privkey_from_scalar(htlc_base_secret, context)
        self.commitment_seed = check_bytes(commitment_seed, 32, "commitment seed")

    def _point(self, secret: coincurve.PrivateKey) -> coincurve.PublicKey:
        return coincurve.PublicKey.from_secret(secret.secret, self.context)

    def funding_pubkey(self) -> coincurve.PublicKey:
        return self._point(self.funding_privkey)

    def revocation_basepoint(self) -> coincurve.PublicKey:
        return self._point(self.revocation_base_secret)

    def payment_basepoint(self) -> coincurve.PublicKey:
        return self._point(self.payment_base_secret)

    def delayed_payment_basepoint(self) -> coincurve.PublicKey:
        return self._point(self.delayed_payment_base_secret)

    def htlc_basepoint(self) -> coincurve.PublicKey:
        return self._point(self.htlc_base_secret)

    def to_public_keys(self) -> ChannelPublicKeys:
        return ChannelPublicKeys(
            self.funding_pubkey(),
            self.revocation_basepoint(),
            self.payment_basepoint(),
            self.delayed_payment_basepoint(),
            self.htlc_basepoint(),
        )

    def per_commitment_secret(self, state_index: int) -> coincurve.PrivateKey:
        return privkey_from_scalar(
            build_commitment_secret(self.commitment_seed, state_index), self.context
        )

    def per_commitment_point(self, state_index: int) -> coincurve.PublicKey:
        return self._point(self.per_commitment_secret(state_index))

    def commitment_keys(
        self,
        state_index: int,
        remote_revocation_basepoint: coincurve.PublicKey,
        remote_htlc_basepoint: coincurve.PublicKey,
    ) -> CommitmentKeys:
        """Keys for our own commitment transaction at @state_index"""
        return CommitmentKeys.from_basepoints(
            self.per_commitment_point(state_index),
            self.delayed_payment_basepoint(),
            self.htlc_basepoint(),
            remote_revocation_basepoint,
            remote_htlc_basepoint,
            self.context,
        )

    def delayed_payment_privkey(
        self, per_commitment_point: coincurve.PublicKey
    ) -> coincurve.PrivateKey:
        return derive_private_key(
            self.delayed_payment_base_secret, per_commitment_point, self.context
        )

    def htlc_privkey(
        self, per_commitment_point: coincurve.PublicKey
    ) -> coincurve.PrivateKey:
        return derive_private_key(
            self.htlc_base_secret, per_commitment_point, self.context
        )
