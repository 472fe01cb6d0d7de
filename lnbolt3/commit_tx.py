#! /usr/bin/python3
import coincurve
import logging
from enum import IntEnum
from typing import Iterable, List, Optional, Tuple
from bitcoin.core import (
    COutPoint,
    CTxOut,
    CTxIn,
    CMutableTransaction,
    b2lx,
)
from bitcoin.core.script import CScript
from .config import ChannelConfig
from .errors import InvalidInputError, ProtocolViolationError
from .fees import (
    commitment_fee,
    htlc_success_fee,
    htlc_timeout_fee,
    is_offered_htlc_dust,
    is_received_htlc_dust,
)
from .funding import Funding
from .htlc_tx import create_htlc_success_tx, create_htlc_timeout_tx
from .keyset import ChannelKeyMaterial, ChannelPublicKeys
from .obscured import locktime_and_sequence, obscure_commitment_number
from .scripts import (
    offered_htlc_script,
    p2wsh,
    received_htlc_script,
    to_local_script,
    to_remote_script,
)
from .shachain import commitment_number_to_index
from .signature import sign_input
from .tweak import CommitmentKeys
from .utils import Side, check_amount, check_bytes, sha256
from .witness import finalize_holder_commitment

logger = logging.getLogger(__name__)


class HTLCDirection(IntEnum):
    """Seen from the commitment holder: offered HTLCs pay the counterparty"""

    offered = 0
    received = 1


class HTLCOutput(object):
    def __init__(
        self,
        direction: HTLCDirection,
        amount_msat: int,
        payment_hash: bytes,
        cltv_expiry: int,
    ):
        self.direction = HTLCDirection(direction)
        self.amount_msat = check_amount(amount_msat, "HTLC amount")
        self.payment_hash = check_bytes(payment_hash, 32, "payment hash")
        if not 0 <= cltv_expiry < 500000000:
            raise InvalidInputError(
                "cltv_expiry {} is not a block height".format(cltv_expiry)
            )
        self.cltv_expiry = cltv_expiry

    @staticmethod
    def from_preimage(
        direction: HTLCDirection, amount_msat: int, preimage: bytes, cltv_expiry: int
    ) -> "HTLCOutput":
        return HTLCOutput(
            direction,
            amount_msat,
            sha256(check_bytes(preimage, 32, "preimage")),
            cltv_expiry,
        )

    def amount_sat(self) -> int:
        # BOLT #3: The amounts for each output MUST be rounded down to whole
        # satoshis.
        return self.amount_msat // 1000

    def second_stage_fee(self, feerate_per_kw: int) -> int:
        if self.direction == HTLCDirection.offered:
            return htlc_timeout_fee(feerate_per_kw)
        return htlc_success_fee(feerate_per_kw)

    def is_dust(self, dust_limit_satoshis: int, feerate_per_kw: int) -> bool:
        if self.direction == HTLCDirection.offered:
            return is_offered_htlc_dust(
                self.amount_sat(), dust_limit_satoshis, feerate_per_kw
            )
        return is_received_htlc_dust(
            self.amount_sat(), dust_limit_satoshis, feerate_per_kw
        )

    def witness_script(self, keys: CommitmentKeys) -> CScript:
        if self.direction == HTLCDirection.offered:
            return offered_htlc_script(
                keys.revocation_key,
                keys.local_htlc_key,
                keys.remote_htlc_key,
                self.payment_hash,
            )
        return received_htlc_script(
            keys.revocation_key,
            keys.local_htlc_key,
            keys.remote_htlc_key,
            self.payment_hash,
            self.cltv_expiry,
        )

    def __str__(self) -> str:
        return "htlc({},{},{},{})".format(
            self.direction.name,
            self.amount_msat,
            self.payment_hash.hex(),
            self.cltv_expiry,
        )


class OutputWithMetadata(object):
    """A commitment output before it is sorted into place"""

    def __init__(
        self,
        value: int,
        script: CScript,
        cltv_expiry: Optional[int] = None,
        witness_script: Optional[CScript] = None,
        htlc: Optional[HTLCOutput] = None,
    ):
        self.value = value
        self.script = script
        self.cltv_expiry = cltv_expiry
        self.witness_script = witness_script
        self.htlc = htlc

    def sort_key(self) -> Tuple[int, bytes, int]:
        # BOLT #3:
        # ## Transaction Input and Output Ordering
        #
        # Lexicographic ordering: see
        # [BIP69](https://github.com/bitcoin/bips/blob/master/bip-0069.mediawiki).
        # In the case of identical HTLC outputs, the outputs are ordered in
        # increasing `cltv_expiry` order.
        if self.cltv_expiry is None:
            return (self.value, bytes(self.script), 0)
        return (self.value, bytes(self.script), self.cltv_expiry)

    def to_txout(self) -> CTxOut:
        return CTxOut(self.value, self.script)


def sort_outputs(outputs: Iterable[OutputWithMetadata]) -> List[OutputWithMetadata]:
    return sorted(outputs, key=lambda o: o.sort_key())


class Commitment(object):
    """One commitment transaction, as built by (and for) its holder.

    Balances are in millisatoshi, excluding the HTLCs in flight; @keys are
    the holder's CommitmentKeys for this commitment number.
    """

    def __init__(
        self,
        funding_outpoint: COutPoint,
        keys: CommitmentKeys,
        local_payment_basepoint: coincurve.PublicKey,
        remote_payment_basepoint: coincurve.PublicKey,
        to_local_msat: int,
        to_remote_msat: int,
        commitment_number: int,
        config: ChannelConfig,
        htlcs: Iterable[HTLCOutput] = (),
    ):
        self.funding_outpoint = funding_outpoint
        self.keys = keys
        self.payment_basepoints = (local_payment_basepoint, remote_payment_basepoint)
        self.amounts = (
            check_amount(to_local_msat, "to_local"),
            check_amount(to_remote_msat, "to_remote"),
        )
        # Validates the range, too.
        commitment_number_to_index(commitment_number)
        self.commitment_number = commitment_number
        self.config = config
        self.htlcs = list(htlcs)

    def obscured_commitment_number(self) -> int:
        opener = self.config.opener
        return obscure_commitment_number(
            self.commitment_number,
            self.payment_basepoints[opener],
            self.payment_basepoints[opener.other()],
        )

    def untrimmed_htlcs(self) -> List[HTLCOutput]:
        htlcs = []
        for htlc in self.htlcs:
            if htlc.is_dust(self.config.dust_limit_satoshis, self.config.feerate_per_kw):
                logger.debug("Trimming dust {}".format(htlc))
                continue
            htlcs.append(htlc)
        return htlcs

    def fee(self) -> int:
        return commitment_fee(self.config.feerate_per_kw, len(self.untrimmed_htlcs()))

    def _balances(self) -> Tuple[int, int]:
        """to_local and to_remote amounts in satoshi, after fee"""
        amounts = [a // 1000 for a in self.amounts]
        fee = self.fee()
        opener = self.config.opener
        # BOLT #3:
        # 4. Subtract this base fee from the funder (either `to_local` or
        # `to_remote`), with a floor of 0 (see [Fee Payment](#fee-payment)).
        if amounts[opener] < fee:
            logger.debug(
                "Opener balance {} cannot cover fee {}".format(amounts[opener], fee)
            )
        amounts[opener] = max(amounts[opener] - fee, 0)
        return amounts[0], amounts[1]

    def outputs(self) -> List[OutputWithMetadata]:
        """Every untrimmed output, in transaction order"""
        outs: List[OutputWithMetadata] = []
        for htlc in self.untrimmed_htlcs():
            witness_script = htlc.witness_script(self.keys)
            outs.append(
                OutputWithMetadata(
                    htlc.amount_sat(),
                    p2wsh(witness_script),
                    htlc.cltv_expiry,
                    witness_script,
                    htlc,
                )
            )

        to_local, to_remote = self._balances()
        dust_limit = self.config.dust_limit_satoshis
        # BOLT #3:
        # 6. If the `to_local` amount is greater or equal to
        #    `dust_limit_satoshis`, add a `to_local` output.
        if to_local >= dust_limit:
            witness_script = to_local_script(
                self.keys.revocation_key,
                self.config.to_self_delay,
                self.keys.local_delayed_payment_key,
            )
            outs.append(
                OutputWithMetadata(to_local, p2wsh(witness_script), None, witness_script)
            )
        # 7. If the `to_remote` amount is greater or equal to
        #    `dust_limit_satoshis`, add a `to_remote` output.
        if to_remote >= dust_limit:
            outs.append(
                OutputWithMetadata(
                    to_remote, to_remote_script(self.payment_basepoints[Side.remote])
                )
            )

        return sort_outputs(outs)

    def unsigned_tx(self) -> CMutableTransaction:
        locktime, sequence = locktime_and_sequence(self.obscured_commitment_number())

        # BOLT #3:
        # ## Commitment Transaction
        #
        # * version: 2
        # * locktime: upper 8 bits are 0x20, lower 24 bits are the lower 24 bits of the obscured commitment number
        # * txin count: 1
        #    * `txin[0]` outpoint: `txid` and `output_index` from `funding_created` message
        #    * `txin[0]` sequence: upper 8 bits are 0x80, lower 24 bits are upper 24 bits of the obscured commitment number
        #    * `txin[0]` script bytes: 0
        txin = CTxIn(self.funding_outpoint, nSequence=sequence)
        outputs = self.outputs()
        tx = CMutableTransaction(
            vin=[txin],
            vout=[o.to_txout() for o in outputs],
            nVersion=2,
            nLockTime=locktime,
        )
        logger.debug(
            "commitment {} #{}: {} outputs, fee {}".format(
                b2lx(tx.GetTxid()), self.commitment_number, len(outputs), self.fee()
            )
        )
        return tx

    def htlc_txs(self) -> List[Tuple[CMutableTransaction, OutputWithMetadata]]:
        """Unsigned second-stage txs (with the output they spend), in output order"""
        commit_txid = self.unsigned_tx().GetTxid()
        ret = []
        for outnum, out in enumerate(self.outputs()):
            # to_local or to_remote output?
            if out.htlc is None:
                continue
            if out.htlc.direction == HTLCDirection.offered:
                tx = create_htlc_timeout_tx(
                    commit_txid,
                    outnum,
                    out.value,
                    out.htlc.cltv_expiry,
                    self.config.feerate_per_kw,
                    self.keys.revocation_key,
                    self.config.to_self_delay,
                    self.keys.local_delayed_payment_key,
                )
            else:
                tx = create_htlc_success_tx(
                    commit_txid,
                    outnum,
                    out.value,
                    self.config.feerate_per_kw,
                    self.keys.revocation_key,
                    self.config.to_self_delay,
                    self.keys.local_delayed_payment_key,
                )
            ret.append((tx, out))
        return ret

    def check_funding(self, funding: Funding) -> None:
        """Balances plus HTLCs in flight must fit in the funding output"""
        total = sum(self.amounts) + sum(h.amount_msat for h in self.htlcs)
        if total > funding.amount * 1000:
            raise ProtocolViolationError(
                "commitment spends {} msat from a {} sat funding output".format(
                    total, funding.amount
                )
            )

    def sign(self, funding: Funding, funding_privkey: coincurve.PrivateKey) -> bytes:
        self.check_funding(funding)
        return sign_input(
            self.unsigned_tx(), 0, funding.redeemscript(), funding.amount, funding_privkey
        )

    def htlc_sigs(self, htlc_privkey: coincurve.PrivateKey) -> List[bytes]:
        """Signatures for each HTLC tx, in commitment output order"""
        # BOLT #2:
        # - MUST include one `htlc_signature` for every HTLC transaction
        #   corresponding to the ordering of the commitment transaction
        return [
            sign_input(tx, 0, out.witness_script, out.value, htlc_privkey)
            for tx, out in self.htlc_txs()
        ]

    def signed_tx(
        self, funding: Funding, local_sig: bytes, remote_sig: bytes
    ) -> CMutableTransaction:
        self.check_funding(funding)
        local_pubkey, remote_pubkey = funding.pubkeys
        return finalize_holder_commitment(
            self.unsigned_tx(), local_pubkey, local_sig, remote_pubkey, remote_sig
        )


def build_commitment_transaction(
    funding_outpoint: COutPoint,
    keys: CommitmentKeys,
    local_payment_basepoint: coincurve.PublicKey,
    remote_payment_basepoint: coincurve.PublicKey,
    to_local_msat: int,
    to_remote_msat: int,
    htlcs: Iterable[HTLCOutput],
    commitment_number: int,
    config: ChannelConfig,
) -> CMutableTransaction:
    return Commitment(
        funding_outpoint,
        keys,
        local_payment_basepoint,
        remote_payment_basepoint,
        to_local_msat,
        to_remote_msat,
        commitment_number,
        config,
        htlcs,
    ).unsigned_tx()


def commitment_from_channel_keys(
    funding_outpoint: COutPoint,
    local_keys: ChannelKeyMaterial,
    remote_pubkeys: ChannelPublicKeys,
    to_local_msat: int,
    to_remote_msat: int,
    htlcs: Iterable[HTLCOutput],
    commitment_number: int,
    config: ChannelConfig,
) -> Commitment:
    """Derive this commitment number's keys, then build our commitment"""
    keys = local_keys.commitment_keys(
        commitment_number_to_index(commitment_number),
        remote_pubkeys.revocation_basepoint,
        remote_pubkeys.htlc_basepoint,
    )
    return Commitment(
        funding_outpoint,
        keys,
        local_keys.payment_basepoint(),
        remote_pubkeys.payment_basepoint,
        to_local_msat,
        to_remote_msat,
        commitment_number,
        config,
        htlcs,
    )


def build_commitment_from_channel_keys(
    funding_outpoint: COutPoint,
    local_keys: ChannelKeyMaterial,
    remote_pubkeys: ChannelPublicKeys,
    to_local_msat: int,
    to_remote_msat: int,
    htlcs: Iterable[HTLCOutput],
    commitment_number: int,
    config: ChannelConfig,
) -> CMutableTransaction:
    return commitment_from_channel_keys(
        funding_outpoint,
        local_keys,
        remote_pubkeys,
        to_local_msat,
        to_remote_msat,
        htlcs,
        commitment_number,
        config,
    ).unsigned_tx()
