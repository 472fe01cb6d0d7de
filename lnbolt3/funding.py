# Support for funding txs.
import coincurve
import logging
from coincurve.context import Context, GLOBAL_CONTEXT
from typing import Optional, Tuple
from bitcoin.core import (
    COutPoint,
    CScript,
    CTxIn,
    CTxOut,
    CMutableTransaction,
    Hash160,
    b2lx,
    lx,
)
import bitcoin.core.script as script
from .errors import InvalidInputError
from .scripts import funding_script, p2wpkh, p2wsh, segwit_address, sort_by_keys
from .signature import sign_input
from .utils import check_amount, check_hex
from .witness import with_witness

logger = logging.getLogger(__name__)


def create_funding_transaction(
    outpoint: COutPoint,
    funding_amount: int,
    local_funding_pubkey: coincurve.PublicKey,
    remote_funding_pubkey: coincurve.PublicKey,
    change: Optional[Tuple[CScript, int]] = None,
) -> CMutableTransaction:
    """Spend @outpoint into the 2-of-2 funding output (plus optional change)"""
    check_amount(funding_amount, "funding amount")
    txin = CTxIn(outpoint, nSequence=0xFFFFFFFF)
    txouts = [
        CTxOut(
            funding_amount,
            p2wsh(funding_script(local_funding_pubkey, remote_funding_pubkey)),
        )
    ]
    if change is not None:
        change_script, change_amount = change
        txouts.append(CTxOut(check_amount(change_amount, "change"), change_script))
    tx = CMutableTransaction([txin], txouts, nVersion=2, nLockTime=0)
    logger.debug("funding tx {} for {} sat".format(b2lx(tx.GetTxid()), funding_amount))
    return tx


class Funding(object):
    """The channel's funding output, as both peers see it"""

    def __init__(
        self,
        funding_txid: str,
        funding_output_index: int,
        funding_amount: int,
        local_funding_pubkey: coincurve.PublicKey,
        remote_funding_pubkey: coincurve.PublicKey,
    ):
        # txid in bitcoin display order, as bitcoin-cli shows it.
        self.txid = check_hex(funding_txid, 64)
        self.output_index = funding_output_index
        self.amount = check_amount(funding_amount, "funding amount")
        self.pubkeys = (local_funding_pubkey, remote_funding_pubkey)

    def outpoint(self) -> COutPoint:
        return COutPoint(lx(self.txid), self.output_index)

    def funding_pubkeys_for_tx(self) -> Tuple[coincurve.PublicKey, coincurve.PublicKey]:
        """Returns funding pubkeys, in tx order"""
        return sort_by_keys(*self.pubkeys)

    def redeemscript(self) -> CScript:
        return funding_script(*self.pubkeys)

    def locking_script(self) -> CScript:
        return p2wsh(self.redeemscript())

    def address(self, network: str) -> str:
        return segwit_address(self.locking_script(), network)

    def channel_id(self) -> str:
        # BOLT #2: This message introduces the `channel_id` to identify the
        # channel. It's derived from the funding transaction by combining the
        # `funding_txid` and the `funding_output_index`, using big-endian
        # exclusive-OR (i.e. `funding_output_index` alters the last 2 bytes).
        chanid = bytearray(lx(self.txid))
        chanid[-1] ^= self.output_index % 256
        chanid[-2] ^= self.output_index // 256
        return chanid.hex()

    @staticmethod
    def from_tx(
        tx: CMutableTransaction,
        local_funding_pubkey: coincurve.PublicKey,
        remote_funding_pubkey: coincurve.PublicKey,
    ) -> "Funding":
        """Find the funding output within @tx"""
        want = p2wsh(funding_script(local_funding_pubkey, remote_funding_pubkey))
        for n, txout in enumerate(tx.vout):
            if txout.scriptPubKey == want:
                return Funding(
                    b2lx(tx.GetTxid()),
                    n,
                    txout.nValue,
                    local_funding_pubkey,
                    remote_funding_pubkey,
                )
        raise InvalidInputError(
            "tx {} has no funding output".format(b2lx(tx.GetTxid()))
        )

    @staticmethod
    def from_utxo(
        txid_in: str,
        tx_index_in: int,
        sats: int,
        privkey: coincurve.PrivateKey,
        fee: int,
        funding_amount: int,
        local_funding_pubkey: coincurve.PublicKey,
        remote_funding_pubkey: coincurve.PublicKey,
        change_script: Optional[CScript] = None,
        dust_limit: int = 546,
        context: Context = GLOBAL_CONTEXT,
    ) -> Tuple["Funding", CMutableTransaction]:
        """Make a funding transaction by spending this P2WPKH utxo using privkey: return Funding, tx.

        Change below @dust_limit is left to the fee rather than creating an
        unrelayable output."""
        change_amount = sats - fee - funding_amount
        if change_amount < 0:
            raise InvalidInputError(
                "utxo of {} sat cannot fund {} sat plus {} fee".format(
                    sats, funding_amount, fee
                )
            )

        inkey_pub = coincurve.PublicKey.from_secret(privkey.secret, context)
        if change_script is None:
            change_script = p2wpkh(inkey_pub)
        change = None
        if change_amount >= dust_limit:
            change = (change_script, change_amount)
        elif change_amount:
            logger.debug("Adding {} sat dust change to the fee".format(change_amount))

        tx = create_funding_transaction(
            COutPoint(lx(check_hex(txid_in, 64)), tx_index_in),
            funding_amount,
            local_funding_pubkey,
            remote_funding_pubkey,
            change,
        )

        # while we're here, sign the transaction: a P2WPKH spend signs the
        # equivalent P2PKH script.
        scriptcode = CScript(
            [
                script.OP_DUP,
                script.OP_HASH160,
                Hash160(inkey_pub.format()),
                script.OP_EQUALVERIFY,
                script.OP_CHECKSIG,
            ]
        )
        sig = sign_input(tx, 0, scriptcode, sats, privkey)
        signed = with_witness(tx, 0, [sig, inkey_pub.format()])

        funding = Funding.from_tx(signed, local_funding_pubkey, remote_funding_pubkey)
        logger.debug("finalized funding {}".format(signed.serialize().hex()))
        return funding, signed
