#! /usr/bin/python3
import coincurve
import logging
from bitcoin.core import (
    COutPoint,
    CTxIn,
    CTxOut,
    CMutableTransaction,
    b2lx,
)
from .fees import htlc_success_fee, htlc_timeout_fee, second_stage_amount
from .scripts import p2wsh, to_local_script
from .utils import check_bytes

logger = logging.getLogger(__name__)


def create_htlc_tx(
    commitment_txid: bytes,
    output_index: int,
    amount_sat: int,
    locktime: int,
    revocation_pubkey: coincurve.PublicKey,
    to_self_delay: int,
    local_delayed_pubkey: coincurve.PublicKey,
) -> CMutableTransaction:
    """@commitment_txid is in wire (internal) byte order"""
    # BOLT #3:
    # ## HTLC-Timeout and HTLC-Success Transactions
    #
    # These HTLC transactions are almost identical, except the
    # HTLC-timeout transaction is timelocked. Both
    # HTLC-timeout/HTLC-success transactions can be spent by a valid
    # penalty transaction.
    # ...
    # * txin count: 1
    # * `txin[0]` outpoint: `txid` of the commitment transaction and
    #    `output_index` of the matching HTLC output for the HTLC transaction
    # * `txin[0]` sequence: `0`
    # * `txin[0]` script bytes: `0`
    check_bytes(commitment_txid, 32, "commitment txid")
    txin = CTxIn(COutPoint(commitment_txid, output_index), nSequence=0)

    # BOLT #3:
    # * txout count: 1
    # * `txout[0]` amount: the HTLC amount minus fees (see [Fee
    #    Calculation](#fee-calculation))
    # * `txout[0]` script: version-0 P2WSH with witness script as shown below
    txout = CTxOut(
        amount_sat,
        p2wsh(to_local_script(revocation_pubkey, to_self_delay, local_delayed_pubkey)),
    )

    # BOLT #3:
    # * version: 2
    # * locktime: `0` for HTLC-success, `cltv_expiry` for HTLC-timeout
    return CMutableTransaction(
        vin=[txin], vout=[txout], nVersion=2, nLockTime=locktime
    )


def create_htlc_timeout_tx(
    commitment_txid: bytes,
    output_index: int,
    htlc_amount_sat: int,
    cltv_expiry: int,
    feerate_per_kw: int,
    revocation_pubkey: coincurve.PublicKey,
    to_self_delay: int,
    local_delayed_pubkey: coincurve.PublicKey,
) -> CMutableTransaction:
    amount = second_stage_amount(htlc_amount_sat, htlc_timeout_fee(feerate_per_kw))
    tx = create_htlc_tx(
        commitment_txid,
        output_index,
        amount,
        cltv_expiry,
        revocation_pubkey,
        to_self_delay,
        local_delayed_pubkey,
    )
    logger.debug(
        "htlc-timeout {} spends {}:{} for {} sat".format(
            b2lx(tx.GetTxid()), b2lx(commitment_txid), output_index, amount
        )
    )
    return tx


def create_htlc_success_tx(
    commitment_txid: bytes,
    output_index: int,
    htlc_amount_sat: int,
    feerate_per_kw: int,
    revocation_pubkey: coincurve.PublicKey,
    to_self_delay: int,
    local_delayed_pubkey: coincurve.PublicKey,
) -> CMutableTransaction:
    amount = second_stage_amount(htlc_amount_sat, htlc_success_fee(feerate_per_kw))
    tx = create_htlc_tx(
        commitment_txid,
        output_index,
        amount,
        0,
        revocation_pubkey,
        to_self_delay,
        local_delayed_pubkey,
    )
    logger.debug(
        "htlc-success {} spends {}:{} for {} sat".format(
            b2lx(tx.GetTxid()), b2lx(commitment_txid), output_index, amount
        )
    )
    return tx
