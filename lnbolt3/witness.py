#! /usr/bin/python3
import coincurve
from typing import List
from bitcoin.core import (
    CMutableTransaction,
    CTxWitness,
    CTxInWitness,
    CScriptWitness,
)
from bitcoin.core.script import CScript
from .errors import InvalidInputError
from .scripts import funding_script
from .utils import check_bytes


def with_witness(
    tx: CMutableTransaction, input_index: int, stack: List[bytes]
) -> CMutableTransaction:
    """Return a copy of @tx with input @input_index's witness replaced.

    @tx itself is left alone: an unsigned tx may still be needed to
    compute sighashes for the other party.
    """
    if not 0 <= input_index < len(tx.vin):
        raise InvalidInputError(
            "tx has no input {} ({} inputs)".format(input_index, len(tx.vin))
        )
    witnesses = []
    for i in range(len(tx.vin)):
        if i == input_index:
            witnesses.append(CTxInWitness(CScriptWitness(stack)))
        elif i < len(tx.wit.vtxinwit):
            witnesses.append(tx.wit.vtxinwit[i])
        else:
            witnesses.append(CTxInWitness())
    return CMutableTransaction(
        list(tx.vin),
        list(tx.vout),
        nLockTime=tx.nLockTime,
        nVersion=tx.nVersion,
        witness=CTxWitness(witnesses),
    )


def funding_witness(
    pubkey_one: coincurve.PublicKey,
    sig_one: bytes,
    pubkey_two: coincurve.PublicKey,
    sig_two: bytes,
) -> List[bytes]:
    # BOLT #3:
    # * `txin[0]` witness: `0 <signature_for_pubkey1> <signature_for_pubkey2>`
    # The leading empty element feeds OP_CHECKMULTISIG's extra pop.
    if pubkey_one.format() < pubkey_two.format():
        sigs = [sig_one, sig_two]
    else:
        sigs = [sig_two, sig_one]
    return [b""] + sigs + [bytes(funding_script(pubkey_one, pubkey_two))]


def to_local_revocation_witness(sig: bytes, to_local_script: CScript) -> List[bytes]:
    # BOLT #3:
    # If a revoked commitment transaction is published, the other party can
    # spend this output immediately with the following witness:
    #
    #     <revocation_sig> 1
    return [sig, b"\x01", bytes(to_local_script)]


def to_local_delayed_witness(sig: bytes, to_local_script: CScript) -> List[bytes]:
    # BOLT #3:
    # The output is spent by an input with `nSequence` field set to
    # `to_self_delay` (which can only be valid after that duration has
    # passed) and witness:
    #
    #     <local_delayedsig> <>
    return [sig, b"", bytes(to_local_script)]


def htlc_timeout_witness(
    remote_sig: bytes, local_sig: bytes, htlc_script: CScript
) -> List[bytes]:
    # BOLT #3:
    # * `txin[0]` witness stack: `0 <remotehtlcsig> <localhtlcsig>  <>` for
    #   HTLC-timeout
    return [b"", remote_sig, local_sig, b"", bytes(htlc_script)]


def htlc_success_witness(
    remote_sig: bytes, local_sig: bytes, preimage: bytes, htlc_script: CScript
) -> List[bytes]:
    # BOLT #3:
    # * `txin[0]` witness stack: `0 <remotehtlcsig> <localhtlcsig>
    #   <payment_preimage>` for HTLC-success
    check_bytes(preimage, 32, "payment preimage")
    return [b"", remote_sig, local_sig, preimage, bytes(htlc_script)]


def finalize_holder_commitment(
    unsigned_tx: CMutableTransaction,
    local_funding_pubkey: coincurve.PublicKey,
    local_sig: bytes,
    remote_funding_pubkey: coincurve.PublicKey,
    remote_sig: bytes,
) -> CMutableTransaction:
    return with_witness(
        unsigned_tx,
        0,
        funding_witness(local_funding_pubkey, local_sig, remote_funding_pubkey, remote_sig),
    )


def finalize_htlc_timeout(
    unsigned_tx: CMutableTransaction,
    remote_sig: bytes,
    local_sig: bytes,
    htlc_script: CScript,
) -> CMutableTransaction:
    return with_witness(
        unsigned_tx, 0, htlc_timeout_witness(remote_sig, local_sig, htlc_script)
    )


def finalize_htlc_success(
    unsigned_tx: CMutableTransaction,
    remote_sig: bytes,
    local_sig: bytes,
    preimage: bytes,
    htlc_script: CScript,
) -> CMutableTransaction:
    return with_witness(
        unsigned_tx,
        0,
        htlc_success_witness(remote_sig, local_sig, preimage, htlc_script),
    )
