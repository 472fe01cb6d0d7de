#! /usr/bin/python3
import coincurve
from coincurve.context import Context, GLOBAL_CONTEXT
from bitcoin.core import CMutableTransaction
import bitcoin.core.script as script
from bitcoin.core.script import CScript
from .errors import InvalidInputError


def sighash(
    tx: CMutableTransaction, input_index: int, witness_script: CScript, amount: int
) -> bytes:
    """BIP143 digest for a SIGHASH_ALL spend of a v0 witness input"""
    if not 0 <= input_index < len(tx.vin):
        raise InvalidInputError(
            "tx has no input {} ({} inputs)".format(input_index, len(tx.vin))
        )
    return script.SignatureHash(
        witness_script,
        tx,
        inIdx=input_index,
        hashtype=script.SIGHASH_ALL,
        amount=amount,
        sigversion=script.SIGVERSION_WITNESS_V0,
    )


def sign_input(
    tx: CMutableTransaction,
    input_index: int,
    witness_script: CScript,
    amount: int,
    privkey: coincurve.PrivateKey,
) -> bytes:
    """DER signature with the SIGHASH_ALL byte appended, ready for a witness"""
    digest = sighash(tx, input_index, witness_script, amount)
    return privkey.sign(digest, hasher=None) + bytes([script.SIGHASH_ALL])


def verify_input_signature(
    tx: CMutableTransaction,
    input_index: int,
    witness_script: CScript,
    amount: int,
    pubkey: coincurve.PublicKey,
    sig: bytes,
    context: Context = GLOBAL_CONTEXT,
) -> bool:
    if len(sig) < 9 or sig[-1] != script.SIGHASH_ALL:
        return False
    digest = sighash(tx, input_index, witness_script, amount)
    try:
        return coincurve.verify_signature(
            sig[:-1], digest, pubkey.format(), hasher=None, context=context
        )
    except ValueError:
        # Not even parsable as DER
        return False

