#! /usr/bin/python3
import coincurve
import struct
from typing import Tuple
from bitcoin.core import CMutableTransaction
from .errors import InvalidInputError
from .shachain import check_index
from .utils import sha256


def obscure_factor(
    opener_payment_basepoint: coincurve.PublicKey,
    non_opener_payment_basepoint: coincurve.PublicKey,
) -> int:
    # BOLT #3:
    # The 48-bit commitment number is obscured by `XOR` with the lower 48 bits of:
    #
    #    SHA256(payment_basepoint from open_channel || payment_basepoint from accept_channel)
    shabytes = sha256(
        opener_payment_basepoint.format() + non_opener_payment_basepoint.format()
    )[-6:]
    return struct.unpack(">Q", bytes(2) + shabytes)[0]


def obscure_commitment_number(
    commitment_number: int,
    opener_payment_basepoint: coincurve.PublicKey,
    non_opener_payment_basepoint: coincurve.PublicKey,
) -> int:
    """XOR the (increasing, from 0) commitment number with the factor"""
    return check_index(commitment_number) ^ obscure_factor(
        opener_payment_basepoint, non_opener_payment_basepoint
    )


def reveal_commitment_number(
    obscured: int,
    opener_payment_basepoint: coincurve.PublicKey,
    non_opener_payment_basepoint: coincurve.PublicKey,
) -> int:
    return check_index(obscured) ^ obscure_factor(
        opener_payment_basepoint, non_opener_payment_basepoint
    )


def locktime_and_sequence(obscured: int) -> Tuple[int, int]:
    # BOLT #3:
    # * locktime: upper 8 bits are 0x20, lower 24 bits are the
    #   lower 24 bits of the obscured commitment number
    # ...
    #    * `txin[0]` sequence: upper 8 bits are 0x80, lower 24 bits are upper 24 bits of the obscured commitment number
    check_index(obscured)
    return 0x20000000 | (obscured & 0x00FFFFFF), 0x80000000 | (obscured >> 24)


def obscured_from_locktime_and_sequence(locktime: int, sequence: int) -> int:
    if locktime >> 24 != 0x20 or sequence >> 24 != 0x80:
        raise InvalidInputError(
            "locktime {:#x} / sequence {:#x} do not encode a commitment number".format(
                locktime, sequence
            )
        )
    return ((sequence & 0x00FFFFFF) << 24) | (locktime & 0x00FFFFFF)


def commitment_number_from_tx(
    tx: CMutableTransaction,
    opener_payment_basepoint: coincurve.PublicKey,
    non_opener_payment_basepoint: coincurve.PublicKey,
) -> int:
    """Recover the commitment number of a (possibly broadcast) commitment tx"""
    if len(tx.vin) != 1:
        raise InvalidInputError("commitment tx must have exactly one input")
    obscured = obscured_from_locktime_and_sequence(tx.nLockTime, tx.vin[0].nSequence)
    return reveal_commitment_number(
        obscured, opener_payment_basepoint, non_opener_payment_basepoint
    )
