#! /usr/bin/python3
import string
import hashlib
import coincurve
from coincurve.context import Context, GLOBAL_CONTEXT
from enum import IntEnum
from bitcoin.core.contrib.ripemd160 import ripemd160 as bitcoin_ripemd160
from .errors import InvalidInputError, CryptoImpossibilityError

# BOLT #3: The 48-bit commitment number
MAX_COMMITMENT_NUMBER = (1 << 48) - 1


class Side(IntEnum):
    local = 0
    remote = 1

    def other(self) -> "Side":
        return Side(1 - self)


def check_hex(val: str, digits: int) -> str:
    if not all(c in string.hexdigits for c in val):
        raise InvalidInputError("{} is not valid hex".format(val))
    if len(val) != digits:
        raise InvalidInputError("{} not {} characters long".format(val, digits))
    return val


def check_bytes(val: bytes, length: int, what: str) -> bytes:
    if len(val) != length:
        raise InvalidInputError(
            "{} must be {} bytes, not {}".format(what, length, len(val))
        )
    return val


def privkey_from_scalar(
    scalar: bytes, context: Context = GLOBAL_CONTEXT
) -> coincurve.PrivateKey:
    """A 32-byte hash output used as a secret: zero or >= n is fatal"""
    try:
        return coincurve.PrivateKey(check_bytes(scalar, 32, "scalar"), context)
    except ValueError as e:
        raise CryptoImpossibilityError(
            "{} is not a valid secp256k1 scalar: {}".format(scalar.hex(), e)
        )


def pubkey_parse(
    val: bytes, context: Context = GLOBAL_CONTEXT
) -> coincurve.PublicKey:
    try:
        return coincurve.PublicKey(val, context)
    except ValueError as e:
        raise InvalidInputError("{} is not a valid pubkey: {}".format(val.hex(), e))


def sha256(b: bytes) -> bytes:
    return hashlib.sha256(b).digest()


def ripemd160(b: bytes) -> bytes:
    # OpenSSL 3 may not provide ripemd160 to hashlib.
    return bitcoin_ripemd160(b)


def check_amount(val: int, what: str) -> int:
    if val < 0:
        raise InvalidInputError("{} cannot be negative ({})".format(what, val))
    return val
