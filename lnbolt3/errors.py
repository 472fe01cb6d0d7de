#! /usr/bin/python3


class Bolt3Error(Exception):
    """Base class for errors raised while deriving keys or building txs"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(Bolt3Error, ValueError):
    """Error thrown when the caller handed us something malformed"""


class CryptoImpossibilityError(Bolt3Error):
    """Error thrown when a hash does not map to a valid scalar or point.

    This should never happen with a working SHA256, so callers are not
    expected to recover from it.
    """


class ProtocolViolationError(Bolt3Error):
    """Error thrown when we are asked to build something BOLT 3 forbids"""
