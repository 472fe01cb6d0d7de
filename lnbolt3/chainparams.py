#! /usr/bin/python3
from typing import Any, Dict
from .errors import InvalidInputError

CHAINPARAMS: Dict[str, Dict[str, Any]] = {
    "bitcoin": {
        "name": "bitcoin",
        "bip173_prefix": "bc",
    },
    "testnet": {
        "name": "testnet",
        "bip173_prefix": "tb",
    },
    "signet": {
        "name": "signet",
        "bip173_prefix": "tb",
    },
    "regtest": {
        "name": "regtest",
        "bip173_prefix": "bcrt",
    },
}


def chainparams(network: str) -> Dict[str, Any]:
    """Return the chainparams for @network"""
    try:
        return CHAINPARAMS[network]
    except KeyError:
        raise InvalidInputError(
            "Unknown network {}: expected one of {}".format(
                network, ", ".join(sorted(CHAINPARAMS))
            )
        )
