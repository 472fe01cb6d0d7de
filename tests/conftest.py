#! /usr/bin/python3
import logging
import pytest
import lnbolt3
from typing import Any, Dict


def pytest_addoption(parser: Any) -> None:
    parser.addoption(
        "--network",
        action="store",
        help="network to use for addresses and chain hashes",
        default="regtest",
    )


def pytest_configure(config: Any) -> None:
    logger = logging.getLogger("lnbolt3")
    if config.getoption("verbose"):
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)


@pytest.fixture()
def network(pytestconfig: Any) -> str:
    return pytestconfig.getoption("network")


@pytest.fixture()
def chainparams(network: str) -> Dict[str, Any]:
    """Return the chainparams for the selected network."""
    return lnbolt3.chainparams(network)


@pytest.fixture()
def bolt3_config(network: str) -> lnbolt3.ChannelConfig:
    # BOLT #3:
    #     local_delay: 144
    #     local_dust_limit_satoshi: 546
    #     feerate_per_kw: 15000
    return lnbolt3.ChannelConfig(
        to_self_delay=144,
        dust_limit_satoshis=546,
        feerate_per_kw=15000,
        network=network,
    )
