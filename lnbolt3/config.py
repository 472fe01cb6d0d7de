#! /usr/bin/python3
from .chainparams import chainparams
from .errors import InvalidInputError
from .utils import Side


class ChannelConfig(object):
    """Per-channel parameters agreed at open time.

    Note that to_self_delay is dictated by the counterparty for the holder's
    commitment transaction, while dust_limit_satoshis is the holder's own.
    """

    def __init__(
        self,
        to_self_delay: int = 144,
        dust_limit_satoshis: int = 546,
        feerate_per_kw: int = 253,
        network: str = "regtest",
        opener: Side = Side.local,
    ):
        # to_self_delay is a CSV block count, so it must fit BIP68's 16 bits.
        if not 0 < to_self_delay <= 0xFFFF:
            raise InvalidInputError(
                "to_self_delay {} out of range".format(to_self_delay)
            )
        if dust_limit_satoshis < 0:
            raise InvalidInputError(
                "dust_limit_satoshis {} is negative".format(dust_limit_satoshis)
            )
        if feerate_per_kw < 0:
            raise InvalidInputError(
                "feerate_per_kw {} is negative".format(feerate_per_kw)
            )
        self.to_self_delay = to_self_delay
        self.dust_limit_satoshis = dust_limit_satoshis
        self.feerate_per_kw = feerate_per_kw
        chainparams(network)
        self.network = network
        self.opener = Side(opener)

    def __repr__(self) -> str:
        return "ChannelConfig(to_self_delay={}, dust_limit_satoshis={}, feerate_per_kw={}, network={}, opener={})".format(
            self.to_self_delay,
            self.dust_limit_satoshis,
            self.feerate_per_kw,
            self.network,
            self.opener.name,
        )
