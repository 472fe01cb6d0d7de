#! /usr/bin/python3
import coincurve
from coincurve.context import Context, GLOBAL_CONTEXT
from typing import List, Optional, Tuple
from .errors import ProtocolViolationError
from .utils import MAX_COMMITMENT_NUMBER, check_bytes, privkey_from_scalar, sha256


def check_index(index: int) -> int:
    if not 0 <= index <= MAX_COMMITMENT_NUMBER:
        raise ProtocolViolationError("48 bits is all you get! ({})".format(index))
    return index


def index_to_commitment_number(index: int) -> int:
    # BOLT #3:
    # The first secret used:
    #  - MUST be index 281474976710655,
    #    - and from there, the index is decremented.
    return MAX_COMMITMENT_NUMBER - check_index(index)


def commitment_number_to_index(commitment_number: int) -> int:
    return MAX_COMMITMENT_NUMBER - check_index(commitment_number)


def _generate_from_seed(seed: bytes, index: int, bits: int = 48) -> bytes:
    # BOLT #3:
    # generate_from_seed(seed, I):
    #     P = seed
    #     for B in 47 down to 0:
    #         if B set in I:
    #             flip(B) in P
    #             P = SHA256(P)
    #     return P
    #
    # Where "flip(B)" alternates the (B mod 8)'th bit of the (B div 8)'th
    # byte of the value.  So, "flip(0) in e3b0..." is "e2b0...", and
    # "flip(10) in "e3b0..." is "e3b4".
    P = bytearray(seed)
    for B in range(bits - 1, -1, -1):
        if ((1 << B) & index) != 0:
            P[B // 8] ^= 1 << (B % 8)
            P = bytearray(sha256(P))
    return bytes(P)


def build_commitment_secret(seed: bytes, state_index: int) -> bytes:
    """The per-commitment secret for @state_index (counts down from 2^48-1)"""
    check_bytes(seed, 32, "commitment seed")
    return _generate_from_seed(seed, check_index(state_index))


def derive_per_commitment_point(
    seed: bytes, state_index: int, context: Context = GLOBAL_CONTEXT
) -> coincurve.PublicKey:
    secret = privkey_from_scalar(build_commitment_secret(seed, state_index), context)
    return coincurve.PublicKey.from_secret(secret.secret, context)


def _trailing_zeros(index: int) -> int:
    # BOLT #3: where_to_put_secret(I): returns the number of trailing zeros
    for position in range(48):
        if index & (1 << position):
            return position
    return 48


class RevocationStore(object):
    """Compact storage of the secrets the counterparty has revealed.

    A secret with N trailing zero bits in its index can derive every secret
    whose index shares its upper 48-N bits, so 49 slots are enough to
    answer for every state revealed so far.
    """

    def __init__(self) -> None:
        # (secret, index) per bucket
        self.known: List[Optional[Tuple[bytes, int]]] = [None] * 49

    def insert_secret(
        self,
        secret: bytes,
        state_index: int,
        point: Optional[coincurve.PublicKey] = None,
        context: Context = GLOBAL_CONTEXT,
    ) -> None:
        """Store a revealed secret, checking it against earlier ones and,
        if given, the per-commitment point the peer sent for that state"""
        check_bytes(secret, 32, "per-commitment secret")
        check_index(state_index)
        if point is not None:
            check_secret_point(secret, point, context)
        bucket = _trailing_zeros(state_index)

        # BOLT #3:
        # for i in 0 to B:
        #     if derive_secret(secret, B, known[i].index) != known[i].secret:
        #         error The secret for I is incorrect
        for i in range(bucket):
            entry = self.known[i]
            if entry is None:
                continue
            if self._derive(secret, bucket, entry[1]) != entry[0]:
                raise ProtocolViolationError(
                    "Secret for index {} does not derive index {}".format(
                        state_index, entry[1]
                    )
                )
        self.known[bucket] = (secret, state_index)

    @staticmethod
    def _derive(base: bytes, bits: int, index: int) -> bytes:
        return _generate_from_seed(base, index, bits)

    def get_secret(self, state_index: int) -> Optional[bytes]:
        """Derive a previously revealed secret, if we can"""
        check_index(state_index)
        for bucket, entry in enumerate(self.known):
            if entry is None:
                continue
            secret, index = entry
            # Upper bits must match the stored index
            mask = ~((1 << bucket) - 1) & MAX_COMMITMENT_NUMBER
            if state_index & mask == index & mask:
                return self._derive(secret, bucket, state_index)
        return None

    def min_index(self) -> Optional[int]:
        indices = [e[1] for e in self.known if e is not None]
        if not indices:
            return None
        return min(indices)


def check_secret_point(
    secret: bytes, point: coincurve.PublicKey, context: Context = GLOBAL_CONTEXT
) -> None:
    check_bytes(secret, 32, "per-commitment secret")
    derived = coincurve.PublicKey.from_secret(
        privkey_from_scalar(secret, context).secret, context
    )
    if derived.format() != point.format():
        raise ProtocolViolationError(
            "secret {}... does not match point {}".format(
                secret.hex()[:8], point.format().hex()
            )
        )
