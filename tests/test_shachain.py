#! /usr/bin/python3
import pytest
from lnbolt3 import (
    MAX_COMMITMENT_NUMBER,
    InvalidInputError,
    ProtocolViolationError,
    RevocationStore,
    check_secret_point,
    build_commitment_secret,
    commitment_number_to_index,
    derive_per_commitment_point,
    index_to_commitment_number,
)


def test_shachain() -> None:
    # BOLT #3:
    # ## Generation Tests
    # name: generate_from_seed 0 final node
    # seed: 0x0000000000000000000000000000000000000000000000000000000000000000
    # I: 281474976710655
    # output: 0x02a40c85b6f28da08dfdbe0926c53fab2de6d28c10301f8f7c4073d5e42e3148
    assert (
        build_commitment_secret(bytes(32), 281474976710655).hex()
        == "02a40c85b6f28da08dfdbe0926c53fab2de6d28c10301f8f7c4073d5e42e3148"
    )

    # BOLT #3:
    # name: generate_from_seed FF final node
    # seed: 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF
    # I: 281474976710655
    # output: 0x7cc854b54e3e0dcdb010d7a3fee464a9687be6e8db3be6854c475621e007a5dc
    assert (
        build_commitment_secret(b"\xff" * 32, 281474976710655).hex()
        == "7cc854b54e3e0dcdb010d7a3fee464a9687be6e8db3be6854c475621e007a5dc"
    )

    # BOLT #3:
    # name: generate_from_seed FF alternate bits 1
    # seed: 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF
    # I: 0xaaaaaaaaaaa
    # output: 0x56f4008fb007ca9acf0e15b054d5c9fd12ee06cea347914ddbaed70d1c13a528
    assert (
        build_commitment_secret(b"\xff" * 32, 0xAAAAAAAAAAA).hex()
        == "56f4008fb007ca9acf0e15b054d5c9fd12ee06cea347914ddbaed70d1c13a528"
    )

    # BOLT #3:
    # name: generate_from_seed FF alternate bits 2
    # seed: 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF
    # I: 0x555555555555
    # output: 0x9015daaeb06dba4ccc05b91b2f73bd54405f2be9f217fbacd3c5ac2e62327d31
    assert (
        build_commitment_secret(b"\xff" * 32, 0x555555555555).hex()
        == "9015daaeb06dba4ccc05b91b2f73bd54405f2be9f217fbacd3c5ac2e62327d31"
    )

    # BOLT #3:
    # name: generate_from_seed 01 last nontrivial node
    # seed: 0x0101010101010101010101010101010101010101010101010101010101010101
    # I: 1
    # output: 0x915c75942a26bb3a433a8ce2cb0427c29ec6c1775cfc78328b57f6ba7bfeaa9c
    assert (
        build_commitment_secret(b"\x01" * 32, 1).hex()
        == "915c75942a26bb3a433a8ce2cb0427c29ec6c1775cfc78328b57f6ba7bfeaa9c"
    )


def test_secret_index_zero_is_seed() -> None:
    # No bits set: no hashing at all.
    assert build_commitment_secret(b"\x42" * 32, 0) == b"\x42" * 32


def test_secrets_differ() -> None:
    seed = bytes(range(32))
    secrets = set(
        build_commitment_secret(seed, MAX_COMMITMENT_NUMBER - n) for n in range(64)
    )
    assert len(secrets) == 64
    assert build_commitment_secret(seed, 12345) == build_commitment_secret(seed, 12345)


def test_index_range() -> None:
    with pytest.raises(ProtocolViolationError):
        build_commitment_secret(bytes(32), MAX_COMMITMENT_NUMBER + 1)
    with pytest.raises(ProtocolViolationError):
        build_commitment_secret(bytes(32), -1)
    with pytest.raises(InvalidInputError):
        build_commitment_secret(bytes(31), 0)


def test_commitment_number_index() -> None:
    assert commitment_number_to_index(0) == MAX_COMMITMENT_NUMBER
    assert index_to_commitment_number(MAX_COMMITMENT_NUMBER) == 0
    assert commitment_number_to_index(42) == 281474976710655 - 42
    assert index_to_commitment_number(commitment_number_to_index(9999)) == 9999
    with pytest.raises(ProtocolViolationError):
        commitment_number_to_index(1 << 48)


def test_per_commitment_point() -> None:
    seed = bytes(32)
    point = derive_per_commitment_point(seed, MAX_COMMITMENT_NUMBER)
    # BOLT #3: secret 02a40c85... is a valid key, so its point is defined.
    assert point.format()[0] in (2, 3)
    assert point.format() == derive_per_commitment_point(seed, MAX_COMMITMENT_NUMBER).format()
    assert point.format() != derive_per_commitment_point(seed, MAX_COMMITMENT_NUMBER - 1).format()


def test_revocation_store() -> None:
    seed = bytes(range(32))
    store = RevocationStore()
    assert store.get_secret(MAX_COMMITMENT_NUMBER) is None
    assert store.min_index() is None

    for n in range(100):
        index = MAX_COMMITMENT_NUMBER - n
        store.insert_secret(build_commitment_secret(seed, index), index)

    assert store.min_index() == MAX_COMMITMENT_NUMBER - 99
    # Only 49 buckets, yet every revealed secret can be regenerated.
    for n in range(100):
        index = MAX_COMMITMENT_NUMBER - n
        assert store.get_secret(index) == build_commitment_secret(seed, index)


def test_revocation_store_rejects_bad_secret() -> None:
    # BOLT #3:
    # name: insert_secret #1 incorrect
    # (a secret from a different seed cannot derive the previous one)
    good = bytes(range(32))
    bad = b"\x01" * 32
    store = RevocationStore()
    store.insert_secret(build_commitment_secret(bad, MAX_COMMITMENT_NUMBER), MAX_COMMITMENT_NUMBER)
    with pytest.raises(ProtocolViolationError):
        store.insert_secret(
            build_commitment_secret(good, MAX_COMMITMENT_NUMBER - 1),
            MAX_COMMITMENT_NUMBER - 1,
        )

    with pytest.raises(InvalidInputError):
        store.insert_secret(bytes(31), MAX_COMMITMENT_NUMBER)


def test_revocation_store_checks_point() -> None:
    seed = bytes(range(32))
    index = MAX_COMMITMENT_NUMBER
    secret = build_commitment_secret(seed, index)
    point = derive_per_commitment_point(seed, index)
    check_secret_point(secret, point)

    store = RevocationStore()
    wrong_point = derive_per_commitment_point(seed, index - 1)
    with pytest.raises(ProtocolViolationError):
        store.insert_secret(secret, index, point=wrong_point)
    # Nothing is stored for a rejected secret.
    assert store.get_secret(index) is None

    store.insert_secret(secret, index, point=point)
    assert store.get_secret(index) == secret

    with pytest.raises(InvalidInputError):
        check_secret_point(bytes(31), point)
