#! /usr/bin/python3
import pytest
from bitcoin.core import CMutableTransaction, COutPoint, CTxIn
from helpers import local_payment_basepoint, remote_payment_basepoint
from lnbolt3 import (
    InvalidInputError,
    ProtocolViolationError,
    commitment_number_from_tx,
    locktime_and_sequence,
    obscure_commitment_number,
    obscure_factor,
    reveal_commitment_number,
)
from lnbolt3.obscured import obscured_from_locktime_and_sequence


def test_obscure_factor() -> None:
    # BOLT #3:
    #     local_payment_basepoint: 034f355bdcb7cc0af728ef3cceb9615d90684bb5b2ca5f859ab0f0b704075871aa
    #     remote_payment_basepoint: 032c0b7cf95324a07d05398b240174dc0c2be444d96b159aa6c7f7b1e668680991
    #     # obscured commitment number = 0x2bb038521914 ^ 42
    assert obscure_factor(local_payment_basepoint, remote_payment_basepoint) == 0x2BB038521914
    # Order matters: it is opener first.
    assert obscure_factor(remote_payment_basepoint, local_payment_basepoint) != 0x2BB038521914


def test_obscure_commitment_number() -> None:
    obscured = obscure_commitment_number(
        42, local_payment_basepoint, remote_payment_basepoint
    )
    assert obscured == 0x2BB038521914 ^ 42
    assert (
        reveal_commitment_number(obscured, local_payment_basepoint, remote_payment_basepoint)
        == 42
    )
    for n in (0, 1, 0xFFFFFF, 0x1000000, (1 << 48) - 1):
        assert (
            reveal_commitment_number(
                obscure_commitment_number(
                    n, local_payment_basepoint, remote_payment_basepoint
                ),
                local_payment_basepoint,
                remote_payment_basepoint,
            )
            == n
        )

    with pytest.raises(ProtocolViolationError):
        obscure_commitment_number(1 << 48, local_payment_basepoint, remote_payment_basepoint)


def test_locktime_and_sequence() -> None:
    # The simple commitment tx vector has locktime 3e195220 and sequence
    # 38b02b80, both little-endian.
    locktime, sequence = locktime_and_sequence(0x2BB038521914 ^ 42)
    assert locktime == 0x2052193E
    assert sequence == 0x802BB038
    assert obscured_from_locktime_and_sequence(locktime, sequence) == 0x2BB038521914 ^ 42

    assert locktime_and_sequence(0) == (0x20000000, 0x80000000)
    assert locktime_and_sequence((1 << 48) - 1) == (0x20FFFFFF, 0x80FFFFFF)

    with pytest.raises(InvalidInputError):
        obscured_from_locktime_and_sequence(0, 0x802BB038)
    with pytest.raises(InvalidInputError):
        obscured_from_locktime_and_sequence(0x2052193E, 0xFFFFFFFF)


def test_commitment_number_from_tx() -> None:
    locktime, sequence = locktime_and_sequence(
        obscure_commitment_number(
            1234567, local_payment_basepoint, remote_payment_basepoint
        )
    )
    tx = CMutableTransaction(
        [CTxIn(COutPoint(bytes(32), 0), nSequence=sequence)],
        [],
        nLockTime=locktime,
        nVersion=2,
    )
    assert (
        commitment_number_from_tx(tx, local_payment_basepoint, remote_payment_basepoint)
        == 1234567
    )

    tx.vin.append(CTxIn(COutPoint(bytes(32), 1)))
    with pytest.raises(InvalidInputError):
        commitment_number_from_tx(tx, local_payment_basepoint, remote_payment_basepoint)
