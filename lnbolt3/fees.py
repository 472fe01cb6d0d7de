#! /usr/bin/python3
from .utils import check_amount

# BOLT #3: expected weights
COMMITMENT_BASE_WEIGHT = 724
HTLC_OUTPUT_WEIGHT = 172
HTLC_TIMEOUT_WEIGHT = 663
HTLC_SUCCESS_WEIGHT = 703


def commitment_fee(feerate_per_kw: int, num_untrimmed_htlcs: int) -> int:
    # BOLT #3:
    # The base fee for a commitment transaction:
    #  - MUST be calculated to match:
    #      1. Start with `weight` = 724.
    #      2. For each committed HTLC, if that output is not trimmed as specified in
    #      [Trimmed Outputs](#trimmed-outputs), add 172 to `weight`.
    #      3. Multiply `feerate_per_kw` by `weight`, divide by 1000 (rounding down).
    check_amount(feerate_per_kw, "feerate_per_kw")
    weight = COMMITMENT_BASE_WEIGHT + HTLC_OUTPUT_WEIGHT * num_untrimmed_htlcs
    return (weight * feerate_per_kw) // 1000


def htlc_timeout_fee(feerate_per_kw: int) -> int:
    # BOLT #3:
    # The fee for an HTLC-timeout transaction:
    #   - MUST BE calculated to match:
    #     1. Multiply `feerate_per_kw` by 663 and divide by 1000 (rounding down).
    return check_amount(feerate_per_kw, "feerate_per_kw") * HTLC_TIMEOUT_WEIGHT // 1000


def htlc_success_fee(feerate_per_kw: int) -> int:
    # BOLT #3:
    # The fee for an HTLC-success transaction:
    #   - MUST BE calculated to match:
    #     1. Multiply `feerate_per_kw` by 703 and divide by 1000 (rounding down).
    return check_amount(feerate_per_kw, "feerate_per_kw") * HTLC_SUCCESS_WEIGHT // 1000


def is_offered_htlc_dust(
    amount_sat: int, dust_limit_satoshis: int, feerate_per_kw: int
) -> bool:
    # BOLT #3:
    #   - for every offered HTLC:
    #     - if the HTLC amount minus the HTLC-timeout fee would be less than
    #     `dust_limit_satoshis` set by the transaction owner:
    #       - MUST NOT contain that output.
    return amount_sat - htlc_timeout_fee(feerate_per_kw) < dust_limit_satoshis


def is_received_htlc_dust(
    amount_sat: int, dust_limit_satoshis: int, feerate_per_kw: int
) -> bool:
    # BOLT #3:
    #   - for every received HTLC:
    #     - if the HTLC amount minus the HTLC-success fee would be less
    #      than `dust_limit_satoshis` set by the transaction owner:
    #       - MUST NOT contain that output.
    return amount_sat - htlc_success_fee(feerate_per_kw) < dust_limit_satoshis


def second_stage_amount(amount_sat: int, fee: int) -> int:
    """HTLC amount less the second-stage fee, never below zero"""
    return max(check_amount(amount_sat, "HTLC amount") - fee, 0)
