"""Constant-product pricing with a proportional input fee.

The pool keeps x * y = k. Selling dx of one side for dy of the other must
satisfy (x + dx')(y - dy) >= x * y, where dx' is the input after the fee.
Solving for dy with the fee ratio kept in integers:

    dy = (dx * m * y) / (x * d + dx * m)

with m / d the fee multiplier (9975 / 10000 by default). Floor division
rounds every output in the pool's favor, so k never decreases.
"""

from exchange.constants import FEE_DENOMINATOR, FEE_MULTIPLIER
from exchange.errors import InvalidAmount, InvalidReserves
from exchange.safe_int import S


def get_output_amount(
    input_amount: int,
    input_reserve: int,
    output_reserve: int,
    *,
    fee_multiplier: int = FEE_MULTIPLIER,
    fee_denominator: int = FEE_DENOMINATOR,
) -> int:
    """Calculate the output of an exact-input trade.

    Args:
        input_amount: Amount sold into the pool
        input_reserve: Pool reserve of the sold asset, before the sale
        output_reserve: Pool reserve of the bought asset
        fee_multiplier: Priced share of the input, out of fee_denominator
        fee_denominator: Fee ratio denominator

    Returns:
        Amount bought, floored

    Raises:
        InvalidReserves: If either reserve is not positive
        InvalidAmount: If input_amount is negative
    """
    if input_reserve <= 0 or output_reserve <= 0:
        raise InvalidReserves(f"Invalid reserves: ({input_reserve}, {output_reserve})")
    if input_amount < 0:
        raise InvalidAmount(f"input_amount must be non-negative: {input_amount}")

    input_with_fee = S(input_amount) * S(fee_multiplier)
    numerator = input_with_fee * S(output_reserve)
    denominator = S(input_reserve) * S(fee_denominator) + input_with_fee

    return (numerator // denominator).to_uint256()


def get_output_amount_without_fee(input_amount: int, input_reserve: int, output_reserve: int) -> int:
    """Output of the same trade on a fee-free curve (upper bound for quotes)."""
    return get_output_amount(
        input_amount, input_reserve, output_reserve, fee_multiplier=1, fee_denominator=1
    )


def proportional_amount(amount: int, numerator: int, denominator: int) -> int:
    """Floor of amount * numerator / denominator.

    Used for share minting, proportional deposits and redemptions.

    Raises:
        InvalidReserves: If denominator is zero
    """
    if denominator <= 0:
        raise InvalidReserves(f"Cannot price against an empty reserve: {denominator}")
    return (S(amount) * S(numerator) // S(denominator)).to_uint256()
