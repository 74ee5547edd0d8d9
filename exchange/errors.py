"""Exchange error classes.

Every error aborts the operation that raised it; the pool's transaction
journal restores reserves, shares and ledger balances before the error
reaches the caller. `code` is the stable identifier exposed over HTTP.
"""

from typing import ClassVar


class ExchangeError(Exception):
    """Base error for exchange operations."""

    code: ClassVar[str] = "exchange_error"


class InvalidAmount(ExchangeError):
    """Amount is negative, or zero where a positive amount is required."""

    code = "invalid_amount"


class InvalidReserves(ExchangeError):
    """Pricing attempted against an empty reserve."""

    code = "invalid_reserves"


class SlippageExceeded(ExchangeError):
    """Computed output is below the caller's minimum acceptable output."""

    code = "slippage_exceeded"

    def __init__(self, amount_out: int, min_amount_out: int) -> None:
        super().__init__(f"Output {amount_out} below minimum {min_amount_out}")
        self.amount_out = amount_out
        self.min_amount_out = min_amount_out


class InsufficientShares(ExchangeError):
    """Withdrawal exceeds the provider's share balance."""

    code = "insufficient_shares"


class InsufficientContribution(ExchangeError):
    """Deposit does not cover the proportional paired-asset requirement."""

    code = "insufficient_contribution"


class InvalidAssetAddress(ExchangeError):
    """Asset reference is zero, malformed, or not usable here."""

    code = "invalid_asset_address"


class InvalidDestination(InvalidAssetAddress):
    """Destination pool is missing or is the source pool itself."""

    code = "invalid_destination"


class PoolAlreadyExists(ExchangeError):
    """A pool is already registered for this asset."""

    code = "pool_already_exists"


class PoolNotFound(ExchangeError):
    """No pool is registered for this asset."""

    code = "pool_not_found"


class InvalidAccountAddress(ExchangeError):
    """Caller, provider or recipient is not a well-formed address."""

    code = "invalid_account_address"


class LedgerTransferFailed(ExchangeError):
    """The asset ledger rejected a debit or credit."""

    code = "ledger_transfer_failed"


# Aliases matching the revert reasons of the on-chain exchange
InsufficientOutputAmount = SlippageExceeded
InsufficientShareBalance = InsufficientShares
InsufficientTokenAmount = InsufficientContribution
