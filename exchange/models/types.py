"""Address and amount types shared by the engine and the HTTP layer.

Accounts, assets and pools are all 20-byte hex addresses, compared in
lowercase. Amounts are plain ints inside the engine; over HTTP they travel
as decimal strings so that 256-bit values survive JSON.
"""

import re
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from exchange.errors import InvalidAccountAddress
from exchange.safe_int import UINT256_MAX

ZERO_ADDRESS = "0x" + "00" * 20

_ADDRESS_PATTERN = r"^0x[0-9a-fA-F]{40}$"
_ADDRESS_RE = re.compile(_ADDRESS_PATTERN)


def validate_uint256(value: Any) -> str:
    """Coerce an int or decimal string into a canonical uint256 string.

    Raises:
        ValueError: For bools and other non-numeric input, or values outside
            [0, 2**256 - 1]
    """
    if isinstance(value, bool) or not isinstance(value, int | str):
        raise ValueError(f"Amount must be an int or decimal string, got {type(value).__name__}")
    try:
        amount = int(value)
    except ValueError as err:
        raise ValueError(f"Amount is not a decimal integer: {value!r}") from err
    if not 0 <= amount <= UINT256_MAX:
        raise ValueError(f"Amount outside uint256 range: {value}")
    return str(amount)


Address = Annotated[str, Field(pattern=_ADDRESS_PATTERN)]

Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="uint256 amount as a decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Lowercase `address`, adding the 0x prefix if it is missing.

    With validate=True a malformed result raises ValueError.
    """
    normalized = address.lower()
    if not normalized.startswith("0x"):
        normalized = f"0x{normalized}"
    if validate and not is_valid_address(normalized):
        raise ValueError(f"Invalid address: {address}")
    return normalized


def normalize_account(address: object) -> str:
    """Normalized caller, provider or recipient address.

    Raises:
        InvalidAccountAddress: If `address` is not a 20-byte hex address
    """
    normalized = normalize_address(address) if isinstance(address, str) else None
    if normalized is None or not is_valid_address(normalized):
        raise InvalidAccountAddress(f"Invalid account address: {address!r}")
    return normalized


def is_valid_address(address: object) -> bool:
    return isinstance(address, str) and _ADDRESS_RE.fullmatch(address) is not None


def is_zero_address(address: str) -> bool:
    """True for the all-zero address, with or without prefix."""
    return normalize_address(address) == ZERO_ADDRESS


def short(address: str) -> str:
    """Last 8 characters of an address, for log context."""
    return address[-8:]
