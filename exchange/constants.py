"""Exchange constants.

Centralizes the fee policy and well-known addresses.
"""

from exchange.models.types import ZERO_ADDRESS, is_valid_address

# Trading fee policy: 0.25% of every input stays in the pool.
# amount_in_with_fee = amount_in * FEE_MULTIPLIER, priced against
# reserve_in * FEE_DENOMINATOR so no fractional intermediate appears.
FEE_MULTIPLIER = 9975
FEE_DENOMINATOR = 10_000

# The native base asset has no contract address; the ledger tracks it
# under the zero address, so no pool can ever be registered for it.
BASE_ASSET = ZERO_ADDRESS


def _validate_address(name: str, address: str) -> str:
    """Validate and return a well-known address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Default registry address, the seed for deterministic pool addresses
DEFAULT_REGISTRY_ADDRESS = _validate_address(
    "registry", "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f"
)
