"""Engine configuration."""

import os
from dataclasses import dataclass

from exchange.constants import DEFAULT_REGISTRY_ADDRESS, FEE_DENOMINATOR, FEE_MULTIPLIER
from exchange.models.types import normalize_address


@dataclass(frozen=True)
class ExchangeConfig:
    """Centralized configuration for pricing and pool creation.

    Attributes:
        fee_multiplier: Share of each input that is priced, out of
            fee_denominator (default: 9975, i.e. a 0.25% fee)
        fee_denominator: Fixed denominator of the fee ratio (default: 10,000)
        registry_address: Address of the registry; pool addresses are
            derived from it and the pooled asset
    """

    fee_multiplier: int = FEE_MULTIPLIER
    fee_denominator: int = FEE_DENOMINATOR
    registry_address: str = DEFAULT_REGISTRY_ADDRESS

    def __post_init__(self) -> None:
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be positive, got {self.fee_denominator}")
        if not 0 < self.fee_multiplier <= self.fee_denominator:
            raise ValueError(
                f"fee_multiplier must be in (0, {self.fee_denominator}], got {self.fee_multiplier}"
            )
        object.__setattr__(
            self, "registry_address", normalize_address(self.registry_address, validate=True)
        )

    @property
    def fee_bps(self) -> int:
        """Fee in basis points, e.g. 25 for 9975/10000."""
        return (self.fee_denominator - self.fee_multiplier) * 10_000 // self.fee_denominator

    @classmethod
    def from_env(cls) -> "ExchangeConfig":
        """Build a config from EXCHANGE_* environment variables.

        - EXCHANGE_FEE_MULTIPLIER (default: 9975)
        - EXCHANGE_FEE_DENOMINATOR (default: 10000)
        - EXCHANGE_REGISTRY_ADDRESS (default: DEFAULT_REGISTRY_ADDRESS)
        """
        return cls(
            fee_multiplier=int(os.environ.get("EXCHANGE_FEE_MULTIPLIER", FEE_MULTIPLIER)),
            fee_denominator=int(os.environ.get("EXCHANGE_FEE_DENOMINATOR", FEE_DENOMINATOR)),
            registry_address=os.environ.get("EXCHANGE_REGISTRY_ADDRESS", DEFAULT_REGISTRY_ADDRESS),
        )


# Default configuration instance
DEFAULT_CONFIG = ExchangeConfig()
