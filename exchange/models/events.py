"""Notification records emitted after a pool operation commits.

Each event is a frozen dataclass whose fields map one-to-one, in order,
onto `abi_types`; `abi_data()` produces the ABI-encoded payload an indexer
would read from a log entry.
"""

from __future__ import annotations

from dataclasses import asdict, astuple, dataclass
from typing import Any, ClassVar

from eth_abi import encode  # type: ignore[attr-defined]


@dataclass(frozen=True)
class Event:
    """Base class for exchange notifications."""

    name: ClassVar[str] = "Event"
    abi_types: ClassVar[tuple[str, ...]] = ()

    def abi_data(self) -> bytes:
        """ABI-encode the event fields in declaration order."""
        values = [
            bytes.fromhex(value[2:]) if abi_type == "address" else value
            for abi_type, value in zip(self.abi_types, astuple(self), strict=True)
        ]
        return encode(list(self.abi_types), values)

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True)
class AssetPurchase(Event):
    """Base asset sold for the pool's paired asset."""

    name: ClassVar[str] = "AssetPurchase"
    abi_types: ClassVar[tuple[str, ...]] = ("address", "address", "address", "uint256", "uint256")

    pool: str
    buyer: str
    recipient: str
    base_sold: int
    assets_bought: int


@dataclass(frozen=True)
class BasePurchase(Event):
    """Paired asset sold for the base asset."""

    name: ClassVar[str] = "BasePurchase"
    abi_types: ClassVar[tuple[str, ...]] = ("address", "address", "address", "uint256", "uint256")

    pool: str
    buyer: str
    recipient: str
    assets_sold: int
    base_bought: int


@dataclass(frozen=True)
class AssetToAssetPurchase(Event):
    """One paired asset sold for another, routed through the base asset."""

    name: ClassVar[str] = "AssetToAssetPurchase"
    abi_types: ClassVar[tuple[str, ...]] = (
        "address",
        "address",
        "address",
        "address",
        "uint256",
        "address",
        "uint256",
    )

    pool: str
    buyer: str
    recipient: str
    source_asset: str
    assets_sold: int
    destination_asset: str
    assets_bought: int


@dataclass(frozen=True)
class Investment(Event):
    """Liquidity deposited; shares minted to the provider."""

    name: ClassVar[str] = "Investment"
    abi_types: ClassVar[tuple[str, ...]] = ("address", "address", "uint256", "uint256", "uint256")

    pool: str
    provider: str
    shares_minted: int
    base_amount: int
    asset_amount: int


@dataclass(frozen=True)
class Divestment(Event):
    """Shares burned; reserves paid out to the provider."""

    name: ClassVar[str] = "Divestment"
    abi_types: ClassVar[tuple[str, ...]] = ("address", "address", "uint256", "uint256", "uint256")

    pool: str
    provider: str
    shares_burned: int
    base_amount: int
    asset_amount: int


@dataclass(frozen=True)
class PoolCreated(Event):
    """A pool was registered for an asset."""

    name: ClassVar[str] = "PoolCreated"
    abi_types: ClassVar[tuple[str, ...]] = ("address", "address")

    asset: str
    pool: str


__all__ = [
    "Event",
    "AssetPurchase",
    "BasePurchase",
    "AssetToAssetPurchase",
    "Investment",
    "Divestment",
    "PoolCreated",
]
