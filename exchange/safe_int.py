"""Checked integer arithmetic for reserves, shares and swap amounts.

Python ints never overflow, so the hazards in pool math are different from
on-chain ones: a difference that goes negative, a division by an empty
reserve, or a settled amount that no longer fits a uint256 balance. SafeInt
turns each of those into a distinct exception instead of a wrong number:

    (S(balance) - S(incoming)).value    # Underflow if incoming > balance
    (S(a) * S(b) // S(c)).to_uint256()  # DivisionByZero, Uint256Overflow
"""

from __future__ import annotations

from functools import total_ordering

UINT256_MAX = (1 << 256) - 1


class SafeIntError(ArithmeticError):
    """Raised by SafeInt instead of producing an invalid amount."""


class DivisionByZero(SafeIntError):
    """Divisor is zero."""


class Underflow(SafeIntError):
    """Difference would be negative."""


class Uint256Overflow(SafeIntError):
    """Value does not fit in a uint256."""


def _unwrap(operand: SafeInt | int) -> int:
    if isinstance(operand, SafeInt):
        return operand.value
    if isinstance(operand, bool) or not isinstance(operand, int):
        raise TypeError(f"SafeInt operand must be int, got {type(operand).__name__}")
    return operand


@total_ordering
class SafeInt:
    """Immutable int wrapper with checked subtraction and division.

    Intermediate products may grow past uint256; bounds are enforced only
    when a result is settled through to_uint256().
    """

    __slots__ = ("_value",)

    def __init__(self, value: SafeInt | int) -> None:
        self._value = _unwrap(value)

    @classmethod
    def zero(cls) -> SafeInt:
        return cls(0)

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __hash__(self) -> int:
        return hash(self._value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other.value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _unwrap(other)

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _unwrap(other))

    __radd__ = __add__

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _unwrap(other))

    __rmul__ = __mul__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Raises Underflow if the difference is negative."""
        subtrahend = _unwrap(other)
        difference = self._value - subtrahend
        if difference < 0:
            raise Underflow(f"{self._value} - {subtrahend} is negative")
        return SafeInt(difference)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Raises DivisionByZero for a zero divisor."""
        divisor = _unwrap(other)
        if divisor == 0:
            raise DivisionByZero(f"{self._value} // 0")
        return SafeInt(self._value // divisor)

    def is_uint256(self) -> bool:
        return 0 <= self._value <= UINT256_MAX

    def to_uint256(self) -> int:
        """The value as a settled amount.

        Raises:
            Uint256Overflow: If the value is negative or above UINT256_MAX
        """
        if self._value < 0:
            raise Uint256Overflow(f"Negative value cannot be uint256: {self._value}")
        if self._value > UINT256_MAX:
            raise Uint256Overflow(f"Value exceeds uint256 max: {self._value}")
        return self._value


S = SafeInt
