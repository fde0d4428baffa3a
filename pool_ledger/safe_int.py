"""Checked uint256 arithmetic for pool amounts.

Every SafeInt holds a value in [0, 2**256 - 1]. Results are range-checked
as they are built, so a bad intermediate never gets a chance to propagate:

    S(reserve_out) * S(amount_in)   # Uint256Overflow past 2**256 - 1
    S(reserve) - S(amount)          # Underflow below zero
    S(numerator) // S(0)            # DivisionByZero

Wrap plain ints on the way in and read ``.value`` on the way out. Callers
translate SafeIntError into the ledger error for their context.
"""

from __future__ import annotations

UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    pass


class Underflow(SafeIntError):
    """Result below zero."""

    pass


class Uint256Overflow(SafeIntError):
    """Result above 2**256 - 1, or above a caller-supplied bound."""

    pass


def _unwrap(x: SafeInt | int) -> int:
    return x._value if isinstance(x, SafeInt) else x


class SafeInt:
    """Unsigned 256-bit integer whose operators raise instead of wrapping.

    Supports +, -, *, // and comparisons against SafeInt or int operands,
    on either side.
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Wrap an int (bool excluded) or copy another SafeInt.

        Raises:
            TypeError: For any other type
            Underflow: If value is negative
            Uint256Overflow: If value exceeds UINT256_MAX
        """
        if isinstance(value, SafeInt):
            self._value = value._value
            return
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        if value < 0:
            raise Underflow(f"{value} is below zero")
        if value > UINT256_MAX:
            raise Uint256Overflow(f"{value} exceeds uint256")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"S({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # Arithmetic. Construction of the result does the range check.

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _unwrap(other))

    __radd__ = __add__

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _unwrap(other))

    __rmul__ = __mul__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value - _unwrap(other))

    def __rsub__(self, other: int) -> SafeInt:
        return SafeInt(other - self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        divisor = _unwrap(other)
        if divisor == 0:
            raise DivisionByZero(f"{self._value} // 0")
        return SafeInt(self._value // divisor)

    # Comparison

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SafeInt, int)):
            return self._value == _unwrap(other)
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _unwrap(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _unwrap(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _unwrap(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _unwrap(other)

    # Conversion

    def __int__(self) -> int:
        return self._value

    __index__ = __int__

    def __bool__(self) -> bool:
        return self._value != 0

    def bounded(self, limit: int) -> int:
        """Return the value if it is at most limit.

        Used where a slot is narrower than uint256, e.g. a pool configured
        with a smaller max_amount.

        Raises:
            Uint256Overflow: If the value exceeds limit
        """
        if self._value > limit:
            raise Uint256Overflow(f"{self._value} exceeds bound {limit}")
        return self._value


# Short alias for arithmetic-heavy code
S = SafeInt
