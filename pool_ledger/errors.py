"""Pool ledger error classes.

Every failed ledger operation raises exactly one of these, and a failed
operation never leaves a partial state change behind.
"""


class LedgerError(Exception):
    """Base error for pool ledger operations.

    The ``code`` class attribute is the stable error name reported to
    API clients.
    """

    code: str = "LedgerError"

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls.code = cls.__name__


class InvalidPair(LedgerError):
    """The two asset identifiers are equal or malformed."""

    pass


class Expired(LedgerError):
    """The operation deadline has passed."""

    pass


class Overflow(LedgerError):
    """A reserve, share total or intermediate product exceeds its bound."""

    pass


class InsufficientReserves(LedgerError):
    """A withdrawal or swap output exceeds the pool reserve."""

    pass


class SlippageExceeded(LedgerError):
    """A computed amount fell below the caller's minimum."""

    pass


class NoLiquidity(LedgerError):
    """The pool has no outstanding shares."""

    pass


class InsufficientShares(LedgerError):
    """The holder owns fewer shares than requested."""

    pass


class InvalidAmount(LedgerError):
    """An input amount or reserve is zero where a positive value is required."""

    pass


class NoReserves(LedgerError):
    """The pool has a zero reserve, so no price exists."""

    pass


class TransferFailed(LedgerError):
    """The asset transfer collaborator rejected a pull or push."""

    pass
