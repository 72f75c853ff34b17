"""Exceptions raised by the counter engine."""

from __future__ import annotations

from collections.abc import Mapping, Sequence


class CounterError(Exception):
    """Base class for counter engine failures.

    Carries the HTTP status the admin surface should answer with.
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class UnknownCategory(CounterError):
    """Raised when a category is not part of the closed enumeration."""

    status_code = 404

    def __init__(self, category: object) -> None:
        self.category = category
        super().__init__(f"Unknown counter category: {category!r}")


class StorageUnavailable(CounterError):
    """Raised when the counter store cannot complete a read or write."""

    status_code = 503


class InvalidRequest(CounterError):
    """Raised for rejected admin requests, such as an unconfirmed reset."""

    status_code = 400


class CounterResetError(CounterError):
    """Raised when a multi-category reset fails for some categories.

    Categories listed in ``reset`` were fully reset before the failure was
    reported; those in ``failed`` were left untouched.
    """

    def __init__(self, reset: Sequence[str], failed: Mapping[str, str]) -> None:
        self.reset = list(reset)
        self.failed = dict(failed)
        names = ", ".join(sorted(self.failed))
        super().__init__(f"Counter reset failed for: {names}", status_code=500)
