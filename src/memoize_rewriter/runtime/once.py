"""Exactly-once lazy initialization.

``OnceCell`` is the Python counterpart of a C++ function-local static: the
value is built on first use, exactly once, even when several threads race on
that first use, and is then shared for the lifetime of the cell.
"""

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class OnceCell(Generic[T]):
    """Holds a value initialized at most once, safely across threads."""

    __slots__ = ("_lock", "_initialized", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._initialized = False
        self._value: T | None = None

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def get(self) -> T:
        """Return the value.

        Raises:
            LookupError: If the cell has not been initialized yet.
        """
        if not self._initialized:
            raise LookupError("OnceCell has not been initialized")
        return self._value  # type: ignore[return-value]

    def get_or_init(self, factory: Callable[[], T]) -> T:
        """Return the value, building it with ``factory`` on first use.

        Concurrent first callers block until the single ``factory`` call
        finishes. If ``factory`` raises, the cell stays empty and the next
        caller retries.
        """
        if self._initialized:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._initialized:
                self._value = factory()
                self._initialized = True
        return self._value  # type: ignore[return-value]
