"""Reference memoize adapter and wrapper for Python hosts.

``memoize(func)`` returns a proxy with cache semantics: a lookup by argument
tuple, falling back to ``func`` on a miss. ``memoized_wrapper`` mirrors the
generated wrapper definition: the proxy is created lazily, exactly once, on
the first call, and lives as long as the wrapper.

    >>> def fib__original__(n):
    ...     return n if n < 2 else fib(n - 1) + fib(n - 2)
    >>> fib = memoized_wrapper(fib__original__)
    >>> fib(30)
    832040
"""

import functools
import threading
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

from memoize_rewriter.runtime.once import OnceCell

_KWARGS_MARK = object()


@dataclass(frozen=True, slots=True)
class CacheInfo:
    """Snapshot of a memoized function's cache statistics."""

    hits: int
    misses: int
    size: int


def _make_key(args: tuple[Any, ...], kwargs: dict[str, Any]) -> Hashable:
    if not kwargs:
        return args
    return (*args, _KWARGS_MARK, *sorted(kwargs.items()))


class MemoizedFunction:
    """Cache-backed proxy for a function.

    The cache is unbounded. Lookups and stores are lock-protected; the wrapped
    function runs outside the lock so recursive calls through the proxy do not
    deadlock. Two threads missing on the same key may both compute it; the
    first stored result wins.
    """

    def __init__(self, func: Callable[..., Any]) -> None:
        self.func = func
        self._cache: dict[Hashable, Any] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        functools.update_wrapper(self, func)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        key = _make_key(args, kwargs)
        with self._lock:
            if key in self._cache:
                self._hits += 1
                return self._cache[key]
            self._misses += 1

        result = self.func(*args, **kwargs)

        with self._lock:
            return self._cache.setdefault(key, result)

    def cache_info(self) -> CacheInfo:
        with self._lock:
            return CacheInfo(hits=self._hits, misses=self._misses, size=len(self._cache))

    def cache_clear(self) -> None:
        """Drop all cached results and reset the statistics."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0


def memoize(func: Callable[..., Any]) -> MemoizedFunction:
    """Return a cache-backed proxy for ``func``."""
    return MemoizedFunction(func)


def memoized_wrapper(
    original: Callable[..., Any],
    adapter: Callable[[Callable[..., Any]], Callable[..., Any]] = memoize,
) -> Callable[..., Any]:
    """Build the wrapper that stands in for ``original`` under its own name.

    Args:
        original: The renamed original implementation.
        adapter: Callable turning ``original`` into a cache-backed proxy.

    Returns:
        A function forwarding its arguments to the proxy. The proxy is built
        on the first call, exactly once. It is reachable as
        ``wrapper.proxy_cell`` for inspection.
    """
    cell: OnceCell[Callable[..., Any]] = OnceCell()

    @functools.wraps(original)
    def wrapper(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
        proxy = cell.get_or_init(lambda: adapter(original))
        return proxy(*args, **kwargs)

    wrapper.proxy_cell = cell  # type: ignore[attr-defined]
    return wrapper
