"""Runtime support matching the contract of the generated wrappers."""

from memoize_rewriter.runtime.memoize import CacheInfo, MemoizedFunction, memoize, memoized_wrapper
from memoize_rewriter.runtime.once import OnceCell

__all__ = ["CacheInfo", "MemoizedFunction", "OnceCell", "memoize", "memoized_wrapper"]
