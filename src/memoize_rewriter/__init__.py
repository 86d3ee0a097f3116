"""Memoize Rewriter.

Rewrites tagged function definitions so that every call, recursive ones
included, goes through a cache-backed proxy.
"""

__version__ = "0.1.0"

from .analysis.overlap_detector import Overlap, OverlapDetector
from .config.runtime_config import ApplicationMode, RuntimeConfig
from .core.buffer import SourceBuffer
from .core.exceptions import (
    AmbiguousOverloadError,
    ManifestError,
    MissingBodyError,
    NameCollisionError,
    OverlappingEditError,
    RewriteError,
    UnresolvableSpanError,
)
from .core.manifest import load_descriptors, parse_descriptors
from .core.models import (
    EditKind,
    FunctionDescriptor,
    Parameter,
    RewriteFailure,
    RewritePlan,
    RewriteResult,
    Span,
    TextEdit,
)
from .core.rewriter import UnitRewriter
from .core.sequencer import EditSequencer
from .rewrite.planner import RewritePlanner

__all__ = [
    "AmbiguousOverloadError",
    "ApplicationMode",
    "EditKind",
    "EditSequencer",
    "FunctionDescriptor",
    "ManifestError",
    "MissingBodyError",
    "NameCollisionError",
    "Overlap",
    "OverlapDetector",
    "OverlappingEditError",
    "Parameter",
    "RewriteError",
    "RewriteFailure",
    "RewritePlan",
    "RewritePlanner",
    "RewriteResult",
    "RuntimeConfig",
    "SourceBuffer",
    "Span",
    "TextEdit",
    "UnitRewriter",
    "UnresolvableSpanError",
    "load_descriptors",
    "parse_descriptors",
]
