"""Loading of function descriptor manifests.

A front end that matches tagged functions hands its results over as a YAML or
JSON document:

    functions:
      - name: fact
        return_type: int
        parameters:
          - {name: n, type: int}
        declaration_start: 0
        name_end: 8
        body_start: 16
        body_end: 64

A bare list of entries is accepted too. ``body_start`` and ``body_end`` may be
null for a declaration without a definition; such entries are rejected later,
per function, rather than failing the whole manifest.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from memoize_rewriter.core.exceptions import ManifestError
from memoize_rewriter.core.models import FunctionDescriptor

logger = logging.getLogger(__name__)


def parse_descriptors(data: Any, source: str = "<manifest>") -> list[FunctionDescriptor]:
    """Convert a decoded manifest document into descriptors.

    Args:
        data: Decoded document, either a mapping with a ``functions`` list or
            a bare list of entries.
        source: Name of the document, for error messages.

    Returns:
        list[FunctionDescriptor]: Descriptors in document order.

    Raises:
        ManifestError: If the document or any entry is malformed.
    """
    if isinstance(data, Mapping):
        entries = data.get("functions")
    else:
        entries = data

    if not isinstance(entries, list):
        raise ManifestError(f"{source} must contain a list of functions")

    descriptors = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise ManifestError(f"{source}: entry {index} must be a mapping")
        try:
            descriptors.append(FunctionDescriptor.from_mapping(entry))
        except KeyError as e:
            raise ManifestError(f"{source}: entry {index} is missing key {e}") from e
        except (TypeError, ValueError) as e:
            raise ManifestError(f"{source}: entry {index} is invalid: {e}") from e

    logger.debug("Loaded %d descriptors from %s", len(descriptors), source)
    return descriptors


def load_descriptors(path: Path) -> list[FunctionDescriptor]:
    """Read descriptors from a ``.json``, ``.yaml`` or ``.yml`` manifest file.

    Raises:
        ManifestError: If the file cannot be read or decoded, or is malformed.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Failed to read manifest {path}: {e}") from e

    try:
        if suffix == ".json":
            data = json.loads(text)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            raise ManifestError(
                f"Unsupported manifest format: {suffix}. Must be .json, .yaml, or .yml"
            )
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in {path}: {e}") from e

    return parse_descriptors(data, source=str(path))
