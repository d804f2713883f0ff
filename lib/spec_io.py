# =============================================================================
# lib/spec_io.py - Spec Loading & Versioning
# =============================================================================
# Loads a SpecDoc from a dict, JSON text or a JSON file, and computes the next
# free version when a (name, version) pair is already taken. Specs are
# immutable once persisted: an edit is saved under a bumped version.
# =============================================================================

import json
import logging
import re
from collections.abc import Collection
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.models import SpecDoc
from lib.utils import SpecLoadError

# Set up logging for this module
logger = logging.getLogger(__name__)

SEMVER_LIKE = re.compile(r"^v(\d+)(?:\.(\d+))?$", re.IGNORECASE | re.ASCII)


def load_spec(source: dict[str, Any] | str | Path) -> SpecDoc:
    """
    Load and validate a Spec document.

    Args:
        source: A parsed dict, JSON text, or a path to a JSON file

    Raises:
        SpecLoadError: If the source cannot be read, is not JSON, or does
                       not describe a valid Spec
    """
    if isinstance(source, dict):
        data = source
    else:
        text = _read_source(source)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SpecLoadError(f"Spec is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SpecLoadError(f"Spec must be a JSON object, got {type(data).__name__}")

    try:
        spec = SpecDoc.model_validate(data)
    except ValidationError as e:
        raise SpecLoadError(
            f"Invalid spec: {e.error_count()} validation error(s)",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    logger.debug(f"Loaded spec '{spec.name}' {spec.version} ({len(spec.fields)} fields)")
    return spec


def _read_source(source: str | Path) -> str:
    """Return JSON text from a path, or the string itself when it is JSON."""
    if isinstance(source, str) and source.lstrip().startswith(("{", "[")):
        return source

    path = Path(source)
    if not path.is_file():
        raise SpecLoadError(f"Spec file not found: {path}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SpecLoadError(f"Could not read spec file {path}: {e}") from e


def bump_version(version: str, taken: Collection[str]) -> str:
    """
    First free version at or after `version`.

    "v1" -> "v2", "v10" -> "v11", "v1.2" -> "v1.3"; any other form gets a
    numeric suffix: "draft" -> "draft-2" -> "draft-3". The version itself is
    returned when it is not taken.

    Example:
        bump_version("v1", {"v1", "v2"}) -> "v3"
    """
    if version not in taken:
        return version

    match = SEMVER_LIKE.match(version)
    if match:
        major = int(match.group(1))
        minor = int(match.group(2)) if match.group(2) is not None else None
        while True:
            if minor is not None:
                minor += 1
                candidate = f"v{major}.{minor}"
            else:
                major += 1
                candidate = f"v{major}"
            if candidate not in taken:
                return candidate

    i = 2
    while f"{version}-{i}" in taken:
        i += 1
    return f"{version}-{i}"
