"""Version label numbering.

Labels have the form ``v<major>.<minor>``. Only the minor component is ever
incremented; the major component is carried over unchanged.
"""

import re
from typing import Optional, Tuple

INITIAL_VERSION_LABEL = "v1.0"
FALLBACK_VERSION_LABEL = "v1.1"

_LABEL_PATTERN = re.compile(r"v(\d+)\.(\d+)")


def parse_version_label(label: Optional[str]) -> Optional[Tuple[int, int]]:
    """Return ``(major, minor)`` for a well-formed label, else ``None``."""
    if not label:
        return None
    match = _LABEL_PATTERN.search(label)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def next_version_label(latest: Optional[str]) -> str:
    """Derive the label that follows ``latest``.

    Never raises: an absent or unparseable label yields ``v1.1``.

    >>> next_version_label("v1.4")
    'v1.5'
    >>> next_version_label("draft")
    'v1.1'
    """
    parsed = parse_version_label(latest)
    if parsed is None:
        return FALLBACK_VERSION_LABEL

    major, minor = parsed
    return f"v{major}.{minor + 1}"
