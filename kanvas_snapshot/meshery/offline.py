"""Offline design identifiers.

When Meshery cannot be reached or rejects a submission, the pipeline carries
on with a locally synthesized identifier. It is informational only and is
never sent to GitHub or back to Meshery.
"""

from datetime import datetime
from typing import Callable, Optional

from kanvas_snapshot.core.schema.design import OFFLINE_PREFIX

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def sanitize_design_name(name: str) -> str:
    """Replace spaces with hyphens; empty names become ``design``."""
    sanitized = (name or "").strip().replace(" ", "-")
    return sanitized or "design"


def offline_identifier(name: str, now: Optional[Callable[[], datetime]] = None) -> str:
    """Build ``offline-mode-<name>-<YYYYmmddHHMMSS>``.

    Two calls with the same name within the same second return the same
    identifier.

    Args:
        name: Design name
        now: Clock returning the current time (default: datetime.now)
    """
    timestamp = (now or datetime.now)().strftime(TIMESTAMP_FORMAT)
    return f"{OFFLINE_PREFIX}{sanitize_design_name(name)}-{timestamp}"
