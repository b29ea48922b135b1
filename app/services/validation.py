"""Field validation for idea writes — URLs, progress, required content fields.

Every check here is pure: it either returns a normalised value or raises
:class:`IdeaValidationError` before anything is written.
"""

import math
from typing import Any, Iterable, List, Mapping, Optional
from urllib.parse import urlparse


REQUIRED_CONTENT_FIELDS = ("title", "description", "category", "problem_statement", "solution")
LINK_FIELDS = ("github_url", "demo_url", "documentation_url", "video_url")

PROGRESS_MIN = 0
PROGRESS_MAX = 100


class IdeaValidationError(ValueError):
    """A write was rejected; ``message`` is safe to show to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def is_valid_url(value: Any) -> bool:
    """Empty/absent is valid; otherwise an absolute http(s) URL is required."""
    if is_blank(value):
        return True
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def check_url(field: str, value: Any) -> None:
    if not is_valid_url(value):
        raise IdeaValidationError(f"{field} is invalid")


def check_urls(values: Mapping[str, Any], fields: Iterable[str] = LINK_FIELDS) -> None:
    """Validate every link field present in ``values``, in a stable order."""
    for field in fields:
        if field in values:
            check_url(field, values[field])


def parse_progress(value: Any) -> int:
    """
    Parse a progress value supplied by the idea owner.

    Accepts ints, floats and numeric strings in [0, 100]. Out-of-range or
    non-numeric input is rejected, never clamped. Fractional values are
    rounded for storage.
    """
    if isinstance(value, bool) or value is None:
        raise IdeaValidationError("Progress must be between 0 and 100")
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        raise IdeaValidationError("Progress must be between 0 and 100")
    if not math.isfinite(number) or number < PROGRESS_MIN or number > PROGRESS_MAX:
        raise IdeaValidationError("Progress must be between 0 and 100")
    return int(round(number))


def missing_required_fields(values: Mapping[str, Any]) -> List[str]:
    return [field for field in REQUIRED_CONTENT_FIELDS if is_blank(values.get(field))]


def check_required_fields(values: Mapping[str, Any]) -> None:
    missing = missing_required_fields(values)
    if missing:
        raise IdeaValidationError(f"Missing required fields: {', '.join(missing)}")


def clean_text(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""
