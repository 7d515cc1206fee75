"""Reelpulse — Description Normalizer.

Canonicalizes free-text post descriptions so that reposts of the same
caption (different casing, spacing or quote style) collapse into one
DescriptionOption with a short, stable fingerprint.
"""

import hashlib
import re
from typing import Iterable, List, Optional

from app.models.dashboard_models import DescriptionOption
from app.models.post_models import PostRecord
from app.core.logging import get_logger

logger = get_logger("analyzer.normalizer")

FINGERPRINT_LENGTH = 12
PREVIEW_LENGTH = 60

_WHITESPACE = re.compile(r"\s+")
_SINGLE_QUOTES = re.compile("[\u2018\u2019]")
_DOUBLE_QUOTES = re.compile("[\u201c\u201d]")


def normalize_description(text: Optional[str]) -> str:
    """Trim, lowercase, collapse whitespace and straighten curly quotes."""
    if not text:
        return ""
    normalized = text.strip().lower()
    normalized = _WHITESPACE.sub(" ", normalized)
    normalized = _SINGLE_QUOTES.sub("'", normalized)
    normalized = _DOUBLE_QUOTES.sub('"', normalized)
    return normalized


def description_fingerprint(text: Optional[str]) -> str:
    """12-char hex MD5 prefix of the normalized text.

    Collisions are possible in a truncated hash and are not detected.
    """
    normalized = normalize_description(text)
    digest = hashlib.md5(normalized.encode("utf-8")).hexdigest()
    return digest[:FINGERPRINT_LENGTH]


def extract_description_options(
    records: Iterable[PostRecord],
) -> List[DescriptionOption]:
    """One option per distinct normalized description.

    Sorted by occurrence count (desc), then normalized text (asc).
    """
    options: dict[str, DescriptionOption] = {}

    for record in records:
        text = record.description or ""
        if not text.strip():
            continue

        option_id = description_fingerprint(text)
        existing = options.get(option_id)
        if existing is None:
            options[option_id] = DescriptionOption(
                id=option_id,
                text=text,
                normalized_text=normalize_description(text),
                preview=truncate_text(text.strip()),
                count=1,
                first_posted=record.date_posted,
                last_posted=record.date_posted,
            )
            continue

        existing.count += 1
        if record.date_posted < existing.first_posted:
            existing.first_posted = record.date_posted
        if record.date_posted > existing.last_posted:
            existing.last_posted = record.date_posted

    result = sorted(options.values(), key=lambda o: (-o.count, o.normalized_text))
    logger.debug(f"Extracted {len(result)} description options")
    return result


def truncate_text(text: str, max_length: int = PREVIEW_LENGTH) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
