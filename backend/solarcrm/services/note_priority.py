"""Note priority carried in legacy history descriptions.

Older note entries stored the priority as a trailing ``(Важное)``-style
suffix instead of a column. ``0002_note_priority_backfill`` moves it into
``project_history.note_priority``; reads fall back to the same parser for
any row written after the migration by an old client.
"""
import re

from solarcrm.db.models.project_note import NotePriority

LEGACY_PRIORITY_SUFFIXES = {
    "Важное": NotePriority.important.value,
    "Срочное": NotePriority.urgent.value,
    "Критическое": NotePriority.critical.value,
}
_SUFFIX_RE = re.compile(r"\s*\((" + "|".join(LEGACY_PRIORITY_SUFFIXES) + r")\)\s*$")


def extract_legacy_priority(description: str | None) -> str | None:
    if not description:
        return None
    m = _SUFFIX_RE.search(description)
    return LEGACY_PRIORITY_SUFFIXES[m.group(1)] if m else None


def strip_legacy_priority(description: str | None) -> str | None:
    if not description:
        return description
    return _SUFFIX_RE.sub("", description)


def resolve_note_priority(stored: str | None, description: str | None) -> str:
    return stored or extract_legacy_priority(description) or NotePriority.normal.value
