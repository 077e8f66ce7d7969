"""Keyword-based tag derivation behind a swappable TagDeriver interface

Matching is naive substring containment on lowercased text: "meeting" also
matches "meetings", "work" matches "network", and negation is not understood
("not urgent" still yields "urgent"). Swap in another TagDeriver to change that.
"""

from typing import Mapping, Optional, Protocol, runtime_checkable

from blocknote.core.document import document_text
from blocknote.core.models import Document, normalize_tag


FALLBACK_TAG = "general"

KEYWORD_TAGS: dict[str, str] = {
    "meeting":    "meeting",
    "idea":       "idea",
    "brainstorm": "idea",
    "thought":    "idea",
    "todo":       "todo",
    "task":       "task",
    "action":     "task",
    "reminder":   "reminder",
    "remember":   "reminder",
    "important":  "important",
    "urgent":     "urgent",
    "priority":   "urgent",
    "project":    "project",
    "work":       "work",
    "business":   "work",
    "personal":   "personal",
    "travel":     "travel",
    "trip":       "travel",
    "shopping":   "shopping",
    "buy":        "shopping",
    "purchase":   "shopping",
    "health":     "health",
    "medical":    "health",
    "fitness":    "health",
    "finance":    "finance",
    "money":      "finance",
    "budget":     "finance",
    "education":  "education",
    "learn":      "education",
    "study":      "education",
    "research":   "research",
    "note":       "note",
    "draft":      "draft",
    "recipe":     "recipe",
    "food":       "recipe",
}


@runtime_checkable
class TagDeriver(Protocol):
    """Anything that maps document text to a non-empty set of labels."""

    def derive_tags(self, text: str) -> set[str]:
        ...


class KeywordTagDeriver:
    """Deterministic keyword-to-tag lookup; yields {'general'} when nothing matches."""

    def __init__(self, keywords: Optional[Mapping[str, str]] = None):
        table = KEYWORD_TAGS if keywords is None else keywords
        self.keywords = {k.lower(): normalize_tag(v) for k, v in table.items()}

    def derive_tags(self, text: str) -> set[str]:
        normalized = text.lower()
        tags = {tag for keyword, tag in self.keywords.items() if keyword in normalized}
        return tags or {FALLBACK_TAG}


_default = KeywordTagDeriver()


def derive_tags(text: str) -> set[str]:
    """Derive tags from text with the built-in keyword table."""
    return _default.derive_tags(text)


def derive_document_tags(doc: Document, deriver: TagDeriver = _default) -> set[str]:
    return deriver.derive_tags(document_text(doc))
