"""Collection statistics: word and block totals, length distribution, most used tags"""

from collections import Counter
from typing import Iterable

from pydantic import BaseModel, Field

from blocknote.core.document import word_count
from blocknote.core.models import BlockType, Document


SHORT_WORDS = 100
LONG_WORDS = 500


class CollectionStats(BaseModel):
    total_documents: int = 0
    total_words:     int = 0
    total_blocks:    int = 0
    average_words:   int = Field(default=0, description="Mean words per document, rounded down")
    average_blocks:  float = 0.0
    blocks_by_type:  dict[str, int] = Field(default_factory=dict)
    short:           int = Field(default=0, description=f"Documents under {SHORT_WORDS} words")
    medium:          int = Field(default=0, description=f"Documents of {SHORT_WORDS}-{LONG_WORDS} words")
    long:            int = Field(default=0, description=f"Documents over {LONG_WORDS} words")
    top_tags:        list[tuple[str, int]] = Field(default_factory=list)


def length_bucket(words: int) -> str:
    """Return 'short', 'medium' or 'long' for a word count."""
    if words < SHORT_WORDS:
        return "short"
    if words <= LONG_WORDS:
        return "medium"
    return "long"


def collection_stats(documents: Iterable[Document], top: int = 10) -> CollectionStats:
    """Summarize documents. top limits the tag ranking (ties broken alphabetically)."""
    docs = list(documents)
    if not docs:
        return CollectionStats(blocks_by_type={t.value: 0 for t in BlockType})

    words = [word_count(d) for d in docs]
    buckets = Counter(length_bucket(w) for w in words)
    by_type = Counter(b.type.value for d in docs for b in d.blocks)
    tag_counts = Counter(t for d in docs for t in d.tags)
    total_blocks = sum(len(d.blocks) for d in docs)

    return CollectionStats(
        total_documents=len(docs),
        total_words=sum(words),
        total_blocks=total_blocks,
        average_words=sum(words) // len(docs),
        average_blocks=round(total_blocks / len(docs), 1),
        blocks_by_type={t.value: by_type.get(t.value, 0) for t in BlockType},
        short=buckets["short"],
        medium=buckets["medium"],
        long=buckets["long"],
        top_tags=sorted(tag_counts.items(), key=lambda kv: (-kv[1], kv[0]))[:top],
    )
