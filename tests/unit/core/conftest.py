"""Shared fixtures for core unit tests"""

import pytest

from blocknote.core.blocks import new_block
from blocknote.core.document import insert_block, new_document, set_cursor
from blocknote.core.models import BlockType


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

## Heading 2

- item one
- item two

1. first
2. second

> quoted line

```python
print("hello")
```
"""

SAMPLE_FM_MD = """\
---
title: Test Doc
author: Ada
tags: [Work, ideas]
---

# Title

Body content.
"""


@pytest.fixture(name="abc_doc")
def abc_doc_fixture():
    """Paragraphs A, B, C with the cursor inside B."""
    doc = new_document("A")
    a = doc.blocks[0]
    b = new_block(BlockType.paragraph, "B")
    c = new_block(BlockType.paragraph, "C")
    doc = insert_block(doc, a.id, b)
    doc = insert_block(doc, b.id, c)
    return set_cursor(doc, b.id, 1)


@pytest.fixture(name="rich_doc")
def rich_doc_fixture():
    """Heading, list, quote and code blocks followed by the initial paragraph."""
    doc = new_document("Intro paragraph")
    blocks = [
        new_block(BlockType.heading, "Plan", level=2),
        new_block(BlockType.list, "milk\neggs", ordered=False),
        new_block(BlockType.quote, "stay hungry"),
        new_block(BlockType.code, "print('x')", language="python"),
    ]
    anchor = None
    for block in blocks:
        doc = insert_block(doc, anchor, block)
        anchor = block.id
    return doc


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="sample_fm_md")
def sample_fm_md_fixture():
    return SAMPLE_FM_MD
