"""Markdown import: frontmatter extraction and markdown-it token-to-block conversion"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from markdown_it import MarkdownIt

from blocknote.core.blocks import new_block
from blocknote.core.models import Block, BlockType


FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)

LIST_TOKENS = {'bullet_list_open', 'ordered_list_open'}
CODE_TOKENS = {'fence', 'code_block'}


@dataclass
class ParsedMarkdown:
    """Blocks and frontmatter read from a markdown source; not persisted."""
    frontmatter: dict[str, Any] = field(default_factory=dict)
    blocks:      list[Block] = field(default_factory=list)


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def _close_index(tokens: list, i: int) -> int:
    """Index of the token closing the container opened at tokens[i]."""
    close_type = tokens[i].type.replace('_open', '_close')
    for j in range(i + 1, len(tokens)):
        if tokens[j].type == close_type and tokens[j].level == tokens[i].level:
            return j
    return len(tokens) - 1


def _inline_texts(tokens: list) -> list[str]:
    return [t.content for t in tokens if t.type == 'inline']


def tokens_to_blocks(tokens: list) -> list[Block]:
    """Convert top-level markdown-it tokens to typed Blocks; nested content is flattened."""
    blocks: list[Block] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        end = i

        if tok.type == 'heading_open':
            end = _close_index(tokens, i)
            text = " ".join(_inline_texts(tokens[i + 1:end]))
            blocks.append(new_block(BlockType.heading, text, level=int(tok.tag[1:])))
        elif tok.type == 'paragraph_open':
            end = _close_index(tokens, i)
            blocks.append(new_block(BlockType.paragraph, "\n".join(_inline_texts(tokens[i + 1:end]))))
        elif tok.type in LIST_TOKENS:
            end = _close_index(tokens, i)
            items = [" ".join(t.split()) for t in _inline_texts(tokens[i + 1:end])]
            blocks.append(new_block(BlockType.list, "\n".join(items), ordered=tok.type == 'ordered_list_open'))
        elif tok.type == 'blockquote_open':
            end = _close_index(tokens, i)
            blocks.append(new_block(BlockType.quote, "\n".join(_inline_texts(tokens[i + 1:end]))))
        elif tok.type in CODE_TOKENS:
            info = tok.info.split() if tok.info else []
            metadata = {"language": info[0]} if info else {}
            blocks.append(new_block(BlockType.code, tok.content.rstrip("\n"), **metadata))
        elif tok.type == 'html_block':
            blocks.append(new_block(BlockType.paragraph, tok.content.rstrip("\n")))

        i = end + 1
    return blocks


def parse_markdown(text: str, parser_config: str = 'commonmark') -> ParsedMarkdown:
    """Parse markdown source into frontmatter and a flat ordered list of Blocks."""
    frontmatter, body = strip_frontmatter(text)
    tokens = _make_parser(parser_config).parse(body)
    return ParsedMarkdown(frontmatter=frontmatter, blocks=tokens_to_blocks(tokens))


def parse_file(path: Path, parser_config: str = 'commonmark') -> ParsedMarkdown:
    """Read and parse a single markdown file."""
    return parse_markdown(path.read_text(encoding='utf-8'), parser_config)
