"""Markdown-to-HTML rendering as a lazy stream of top-level blocks"""

import logging
import math
from typing import Iterable, Iterator, Optional

from markdown_it import MarkdownIt
from markdown_it.token import Token

from mdsite.core.models import BlockKind, PostMeta, RenderedBlock, TocEntry
from mdsite.core.utils.slug import unique_slug


logger = logging.getLogger(__name__)

DEFAULT_PRESET = 'gfm-like'
WORDS_PER_MINUTE = 213
SUMMARY_WORDS = 70

BLOCK_TYPE_MAP: dict[str, BlockKind] = {
    'heading_open':      BlockKind.heading,
    'bullet_list_open':  BlockKind.list,
    'ordered_list_open': BlockKind.list,
    'fence':             BlockKind.code,
    'code_block':        BlockKind.code,
    'table_open':        BlockKind.table,
    'html_block':        BlockKind.html,
    'blockquote_open':   BlockKind.quote,
    'hr':                BlockKind.rule,
}


def make_parser(preset: str = DEFAULT_PRESET) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def _heading_level(token: Token) -> Optional[int]:
    """Extract heading level (1-6) from a heading_open token tag, else None."""
    if token.type == 'heading_open' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def _inline_text(token: Optional[Token]) -> str:
    """Plain text of an inline token: text and code spans, markup dropped."""
    if token is None or token.type != 'inline':
        return ''
    if not token.children:
        return token.content
    parts = []
    for child in token.children:
        if child.type in ('text', 'code_inline'):
            parts.append(child.content)
        elif child.type in ('softbreak', 'hardbreak'):
            parts.append(' ')
        elif child.type == 'image':
            parts.append(child.content)
    return ''.join(parts).strip()


def _para_kind(group: list[Token]) -> BlockKind:
    """Return figure if the paragraph contains only an image inline, else paragraph."""
    for tok in group:
        if tok.type == 'inline' and tok.children:
            non_ws = [c for c in tok.children if c.type not in ('softbreak', 'hardbreak')]
            if len(non_ws) == 1 and non_ws[0].type == 'image':
                return BlockKind.figure
    return BlockKind.paragraph


def _group_blocks(tokens: list[Token]) -> Iterator[list[Token]]:
    """Yield token runs that each form one top-level block (open ... matching close)."""
    depth = 0
    current: list[Token] = []
    for tok in tokens:
        current.append(tok)
        depth += tok.nesting
        if depth <= 0:
            yield current
            current, depth = [], 0
    if current:
        yield current


def render_blocks(body: str, preset: str = DEFAULT_PRESET) -> Iterator[RenderedBlock]:
    """Render body markdown one top-level block at a time.

    Malformed constructs come through as literal text; nothing here raises on content.
    Headings get a unique id attribute derived from their text.
    """
    md = make_parser(preset)
    env: dict = {}
    tokens = md.parse(body, env)
    anchors: dict[str, int] = {}

    for group in _group_blocks(tokens):
        first = group[0]
        if first.type == 'paragraph_open':
            kind = _para_kind(group)
        else:
            kind = BLOCK_TYPE_MAP.get(first.type, BlockKind.other)

        inline = next((t for t in group if t.type == 'inline'), None)
        level = _heading_level(first)
        anchor = None
        text = ''
        if kind == BlockKind.heading:
            text = _inline_text(inline)
            anchor = unique_slug(text, anchors)
            first.attrSet('id', anchor)
        elif kind in (BlockKind.paragraph, BlockKind.figure):
            text = _inline_text(inline)
        elif kind == BlockKind.other:
            logger.debug("Unmapped block token %r rendered as-is", first.type)

        yield RenderedBlock(
            kind=kind,
            html=md.renderer.render(group, md.options, env),
            text=text,
            level=level,
            anchor=anchor,
        )


def render_markdown(body: str, preset: str = DEFAULT_PRESET) -> str:
    """Render the whole body into a single HTML string."""
    return ''.join(b.html for b in render_blocks(body, preset))


def table_of_contents(blocks: Iterable[RenderedBlock]) -> list[TocEntry]:
    """List headings in document order."""
    return [
        TocEntry(level=b.level, anchor=b.anchor, text=b.text)
        for b in blocks
        if b.kind == BlockKind.heading and b.anchor
    ]


def word_count(body: str, preset: str = DEFAULT_PRESET) -> int:
    """Count words in prose (inline content); code blocks are not counted."""
    tokens = make_parser(preset).parse(body)
    return sum(len(_inline_text(t).split()) for t in tokens if t.type == 'inline')


def reading_time(words: int) -> int:
    """Minutes to read, rounded up; 0 only for an empty body."""
    return math.ceil(words / WORDS_PER_MINUTE) if words > 0 else 0


def summarize(meta: PostMeta, blocks: Iterable[RenderedBlock], limit: int = SUMMARY_WORDS) -> str:
    """Prefer explicit summary/description, else the first paragraph truncated to limit words."""
    if meta.summary:
        return meta.summary
    if meta.description:
        return meta.description
    for b in blocks:
        if b.kind == BlockKind.paragraph and b.text:
            words = b.text.split()
            return ' '.join(words[:limit]) + (' ...' if len(words) > limit else '')
    return ''
