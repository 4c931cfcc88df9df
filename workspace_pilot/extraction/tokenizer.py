"""Single-pass tokenizer for tagged assistant output.

The tokenizer walks the text once and recognises tag boundaries generically
for every name in the grammar. Anything it cannot close cleanly is skipped and
scanning resumes right after the offending ``<``, so prose around and between
tags is never an error.

Rules
-----

- A tag opens with ``<name`` where ``name`` is a known tag; attributes follow
  as ``key="value"`` or ``key='value'`` pairs and the tag ends at ``>`` or
  ``/>``. A stray ``<`` before the end marks the tag as malformed.
- Quoted values may hold ``<`` and ``>``, but a value that reaches into
  another known tag means its quote was left open, and the tag is malformed.
- Block tags take everything up to the first ``</name>`` as their body. An
  unterminated block tag is dropped. Tags inside a consumed body are part of
  that body, not separate fragments. Each name is searched for a missing
  closing tag at most once, so the scan stays linear.
- Attribute tags never consume a body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from .grammar import BLOCK_TAGS, KNOWN_TAGS, RAG_LINK_MARKER


@dataclass(frozen=True)
class TagFragment:
    """One well-formed tag occurrence."""

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    start: int = 0


@dataclass(frozen=True)
class RagLink:
    label: str
    target: str
    start: int = 0


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_-"


def _read_name(text: str, pos: int) -> Tuple[str, int]:
    end = pos
    while end < len(text) and _is_name_char(text[end]):
        end += 1
    return text[pos:end], end


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _reaches_known_tag(value: str) -> bool:
    at = value.find("<")
    while at != -1:
        start = at + 2 if value.startswith("</", at) else at + 1
        if _read_name(value, start)[0] in KNOWN_TAGS:
            return True
        at = value.find("<", at + 1)
    return False


def _read_attributes(text: str, pos: int) -> Optional[Tuple[Dict[str, str], int, bool]]:
    """Parse attributes starting at ``pos``.

    Returns ``(attributes, end, self_closing)`` where ``end`` is the index just
    past the closing ``>``, or ``None`` if the tag is malformed.
    """
    attrs: Dict[str, str] = {}
    n = len(text)
    while True:
        pos = _skip_ws(text, pos)
        if pos >= n:
            return None
        if text.startswith("/>", pos):
            return attrs, pos + 2, True
        ch = text[pos]
        if ch == ">":
            return attrs, pos + 1, False
        if ch == "<":
            return None

        key, pos = _read_name(text, pos)
        if not key:
            return None
        pos = _skip_ws(text, pos)
        if pos >= n or text[pos] != "=":
            # Valueless attribute, e.g. <tag flag>
            attrs.setdefault(key, "")
            continue

        pos = _skip_ws(text, pos + 1)
        if pos >= n:
            return None
        quote = text[pos]
        if quote in ("'", '"'):
            close = text.find(quote, pos + 1)
            if close == -1:
                return None
            value = text[pos + 1 : close]
            if _reaches_known_tag(value):
                return None
            pos = close + 1
        else:
            start = pos
            while pos < n and not text[pos].isspace() and text[pos] not in "<>" and not text.startswith("/>", pos):
                pos += 1
            value = text[start:pos]
        attrs.setdefault(key, value)


def iter_tags(text: str) -> Iterator[TagFragment]:
    """Yield well-formed tag fragments in textual order."""
    # Offset from which a block name is known to have no closing tag.
    unclosed_from: Dict[str, int] = {}
    pos = 0
    while True:
        lt = text.find("<", pos)
        if lt == -1:
            return
        name, name_end = _read_name(text, lt + 1)
        if name not in KNOWN_TAGS:
            pos = lt + 1
            continue

        parsed = _read_attributes(text, name_end)
        if parsed is None:
            pos = lt + 1
            continue
        attrs, tag_end, self_closing = parsed

        if name in BLOCK_TAGS and not self_closing:
            closing = f"</{name}>"
            if tag_end >= unclosed_from.get(name, len(text) + 1):
                close_at = -1
            else:
                close_at = text.find(closing, tag_end)
            if close_at == -1:
                unclosed_from.setdefault(name, tag_end)
                pos = tag_end
                continue
            yield TagFragment(name=name, attributes=attrs, body=text[tag_end:close_at], start=lt)
            pos = close_at + len(closing)
            continue

        yield TagFragment(name=name, attributes=attrs, body=None, start=lt)
        pos = tag_end


def find_block(body: str, name: str) -> Optional[str]:
    """Return the content of the first ``<name>...</name>`` block in ``body``."""
    opening = f"<{name}>"
    closing = f"</{name}>"
    start = body.find(opening)
    if start == -1:
        return None
    start += len(opening)
    end = body.find(closing, start)
    if end == -1:
        return None
    return body[start:end]


def iter_rag_links(text: str) -> Iterator[RagLink]:
    """Yield ``[label](rag://target)`` references in textual order."""
    floor = 0
    pos = 0
    while True:
        at = text.find(RAG_LINK_MARKER, pos)
        if at == -1:
            return
        pos = at + 1
        # Labels cannot contain ']', so the opening bracket lies after the previous marker.
        open_at = text.rfind("[", floor, at)
        floor = at + 1
        target_start = at + len(RAG_LINK_MARKER)
        close_at = text.find(")", target_start)
        if open_at == -1 or close_at == -1:
            continue
        label = text[open_at + 1 : at]
        target = text[target_start:close_at]
        if not label or "]" in label or not target:
            continue
        yield RagLink(label=label, target=target, start=open_at)
        pos = close_at + 1
        floor = pos
