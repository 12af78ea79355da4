"""Shape model reply text into rich content blocks.

Backends answer in markdown. This is a line-oriented reader for the subset
the assistant personas are told to use; anything it does not recognize ends
up in a paragraph, so no reply text is ever dropped.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..types.content import (
    CalloutBlock,
    CodeBlock,
    ContentBlock,
    DividerBlock,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    MathBlock,
    ParagraphBlock,
    QuoteBlock,
    TableBlock,
)

_FENCE_RE = re.compile(r"^\s*```\s*([\w+#.-]*)\s*$")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_DIVIDER_RE = re.compile(r"^\s*(?:-{3,}|\*{3,}|_{3,})\s*$")
_CALLOUT_RE = re.compile(r"^>\s*\[!(\w+)\]\s*(.*)$")
_QUOTE_RE = re.compile(r"^>\s?(.*)$")
_TABLE_SEPARATOR_RE = re.compile(r"^\s*\|?\s*:?-{3,}:?\s*(?:\|\s*:?-{3,}:?\s*)*\|?\s*$")
_TODO_RE = re.compile(r"^\s*[-*+]\s+\[([ xX])\]\s+(.*)$")
_BULLET_RE = re.compile(r"^\s*[-*+]\s+(.*)$")
_ORDERED_RE = re.compile(r"^\s*\d+[.)]\s+(.*)$")
_IMAGE_RE = re.compile(r'^\s*!\[([^\]]*)\]\(([^)\s]+)(?:\s+"[^"]*")?\)\s*$')
_MATH_FENCE = "$$"

_CALLOUT_TYPES = {
    "note": "info",
    "info": "info",
    "tip": "success",
    "success": "success",
    "important": "warning",
    "warning": "warning",
    "caution": "warning",
    "danger": "error",
    "error": "error",
}


def _split_row(line: str) -> List[str]:
    stripped = line.strip()
    if stripped.startswith("|"):
        stripped = stripped[1:]
    if stripped.endswith("|"):
        stripped = stripped[:-1]
    return [cell.strip() for cell in stripped.split("|")]


def _list_style(line: str) -> Optional[str]:
    if _TODO_RE.match(line):
        return "todo"
    if _BULLET_RE.match(line) and not _DIVIDER_RE.match(line):
        return "bulleted"
    if _ORDERED_RE.match(line):
        return "ordered"
    return None


class _Reader:
    def __init__(self, text: str):
        self.lines = text.replace("\r\n", "\n").split("\n")
        self.pos = 0
        self.blocks: List[ContentBlock] = []
        self.paragraph: List[str] = []

    def peek(self, offset: int = 0) -> Optional[str]:
        index = self.pos + offset
        return self.lines[index] if index < len(self.lines) else None

    def flush_paragraph(self) -> None:
        if self.paragraph:
            self.blocks.append(ParagraphBlock(content=" ".join(self.paragraph)))
            self.paragraph = []

    def emit(self, block: ContentBlock) -> None:
        self.flush_paragraph()
        self.blocks.append(block)

    def read(self) -> List[ContentBlock]:
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            if not line.strip():
                self.flush_paragraph()
                self.pos += 1
            elif _FENCE_RE.match(line):
                self._read_code(_FENCE_RE.match(line).group(1))
            elif line.strip().startswith(_MATH_FENCE):
                self._read_math(line.strip())
            elif _HEADING_RE.match(line):
                match = _HEADING_RE.match(line)
                level = min(len(match.group(1)), 3)
                self.emit(HeadingBlock(content=match.group(2), metadata={"level": level}))
                self.pos += 1
            elif _DIVIDER_RE.match(line):
                self.emit(DividerBlock())
                self.pos += 1
            elif _CALLOUT_RE.match(line):
                self._read_callout(_CALLOUT_RE.match(line))
            elif _QUOTE_RE.match(line):
                self._read_quote()
            elif line.lstrip().startswith("|") and _TABLE_SEPARATOR_RE.match(self.peek(1) or ""):
                self._read_table()
            elif _list_style(line):
                self._read_list(_list_style(line))
            elif _IMAGE_RE.match(line):
                match = _IMAGE_RE.match(line)
                alt = match.group(1) or None
                self.emit(ImageBlock(content=alt or "", metadata={"url": match.group(2), "alt": alt}))
                self.pos += 1
            else:
                self.paragraph.append(line.strip())
                self.pos += 1
        self.flush_paragraph()
        return self.blocks

    def _read_code(self, language: str) -> None:
        self.pos += 1
        body: List[str] = []
        while self.pos < len(self.lines) and not self.lines[self.pos].strip().startswith("```"):
            body.append(self.lines[self.pos])
            self.pos += 1
        self.pos += 1  # closing fence, or past the end when unclosed
        self.emit(CodeBlock(metadata={"language": language or "text", "code": "\n".join(body)}))

    def _read_math(self, first: str) -> None:
        inner = first[len(_MATH_FENCE):]
        if inner.endswith(_MATH_FENCE):
            self.pos += 1
            self.emit(MathBlock(content=inner[: -len(_MATH_FENCE)].strip(), metadata={"display": "block"}))
            return
        body = [inner] if inner.strip() else []
        self.pos += 1
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            self.pos += 1
            if line.strip().endswith(_MATH_FENCE):
                tail = line.strip()[: -len(_MATH_FENCE)]
                if tail.strip():
                    body.append(tail)
                break
            body.append(line)
        self.emit(MathBlock(content="\n".join(body).strip(), metadata={"display": "block"}))

    def _read_callout(self, match: re.Match) -> None:
        callout_type = _CALLOUT_TYPES.get(match.group(1).lower(), "info")
        body = [match.group(2)] if match.group(2).strip() else []
        self.pos += 1
        while self.pos < len(self.lines) and _QUOTE_RE.match(self.lines[self.pos]):
            body.append(_QUOTE_RE.match(self.lines[self.pos]).group(1))
            self.pos += 1
        self.emit(CalloutBlock(content=" ".join(part.strip() for part in body if part.strip()),
                               metadata={"callout_type": callout_type}))

    def _read_quote(self) -> None:
        body: List[str] = []
        while self.pos < len(self.lines) and _QUOTE_RE.match(self.lines[self.pos]):
            body.append(_QUOTE_RE.match(self.lines[self.pos]).group(1).strip())
            self.pos += 1
        self.emit(QuoteBlock(content=" ".join(part for part in body if part)))

    def _read_table(self) -> None:
        headers = _split_row(self.lines[self.pos])
        self.pos += 2
        rows: List[List[str]] = []
        while self.pos < len(self.lines) and self.lines[self.pos].lstrip().startswith("|"):
            rows.append(_split_row(self.lines[self.pos]))
            self.pos += 1
        self.emit(TableBlock(metadata={"headers": headers, "rows": rows}))

    def _read_list(self, style: str) -> None:
        items: List[str] = []
        todo_items: List[dict] = []
        while self.pos < len(self.lines) and _list_style(self.lines[self.pos]) == style:
            line = self.lines[self.pos]
            if style == "todo":
                match = _TODO_RE.match(line)
                todo_items.append({"text": match.group(2).strip(), "checked": match.group(1) != " "})
            elif style == "ordered":
                items.append(_ORDERED_RE.match(line).group(1).strip())
            else:
                items.append(_BULLET_RE.match(line).group(1).strip())
            self.pos += 1
        self.emit(ListBlock(metadata={"style": style, "items": items, "todo_items": todo_items}))


def blocks_from_markdown(text: Optional[str]) -> List[ContentBlock]:
    """Split markdown ``text`` into content blocks, in document order."""

    if not text or not text.strip():
        return []
    return _Reader(text).read()


__all__ = ["blocks_from_markdown"]
