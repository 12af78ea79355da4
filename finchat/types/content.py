"""
Rich content model for chat messages.

A message is an ordered list of typed content blocks rather than a raw
string. ``ContentBlock`` is a closed union discriminated on ``type``; each
block kind carries its own metadata model, and every kind knows how to
flatten itself to plain text for consumers such as speech synthesis.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Iterable, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator


class BlockType(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    CODE = "code"
    TABLE = "table"
    CALLOUT = "callout"
    IMAGE = "image"
    MATH = "math"
    EMBED = "embed"
    FILE = "file"
    QUOTE = "quote"
    DIVIDER = "divider"


class AssistantType(str, Enum):
    """Persona tag a message can request."""
    PROGRAMMER = "programmer"
    WRITER = "writer"
    RESEARCHER = "researcher"
    LIFESTYLE = "lifestyle"
    GENERAL = "general"


class ContentValidationError(ValueError):
    """Raised when raw block data does not form a well-formed block."""

    def __init__(self, message: str, kind: Optional[str] = None):
        super().__init__(message)
        self.kind = kind


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class MathPart(_Frozen):
    type: Literal["math"] = "math"
    content: str
    inline: bool = True


Fragment = Union[str, MathPart]
BlockContent = Union[str, Tuple[Fragment, ...]]


def fragments_text(content: BlockContent) -> str:
    if isinstance(content, str):
        return content
    return "".join(part if isinstance(part, str) else part.content for part in content)


# ---------------------------------------------------------------------------
# Metadata models
# ---------------------------------------------------------------------------

class BaseMetadata(_Frozen):
    id: Optional[str] = None
    is_html: bool = Field(default=False, alias="isHtml")
    has_math: bool = Field(default=False, alias="hasMath")


class HeadingMetadata(BaseMetadata):
    level: int = Field(default=1, ge=1, le=3)


class TodoItem(_Frozen):
    text: str
    checked: bool = False


class ListMetadata(BaseMetadata):
    style: Literal["bulleted", "ordered", "todo"] = "bulleted"
    items: Tuple[str, ...] = ()
    todo_items: Tuple[TodoItem, ...] = Field(default=(), alias="todoItems")


class CodeMetadata(BaseMetadata):
    language: str
    code: str
    component_name: Optional[str] = Field(default=None, alias="componentName")
    description: Optional[str] = None


class TableCell(_Frozen):
    content: str
    is_header: bool = Field(default=False, alias="isHeader")


class TableMetadata(BaseMetadata):
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[TableCell, ...], ...]

    @field_validator("rows", mode="before")
    @classmethod
    def _wrap_plain_cells(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        wrapped = []
        for row in value:
            if isinstance(row, (list, tuple)):
                row = [{"content": cell} if isinstance(cell, str) else cell for cell in row]
            wrapped.append(row)
        return wrapped


class CalloutMetadata(BaseMetadata):
    callout_type: Literal["info", "warning", "success", "error"] = Field(default="info", alias="calloutType")


class ImageMetadata(BaseMetadata):
    url: str
    alt: Optional[str] = None


class MathMetadata(BaseMetadata):
    display: Literal["block", "inline"] = "block"


class EmbedMetadata(BaseMetadata):
    provider: Literal["youtube", "twitter", "vimeo", "spotify"]
    url: str
    title: Optional[str] = None
    thumbnail_url: Optional[str] = Field(default=None, alias="thumbnailUrl")
    width: Optional[int] = None
    height: Optional[int] = None
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")


class FileMetadata(BaseMetadata):
    filename: str
    file_type: str = Field(alias="fileType")
    size: Optional[int] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    preview: Optional[str] = None


class QuoteMetadata(BaseMetadata):
    author: Optional[str] = None
    source: Optional[str] = None
    is_block_quote: bool = Field(default=False, alias="isBlockQuote")


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

class _Block(_Frozen):
    content: BlockContent = ""

    @property
    def text(self) -> str:
        return fragments_text(self.content)

    def plain_text(self) -> str:
        raise NotImplementedError(f"{type(self).__name__} does not define plain_text()")


class ParagraphBlock(_Block):
    type: Literal["paragraph"] = "paragraph"
    metadata: Optional[BaseMetadata] = None

    def plain_text(self) -> str:
        return self.text


class HeadingBlock(_Block):
    type: Literal["heading"] = "heading"
    metadata: Optional[HeadingMetadata] = None

    @property
    def level(self) -> int:
        return self.metadata.level if self.metadata else 1

    def plain_text(self) -> str:
        return self.text


class ListBlock(_Block):
    type: Literal["list"] = "list"
    metadata: Optional[ListMetadata] = None

    def plain_text(self) -> str:
        if self.metadata:
            lines = list(self.metadata.items) + [item.text for item in self.metadata.todo_items]
            if lines:
                return "\n".join(lines)
        return self.text


class CodeBlock(_Block):
    type: Literal["code"] = "code"
    metadata: CodeMetadata

    def plain_text(self) -> str:
        return self.metadata.code


class TableBlock(_Block):
    type: Literal["table"] = "table"
    metadata: TableMetadata

    def plain_text(self) -> str:
        lines = []
        if self.metadata.headers:
            lines.append(", ".join(self.metadata.headers))
        for row in self.metadata.rows:
            cells = [cell.content for cell in row]
            if any(cells):
                lines.append(", ".join(cells))
        return "\n".join(lines)


class CalloutBlock(_Block):
    type: Literal["callout"] = "callout"
    metadata: Optional[CalloutMetadata] = None

    def plain_text(self) -> str:
        return self.text


class ImageBlock(_Block):
    type: Literal["image"] = "image"
    metadata: Optional[ImageMetadata] = None

    def plain_text(self) -> str:
        if self.metadata and self.metadata.alt:
            return self.metadata.alt
        return self.text


class MathBlock(_Block):
    type: Literal["math"] = "math"
    metadata: Optional[MathMetadata] = None

    def plain_text(self) -> str:
        return self.text


class EmbedBlock(_Block):
    type: Literal["embed"] = "embed"
    metadata: Optional[EmbedMetadata] = None

    def plain_text(self) -> str:
        if self.metadata and self.metadata.title:
            return self.metadata.title
        return self.text


class FileBlock(_Block):
    type: Literal["file"] = "file"
    metadata: Optional[FileMetadata] = None

    def plain_text(self) -> str:
        if self.text:
            return self.text
        return self.metadata.filename if self.metadata else ""


class QuoteBlock(_Block):
    type: Literal["quote"] = "quote"
    metadata: Optional[QuoteMetadata] = None

    def plain_text(self) -> str:
        return self.text


class DividerBlock(_Block):
    type: Literal["divider"] = "divider"
    metadata: Optional[BaseMetadata] = None

    def plain_text(self) -> str:
        return ""


ContentBlock = Annotated[
    Union[
        ParagraphBlock,
        HeadingBlock,
        ListBlock,
        CodeBlock,
        TableBlock,
        CalloutBlock,
        ImageBlock,
        MathBlock,
        EmbedBlock,
        FileBlock,
        QuoteBlock,
        DividerBlock,
    ],
    Field(discriminator="type"),
]

BLOCK_CLASSES = {
    BlockType.PARAGRAPH: ParagraphBlock,
    BlockType.HEADING: HeadingBlock,
    BlockType.LIST: ListBlock,
    BlockType.CODE: CodeBlock,
    BlockType.TABLE: TableBlock,
    BlockType.CALLOUT: CalloutBlock,
    BlockType.IMAGE: ImageBlock,
    BlockType.MATH: MathBlock,
    BlockType.EMBED: EmbedBlock,
    BlockType.FILE: FileBlock,
    BlockType.QUOTE: QuoteBlock,
    BlockType.DIVIDER: DividerBlock,
}

_block_adapter: TypeAdapter = TypeAdapter(ContentBlock)


def parse_block(data: Any) -> ContentBlock:
    """Validate raw block data into a typed block.

    Raises:
        ContentValidationError: unknown kind, or metadata that does not
            match the kind.
    """
    kind = data.get("type") if isinstance(data, dict) else None
    try:
        return _block_adapter.validate_python(data)
    except ValidationError as exc:
        raise ContentValidationError(
            f"Invalid {kind or 'unknown'} block: {exc.errors()[0]['msg']}",
            kind=kind,
        ) from exc


def parse_blocks(data: Iterable[Any]) -> List[ContentBlock]:
    return [parse_block(item) for item in data]


def to_plain_text(blocks: Sequence[ContentBlock]) -> str:
    """Flatten blocks to human-readable text, dropping layout and media."""
    parts = []
    for block in blocks:
        text = block.plain_text().strip()
        if text:
            parts.append(text)
    return "\n".join(parts)


def text_block(text: str) -> ParagraphBlock:
    return ParagraphBlock(content=text)


class ChatMessage(_Frozen):
    role: Literal["user", "assistant", "system"]
    content: Tuple[ContentBlock, ...] = ()
    assistant_type: Optional[AssistantType] = Field(default=None, alias="assistantType")

    @field_validator("content", mode="before")
    @classmethod
    def _accept_plain_string(cls, value: Any) -> Any:
        # Older clients send the message body as a bare string
        if isinstance(value, str):
            return [{"type": "paragraph", "content": value}] if value else []
        return value

    @classmethod
    def from_text(cls, role: str, text: str, assistant_type: Optional[AssistantType] = None) -> "ChatMessage":
        return cls(role=role, content=(text_block(text),) if text else (), assistant_type=assistant_type)

    def plain_text(self) -> str:
        return to_plain_text(self.content)


__all__ = [
    "AssistantType",
    "BlockType",
    "BLOCK_CLASSES",
    "CalloutBlock",
    "ChatMessage",
    "CodeBlock",
    "CodeMetadata",
    "ContentBlock",
    "ContentValidationError",
    "DividerBlock",
    "EmbedBlock",
    "FileBlock",
    "HeadingBlock",
    "ImageBlock",
    "ListBlock",
    "MathBlock",
    "MathPart",
    "ParagraphBlock",
    "QuoteBlock",
    "TableBlock",
    "TableCell",
    "TableMetadata",
    "TodoItem",
    "parse_block",
    "parse_blocks",
    "text_block",
    "to_plain_text",
]
