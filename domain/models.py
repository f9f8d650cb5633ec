from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

BlockType = Literal["header", "text", "image", "button", "divider"]
DocumentStatus = Literal["draft", "sent", "scheduled"]
ResizeHandle = Literal["n", "s", "e", "w", "ne", "nw", "se", "sw"]
ForceKind = Literal["grid", "align", "repel"]

BLOCK_TYPES: tuple[str, ...] = get_args(BlockType)
RESIZE_HANDLES: tuple[str, ...] = get_args(ResizeHandle)

GRID_SIZE = 20
MIN_BLOCK_WIDTH = 160
MIN_BLOCK_HEIGHT = 80
MAX_BLOCK_WIDTH = 480
MAX_BLOCK_HEIGHT = 350
CANVAS_SIZE_MARGIN = 60
DEFAULT_CONTENT_WIDTH = 600
DEFAULT_CONTENT_HEIGHT = 800
HEADER_TEXT_LIMIT = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)


@dataclass(frozen=True)
class Size:
    width: int
    height: int


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    def expanded(self, margin: float) -> tuple[float, float, float, float]:
        return (
            self.x - margin,
            self.y - margin,
            self.right + margin,
            self.bottom + margin,
        )

    def moved_to(self, x: int, y: int) -> Rect:
        return Rect(x, y, self.width, self.height)

    def resized(self, width: int, height: int) -> Rect:
        return Rect(self.x, self.y, width, height)


@dataclass(frozen=True)
class Overlap:
    dx: float
    dy: float

    @property
    def is_empty(self) -> bool:
        return self.dx <= 0 or self.dy <= 0


@dataclass(frozen=True)
class SizeLimits:
    min_width: int
    max_width: int
    min_height: int
    max_height: int


@dataclass(frozen=True)
class Canvas:
    width: int
    height: int
    grid_size: int = GRID_SIZE
    snap_to_grid: bool = True

    @property
    def limits(self) -> SizeLimits:
        return SizeLimits(
            min_width=MIN_BLOCK_WIDTH,
            max_width=min(self.width - CANVAS_SIZE_MARGIN, MAX_BLOCK_WIDTH),
            min_height=MIN_BLOCK_HEIGHT,
            max_height=min(self.height - CANVAS_SIZE_MARGIN, MAX_BLOCK_HEIGHT),
        )

    @classmethod
    def from_global_styles(cls, styles: GlobalStyles, snap_to_grid: bool = True) -> Canvas:
        return cls(
            width=styles.content_width,
            height=styles.content_height,
            snap_to_grid=snap_to_grid,
        )


@dataclass(frozen=True)
class Force:
    dx: float
    dy: float
    kind: ForceKind


@dataclass(frozen=True)
class DragSession:
    block_id: str
    grab_offset: Point


@dataclass(frozen=True)
class ResizeSession:
    block_id: str
    handle: ResizeHandle
    start_pointer: Point
    start_rect: Rect


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Position(CamelModel):
    x: int = 0
    y: int = 0
    width: int = 200
    height: int = 100

    @field_validator("x", "y", "width", "height", mode="before")
    @classmethod
    def round_fractional(cls, value: object) -> object:
        if isinstance(value, float) and math.isfinite(value):
            return round_half_up(value)
        return value

    def to_rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @classmethod
    def from_rect(cls, rect: Rect) -> Position:
        return cls(x=rect.x, y=rect.y, width=rect.width, height=rect.height)


class BlockContent(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    text: Optional[str] = None
    html: Optional[str] = None
    src: Optional[str] = None
    alt: Optional[str] = None
    href: Optional[str] = None


class BlockStyles(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    color: Optional[str] = None
    background_color: Optional[str] = None
    text_align: Optional[str] = None
    font_size: Optional[str] = None
    border_radius: Optional[str] = None
    padding_x: Optional[int] = None
    padding_y: Optional[int] = None
    min_width: Optional[int] = None
    thickness: Optional[str] = None


def infer_block_type(content: object) -> BlockType:
    if isinstance(content, BaseModel):
        content = content.model_dump()
    if not isinstance(content, dict):
        return "text"
    text = content.get("text")
    if isinstance(text, str) and text and len(text) < HEADER_TEXT_LIMIT:
        return "header"
    if content.get("html"):
        return "text"
    if content.get("src"):
        return "image"
    return "text"


class Block(CamelModel):
    id: str = Field(..., min_length=1)
    type: BlockType
    content: BlockContent = Field(default_factory=BlockContent)
    styles: BlockStyles = Field(default_factory=BlockStyles)
    position: Position = Field(default_factory=Position)
    order: int = 0
    recovered_from_type: Optional[str] = Field(default=None, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def recover_unknown_type(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        raw_type = data.get("type")
        if raw_type in BLOCK_TYPES:
            return data
        recovered = infer_block_type(data.get("content"))
        logger.warning(
            "Invalid block type %r for block %r, recovered as %r",
            raw_type,
            data.get("id"),
            recovered,
        )
        return {**data, "type": recovered, "recovered_from_type": str(raw_type)}

    @property
    def rect(self) -> Rect:
        return self.position.to_rect()

    def with_rect(self, rect: Rect) -> Block:
        return self.model_copy(update={"position": Position.from_rect(rect)})


class GlobalStyles(CamelModel):
    primary_color: str = "#3B82F6"
    background_color: str = "#FFFFFF"
    content_width: int = Field(default=DEFAULT_CONTENT_WIDTH, gt=0)
    content_height: int = DEFAULT_CONTENT_HEIGHT
    font_family: str = "Arial, sans-serif"

    @field_validator("content_height", mode="before")
    @classmethod
    def default_missing_height(cls, value: object) -> object:
        return value or DEFAULT_CONTENT_HEIGHT


class NewsletterDocument(CamelModel):
    id: Optional[str] = None
    title: str = ""
    subject: str = ""
    blocks: List[Block] = Field(default_factory=list)
    global_styles: GlobalStyles = Field(default_factory=GlobalStyles)
    status: DocumentStatus = "draft"
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("blocks", mode="after")
    @classmethod
    def ensure_unique_block_ids(cls, blocks: List[Block]) -> List[Block]:
        seen: set[str] = set()
        for block in blocks:
            if block.id in seen:
                msg = f"Duplicate block id found: {block.id}"
                raise ValueError(msg)
            seen.add(block.id)
        return blocks

    def find_block(self, block_id: str) -> Block | None:
        return next((block for block in self.blocks if block.id == block_id), None)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


DEFAULT_BLOCK_SIZES: Dict[str, Size] = {
    "header": Size(400, 80),
    "text": Size(450, 120),
    "image": Size(400, 250),
    "button": Size(200, 60),
    "divider": Size(450, 40),
}
FALLBACK_BLOCK_SIZE = Size(200, 100)


def default_block_size(block_type: str) -> Size:
    return DEFAULT_BLOCK_SIZES.get(block_type, FALLBACK_BLOCK_SIZE)


def default_content(block_type: str) -> BlockContent:
    if block_type == "header":
        return BlockContent(text="Titre de votre newsletter")
    if block_type == "text":
        return BlockContent(html="<p>Votre contenu texte ici.</p>")
    if block_type == "image":
        return BlockContent(src="", alt="Description de l'image", href="")
    if block_type == "button":
        return BlockContent(text="Cliquez ici", href="#")
    return BlockContent()


def default_styles(block_type: str) -> BlockStyles:
    if block_type == "header":
        return BlockStyles(color="#1F2937", text_align="center")
    if block_type == "text":
        return BlockStyles(color="#374151", font_size="16px", text_align="left")
    if block_type == "image":
        return BlockStyles(border_radius="8px")
    if block_type == "button":
        return BlockStyles(
            background_color="#3B82F6",
            color="#FFFFFF",
            border_radius="8px",
            text_align="center",
            padding_x=32,
            padding_y=16,
            font_size="16px",
        )
    if block_type == "divider":
        return BlockStyles(color="#E5E7EB", thickness="1px")
    return BlockStyles()
