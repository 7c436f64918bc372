"""Domain types shared by the slideshow engine.

Catalog items and the video configuration are immutable for the duration of a
run; the generation session is the only mutable state and belongs to the
generator that created it.
"""
from __future__ import annotations

import contextlib
import enum
import os
import tempfile
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterator, Optional, Tuple

CENTS = Decimal("0.01")

SELECTION_MODES = ("all", "by-category", "discounted")
# Names used by the admin form
SELECTION_ALIASES = {"category": "by-category", "discount": "discounted"}
ANIMATION_KINDS = ("fade", "zoom", "slide", "rotate")

MAX_PRODUCTS_RANGE = (3, 12)
PRODUCT_DURATION_RANGE = (2, 6)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class CatalogItem:
    """A product as handed over by the catalog collaborator (read-only)."""

    id: str
    title: str
    price: Decimal
    discount: Optional[float] = None
    image_ref: str = ""
    category: str = ""
    active: bool = True

    def __post_init__(self):
        object.__setattr__(self, "price", _to_decimal(self.price))
        if self.price < 0:
            raise ValueError(f"Price must be non-negative: {self.price}")
        if self.discount is not None and not (0 <= self.discount <= 100):
            raise ValueError(f"Discount must be within [0, 100]: {self.discount}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogItem":
        """Build an item from a catalog payload entry.

        Accepts both the REST shape (``_id``, ``thumbnails``, ``status``) and
        the flat shape used by local item files (``id``, ``image``, ``active``).
        """
        thumbnails = data.get("thumbnails") or []
        image_ref = data.get("image") or data.get("image_ref") or (thumbnails[0] if thumbnails else "")
        discount = data.get("discount")
        return cls(
            id=str(data.get("_id") or data.get("id") or ""),
            title=str(data.get("title") or ""),
            price=_to_decimal(data.get("price") or 0),
            discount=float(discount) if discount is not None else None,
            image_ref=image_ref or "",
            category=str(data.get("category") or ""),
            active=bool(data.get("status", data.get("active", True))),
        )

    @property
    def has_discount(self) -> bool:
        return bool(self.discount) and self.discount > 0

    @property
    def discounted_price(self) -> Decimal:
        if not self.has_discount:
            return self.price
        factor = Decimal(1) - _to_decimal(self.discount) / Decimal(100)
        return (self.price * factor).quantize(CENTS, rounding=ROUND_HALF_UP)

    @property
    def saved_amount(self) -> Decimal:
        return (self.price - self.discounted_price).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class VideoConfig:
    """Per-run video options, as set from the admin form or the CLI."""

    selection: str = "all"
    category: Optional[str] = None
    max_products: int = 8
    show_name: bool = True
    show_price: bool = True
    product_duration: float = 6
    animation: str = "zoom"

    def __post_init__(self):
        if self.selection not in SELECTION_MODES:
            raise ValueError(f"Unknown selection mode: {self.selection}")
        if self.animation not in ANIMATION_KINDS:
            raise ValueError(f"Unknown animation kind: {self.animation}")
        lo, hi = MAX_PRODUCTS_RANGE
        if not (lo <= self.max_products <= hi):
            raise ValueError(f"max_products must be between {lo} and {hi}")
        lo, hi = PRODUCT_DURATION_RANGE
        if not (lo <= self.product_duration <= hi):
            raise ValueError(f"product_duration must be between {lo} and {hi} seconds")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "VideoConfig":
        data = dict(data or {})
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__ and v is not None}
        if 'selection' in known:
            known['selection'] = SELECTION_ALIASES.get(known['selection'], known['selection'])
        if 'max_products' in known:
            known['max_products'] = int(known['max_products'])
        if 'product_duration' in known:
            known['product_duration'] = float(known['product_duration'])
        return cls(**known)


@dataclass(frozen=True)
class SlideTexts:
    """Free-text copy shown on the intro and outro cards."""

    brand_name: str = "Joly Lingerie"
    intro_subtitle: str = "Our Collection"
    intro_description: str = "exclusive and elegant products"
    outro_message: str = "Thank you for your preference"
    outro_call_to_action: str = "Visit us in our store"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SlideTexts":
        data = data or {}
        return cls(**{k: str(v) for k, v in data.items() if k in cls.__dataclass_fields__ and v is not None})


@dataclass(frozen=True)
class VisualParams:
    """Visual parameters of one rendered frame, derived from progress."""

    image_scale: float = 1.0
    image_opacity: float = 1.0
    image_rotation: float = 0.0   # radians
    image_offset_y: float = 0.0   # fraction of the surface height
    text_opacity: float = 1.0
    text_offset_y: float = 0.0    # px


class GenerationStatus(str, enum.Enum):
    IDLE = "idle"
    GENERATING = "generating"
    SUCCESS = "success"
    ERROR = "error"
    CANCELLED = "cancelled"


ProgressUpdate = Tuple[int, str]


@dataclass
class GenerationSession:
    """Mutable status of one generation run."""

    status: GenerationStatus = GenerationStatus.IDLE
    percent: int = 0
    message: str = ""
    error: Optional[str] = None

    def report(self, percent: float, message: str) -> bool:
        """Update progress keeping it non-decreasing; return True if it changed."""
        value = max(self.percent, min(100, int(percent)))
        changed = value != self.percent or message != self.message
        self.percent = value
        self.message = message
        return changed


@dataclass(frozen=True)
class EncodedVideo:
    """Raw output of a capture session before it is wrapped for the caller."""

    data: bytes
    mime_type: str
    frame_count: int = 0


@dataclass(frozen=True)
class GeneratedVideo:
    """Finished artifact handed to the caller, who owns it thereafter."""

    data: bytes = field(repr=False)
    mime_type: str
    id: str
    items: Tuple[CatalogItem, ...]
    config: VideoConfig
    duration_seconds: float

    @property
    def byte_size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return "mp4" if "mp4" in self.mime_type else "webm"

    @contextlib.contextmanager
    def preview_file(self) -> Iterator[str]:
        """Expose the payload as a temporary file, removed on every exit path."""
        fd, path = tempfile.mkstemp(prefix=f"{self.id}_", suffix=f".{self.extension}")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(self.data)
            yield path
        finally:
            if os.path.exists(path):
                os.unlink(path)
