"""
Layout Model
Per-element position, size and visibility state for one card design
"""

import math
from enum import Enum
from typing import Dict, Optional, Tuple, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from badgeforge.engine.archetypes import Archetype, default_layout_data

PHOTO_KEY = "image"
QR_KEY = "qrCode"
CUSTOM_TEXT_PREFIX = "customText"
CUSTOM_PHOTO_PREFIX = "customPhoto"

# Drag bounds keep elements off the printable card edge
SNAP_MIN = 5
SNAP_MAX = 95
SNAP_STEP = 2

MIN_FONT_SIZE = 6
MAX_FONT_SIZE = 120


class LayoutError(ValueError):
    """Invalid layout mutation"""


class ElementNotFound(LayoutError):
    """Element key has no entry in the layout (never added, or deleted)"""

    def __init__(self, key: str):
        super().__init__(f"Element '{key}' is not part of this layout")
        self.key = key


class ElementKind(str, Enum):
    TEXT = "text"
    PHOTO = "photo"
    QR = "qr"


def element_kind(key: str) -> ElementKind:
    if key == QR_KEY:
        return ElementKind.QR
    if key == PHOTO_KEY or key.startswith(CUSTOM_PHOTO_PREFIX):
        return ElementKind.PHOTO
    return ElementKind.TEXT


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _snap_axis(value: float) -> int:
    clamped = max(SNAP_MIN, min(SNAP_MAX, value))
    return _round_half_up(clamped / SNAP_STEP) * SNAP_STEP


def snap_position(x: float, y: float) -> Tuple[int, int]:
    """Clamp both axes to the drag bounds, then snap to the nearest even percent"""
    return _snap_axis(x), _snap_axis(y)


class ElementPosition(BaseModel):
    """Placement of one element, in percent of the card"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    x: float = Field(..., ge=0, le=100, description="Horizontal center in percent")
    y: float = Field(..., ge=0, le=100, description="Vertical center in percent")
    visible: bool = True
    width: Optional[float] = Field(default=None, gt=0, le=100, description="Photo/QR width in percent")
    font_size: Optional[int] = Field(default=None, ge=MIN_FONT_SIZE, le=MAX_FONT_SIZE)
    text_align: Optional[Literal["left", "center", "right"]] = None


class Layout(BaseModel):
    """
    Element map for one card design plus the custom element counters.

    A key missing from `elements` was deleted and must never render;
    `visible=False` only hides it.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    elements: Dict[str, ElementPosition] = Field(default_factory=dict)
    custom_text_count: int = Field(default=0, ge=0)
    custom_photo_count: int = Field(default=0, ge=0)

    @classmethod
    def default_for(cls, archetype: Archetype) -> "Layout":
        return cls.from_element_map(default_layout_data(archetype))

    @classmethod
    def from_element_map(cls, element_map: Dict[str, dict], counters: Optional[Dict[str, int]] = None) -> "Layout":
        """
        Build a layout from a persisted element map.

        Counters come from `counters` when given. Maps saved without counters
        are seeded once from the highest custom index present.
        """
        elements = {
            key: value if isinstance(value, ElementPosition) else ElementPosition.model_validate(value)
            for key, value in (element_map or {}).items()
        }
        if counters is None:
            counters = {
                "text": _highest_index(elements, CUSTOM_TEXT_PREFIX),
                "photo": _highest_index(elements, CUSTOM_PHOTO_PREFIX),
            }
        return cls(
            elements=elements,
            custom_text_count=int(counters.get("text", 0)),
            custom_photo_count=int(counters.get("photo", 0)),
        )

    def to_element_map(self) -> Dict[str, dict]:
        return {
            key: position.model_dump(by_alias=True, exclude_none=True)
            for key, position in self.elements.items()
        }

    def counters(self) -> Dict[str, int]:
        return {"text": self.custom_text_count, "photo": self.custom_photo_count}

    def __contains__(self, key: str) -> bool:
        return key in self.elements

    def get(self, key: str) -> ElementPosition:
        try:
            return self.elements[key]
        except KeyError:
            raise ElementNotFound(key) from None

    def is_rendered(self, key: str) -> bool:
        position = self.elements.get(key)
        return position is not None and position.visible

    def set_visible(self, key: str, visible: bool) -> ElementPosition:
        position = self.get(key)
        position.visible = bool(visible)
        return position

    def toggle_visible(self, key: str) -> ElementPosition:
        return self.set_visible(key, not self.get(key).visible)

    def set_position(self, key: str, x: float, y: float) -> ElementPosition:
        position = self.get(key)
        position.x = x
        position.y = y
        return position

    def set_font_size(self, key: str, font_size: int) -> ElementPosition:
        position = self.get(key)
        if element_kind(key) is not ElementKind.TEXT:
            raise LayoutError(f"Font size applies to text elements only, not '{key}'")
        if not MIN_FONT_SIZE <= font_size <= MAX_FONT_SIZE:
            raise LayoutError(f"Font size must be between {MIN_FONT_SIZE} and {MAX_FONT_SIZE}px")
        position.font_size = int(font_size)
        return position

    def set_width(self, key: str, width: float) -> ElementPosition:
        position = self.get(key)
        if element_kind(key) is ElementKind.TEXT:
            raise LayoutError(f"Width applies to photo and QR elements only, not '{key}'")
        if not 0 < width <= 100:
            raise LayoutError("Width must be a percentage between 0 and 100")
        position.width = width
        return position

    def add_element(self, kind: str) -> str:
        """Append a custom element; indices are never reused within a layout"""
        if kind == ElementKind.TEXT.value:
            self.custom_text_count += 1
            n = self.custom_text_count
            key = f"{CUSTOM_TEXT_PREFIX}{n}"
            position = ElementPosition(
                x=50, y=min(100, 50 + (n - 1) * 8), font_size=14, text_align="center", visible=True
            )
        elif kind == ElementKind.PHOTO.value:
            self.custom_photo_count += 1
            n = self.custom_photo_count
            key = f"{CUSTOM_PHOTO_PREFIX}{n}"
            position = ElementPosition(x=min(100, 30 + (n - 1) * 15), y=60, width=15, visible=True)
        else:
            raise LayoutError(f"Unknown element kind '{kind}'")

        self.elements[key] = position
        return key

    def remove_element(self, key: str) -> None:
        self.get(key)
        del self.elements[key]

    def reset_to_default(self, archetype: Archetype) -> None:
        self.elements = Layout.default_for(archetype).elements
        self.custom_text_count = 0
        self.custom_photo_count = 0


def _highest_index(elements: Dict[str, ElementPosition], prefix: str) -> int:
    highest = 0
    for key in elements:
        suffix = key[len(prefix):] if key.startswith(prefix) else ""
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class DragController:
    """
    Idle -> Dragging(key) -> Idle.

    Pointer coordinates are canvas-relative pixels. Candidates are clamped and
    snapped on every move; only `end()` writes to the layout.
    """

    def __init__(self, layout: Layout):
        self.layout = layout
        self.state = DragState.IDLE
        self.key: Optional[str] = None
        self.candidate: Optional[Tuple[float, float]] = None
        self._offset = (0.0, 0.0)
        self._canvas = (0.0, 0.0)

    def begin(self, key: str, pointer_x: float, pointer_y: float, canvas_width: float, canvas_height: float):
        if self.state is DragState.DRAGGING:
            raise LayoutError(f"Already dragging '{self.key}'")
        if canvas_width <= 0 or canvas_height <= 0:
            raise LayoutError("Canvas size must be positive")

        position = self.layout.get(key)
        element_x = position.x / 100 * canvas_width
        element_y = position.y / 100 * canvas_height

        self._offset = (pointer_x - element_x, pointer_y - element_y)
        self._canvas = (canvas_width, canvas_height)
        self.key = key
        self.candidate = (position.x, position.y)
        self.state = DragState.DRAGGING

    def move(self, pointer_x: float, pointer_y: float) -> Tuple[int, int]:
        if self.state is not DragState.DRAGGING:
            raise LayoutError("No drag in progress")

        width, height = self._canvas
        raw_x = (pointer_x - self._offset[0]) / width * 100
        raw_y = (pointer_y - self._offset[1]) / height * 100
        self.candidate = snap_position(raw_x, raw_y)
        return self.candidate

    def end(self) -> Optional[ElementPosition]:
        """Commit the last candidate; a no-op when idle"""
        if self.state is not DragState.DRAGGING:
            return None

        key, candidate = self.key, self.candidate
        self.cancel()
        return self.layout.set_position(key, *candidate)

    def cancel(self) -> None:
        self.state = DragState.IDLE
        self.key = None
        self.candidate = None
