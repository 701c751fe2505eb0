"""
Style models and registries.

Styles are named, shared bags of CSS attributes. Nodes reference a
NodeStyle (rendered as ``classDef``/``class``), edges reference an
EdgeStyle (rendered as ``linkStyle``). A registry lives for as long as its
diagram and hands out the same style object for the same id.
"""

import logging
import re
from typing import Callable, Generic, Iterator, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

log = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_NAMED_COLOR = re.compile(r"^[a-zA-Z]+$")


def _check_color(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    if _HEX_COLOR.match(value) or _NAMED_COLOR.match(value):
        return value
    raise ValueError(f"not an HTML color: {value!r}")


class _BaseStyle(BaseModel):
    """Attributes shared by node and edge styles."""
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(frozen=True)
    stroke: Optional[str] = None       # Line color
    stroke_width: int = Field(default=1, ge=0)  # px
    stroke_dash: int = Field(default=0, ge=0)   # px, 0 = solid
    opacity: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    more: str = ""  # Raw CSS appended as-is, e.g. "color:#fff"

    @field_validator("stroke", mode="before")
    @classmethod
    def validate_stroke(cls, value):
        return _check_color(value)

    def _css_parts(self) -> list[str]:
        parts = []
        if self.stroke:
            parts.append(f"stroke:{self.stroke}")
        parts.append(f"stroke-width:{self.stroke_width}px")
        if self.stroke_dash:
            parts.append(f"stroke-dasharray:{self.stroke_dash}px")
        if self.opacity is not None:
            parts.append(f"opacity:{self.opacity:g}")
        if self.more:
            parts.append(self.more)
        return parts

    def css(self) -> str:
        """Comma separated CSS attribute list as Mermaid expects it."""
        return ",".join(self._css_parts())


class NodeStyle(_BaseStyle):
    """A named node style, rendered as a ``classDef`` line."""
    fill: Optional[str] = None

    @field_validator("fill", mode="before")
    @classmethod
    def validate_fill(cls, value):
        return _check_color(value)

    def _css_parts(self) -> list[str]:
        parts = super()._css_parts()
        if self.fill:
            parts.insert(0, f"fill:{self.fill}")
        return parts


class EdgeStyle(_BaseStyle):
    """
    A named edge style, rendered as a ``linkStyle`` line.

    Mermaid applies a linkStyle on top of the connector, so a styled
    dotted edge is drawn solid unless ``stroke_dash`` is set here too.
    """


StyleT = TypeVar("StyleT", bound=_BaseStyle)


class StyleRegistry(Generic[StyleT]):
    """Get-or-create store of styles keyed by id, kept in creation order."""

    def __init__(self, factory: Callable[..., StyleT]):
        self._factory = factory
        self._styles: dict[str, StyleT] = {}

    def get(self, style_id: str) -> StyleT:
        """Return the style for ``style_id``, creating it with defaults on first use."""
        style = self._styles.get(style_id)
        if style is None:
            style = self._factory(id=style_id)
            self._styles[style_id] = style
            log.debug("Created %s %r", type(style).__name__, style_id)
        return style

    def __contains__(self, style_id: object) -> bool:
        return style_id in self._styles

    def __iter__(self) -> Iterator[StyleT]:
        return iter(list(self._styles.values()))

    def __len__(self) -> int:
        return len(self._styles)
