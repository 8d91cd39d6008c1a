"""
Immutable scene graph for plan documents.

Layout code builds trees of these frozen dataclasses; ``svg_writer`` turns a
finished :class:`Document` into SVG text. Nothing here knows about any
concrete vector format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Union


@dataclass(frozen=True)
class Rotation:
    """Rotation by ``angle`` degrees about the pivot (cx, cy)."""
    angle: float
    cx: float
    cy: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    css_class: str | None = None
    rx: float | None = None


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    css_class: str | None = None
    marker_start: str | None = None
    marker_end: str | None = None


@dataclass(frozen=True)
class Text:
    """
    A single text label.

    Attributes:
        x, y: Anchor point
        content: Label string
        anchor: Horizontal alignment ("start", "middle", "end")
        baseline: Vertical alignment (None = alphabetic, "middle", "hanging")
        rotation: Optional rotation about a pivot
    """
    x: float
    y: float
    content: str
    css_class: str | None = None
    anchor: str = "start"
    baseline: str | None = None
    rotation: Rotation | None = None


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    css_class: str | None = None


@dataclass(frozen=True)
class Marker:
    """Reusable arrowhead definition referenced by lines via its id."""
    id: str
    path: str
    fill: str
    view_box: tuple[float, float, float, float] = (0, 0, 10, 10)
    ref_x: float = 9
    ref_y: float = 5
    width: float = 6
    height: float = 6
    orient: str = "auto-start-reverse"


@dataclass(frozen=True)
class Group:
    """
    Container node.

    ``transform`` is an SVG-style transform list applied to the whole group;
    ``group_id`` and ``css_class`` are used to locate layers later on.
    """
    children: tuple["Node", ...] = ()
    group_id: str | None = None
    css_class: str | None = None
    transform: str | None = None

    def has_class(self, name: str) -> bool:
        return bool(self.css_class) and name in self.css_class.split()


Node = Union[Rect, Line, Text, Circle, Group]


@dataclass(frozen=True)
class Document:
    """
    Root of a scene.

    Attributes:
        children: Top-level nodes in paint order
        view_box: Declared extent as (min_x, min_y, width, height)
        width, height: Optional output size in page units
        markers: Marker definitions
        styles: CSS style sheets
        aria_label: Accessible name for the drawing
    """
    children: tuple[Node, ...] = ()
    view_box: tuple[float, float, float, float] | None = None
    width: float | None = None
    height: float | None = None
    markers: tuple[Marker, ...] = field(default_factory=tuple)
    styles: tuple[str, ...] = field(default_factory=tuple)
    aria_label: str = ""


def iter_nodes(node: Node | Document) -> Iterator[Node]:
    """Depth-first walk over every node below (and including) a group."""
    if isinstance(node, Document):
        for child in node.children:
            yield from iter_nodes(child)
        return
    yield node
    if isinstance(node, Group):
        for child in node.children:
            yield from iter_nodes(child)


def iter_primitives(node: Node | Document) -> Iterator[Node]:
    """Every non-group node below a group or document."""
    for item in iter_nodes(node):
        if not isinstance(item, Group):
            yield item


def find_group(root: Document | Group, name: str) -> Group | None:
    """
    Find the first group whose id or class matches ``name``.

    Groups are matched by CSS class first and by id second, in document
    order.
    """
    groups = [n for n in iter_nodes(root) if isinstance(n, Group)]
    for group in groups:
        if group.has_class(f"{name}-group"):
            return group
    for group in groups:
        if group.group_id == name:
            return group
    return None
