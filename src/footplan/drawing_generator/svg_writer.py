"""
SVG serializer for scene documents.
"""

from __future__ import annotations

import math
from xml.sax.saxutils import escape, quoteattr

from .scene import Circle, Document, Group, Line, Marker, Node, Rect, Text

SVG_NS = "http://www.w3.org/2000/svg"


def format_number(value: float) -> str:
    """Compact decimal text for coordinates (at most 4 decimals, no -0)."""
    if not math.isfinite(value):
        return "0"
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _attrs(**attrs) -> str:
    """Render keyword attributes; None values are skipped, '_' becomes '-'."""
    parts = []
    for name, value in attrs.items():
        if value is None:
            continue
        if isinstance(value, float):
            value = format_number(value)
        parts.append(f"{name.rstrip('_').replace('_', '-')}={quoteattr(str(value))}")
    return " ".join(parts)


def _marker_ref(marker_id: str | None) -> str | None:
    return f"url(#{marker_id})" if marker_id else None


def _rotation(text: Text) -> str | None:
    if text.rotation is None:
        return None
    r = text.rotation
    return f"rotate({format_number(r.angle)} {format_number(r.cx)} {format_number(r.cy)})"


def _marker_svg(marker: Marker) -> str:
    vb = " ".join(format_number(v) for v in marker.view_box)
    return (
        f'<marker {_attrs(id=marker.id, viewBox=vb, refX=float(marker.ref_x), refY=float(marker.ref_y), markerWidth=float(marker.width), markerHeight=float(marker.height), orient=marker.orient)}>'
        f'<path {_attrs(d=marker.path, fill=marker.fill)}/></marker>'
    )


def _node_svg(node: Node, indent: int) -> list[str]:
    pad = "  " * indent
    if isinstance(node, Group):
        attrs = _attrs(id=node.group_id, class_=node.css_class, transform=node.transform)
        lines = [f"{pad}<g {attrs}".rstrip() + ">"]
        for child in node.children:
            lines.extend(_node_svg(child, indent + 1))
        lines.append(f"{pad}</g>")
        return lines
    if isinstance(node, Rect):
        return [f"{pad}<rect {_attrs(x=float(node.x), y=float(node.y), width=float(node.width), height=float(node.height), rx=None if node.rx is None else float(node.rx), class_=node.css_class)}/>"]
    if isinstance(node, Line):
        return [
            f"{pad}<line {_attrs(x1=float(node.x1), y1=float(node.y1), x2=float(node.x2), y2=float(node.y2), class_=node.css_class, marker_start=_marker_ref(node.marker_start), marker_end=_marker_ref(node.marker_end))}/>"
        ]
    if isinstance(node, Circle):
        return [f"{pad}<circle {_attrs(cx=float(node.cx), cy=float(node.cy), r=float(node.r), class_=node.css_class)}/>"]
    if isinstance(node, Text):
        anchor = node.anchor if node.anchor != "start" else None
        return [
            f"{pad}<text {_attrs(x=float(node.x), y=float(node.y), class_=node.css_class, text_anchor=anchor, dominant_baseline=node.baseline, transform=_rotation(node))}>"
            f"{escape(node.content)}</text>"
        ]
    raise TypeError(f"Cannot serialize node of type {type(node).__name__}")


def to_svg(document: Document) -> str:
    """
    Serialize a Document to a standalone SVG string.

    Args:
        document: Scene to serialize

    Returns:
        SVG document text
    """
    root = {"xmlns": SVG_NS, "role": "img", "aria_label": document.aria_label or None}
    if document.width is not None:
        root["width"] = float(document.width)
    if document.height is not None:
        root["height"] = float(document.height)
    if document.view_box is not None:
        root["viewBox"] = " ".join(format_number(float(v)) for v in document.view_box)

    svg_parts = [f"<svg {_attrs(**root)}>"]

    if document.markers:
        svg_parts.append("<defs>")
        svg_parts.extend(f"  {_marker_svg(m)}" for m in document.markers)
        svg_parts.append("</defs>")

    for style in document.styles:
        svg_parts.append(f'<style type="text/css">{escape(style)}</style>')

    for child in document.children:
        svg_parts.extend(_node_svg(child, 0))

    svg_parts.append("</svg>")
    return "\n".join(svg_parts)
