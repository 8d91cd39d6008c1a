"""
Export of composed plan documents to SVG and PDF files.

PDF output goes through svglib + reportlab (pure Python, no Cairo needed)
and is optional: without those libraries only SVG export is available.
"""

from __future__ import annotations

import io
import logging
import os
import re
import tempfile
from pathlib import Path

# Make PDF export optional using svglib + reportlab
try:
    from reportlab.graphics import renderPDF
    from reportlab.lib.units import mm
    from reportlab.pdfgen import canvas
    from svglib.svglib import svg2rlg
    SVGLIB_AVAILABLE = True
except ImportError:
    SVGLIB_AVAILABLE = False

from .constants import MM_TO_PX, PDF_PAGE_MARGIN_MM
from .layout_engine import ComposedDocument
from .scene import Document
from .svg_writer import to_svg

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("svg", "pdf")
DEFAULT_FILE_NAME = "foundation_plan"


def sanitize_file_name(name: str | None, default: str = DEFAULT_FILE_NAME) -> str:
    """Replace everything outside ``[A-Za-z0-9._-]`` with underscores."""
    cleaned = re.sub(r"[^A-Za-z0-9._-]", "_", (name or "").strip())
    return cleaned or default


def _document_of(source: ComposedDocument | Document | None) -> Document:
    if isinstance(source, ComposedDocument):
        return source.document
    if isinstance(source, Document):
        return source
    raise ValueError("No valid document to export.")


def _page_size_mm(source: ComposedDocument | Document) -> tuple[float, float]:
    if isinstance(source, ComposedDocument):
        return source.page_mm
    vb = source.view_box
    width = source.width or (vb[2] if vb else 0) or 1000
    height = source.height or (vb[3] if vb else 0) or 1000
    return width / MM_TO_PX, height / MM_TO_PX


def render_svg(source: ComposedDocument | Document) -> str:
    """SVG text of a composed page or a bare document."""
    return to_svg(_document_of(source))


def render_pdf(source: ComposedDocument | Document, margin_mm: float = PDF_PAGE_MARGIN_MM) -> bytes:
    """
    Render a composed page to PDF bytes.

    The page matches the template size; the drawing is scaled uniformly to
    fit inside the margin and centered.

    Raises:
        ImportError: If svglib/reportlab are not installed
        ValueError: If there is no document or the SVG cannot be parsed
    """
    if not SVGLIB_AVAILABLE:
        raise ImportError(
            "PDF export requires svglib and reportlab. "
            "Install with: pip install svglib reportlab"
        )

    svg_content = render_svg(source)
    page_w_mm, page_h_mm = _page_size_mm(source)

    # Write SVG to a temporary file for svglib to read
    with tempfile.NamedTemporaryFile(mode="w", suffix=".svg",
                                     encoding="utf-8", delete=False) as tmp:
        tmp.write(svg_content)
        tmp_path = tmp.name

    try:
        drawing = svg2rlg(tmp_path)
        if drawing is None:
            raise ValueError("Failed to parse SVG content")
    finally:
        os.unlink(tmp_path)

    page_width = page_w_mm * mm
    page_height = page_h_mm * mm
    margin = margin_mm * mm

    scale = min(
        (page_width - 2 * margin) / drawing.width,
        (page_height - 2 * margin) / drawing.height,
    )
    target_width = drawing.width * scale
    target_height = drawing.height * scale
    drawing.width = target_width
    drawing.height = target_height
    drawing.scale(scale, scale)

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(page_width, page_height))
    renderPDF.draw(
        drawing, c,
        (page_width - target_width) / 2,
        (page_height - target_height) / 2,
    )
    c.showPage()
    c.save()
    return buffer.getvalue()


def export_plan(
    composed: ComposedDocument | Document | None,
    fmt: str,
    output_dir: str | Path,
    file_name_base: str | None = None,
) -> Path:
    """
    Write a composed page to ``<output_dir>/<base>.<fmt>``.

    The output is rendered completely before the file is opened, so a
    failed export leaves no partial file behind.

    Args:
        composed: Page to export
        fmt: "svg" or "pdf"
        output_dir: Target directory (created if missing)
        file_name_base: File name without extension; sanitized

    Returns:
        Path of the written file

    Raises:
        ValueError: Unknown format, missing document or unparseable SVG
        ImportError: PDF requested but svglib/reportlab are missing
    """
    fmt = (fmt or "").lower()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format {fmt!r}; expected one of {', '.join(EXPORT_FORMATS)}")
    _document_of(composed)

    if fmt == "svg":
        payload: str | bytes = render_svg(composed)
    else:
        payload = render_pdf(composed)

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{sanitize_file_name(file_name_base)}.{fmt}"

    if isinstance(payload, bytes):
        path.write_bytes(payload)
    else:
        path.write_text(payload, encoding="utf-8")

    logger.info("Exported %s: %s", fmt.upper(), path)
    return path
