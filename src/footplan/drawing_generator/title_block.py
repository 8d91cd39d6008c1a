"""
Page furniture for composed plan documents: title, subtitle, legend and
the divider lines between the page bands.
"""

from dataclasses import dataclass, field
from typing import Optional

from .dimensions import format_cm
from .scene import Group, Line, Text
from .view_area import ViewArea

MAX_LEGEND_LINES = 4
TEXT_INSET = 12        # px from the band's left edge
TITLE_BASELINE = 26    # px below the header top
SUBTITLE_BASELINE = 46
LEGEND_BASELINE = 22   # px below the legend top
LEGEND_LINE_HEIGHT = 16

DEFAULT_TITLE = "Foundation plan"
DEFAULT_MODEL_NAME = "Unnamed"

DEFAULT_NOTES = (
    "All dimensions in cm (approximate).",
    "Export reflects the currently computed plan.",
    "Foundation recommendation - execution by the builder.",
)


def default_notes(foundation_depth: Optional[float] = None) -> list[str]:
    """Legend lines used when the caller supplies none."""
    notes = list(DEFAULT_NOTES)
    if foundation_depth:
        notes.append(f"Foundation depth (frost-free): {format_cm(foundation_depth)} cm.")
    return notes


@dataclass
class TitleBlockInfo:
    """Information displayed in the header and legend bands."""
    title: str = DEFAULT_TITLE
    model_name: str = DEFAULT_MODEL_NAME
    template_label: str = ""
    notes: list[str] = field(default_factory=list)
    foundation_depth: Optional[float] = None

    def __post_init__(self):
        self.title = (self.title or "").strip() or DEFAULT_TITLE
        self.model_name = (self.model_name or "").strip() or DEFAULT_MODEL_NAME
        self.notes = [note for note in self.notes if note and note.strip()]

    @property
    def subtitle(self) -> str:
        return f"Model: {self.model_name} | Template: {self.template_label}"

    @property
    def legend_lines(self) -> list[str]:
        lines = self.notes or default_notes(self.foundation_depth)
        return lines[:MAX_LEGEND_LINES]


@dataclass
class TitleBlock:
    """
    Generates the page furniture for one composed page.

    The header band carries title and subtitle, the legend band carries up
    to four note lines, and thin dividers mark where the content band
    starts and ends.
    """
    info: TitleBlockInfo
    header: ViewArea
    content: ViewArea
    legend: ViewArea

    def dividers(self) -> Group:
        return Group(
            children=(
                Line(self.content.left, self.content.top, self.content.right, self.content.top,
                     css_class="slot-divider"),
                Line(self.legend.left, self.legend.top, self.legend.right, self.legend.top,
                     css_class="slot-divider"),
            ),
            group_id="slot-dividers",
        )

    def header_group(self) -> Group:
        x = self.header.x + TEXT_INSET
        return Group(
            children=(
                Text(x, self.header.y + TITLE_BASELINE, self.info.title, css_class="title"),
                Text(x, self.header.y + SUBTITLE_BASELINE, self.info.subtitle, css_class="subtitle"),
            ),
            group_id="header",
        )

    def legend_group(self) -> Group:
        x = self.legend.x + TEXT_INSET
        return Group(
            children=tuple(
                Text(x, self.legend.y + LEGEND_BASELINE + i * LEGEND_LINE_HEIGHT, line,
                     css_class="legend-text")
                for i, line in enumerate(self.info.legend_lines)
            ),
            group_id="legend",
        )

    def generate(self) -> tuple[Group, ...]:
        """Divider, header and legend groups in paint order."""
        return (self.dividers(), self.header_group(), self.legend_group())
