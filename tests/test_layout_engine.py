#!/usr/bin/env python3
"""
Tests for fitting plans onto template pages.

Tests cover:
- Bounds normalization and view box fallback
- Fit scale, centering and projection
- Page band layout
- Projection of annotation primitives (points, lengths, rotation pivots)
- Warnings for missing groups and degenerate bounds
"""

import math

import pytest

from footplan.drawing_generator.constants import MM_TO_PX, AnnotationPolicy
from footplan.drawing_generator.layout_engine import (
    compose_plan_document,
    compute_fit,
    normalize_bounds,
    page_slots,
    project_node,
)
from footplan.drawing_generator.plan import generate_plan
from footplan.drawing_generator.scene import (
    Circle,
    Document,
    Group,
    Line,
    Rect,
    Rotation,
    Text,
    find_group,
    iter_primitives,
)
from footplan.drawing_generator.templates import A4_LANDSCAPE_STANDARD, A4_PORTRAIT_STANDARD
from footplan.drawing_generator.view_area import BoundingBox, ViewArea
from footplan.structure import StructuralConfig


SAUNA = StructuralConfig(220, 210, 200, 8, 40, 80, (79, 100, 79))


# =============================================================================
# BOUNDS NORMALIZATION TESTS
# =============================================================================


class TestNormalizeBounds:
    """Test acceptance and rejection of bounds."""

    def test_bounding_box(self):
        """A valid BoundingBox should pass through."""
        box = BoundingBox(0, 0, 10, 5)
        assert normalize_bounds(box) == box

    def test_mapping_with_size(self):
        """Mappings with min values and width/height should be accepted."""
        assert normalize_bounds({"minX": 1, "minY": 2, "width": 10, "height": 5}) == BoundingBox(1, 2, 11, 7)
        assert normalize_bounds({"xMin": 1, "yMin": 2, "maxX": 4, "maxY": 8}) == BoundingBox(1, 2, 4, 8)

    def test_sequence(self):
        """A 4-tuple should be read as (min_x, min_y, max_x, max_y)."""
        assert normalize_bounds((0, 0, 3, 4)) == BoundingBox(0, 0, 3, 4)

    @pytest.mark.parametrize(
        "bounds",
        [
            None,
            BoundingBox(5, 5, 5, 5),
            BoundingBox(0, 0, math.nan, 10),
            (0, 0, math.inf, 1),
            {"minX": 0, "minY": 0, "width": 0, "height": 10},
            {"minX": "a", "minY": 0, "width": 1, "height": 1},
            "0 0 10 10",
        ],
    )
    def test_rejected(self, bounds):
        """Missing, degenerate or non-finite bounds should be rejected."""
        assert normalize_bounds(bounds) is None


# =============================================================================
# FIT TESTS
# =============================================================================


class TestFit:
    """Test scale and centering."""

    def test_scale_and_centering(self):
        """A square source in a wide slot should be limited by the height."""
        fit = compute_fit(ViewArea(0, 0, 200, 100), BoundingBox(0, 0, 100, 100))
        assert fit.scale == pytest.approx(0.98)
        assert fit.offset_x == pytest.approx(51)
        assert fit.offset_y == pytest.approx(1)
        assert fit.warnings == ()

    def test_projection(self):
        """Source corners should map onto the centered drawing area."""
        fit = compute_fit(ViewArea(10, 20, 200, 100), BoundingBox(-50, -50, 50, 50))
        assert fit.project_point(-50, -50) == pytest.approx((61, 21))
        assert fit.project_point(50, 50) == pytest.approx((159, 119))
        assert fit.project_length(10) == pytest.approx(9.8)

    def test_deterministic(self):
        """The same input should always give the same fit."""
        a = compute_fit(ViewArea(0, 0, 300, 400), BoundingBox(-10, -20, 500, 90))
        b = compute_fit(ViewArea(0, 0, 300, 400), BoundingBox(-10, -20, 500, 90))
        assert a == b

    def test_annotation_bounds_unioned(self):
        """Valid annotation bounds should extend the fitted source."""
        fit = compute_fit(ViewArea(0, 0, 100, 100), BoundingBox(0, 0, 10, 10), BoundingBox(-10, -10, 20, 20))
        assert fit.source_bounds == BoundingBox(-10, -10, 20, 20)
        assert fit.annotation_bounds == BoundingBox(-10, -10, 20, 20)

    def test_invalid_annotation_bounds_ignored(self):
        """Invalid annotation bounds should be ignored silently."""
        fit = compute_fit(ViewArea(0, 0, 100, 100), BoundingBox(0, 0, 10, 10), BoundingBox(1, 1, 1, 1))
        assert fit.source_bounds == BoundingBox(0, 0, 10, 10)
        assert fit.annotation_bounds is None

    def test_coverage(self):
        """The dominant axis should be filled to the fill ratio."""
        fit = compute_fit(ViewArea(0, 0, 200, 100), BoundingBox(0, 0, 100, 100))
        assert fit.coverage.dominant_ratio == pytest.approx(0.98)
        assert fit.coverage.width_ratio == pytest.approx(0.49)

    def test_fallback_bounds(self):
        """Degenerate geometry bounds should fall back with a warning."""
        fit = compute_fit(ViewArea(0, 0, 100, 100), BoundingBox(3, 3, 3, 3), None, BoundingBox(0, 0, 500, 250))
        assert fit.source_bounds == BoundingBox(0, 0, 500, 250)
        assert any("geometry bounds" in w for w in fit.warnings)
        assert math.isfinite(fit.scale) and fit.scale > 0

    def test_fallback_scale(self):
        """A slot without usable width should fall back to scale 1."""
        fit = compute_fit(ViewArea(0, 0, -10, 100), BoundingBox(0, 0, 10, 10))
        assert fit.scale == 1
        assert any("scale" in w for w in fit.warnings)

    def test_svg_transform_matches_projection(self):
        """The transform string should encode offset, scale and source origin."""
        fit = compute_fit(ViewArea(0, 0, 200, 100), BoundingBox(10, 20, 110, 120))
        assert fit.svg_transform == "translate(51 1) scale(0.98) translate(-10 -20)"


# =============================================================================
# PAGE LAYOUT TESTS
# =============================================================================


class TestPageSlots:
    """Test the header / content / legend bands."""

    @pytest.mark.parametrize("template", [A4_PORTRAIT_STANDARD, A4_LANDSCAPE_STANDARD])
    def test_bands_stack(self, template):
        """Bands should stack without gaps between the margins."""
        slots = page_slots(template)
        header, content, legend = slots["header"], slots["content"], slots["legend"]
        assert header.y == pytest.approx(2 * MM_TO_PX)
        assert content.y == pytest.approx(header.bottom)
        assert legend.y == pytest.approx(content.bottom)
        assert legend.bottom == pytest.approx((template.height_mm - 2) * MM_TO_PX)
        assert header.width == content.width == legend.width == pytest.approx((template.width_mm - 4) * MM_TO_PX)

    def test_band_heights(self):
        """Header and legend heights should come from the template."""
        slots = page_slots(A4_PORTRAIT_STANDARD)
        assert slots["header"].height == pytest.approx(22 * MM_TO_PX)
        assert slots["legend"].height == pytest.approx(30 * MM_TO_PX)


# =============================================================================
# PROJECTION TESTS
# =============================================================================


class TestProjection:
    """Test re-projection of annotation nodes."""

    FIT = compute_fit(ViewArea(0, 0, 200, 100), BoundingBox(0, 0, 100, 100))

    def test_line(self):
        """Both line endpoints should be projected."""
        line = project_node(Line(0, 0, 100, 100, marker_end="dim-arrow"), self.FIT)
        assert (line.x1, line.y1) == pytest.approx((51, 1))
        assert (line.x2, line.y2) == pytest.approx((149, 99))
        assert line.marker_end == "dim-arrow"

    def test_text_rotation_pivot(self):
        """Only the pivot of a rotation should move, not its angle."""
        text = project_node(Text(50, 50, "20", rotation=Rotation(90, 50, 50)), self.FIT)
        assert (text.x, text.y) == pytest.approx((100, 50))
        assert text.rotation.angle == 90
        assert (text.rotation.cx, text.rotation.cy) == pytest.approx((100, 50))

    def test_rect_lengths(self):
        """Rect corners move and its sizes scale."""
        rect = project_node(Rect(0, 0, 10, 20, rx=5), self.FIT)
        assert (rect.x, rect.y) == pytest.approx((51, 1))
        assert (rect.width, rect.height, rect.rx) == pytest.approx((9.8, 19.6, 4.9))

    def test_circle(self):
        """Circle centers move and radii scale."""
        circle = project_node(Circle(100, 0, 10), self.FIT)
        assert (circle.cx, circle.cy, circle.r) == pytest.approx((149, 1, 9.8))

    def test_group_transform_dropped(self):
        """Group transforms are removed since children are projected directly."""
        group = project_node(Group((Line(0, 0, 1, 1),), transform="scale(2)"), self.FIT)
        assert group.transform is None


# =============================================================================
# COMPOSITION TESTS
# =============================================================================


class TestCompose:
    """Test composing generated plans onto pages."""

    def test_compose_sauna(self):
        """The reference plan should compose without warnings."""
        plan = generate_plan(SAUNA)
        page = compose_plan_document(A4_PORTRAIT_STANDARD, plan, title="Sauna", model_name="Model A")
        assert page.template_id == "A4_PORTRAIT_STANDARD"
        assert page.page_mm == (210, 297)
        assert page.warnings == ()
        assert page.document.width == pytest.approx(210 * MM_TO_PX)
        assert page.fit.source_bounds == plan.geometry_bounds.union(plan.annotation_bounds)

    def test_template_by_id(self):
        """Templates can be passed by id; unknown ids use the default."""
        plan = generate_plan(SAUNA)
        assert compose_plan_document("A4_LANDSCAPE_STANDARD", plan).template_id == "A4_LANDSCAPE_STANDARD"
        assert compose_plan_document("NO_SUCH_PAGE", plan).template_id == "A4_PORTRAIT_STANDARD"

    def test_geometry_under_transform(self):
        """The geometry group should sit under the fit transform."""
        plan = generate_plan(SAUNA)
        page = compose_plan_document(A4_PORTRAIT_STANDARD, plan)
        wrapper = next(c for c in page.document.children if isinstance(c, Group) and c.group_id == "plan-geometry")
        assert wrapper.transform == page.fit.svg_transform
        assert wrapper.children[0] is plan.document.children[0]

    def test_annotations_projected(self):
        """Annotation lines should be projected point by point."""
        plan = generate_plan(SAUNA)
        page = compose_plan_document(A4_PORTRAIT_STANDARD, plan)
        source = [n for n in iter_primitives(plan.document.children[1]) if isinstance(n, Line)]
        projected = [n for n in iter_primitives(find_group(page.document, "annotation")) if isinstance(n, Line)]
        assert len(source) == len(projected)
        for before, after in zip(source, projected):
            assert (after.x1, after.y1) == pytest.approx(page.fit.project_point(before.x1, before.y1))
            assert (after.x2, after.y2) == pytest.approx(page.fit.project_point(before.x2, before.y2))

    @pytest.mark.parametrize("template", [A4_PORTRAIT_STANDARD, A4_LANDSCAPE_STANDARD])
    def test_annotations_inside_content(self, template):
        """Projected annotation lines should stay inside the content band."""
        page = compose_plan_document(template, generate_plan(SAUNA))
        content = page.slots["content"]
        box = BoundingBox(content.left, content.top, content.right, content.bottom)
        for node in iter_primitives(find_group(page.document, "annotation")):
            if isinstance(node, Line):
                assert box.contains(node.x1, node.y1, tolerance=1e-3)
                assert box.contains(node.x2, node.y2, tolerance=1e-3)

    def test_rotated_labels_keep_angle(self):
        """Rotated labels keep their angle and pivot on their projected anchor."""
        plan = generate_plan(SAUNA, policy=AnnotationPolicy(rotate_detail_labels=True))
        page = compose_plan_document(A4_PORTRAIT_STANDARD, plan)
        rotated = [
            n for n in iter_primitives(find_group(page.document, "annotation"))
            if isinstance(n, Text) and n.rotation is not None
        ]
        assert rotated
        for text in rotated:
            assert text.rotation.angle == 90
            assert (text.rotation.cx, text.rotation.cy) == pytest.approx((text.x, text.y))

    def test_page_furniture(self):
        """Title, subtitle and default legend lines should be on the page."""
        page = compose_plan_document(A4_PORTRAIT_STANDARD, generate_plan(SAUNA), title="Sauna", model_name="Model A")
        texts = [n.content for n in iter_primitives(page.document) if isinstance(n, Text)]
        assert "Sauna" in texts
        assert "Model: Model A | Template: A4 Portrait Standard" in texts
        assert "Foundation depth (frost-free): 80 cm." in texts

    def test_custom_notes_limited(self):
        """At most four legend lines should be drawn."""
        notes = [f"note {i}" for i in range(6)]
        page = compose_plan_document(A4_PORTRAIT_STANDARD, generate_plan(SAUNA), notes=notes)
        legend = next(c for c in page.document.children if isinstance(c, Group) and c.group_id == "legend")
        assert [t.content for t in legend.children] == notes[:4]

    def test_missing_document(self):
        """Composing without a plan document should fail."""
        with pytest.raises(ValueError):
            compose_plan_document(A4_PORTRAIT_STANDARD, None)

    def test_degenerate_bounds_fallback(self):
        """Degenerate bounds should fall back to the declared view box."""
        document = Document(view_box=(0, 0, 500, 250))
        page = compose_plan_document(A4_PORTRAIT_STANDARD, document, geometry_bounds=BoundingBox(5, 5, 5, 5))
        assert page.fit.source_bounds == BoundingBox(0, 0, 500, 250)
        assert math.isfinite(page.fit.scale) and page.fit.scale > 0
        assert any("geometry bounds" in w for w in page.warnings)

    def test_no_view_box_fallback(self):
        """Without a view box the fallback source is 1000 x 1000."""
        page = compose_plan_document(A4_PORTRAIT_STANDARD, Document())
        assert page.fit.source_bounds == BoundingBox(0, 0, 1000, 1000)

    def test_missing_groups(self):
        """Documents without named groups are placed whole with warnings."""
        document = Document(children=(Rect(0, 0, 10, 10),), view_box=(0, 0, 10, 10))
        page = compose_plan_document(A4_PORTRAIT_STANDARD, document, geometry_bounds=BoundingBox(0, 0, 10, 10))
        assert any("geometry group is missing" in w for w in page.warnings)
        assert any("annotation group is missing" in w for w in page.warnings)
        wrapper = next(c for c in page.document.children if isinstance(c, Group) and c.group_id == "plan-geometry")
        assert wrapper.children == document.children

    def test_group_found_by_id(self):
        """Groups can also be identified by id."""
        document = Document(
            children=(
                Group((Rect(0, 0, 10, 10),), group_id="geometry"),
                Group((Line(0, 0, 10, 0),), group_id="annotation"),
            ),
        )
        page = compose_plan_document(A4_PORTRAIT_STANDARD, document, geometry_bounds=BoundingBox(0, 0, 10, 10))
        assert not any("missing" in w for w in page.warnings)
