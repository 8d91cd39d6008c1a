#!/usr/bin/env python3
"""
Barrel Sauna Foundation Plan Example

Draws the foundation plan of a 220 cm barrel sauna standing on four feet:
- Main body 220 x 210 cm
- Feet 200 x 8 cm with gaps of 79, 100 and 79 cm
- Foundation strips 40 cm wide, 80 cm frost-free depth

Outputs:
- SVG plan on an A4 portrait page
- PDF plan on an A4 landscape page (if svglib/reportlab are installed)
- Stored record in a YAML store file
"""

from pathlib import Path

from footplan import ConfigStore, create_empty_record, validate_record
from footplan.drawing_generator import SVGLIB_AVAILABLE, compose_plan_document, export_plan, generate_plan


def main():
    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    print("Barrel Sauna Foundation Plan")
    print("=" * 50)

    # The default record is the standard barrel sauna
    store = ConfigStore(output_dir / "footplan_store.yaml")
    record = store.put(create_empty_record())
    for warning in validate_record(record):
        print(f"  Warning: {warning}")

    plan = generate_plan(record.config, title="Barrel sauna 220")
    metrics = plan.metrics
    print(f"Feet: {metrics.foot_count}")
    print(f"Total foot span: {metrics.total_foot_span:g} cm")
    print(f"First to last foot: {metrics.first_to_last:g} cm")

    portrait = compose_plan_document("A4_PORTRAIT_STANDARD", plan, title="Barrel sauna 220", model_name=record.name)
    svg_path = export_plan(portrait, "svg", output_dir, "barrel_sauna_220")
    print(f"\nExported SVG: {svg_path} (scale {portrait.fit.scale:.3f})")

    if SVGLIB_AVAILABLE:
        landscape = compose_plan_document(
            "A4_LANDSCAPE_STANDARD",
            plan,
            title="Barrel sauna 220",
            model_name=record.name,
            notes=["All dimensions in cm.", "Feet rest centered on their foundation strips."],
        )
        pdf_path = export_plan(landscape, "pdf", output_dir, "barrel_sauna_220_landscape")
        print(f"Exported PDF: {pdf_path}")
    else:
        print("PDF export skipped (install svglib and reportlab)")

    for warning in portrait.warnings:
        print(f"  {warning}")


if __name__ == "__main__":
    main()
