#!/usr/bin/env python3
"""
Render a SWMS JSON file from the command line.

Usage:
    python render_sample.py <path_to_json_file> [--html]

Example:
    python render_sample.py samples/sample_swms.json
    python render_sample.py samples/sample_swms.json --html
"""

import json
import logging
import os
import sys

import config
from document_builder import RenderOptions
from renderer import render_swms


def render_sample(json_path: str, output_format: str = "pdf") -> bool:
    """
    Render one SWMS document and write the output beside the input file.

    Args:
        json_path: Path to the SWMS JSON document
        output_format: "pdf" or "html"

    Returns:
        True if the document rendered
    """
    if not os.path.exists(json_path):
        print(f"Error: File not found: {json_path}")
        return False

    if not json_path.lower().endswith('.json'):
        print(f"Error: File is not JSON: {json_path}")
        return False

    print(f"Rendering SWMS from: {json_path}")
    print("=" * 60)

    print("\n[1] Loading document...")
    try:
        with open(json_path, 'r', encoding='utf-8') as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error reading {json_path}: {e}")
        return False

    print(f"\n[2] Rendering {output_format.upper()}...")
    result = render_swms(payload, output_format, options=RenderOptions.from_config())

    if not result.ok:
        print(f"\nRender failed ({result.error_kind}): {result.error_message}")
        if result.error_section:
            print(f"  Section: {result.error_section}")
        return False

    print("\n[3] Render Summary:")
    print("-" * 60)
    print(f"Pages: {result.page_count}")
    print(f"Warnings: {len(result.warnings)}")
    for warning in result.warnings[:20]:
        print(f"  [{warning.section or 'document'}] {warning.code}: {warning.message}")
    if len(result.warnings) > 20:
        print(f"  ... and {len(result.warnings) - 20} more warnings")

    output_file = json_path[:-len('.json')] + f".{output_format}"
    print(f"\n[4] Saving output to: {output_file}")
    if output_format == "pdf":
        with open(output_file, 'wb') as f:
            f.write(result.content)
    else:
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(result.content)
    print("  ✓ Saved successfully!")

    print("\n" + "=" * 60)
    print("Render completed successfully!")
    return True


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)

    if len(sys.argv) < 2:
        print("Usage: python render_sample.py <path_to_json_file> [--html]")
        print("\nExample:")
        print("  python render_sample.py samples/sample_swms.json")
        print("  python render_sample.py samples/sample_swms.json --html")
        sys.exit(1)

    fmt = "html" if len(sys.argv) > 2 and sys.argv[2] == "--html" else "pdf"
    sys.exit(0 if render_sample(sys.argv[1], fmt) else 1)
