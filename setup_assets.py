#!/usr/bin/env python3
"""
Generate placeholder pass artwork for the business card.
Replace pass_assets/photo*.png and strip*.png with real artwork for production.
"""

from PIL import Image, ImageDraw
from pathlib import Path

BACKGROUND = (29, 37, 27, 255)
ACCENT = (128, 190, 122, 255)


def create_photo(size: int, filename: str, output_dir: Path):
    """Create a round avatar placeholder (used for both icon and logo)."""
    img = Image.new("RGBA", (size, size), BACKGROUND)
    draw = ImageDraw.Draw(img)

    margin = max(1, size // 8)
    draw.ellipse([margin, margin, size - margin, size - margin], fill=ACCENT)

    img.save(output_dir / filename)
    print(f"Created {filename} ({size}x{size})")


def create_strip(width: int, height: int, filename: str, output_dir: Path):
    """Create a strip banner with a thin accent line along the bottom."""
    img = Image.new("RGBA", (width, height), BACKGROUND)
    draw = ImageDraw.Draw(img)

    line_height = max(1, height // 20)
    draw.rectangle([0, height - line_height, width, height], fill=ACCENT)

    img.save(output_dir / filename)
    print(f"Created {filename} ({width}x{height})")


def main():
    output_dir = Path(__file__).parent / "pass_assets"
    output_dir.mkdir(exist_ok=True)

    for scale, suffix in ((1, ""), (2, "@2x"), (3, "@3x")):
        create_photo(29 * scale, f"photo{suffix}.png", output_dir)
        create_strip(375 * scale, 123 * scale, f"strip{suffix}.png", output_dir)

    print("\nPass assets created successfully!")
    print(f"Location: {output_dir}")


if __name__ == "__main__":
    main()
