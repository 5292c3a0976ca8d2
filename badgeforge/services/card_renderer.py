"""
Card Renderer Service
Draws resolved card layouts with Pillow and packages batches as ZIP archives
"""

import logging
import zipfile
from io import BytesIO
from typing import Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps

from badgeforge.engine.archetypes import DEFAULT_THEMES, Theme
from badgeforge.engine.filenames import build_card_filename
from badgeforge.engine.labels import ResolvedElement, resolve_card
from badgeforge.engine.layout import PHOTO_KEY, ElementKind, Layout
from badgeforge.engine.records import Record
from badgeforge.services.image_optimizer import ImageOptimizer

logger = logging.getLogger(__name__)

# Editor canvas is 320x480; sizes in layouts are relative to that width
BASE_WIDTH = 320
CARD_RATIO = 1.5
HEADER_FRACTION = 0.22
DEFAULT_FONT_SIZE = 14
DEFAULT_PHOTO_WIDTH = 25


class CardRenderer:
    """Reference raster renderer for card layouts"""

    @staticmethod
    def _hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
        if not hex_color:
            return (0, 0, 0)
        color = hex_color.strip().lstrip("#")
        if len(color) != 6:
            return (0, 0, 0)
        try:
            return tuple(int(color[i:i + 2], 16) for i in (0, 2, 4))
        except ValueError:
            return (0, 0, 0)

    @staticmethod
    def _load_font(font_size: int) -> ImageFont.ImageFont:
        for candidate in ("DejaVuSans.ttf", "Arial.ttf", "arial.ttf"):
            try:
                return ImageFont.truetype(candidate, font_size)
            except OSError:
                continue
        return ImageFont.load_default(size=font_size)

    @staticmethod
    def _apply_alignment(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont, x: int, align: str) -> int:
        """Left edge for text anchored at `x` with the given alignment"""
        if not text:
            return x
        align_value = (align or "center").lower()
        if align_value == "left":
            return x
        bbox = draw.textbbox((0, 0), text, font=font)
        text_width = bbox[2] - bbox[0]
        if align_value == "right":
            return x - text_width
        return x - (text_width // 2)

    @staticmethod
    def _background(size: Tuple[int, int], theme: Theme, scale: float) -> Image.Image:
        width, height = size
        card = Image.new("RGBA", size, (255, 255, 255, 255))
        draw = ImageDraw.Draw(card)

        start = CardRenderer._hex_to_rgb(theme.gradient_from)
        end = CardRenderer._hex_to_rgb(theme.gradient_to)
        header = max(1, int(height * HEADER_FRACTION))
        for x in range(width):
            t = x / max(1, width - 1)
            color = tuple(int(start[i] + (end[i] - start[i]) * t) for i in range(3))
            draw.line([(x, 0), (x, header)], fill=color)

        radius = int(theme.corner_radius * scale)
        if radius <= 0:
            return card

        mask = Image.new("L", size, 0)
        ImageDraw.Draw(mask).rounded_rectangle((0, 0, width - 1, height - 1), radius=radius, fill=255)
        rounded = Image.new("RGBA", size, (0, 0, 0, 0))
        rounded.paste(card, (0, 0), mask)
        return rounded

    @staticmethod
    def _frame(draw: ImageDraw.ImageDraw, box: Tuple[int, int, int, int], caption: str, scale: float) -> None:
        draw.rectangle(box, outline=(148, 163, 184), width=max(1, int(2 * scale)))
        font = CardRenderer._load_font(max(6, int(10 * scale)))
        center_x = (box[0] + box[2]) // 2
        center_y = (box[1] + box[3]) // 2
        bbox = draw.textbbox((0, 0), caption, font=font)
        draw.text(
            (center_x - (bbox[2] - bbox[0]) // 2, center_y - (bbox[3] - bbox[1]) // 2),
            caption,
            font=font,
            fill=(100, 116, 139),
        )

    @staticmethod
    def _draw_text(card: Image.Image, element: ResolvedElement, color, scale: float) -> None:
        draw = ImageDraw.Draw(card)
        width, height = card.size
        font = CardRenderer._load_font(max(1, int((element.position.font_size or DEFAULT_FONT_SIZE) * scale)))

        x = int(element.position.x / 100 * width)
        y = int(element.position.y / 100 * height)
        bbox = draw.textbbox((0, 0), element.value, font=font)
        left = CardRenderer._apply_alignment(draw, element.value, font, x, element.position.text_align)
        draw.text((left, y - (bbox[3] - bbox[1]) // 2), element.value, font=font, fill=color)

    @staticmethod
    def _draw_picture(card: Image.Image, element: ResolvedElement, record: Optional[Record], scale: float) -> None:
        width, height = card.size
        side = max(1, int((element.position.width or DEFAULT_PHOTO_WIDTH) / 100 * width))
        left = int(element.position.x / 100 * width) - side // 2
        top = int(element.position.y / 100 * height) - side // 2
        box = (left, top, left + side, top + side)

        photo = None
        if element.kind is ElementKind.PHOTO and element.key == PHOTO_KEY and record is not None and record.image:
            try:
                photo = ImageOptimizer.load_data_uri(record.image)
            except (ValueError, OSError) as e:
                logger.warning("Unreadable photo on record %s: %s", record.id, e)

        if photo is None:
            caption = "QR" if element.kind is ElementKind.QR else element.label
            CardRenderer._frame(ImageDraw.Draw(card), box, caption, scale)
            return

        fitted = ImageOps.fit(photo.convert("RGB"), (side, side), Image.Resampling.LANCZOS)
        card.paste(fitted, (left, top))

    @staticmethod
    def render_card(
        layout: Layout,
        custom_labels: Optional[Dict[str, str]],
        record: Optional[Record],
        theme: Optional[Theme] = None,
        width: int = 640,
    ) -> Image.Image:
        """
        Render one card.

        Only present and visible elements are drawn. Text comes from label
        resolution; the main photo uses the record's data URI and every other
        picture element is drawn as a captioned frame.
        """
        theme = theme or DEFAULT_THEMES[0]
        height = int(width * CARD_RATIO)
        scale = width / BASE_WIDTH

        card = CardRenderer._background((width, height), theme, scale)
        text_color = CardRenderer._hex_to_rgb(theme.text_color)

        for element in resolve_card(layout, custom_labels, record):
            if element.kind is ElementKind.TEXT:
                CardRenderer._draw_text(card, element, text_color, scale)
            else:
                CardRenderer._draw_picture(card, element, record, scale)

        return card

    @staticmethod
    def encode(card: Image.Image, fmt: str = "png") -> bytes:
        output = BytesIO()
        if fmt == "jpg":
            flat = Image.new("RGB", card.size, (255, 255, 255))
            flat.paste(card, mask=card.split()[-1] if card.mode == "RGBA" else None)
            flat.save(output, format="JPEG", quality=92)
        else:
            card.save(output, format="PNG")
        return output.getvalue()

    @staticmethod
    def export_cards(
        records: List[Record],
        layout: Layout,
        custom_labels: Optional[Dict[str, str]],
        theme: Optional[Theme] = None,
        filename_template: str = "",
        fmt: str = "png",
        width: int = 640,
    ) -> bytes:
        """ZIP archive with one image per record; clashing names get _2, _3..."""
        buffer = BytesIO()
        used = set()

        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for record in records:
                filename = build_card_filename(record, filename_template, extension=fmt)
                stem = filename[:-(len(fmt) + 1)]
                counter = 2
                while filename.lower() in used:
                    filename = f"{stem}_{counter}.{fmt}"
                    counter += 1
                used.add(filename.lower())

                card = CardRenderer.render_card(layout, custom_labels, record, theme, width)
                zf.writestr(filename, CardRenderer.encode(card, fmt))

        logger.info("Exported %d card(s)", len(records))
        return buffer.getvalue()


# Singleton
card_renderer = CardRenderer()
