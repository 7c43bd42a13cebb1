"""
E-card Service - Personalised PDF e-cards drawn over an uploaded backdrop

Layout coordinates are measured in pixels from the top-left corner of the
backdrop image. The PDF page is exactly the size of the image, so one pixel
maps to one PDF point.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple
import io
import re

from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from blastdesk.core.exceptions import EcardGenerationError
from blastdesk.core.logging_config import logger


DEFAULT_NAME_FONT_SIZE = 48
DEFAULT_ROLE_FONT_SIZE = 36
DEFAULT_COLOR = "#000000"
PDF_FONT = "Helvetica"

_HEX_COLOR_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def hex_to_rgb(value: Optional[str]) -> Tuple[float, float, float]:
    """Parse #rrggbb into 0..1 floats; anything else is black"""
    match = _HEX_COLOR_RE.match(value or "")
    if not match:
        return (0.0, 0.0, 0.0)
    return tuple(int(part, 16) / 255 for part in match.groups())


def _rgb_255(value: Optional[str]) -> Tuple[int, int, int]:
    return tuple(round(channel * 255) for channel in hex_to_rgb(value))


def _pick(value: Any, default: Any) -> Any:
    return default if value is None else value


@dataclass
class EcardLayout:
    """Where and how the recipient's name and role are drawn"""
    name_x: int = 0
    name_y: int = 0
    name_font_size: int = DEFAULT_NAME_FONT_SIZE
    name_color: str = DEFAULT_COLOR
    role_x: int = 0
    role_y: int = 0
    role_font_size: int = DEFAULT_ROLE_FONT_SIZE
    role_color: str = DEFAULT_COLOR

    @classmethod
    def from_source(cls, source: Any) -> "EcardLayout":
        """Build from a template row or request schema; unset fields take the defaults"""
        return cls(
            name_x=_pick(getattr(source, "name_x", None), 0),
            name_y=_pick(getattr(source, "name_y", None), 0),
            name_font_size=_pick(getattr(source, "name_font_size", None), DEFAULT_NAME_FONT_SIZE),
            name_color=_pick(getattr(source, "name_color", None), DEFAULT_COLOR),
            role_x=_pick(getattr(source, "role_x", None), 0),
            role_y=_pick(getattr(source, "role_y", None), 0),
            role_font_size=_pick(getattr(source, "role_font_size", None), DEFAULT_ROLE_FONT_SIZE),
            role_color=_pick(getattr(source, "role_color", None), DEFAULT_COLOR),
        )


def generate_ecard_pdf(
    name: str,
    role: str,
    backdrop_bytes: bytes,
    layout: Optional[EcardLayout] = None
) -> bytes:
    """
    Draw name and role over the backdrop and return a single-page PDF.

    Raises EcardGenerationError if the image cannot be read or the PDF cannot
    be written.
    """
    layout = layout or EcardLayout()

    try:
        image = ImageReader(io.BytesIO(backdrop_bytes))
        width, height = image.getSize()

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(width, height))
        pdf.drawImage(image, 0, 0, width=width, height=height)

        for text, x, y, size, color in (
            (name, layout.name_x, layout.name_y, layout.name_font_size, layout.name_color),
            (role, layout.role_x, layout.role_y, layout.role_font_size, layout.role_color),
        ):
            pdf.setFont(PDF_FONT, size)
            pdf.setFillColorRGB(*hex_to_rgb(color))
            # PDF origin is bottom-left; text is placed by its baseline
            pdf.drawString(x, height - y - size, text or "")

        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    except Exception as e:
        logger.error(f"[Ecard] Error generating PDF for {name!r}: {e}", exc_info=True)
        raise EcardGenerationError() from e


def render_ecard_preview(
    name: str,
    role: str,
    backdrop_bytes: bytes,
    layout: Optional[EcardLayout] = None
) -> bytes:
    """
    Raster preview of the same e-card as PNG bytes.

    Text baselines land at the same place as in the PDF (y + font size from
    the top). Glyph shapes differ since the preview uses Pillow's bundled font.
    """
    layout = layout or EcardLayout()

    try:
        with Image.open(io.BytesIO(backdrop_bytes)) as source:
            image = source.convert("RGBA")

        draw = ImageDraw.Draw(image)

        for text, x, y, size, color in (
            (name, layout.name_x, layout.name_y, layout.name_font_size, layout.name_color),
            (role, layout.role_x, layout.role_y, layout.role_font_size, layout.role_color),
        ):
            font = ImageFont.load_default(size=size)
            ascent = font.getmetrics()[0] if hasattr(font, "getmetrics") else size
            draw.text((x, y + size - ascent), text or "", font=font, fill=_rgb_255(color))

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    except Exception as e:
        logger.error(f"[Ecard] Error rendering preview for {name!r}: {e}", exc_info=True)
        raise EcardGenerationError("Failed to render e-card preview.") from e
