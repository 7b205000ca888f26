import logging
from enum import Enum
from io import BytesIO

from PIL import Image, ImageDraw, ImageFont
from pypdf import PdfReader, PdfWriter
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .config import CARDS_PER_PAGE, CARDS_PER_ROW, JPEG_QUALITY, PrintSettings
from .errors import EmptyCollectionError
from .image_loader import load_images

logger = logging.getLogger(__name__)

EMPTY_COLLECTION_MESSAGE = "Add at least one card before generating the PDF!"
PLACEHOLDER_TEXT = "Image not found"
AUTO_PRINT_JS = "this.print({bUI: true, bSilent: false, bShrinkToFit: true});"


class RenderState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    RASTERIZING = "rasterizing"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


class RenderReport:
    def __init__(self, output_pdf, pages, failed_sources):
        self.output_pdf = output_pdf
        self.pages = pages
        self.failed_sources = failed_sources

    @property
    def page_count(self):
        return len(self.pages)


def paginate(entries, per_page=CARDS_PER_PAGE):
    """Split entries into pages in order; the last page holds only what is left."""
    return [entries[i:i + per_page] for i in range(0, len(entries), per_page)]


def slot_rect(slot, settings):
    """Pixel box (x, y, w, h) of a slot on the page raster, row-major from the top left."""
    margin_x, margin_y = settings.grid_margin_mm
    row = slot // CARDS_PER_ROW
    col = slot % CARDS_PER_ROW
    x_mm = margin_x + col * (settings.card_width_mm + settings.spacing_mm)
    y_mm = margin_y + row * (settings.card_height_mm + settings.spacing_mm)
    return (
        settings.mm_to_px(x_mm),
        settings.mm_to_px(y_mm),
        settings.mm_to_px(settings.card_width_mm),
        settings.mm_to_px(settings.card_height_mm),
    )


def fit_inside(img_width, img_height, box_width, box_height):
    """Largest size with the image's aspect ratio that fits inside the box."""
    img_ratio = img_width / img_height
    if img_ratio > box_width / box_height:
        return box_width, max(1, round(box_width / img_ratio))
    return max(1, round(box_height * img_ratio)), box_height


def _placeholder_font():
    return ImageFont.load_default(size=16)


def draw_card(page, image, rect):
    x, y, w, h = rect
    draw_w, draw_h = fit_inside(image.width, image.height, w, h)
    resized = image.resize((draw_w, draw_h), Image.Resampling.LANCZOS)
    page.paste(resized, (x + (w - draw_w) // 2, y + (h - draw_h) // 2))


def draw_placeholder(draw, rect, font=None):
    x, y, w, h = rect
    draw.rectangle([x, y, x + w - 1, y + h - 1], fill="#cccccc")
    draw.text((x + 10, y + h // 2 - 8), PLACEHOLDER_TEXT, fill="#333333", font=font or _placeholder_font())


def rasterize_page(results, settings):
    """Draw one page: each LoadResult in slot order, a placeholder for failures, a border on every slot."""
    page = Image.new("RGB", settings.page_size_px, "#ffffff")
    draw = ImageDraw.Draw(page)
    font = None
    for slot, result in enumerate(results[:CARDS_PER_PAGE]):
        rect = slot_rect(slot, settings)
        if result.ok:
            draw_card(page, result.image, rect)
        else:
            font = font or _placeholder_font()
            draw_placeholder(draw, rect, font)
        x, y, w, h = rect
        draw.rectangle([x, y, x + w - 1, y + h - 1], outline="#000000", width=2)
    return page


def assemble_pdf(rasters, settings, auto_print=True):
    """Embed one JPEG page raster per PDF page at the physical page size."""
    page_size = (settings.page_width_mm * mm, settings.page_height_mm * mm)
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=page_size)
    for raster in rasters:
        jpeg = BytesIO()
        raster.save(jpeg, format="JPEG", quality=JPEG_QUALITY)
        jpeg.seek(0)
        c.drawImage(ImageReader(jpeg), 0, 0, width=page_size[0], height=page_size[1])
        c.showPage()
    c.save()

    if not auto_print:
        return buffer.getvalue()

    writer = PdfWriter(clone_from=PdfReader(BytesIO(buffer.getvalue())))
    writer.add_js(AUTO_PRINT_JS)
    out = BytesIO()
    writer.write(out)
    return out.getvalue()


def generate_pdf(entries, output_pdf, settings=None, on_state=None, loader=load_images, auto_print=True):
    """
    Render the collection to a print-ready PDF at output_pdf.

    An empty collection is rejected before any loading or drawing. Image failures
    become placeholder tiles and never stop the render.
    """
    settings = settings or PrintSettings()
    notify = on_state or (lambda state: None)
    entries = list(entries)

    if not entries:
        notify(RenderState.FAILED)
        raise EmptyCollectionError(EMPTY_COLLECTION_MESSAGE)

    notify(RenderState.LOADING)
    results = loader(
        [entry.image_source for entry in entries],
        max_workers=settings.max_workers,
        retries=settings.retries,
        delay=settings.retry_delay,
        relays=settings.relays,
    )
    failed = [result.source for result in results if not result.ok]
    if failed:
        logger.warning("%d of %d images could not be loaded", len(failed), len(entries))

    notify(RenderState.RASTERIZING)
    pages = paginate(entries)
    rasters = [rasterize_page(page_results, settings) for page_results in paginate(results)]

    notify(RenderState.ASSEMBLING)
    try:
        pdf_bytes = assemble_pdf(rasters, settings, auto_print=auto_print)
        with open(output_pdf, "wb") as f:
            f.write(pdf_bytes)
    except Exception:
        notify(RenderState.FAILED)
        raise

    logger.info("PDF generated: %s (%d pages)", output_pdf, len(pages))
    notify(RenderState.DONE)
    return RenderReport(output_pdf, pages, failed)
