# compass/services/document_renderer.py
# Turns a study plan into an on-screen timeline and a paginated PDF.
# Date: 2026-10-19
# Version: 0.1.0

import asyncio
import html
import io
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from PIL import Image, ImageDraw, ImageFont
from compass.core.config import Settings
from compass.core.errors import RenderError
from compass.models.common import StudyPlanDocument
from compass.utils.logger import console

MM_PER_INCH = 25.4


def export_filename(career: str) -> str:
    """'Software  Engineering' -> 'study-plan-software--engineering.pdf'"""
    return f"study-plan-{career.lower().replace(' ', '-')}.pdf"


@dataclass(frozen=True)
class PageGeometry:
    """Page size and margin in pixels at the export resolution."""
    width: int
    height: int
    margin: int
    dpi: int = 150

    @classmethod
    def from_settings(cls, settings: Settings) -> "PageGeometry":
        def to_px(mm: float) -> int:
            return round(mm / MM_PER_INCH * settings.PDF_DPI)
        return cls(
            width=to_px(settings.PDF_PAGE_WIDTH_MM),
            height=to_px(settings.PDF_PAGE_HEIGHT_MM),
            margin=to_px(settings.PDF_MARGIN_MM),
            dpi=settings.PDF_DPI,
        )

    @property
    def content_width(self) -> int:
        return self.width - 2 * self.margin

    @property
    def content_height(self) -> int:
        return self.height - 2 * self.margin

    def page_count(self, visual_height: int) -> int:
        return max(0, math.ceil(visual_height / self.content_height))


@dataclass(frozen=True)
class VisualNode:
    """One block of the timeline. `markup` is already HTML-escaped."""
    kind: str
    markup: str

    @property
    def text(self) -> str:
        return html.unescape(self.markup)


# kind -> (html tag, css class)
_HTML_TAGS: Dict[str, Tuple[str, str]] = {
    "title": ("h1", "plan-title"),
    "institution": ("h2", "plan-institution"),
    "degree": ("p", "plan-degree"),
    "term": ("h3", "plan-term"),
    "course": ("li", "plan-course"),
    "section": ("h2", "plan-extras"),
    "group": ("h3", "plan-extras-group"),
    "item": ("li", "plan-extras-item"),
}

_LIST_ITEMS = ("course", "item")


@dataclass
class VisualTree:
    nodes: List[VisualNode] = field(default_factory=list)

    def add(self, kind: str, text: str):
        self.nodes.append(VisualNode(kind=kind, markup=html.escape(str(text), quote=True)))

    def to_html(self) -> str:
        parts = ['<div class="study-plan">']
        in_list = False
        for node in self.nodes:
            is_item = node.kind in _LIST_ITEMS
            if is_item and not in_list:
                parts.append("<ul>")
            elif not is_item and in_list:
                parts.append("</ul>")
            in_list = is_item
            tag, css_class = _HTML_TAGS[node.kind]
            parts.append(f'<{tag} class="{css_class}">{node.markup}</{tag}>')
        if in_list:
            parts.append("</ul>")
        parts.append("</div>")
        return "".join(parts)


@dataclass(frozen=True)
class _Style:
    size: int
    indent: int = 0
    space_before: int = 0
    bullet: str = ""
    color: str = "#1f2933"


_STYLES: Dict[str, _Style] = {
    "title": _Style(size=32, color="#0b3d91"),
    "institution": _Style(size=24, space_before=28, color="#0b3d91"),
    "degree": _Style(size=18, space_before=4, color="#52606d"),
    "term": _Style(size=18, indent=20, space_before=14),
    "course": _Style(size=15, indent=44, space_before=2, bullet="• "),
    "section": _Style(size=22, space_before=28, color="#0b3d91"),
    "group": _Style(size=17, indent=20, space_before=10),
    "item": _Style(size=15, indent=44, space_before=2, bullet="• "),
}

LINE_SPACING = 1.4
PADDING = 24


class DocumentRenderer:
    """
    render -> rasterize -> paginate -> to_pdf. Rendering builds the visual
    tree, rasterizing draws it as one continuous image of content width, and
    pagination slices that image into page-height bands.
    """
    def __init__(self, geometry: PageGeometry, font_path: Optional[str] = None):
        self.geometry = geometry
        self._font_path = font_path
        self._fonts: Dict[int, ImageFont.ImageFont] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentRenderer":
        return cls(PageGeometry.from_settings(settings), font_path=settings.PDF_FONT_PATH)

    def render(self, doc: StudyPlanDocument) -> VisualTree:
        tree = VisualTree()
        tree.add("title", f"Study Plan: {doc.career}")
        for plan in doc.plans:
            tree.add("institution", plan.institution)
            tree.add("degree", plan.degree)
            for entry in plan.timeline:
                tree.add("term", entry.term)
                for course in entry.courses:
                    tree.add("course", course)
        extras = doc.extracurriculars
        if extras is not None and (extras.clubs or extras.activities):
            tree.add("section", "Extracurriculars")
            for label, items in (("Clubs", extras.clubs), ("Activities", extras.activities)):
                if not items:
                    continue
                tree.add("group", label)
                for item in items:
                    tree.add("item", item)
        return tree

    def _font(self, size: int):
        if size not in self._fonts:
            if self._font_path:
                self._fonts[size] = ImageFont.truetype(self._font_path, size)
            else:
                self._fonts[size] = ImageFont.load_default(size=size)
        return self._fonts[size]

    @staticmethod
    def _break_word(word: str, font, max_width: int) -> List[str]:
        """Splits a token wider than the line into pieces that fit."""
        if font.getlength(word) <= max_width:
            return [word]
        pieces: List[str] = []
        current = ""
        for char in word:
            if current and font.getlength(current + char) > max_width:
                pieces.append(current)
                current = char
            else:
                current += char
        pieces.append(current)
        return pieces

    def _wrap(self, text: str, font, max_width: int) -> List[str]:
        """Word-wraps each line of `text`; explicit newlines start a new line."""
        lines: List[str] = []
        for paragraph in text.splitlines() or [""]:
            current = ""
            for word in paragraph.split():
                for piece in self._break_word(word, font, max_width):
                    candidate = f"{current} {piece}" if current else piece
                    if current and font.getlength(candidate) > max_width:
                        lines.append(current)
                        current = piece
                    else:
                        current = candidate
            lines.append(current)
        return lines

    def layout(self, tree: VisualTree) -> Tuple[List[Tuple[int, int, str, object, str]], int]:
        """Positions every wrapped line; returns the draw operations and the total height."""
        width = self.geometry.content_width
        operations = []
        y = PADDING
        for node in tree.nodes:
            style = _STYLES[node.kind]
            font = self._font(style.size)
            line_height = math.ceil(style.size * LINE_SPACING)
            y += style.space_before
            x = PADDING + style.indent
            for index, line in enumerate(self._wrap(style.bullet + node.text, font, width - x - PADDING)):
                # continuation lines align with the text after the bullet
                line_x = x if index == 0 else x + round(font.getlength(style.bullet))
                operations.append((line_x, y, line, font, style.color))
                y += line_height
        return operations, y + PADDING

    def rasterize(self, tree: VisualTree) -> Image.Image:
        try:
            operations, height = self.layout(tree)
            image = Image.new("RGB", (self.geometry.content_width, height), "white")
            draw = ImageDraw.Draw(image)
            for x, y, line, font, color in operations:
                draw.text((x, y), line, font=font, fill=color)
            return image
        except (OSError, ValueError) as e:
            raise RenderError(f"Failed to rasterize the study plan: {e}") from e

    def paginate(self, image: Image.Image) -> List[Image.Image]:
        geometry = self.geometry
        if image.width != geometry.content_width:
            scaled_height = round(image.height * geometry.content_width / image.width)
            image = image.resize((geometry.content_width, scaled_height))

        pages = []
        offset = 0
        remaining = image.height
        while remaining > 0:
            band = image.crop((0, offset, image.width, min(offset + geometry.content_height, image.height)))
            page = Image.new("RGB", (geometry.width, geometry.height), "white")
            page.paste(band, (geometry.margin, geometry.margin))
            pages.append(page)
            offset += geometry.content_height
            remaining -= geometry.content_height
        return pages

    def to_pdf(self, pages: List[Image.Image]) -> bytes:
        if not pages:
            raise RenderError("The study plan produced no pages to export.")
        buffer = io.BytesIO()
        try:
            pages[0].save(
                buffer, format="PDF", save_all=True,
                append_images=pages[1:], resolution=float(self.geometry.dpi),
            )
        except (OSError, ValueError) as e:
            raise RenderError(f"Failed to write the PDF: {e}") from e
        return buffer.getvalue()


@dataclass(frozen=True)
class ExportedDocument:
    filename: str
    path: Path
    pages: int


class DocumentExporter:
    """
    The save-as-file boundary: renders a plan to PDF and writes it into the
    export directory. Every session gets its own subdirectory, so two
    sessions exporting the same career never share a file.
    """
    def __init__(self, renderer: DocumentRenderer, export_dir: str):
        self.renderer = renderer
        self._export_dir = Path(export_dir)

    def _session_dir(self, session_id: Optional[str]) -> Path:
        name = Path(session_id or "").name
        if name in ("", ".", ".."):
            raise RenderError("Cannot export a study plan without a session id.")
        return self._export_dir / name

    def path_for(self, filename: str, session_id: Optional[str]) -> Path:
        return self._session_dir(session_id) / Path(filename).name

    def save(self, data: bytes, filename: str, session_id: Optional[str]) -> Path:
        target = self.path_for(filename, session_id)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise RenderError(f"Failed to save '{target.name}': {e}") from e
        return target

    def export_sync(self, doc: StudyPlanDocument, session_id: Optional[str]) -> ExportedDocument:
        filename = export_filename(doc.career)
        target = self.path_for(filename, session_id)
        image = self.renderer.rasterize(self.renderer.render(doc))
        pages = self.renderer.paginate(image)
        path = self.save(self.renderer.to_pdf(pages), filename, session_id)
        console.success(f"Exported '{filename}' with {len(pages)} page(s) to '{target.parent.name}'.")
        return ExportedDocument(filename=filename, path=path, pages=len(pages))

    async def export(self, doc: StudyPlanDocument, session_id: Optional[str]) -> ExportedDocument:
        return await asyncio.to_thread(self.export_sync, doc, session_id)
