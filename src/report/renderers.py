"""
Report renderers: ReportContent → document bytes.

All renderers share ``ReportRenderer.render``, which wraps the format-specific
``_render_bytes`` into a GeneratedReport and converts library failures into
RenderError. The orchestrator only ever sees the base class.
"""

import io
import logging
import os
import re
import shutil
import subprocess
import tempfile
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional
from xml.sax.saxutils import escape

from docx import Document
from docx.shared import Inches, Pt
from docx.enum.text import WD_ALIGN_PARAGRAPH
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    SimpleDocTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
    Image,
)

from src.exceptions import RenderError
from src.pipeline.models import (
    GeneratedReport, ReportContent, ReportFormat, ReportRequest, SectionKind, TextSection,
)

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

HEADER_FILL = colors.HexColor("#1F3A5F")
ROW_STRIPE = colors.HexColor("#F3F4F6")

# pdflatex wall-clock limit per run (seconds)
LATEX_TIMEOUT_SECONDS = 120

# Characters lxml refuses inside XML text nodes
_XML_INVALID = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def _xml_safe(text: str) -> str:
    return _XML_INVALID.sub("", text or "")


def _markup(text: str) -> str:
    """Text escaped for a reportlab Paragraph."""
    return escape(_xml_safe(text))


def generate_file_name(request: ReportRequest, extension: str) -> str:
    """``<title-slug or report>_<YYYYmmdd_HHMMSS>.<extension>``"""
    base = "report"
    if request.title and request.title.strip():
        base = re.sub(r"[^a-zA-Z0-9._-]", "_", request.title.strip()).lower()
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"{base}_{timestamp}.{extension}"


class ReportRenderer(ABC):
    """Base class for one output format."""

    format: ReportFormat = ReportFormat.PDF
    mime_type: str = PDF_MIME_TYPE
    extension: str = "pdf"

    @abstractmethod
    def _render_bytes(self, content: ReportContent) -> bytes:
        pass

    def file_name(self, request: ReportRequest) -> str:
        return generate_file_name(request, self.extension)

    def render(self, content: ReportContent, request: ReportRequest) -> GeneratedReport:
        """
        Render content for a request.

        Raises:
            RenderError: if the underlying document library fails
        """
        try:
            data = self._render_bytes(content)
        except RenderError:
            raise
        except Exception as e:
            logger.error(f"Error generating {self.format.value} report for {request.id}: {e}")
            raise RenderError(self.format.value, f"Failed to generate {self.format.value} report: {e}", e) from e

        logger.info(f"Rendered {self.format.value} report for {request.id} ({len(data)} bytes)")
        return GeneratedReport(
            id=str(uuid.uuid4()),
            file_name=self.file_name(request),
            format=self.format,
            content=data,
            mime_type=self.mime_type,
            generated_at=datetime.now(timezone.utc),
            request_id=request.id,
            source_url=request.source_url,
        )


# =============================================================================
# PDF (reportlab)
# =============================================================================

class PdfRenderer(ReportRenderer):
    format = ReportFormat.PDF
    mime_type = PDF_MIME_TYPE
    extension = "pdf"

    def __init__(self):
        base = getSampleStyleSheet()
        self.title_style = ParagraphStyle("ReportTitle", parent=base["Title"], fontSize=20, spaceAfter=12,
                                          alignment=TA_CENTER)
        self.h1 = ParagraphStyle("ReportH1", parent=base["Heading1"], fontSize=16, spaceBefore=12, spaceAfter=8)
        self.h2 = ParagraphStyle("ReportH2", parent=base["Heading2"], fontSize=13, spaceBefore=8, spaceAfter=6)
        self.body = ParagraphStyle("ReportBody", parent=base["BodyText"], fontSize=11, leading=15)
        self.quote = ParagraphStyle("ReportQuote", parent=self.body, leftIndent=12 * mm, textColor=colors.grey,
                                    fontName="Helvetica-Oblique")
        self.meta = ParagraphStyle("ReportMeta", parent=self.body, fontSize=9, textColor=colors.grey)

    def _section_flowables(self, section: TextSection) -> List:
        if section.kind is SectionKind.HEADER:
            return [Paragraph(_markup(section.content), self.h2)]
        flowables = []
        if section.title:
            flowables.append(Paragraph(f"<b>{_markup(section.title)}</b>", self.body))
        if section.kind is SectionKind.QUOTE:
            flowables.append(Paragraph(_markup(section.content), self.quote))
        elif section.kind is SectionKind.BULLET:
            flowables.append(Paragraph(_markup(section.content), self.body, bulletText="•"))
        else:
            flowables.append(Paragraph(_markup(section.content), self.body))
        flowables.append(Spacer(1, 4))
        return flowables

    def _chart_image(self, png: bytes, max_width: float) -> Image:
        width, height = ImageReader(io.BytesIO(png)).getSize()
        scale = min(1.0, max_width / float(width))
        return Image(io.BytesIO(png), width=width * scale, height=height * scale)

    def _render_bytes(self, content: ReportContent) -> bytes:
        buf = io.BytesIO()
        doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=20 * mm, rightMargin=20 * mm,
                                topMargin=18 * mm, bottomMargin=18 * mm, title=content.title)
        story = [
            Paragraph(_markup(content.title), self.title_style),
            Paragraph(f"Source: {_markup(content.source_url)}", self.meta),
            Paragraph(f"Generated: {content.generated_at.strftime(DATE_FORMAT)}", self.meta),
            Paragraph(f"Report ID: {_markup(content.id)}", self.meta),
            Spacer(1, 10),
        ]

        if content.summary:
            story.append(Paragraph("Executive Summary", self.h1))
            story.append(Paragraph(_markup(content.summary), self.body))

        if content.sections:
            story.append(Paragraph("Content Analysis", self.h1))
            for section in content.sections:
                story.extend(self._section_flowables(section))

        if content.charts:
            story.append(Paragraph("Data Visualizations", self.h1))
            for chart in content.charts:
                story.append(Paragraph(_markup(chart.title), self.h2))
                if chart.image_bytes:
                    story.append(self._chart_image(chart.image_bytes, doc.width))
                if chart.description:
                    story.append(Paragraph(_markup(chart.description), self.meta))

        for table in content.tables:
            story.append(Paragraph(_markup(table.title), self.h1))
            if table.description:
                story.append(Paragraph(_markup(table.description), self.meta))
            cell = ParagraphStyle("Cell", parent=self.body, fontSize=9, leading=11)
            data = [[Paragraph(f"<b>{_markup(h)}</b>", cell) for h in table.headers]]
            data += [[Paragraph(_markup(v), cell) for v in row] for row in table.rows]
            t = Table(data, repeatRows=1, hAlign="LEFT")
            t.setStyle(TableStyle([
                ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, ROW_STRIPE]),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]))
            story.append(t)

        doc.build(story)
        return buf.getvalue()


# =============================================================================
# DOCX (python-docx)
# =============================================================================

class DocxRenderer(ReportRenderer):
    format = ReportFormat.DOCX
    mime_type = DOCX_MIME_TYPE
    extension = "docx"

    def _add_section(self, doc, section: TextSection):
        if section.kind is SectionKind.HEADER:
            doc.add_heading(_xml_safe(section.content), level=2)
            return
        if section.title:
            run = doc.add_paragraph().add_run(_xml_safe(section.title))
            run.bold = True
        if section.kind is SectionKind.BULLET:
            doc.add_paragraph(_xml_safe(section.content), style="List Bullet")
        elif section.kind is SectionKind.QUOTE:
            doc.add_paragraph().add_run(_xml_safe(section.content)).italic = True
        else:
            doc.add_paragraph(_xml_safe(section.content))

    def _render_bytes(self, content: ReportContent) -> bytes:
        doc = Document()
        style = doc.styles['Normal']
        style.font.name = 'Calibri'
        style.font.size = Pt(11)

        title = doc.add_heading(_xml_safe(content.title), level=0)
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER

        meta = doc.add_paragraph()
        meta.add_run(f"Source: {_xml_safe(content.source_url)}\n").italic = True
        meta.add_run(f"Generated: {content.generated_at.strftime(DATE_FORMAT)}\n").italic = True
        meta.add_run(f"Report ID: {content.id}").italic = True

        if content.summary:
            doc.add_heading("Executive Summary", level=1)
            doc.add_paragraph(_xml_safe(content.summary))

        if content.sections:
            doc.add_heading("Content Analysis", level=1)
            for section in content.sections:
                self._add_section(doc, section)

        if content.charts:
            doc.add_heading("Data Visualizations", level=1)
            for chart in content.charts:
                doc.add_heading(_xml_safe(chart.title), level=2)
                if chart.image_bytes:
                    doc.add_picture(io.BytesIO(chart.image_bytes), width=Inches(6))
                if chart.description:
                    doc.add_paragraph().add_run(_xml_safe(chart.description)).italic = True

        for table in content.tables:
            doc.add_heading(_xml_safe(table.title), level=1)
            if table.description:
                doc.add_paragraph(_xml_safe(table.description))
            t = doc.add_table(rows=1 + len(table.rows), cols=len(table.headers))
            t.style = 'Table Grid'
            for i, header in enumerate(table.headers):
                cell = t.rows[0].cells[i]
                cell.text = _xml_safe(header)
                cell.paragraphs[0].runs[0].bold = True
            for r, row in enumerate(table.rows, start=1):
                for c, value in enumerate(row):
                    t.rows[r].cells[c].text = _xml_safe(value)

        buf = io.BytesIO()
        doc.save(buf)
        return buf.getvalue()


# =============================================================================
# LaTeX → PDF (pdflatex)
# =============================================================================

_LATEX_ESCAPES = [
    ("\\", r"\textbackslash "),
    ("{", r"\{"),
    ("}", r"\}"),
    ("$", r"\$"),
    ("&", r"\&"),
    ("%", r"\%"),
    ("#", r"\#"),
    ("^", r"\textasciicircum "),
    ("_", r"\_"),
    ("~", r"\textasciitilde "),
]


def escape_latex(text: Optional[str]) -> str:
    if not text:
        return ""
    # Backslash first so later replacements are not re-escaped
    for char, replacement in _LATEX_ESCAPES:
        text = text.replace(char, replacement)
    return text


def build_latex_source(content: ReportContent, chart_files: Dict[int, str]) -> str:
    """
    LaTeX document for the content. ``chart_files`` maps chart index to an
    image file name in the build directory.
    """
    lines = [
        r"\documentclass{article}",
        r"\usepackage[utf8]{inputenc}",
        r"\usepackage{graphicx}",
        r"\usepackage{booktabs}",
        r"\usepackage{geometry}",
        r"\geometry{margin=1in}",
        r"\title{" + escape_latex(content.title) + "}",
        r"\date{" + content.generated_at.strftime(DATE_FORMAT) + "}",
        r"\begin{document}",
        r"\maketitle",
        "",
    ]

    if content.summary:
        lines += [r"\section{Executive Summary}", escape_latex(content.summary), ""]

    for section in content.sections:
        if section.kind is SectionKind.HEADER:
            lines.append(r"\subsection{" + escape_latex(section.content) + "}")
            continue
        if section.title:
            lines.append(r"\paragraph{" + escape_latex(section.title) + "}")
        lines += [escape_latex(section.content), ""]

    for i, chart in enumerate(content.charts):
        lines += [r"\section{" + escape_latex(chart.title) + "}"]
        if i in chart_files:
            lines += [
                r"\begin{figure}[h!]",
                r"\centering",
                r"\includegraphics[width=0.9\textwidth]{" + chart_files[i] + "}",
                r"\caption{" + escape_latex(chart.description) + "}",
                r"\end{figure}",
            ]
        lines.append("")

    if content.tables:
        lines.append(r"\section{Data Tables}")
    for table in content.tables:
        lines.append(r"\subsection{" + escape_latex(table.title) + "}")
        if not table.headers:
            continue
        lines += [
            r"\begin{table}[h!]",
            r"\centering",
            r"\begin{tabular}{" + "l" * len(table.headers) + "}",
            r"\toprule",
            " & ".join(escape_latex(h) for h in table.headers) + r" \\",
            r"\midrule",
        ]
        for row in table.rows:
            lines.append(" & ".join(escape_latex(v) for v in row[:len(table.headers)]) + r" \\")
        lines += [r"\bottomrule", r"\end{tabular}", r"\end{table}", ""]

    lines.append(r"\end{document}")
    return "\n".join(lines) + "\n"


class LatexPdfRenderer(ReportRenderer):
    """PDF typeset by pdflatex from generated LaTeX source."""

    format = ReportFormat.PDF
    mime_type = PDF_MIME_TYPE
    extension = "pdf"

    def __init__(self, pdflatex: str = "pdflatex"):
        self.pdflatex = pdflatex

    def file_name(self, request: ReportRequest) -> str:
        return generate_file_name(request, "pdf").replace(".pdf", "_latex.pdf")

    def _render_bytes(self, content: ReportContent) -> bytes:
        executable = shutil.which(self.pdflatex)
        if executable is None:
            raise RenderError(self.format.value, f"{self.pdflatex} not found on PATH")

        with tempfile.TemporaryDirectory() as build_dir:
            chart_files = {}
            for i, chart in enumerate(content.charts):
                if chart.image_bytes:
                    name = f"chart_{i}.png"
                    with open(os.path.join(build_dir, name), 'wb') as f:
                        f.write(chart.image_bytes)
                    chart_files[i] = name

            with open(os.path.join(build_dir, "report.tex"), 'w', encoding='utf-8') as f:
                f.write(build_latex_source(content, chart_files))

            cmd = [executable, "-interaction=nonstopmode", "-halt-on-error", "report.tex"]
            result = subprocess.run(cmd, cwd=build_dir, capture_output=True, text=True,
                                    timeout=LATEX_TIMEOUT_SECONDS)
            if result.returncode != 0:
                raise RenderError(self.format.value,
                                  f"pdflatex exited with {result.returncode}: {result.stdout[-500:]}")

            with open(os.path.join(build_dir, "report.pdf"), 'rb') as f:
                return f.read()


def build_renderers(config: Optional[Dict] = None) -> Dict[ReportFormat, ReportRenderer]:
    """Renderer per concrete format; ``pdf_engine`` picks reportlab or latex."""
    config = config or {}
    engine = config.get("pdf_engine", "reportlab")
    if engine == "latex":
        pdf_renderer: ReportRenderer = LatexPdfRenderer()
    elif engine == "reportlab":
        pdf_renderer = PdfRenderer()
    else:
        raise ValueError(f"Unknown pdf_engine: {engine}")
    return {ReportFormat.PDF: pdf_renderer, ReportFormat.DOCX: DocxRenderer()}
