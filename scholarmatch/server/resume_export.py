# server/resume_export.py
"""
Render generated resume text as a .docx file.

Layout: the student's name as the title, a contact line, then one block
per non-empty line of the resume text:
- "##" / "**" prefixed or ALL-CAPS (longer than 3 chars) -> heading
- "-" / "•" prefixed -> bullet
- anything else -> paragraph
"""

import re
from io import BytesIO
from typing import Optional, Tuple
from urllib.parse import quote

from docx import Document
from docx.shared import Pt

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

HEADING = "heading"
BULLET = "bullet"
PARAGRAPH = "paragraph"


def classify_line(line: str) -> Tuple[str, str]:
    """Return (kind, text) for one line of resume text."""
    text = line.strip()
    if text.startswith("##") or text.startswith("**") or (text.upper() == text and len(text) > 3):
        return HEADING, re.sub(r"[#*]", "", text).strip()
    if text.startswith("-") or text.startswith("•"):
        return BULLET, text[1:].strip()
    return PARAGRAPH, text


def resume_filename(name: Optional[str]) -> str:
    stem = re.sub(r"\s+", "_", name or "resume")
    return f"{stem}_Resume.docx"


def content_disposition(name: Optional[str]) -> str:
    """
    Attachment header for the resume download. Header values must be
    Latin-1, so the plain ``filename`` is an ASCII rendering of the name and
    the exact name goes in ``filename*`` (RFC 6266).
    """
    stem = re.sub(r"\s+", "_", name or "resume")
    ascii_stem = re.sub(r'[^\x20-\x7e]|["\\]', "", stem).strip("_") or "resume"
    fallback = f"{ascii_stem}_Resume.docx"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(resume_filename(name), safe='')}"


def _sized_run(paragraph, text: str, size: int, bold: bool = False) -> None:
    run = paragraph.add_run(text)
    run.bold = bold
    run.font.size = Pt(size)


def build_resume_docx(
    content: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    location: Optional[str] = None,
) -> bytes:
    doc = Document()

    title = doc.add_paragraph(style="Title")
    _sized_run(title, name or "Resume", 16, bold=True)
    title.paragraph_format.space_after = Pt(10)

    if email or phone:
        contact = doc.add_paragraph()
        _sized_run(contact, f"{email or ''} | {phone or ''} | {location or ''}", 11)
        contact.paragraph_format.space_after = Pt(15)

    for line in content.split("\n"):
        if not line.strip():
            continue
        kind, text = classify_line(line)
        if kind == HEADING:
            p = doc.add_heading(level=1)
            _sized_run(p, text, 13, bold=True)
            p.paragraph_format.space_before = Pt(10)
            p.paragraph_format.space_after = Pt(5)
        elif kind == BULLET:
            p = doc.add_paragraph(style="List Bullet")
            _sized_run(p, text, 11)
            p.paragraph_format.space_after = Pt(2.5)
        else:
            p = doc.add_paragraph()
            _sized_run(p, text, 11)
            p.paragraph_format.space_after = Pt(5)

    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()
