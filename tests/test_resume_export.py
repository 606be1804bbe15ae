from __future__ import annotations

from io import BytesIO

from docx import Document

from scholarmatch.server.resume_export import (
    BULLET,
    HEADING,
    PARAGRAPH,
    build_resume_docx,
    classify_line,
    content_disposition,
    resume_filename,
)

RESUME = """## Summary
Curious engineer who likes building data tools.

EXPERIENCE
- Built an attendance tracker used by 300 students
• Mentored juniors in Python

**Projects**
Open-source contributions to a campus app.
"""


def test_classify_line() -> None:
    assert classify_line("## Summary") == (HEADING, "Summary")
    assert classify_line("**Skills**") == (HEADING, "Skills")
    assert classify_line("EDUCATION") == (HEADING, "EDUCATION")
    assert classify_line("- Led a team") == (BULLET, "Led a team")
    assert classify_line("• Won a hackathon") == (BULLET, "Won a hackathon")
    assert classify_line("Built things.") == (PARAGRAPH, "Built things.")
    # short all-caps lines are not headings
    assert classify_line("GPA")[0] == PARAGRAPH


def test_resume_filename_replaces_whitespace() -> None:
    assert resume_filename("Priya  Sharma") == "Priya_Sharma_Resume.docx"
    assert resume_filename(None) == "resume_Resume.docx"


def test_build_resume_docx_layout() -> None:
    data = build_resume_docx(RESUME, name="Priya Sharma", email="priya@example.com", phone="123")

    doc = Document(BytesIO(data))
    texts = [p.text for p in doc.paragraphs]

    assert texts[0] == "Priya Sharma"
    assert texts[1] == "priya@example.com | 123 | "
    assert texts[2:] == [
        "Summary",
        "Curious engineer who likes building data tools.",
        "EXPERIENCE",
        "Built an attendance tracker used by 300 students",
        "Mentored juniors in Python",
        "Projects",
        "Open-source contributions to a campus app.",
    ]
    assert doc.paragraphs[2].style.name == "Heading 1"
    assert doc.paragraphs[5].style.name == "List Bullet"


def test_build_resume_docx_without_contact_details() -> None:
    doc = Document(BytesIO(build_resume_docx("Just one line.")))

    assert [p.text for p in doc.paragraphs] == ["Resume", "Just one line."]


def test_content_disposition_keeps_header_ascii() -> None:
    header = content_disposition('अनन्या "Annie" राव')

    header.encode("latin-1")
    assert header == (
        "attachment; filename=\"Annie_Resume.docx\"; "
        "filename*=UTF-8''%E0%A4%85%E0%A4%A8%E0%A4%A8%E0%A5%8D%E0%A4%AF%E0%A4%BE_%22Annie%22_"
        "%E0%A4%B0%E0%A4%BE%E0%A4%B5_Resume.docx"
    )
    assert content_disposition(None) == (
        "attachment; filename=\"resume_Resume.docx\"; filename*=UTF-8''resume_Resume.docx"
    )
