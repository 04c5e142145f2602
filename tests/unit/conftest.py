"""Unit test conftest - no database or GCP credentials required."""

from __future__ import annotations

import io

import pytest


@pytest.fixture
def sample_docx_bytes() -> bytes:
    """Generate a 3-paragraph DOCX file in memory."""
    docx = pytest.importorskip("docx")
    doc = docx.Document()
    doc.add_paragraph("Quotation Q-2041 for OS Overseas.")
    doc.add_paragraph("Item: 40ft container, Mumbai to Rotterdam.")
    doc.add_paragraph("Total: USD 2,350.00")
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def empty_docx_bytes() -> bytes:
    """Generate a valid DOCX with no paragraphs containing text."""
    docx = pytest.importorskip("docx")
    doc = docx.Document()
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def table_docx_bytes() -> bytes:
    """DOCX with a heading paragraph, a 2x2 line-item table, then a total."""
    docx = pytest.importorskip("docx")
    doc = docx.Document()
    doc.add_paragraph("Quotation Q-2042")
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "40ft container"
    table.cell(0, 1).text = "USD 2,350.00"
    table.cell(1, 0).text = "Customs clearance"
    table.cell(1, 1).text = "USD 180.00"
    doc.add_paragraph("Total: USD 2,530.00")
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def table_only_docx_bytes() -> bytes:
    """DOCX whose only content is a 1x2 table."""
    docx = pytest.importorskip("docx")
    doc = docx.Document()
    table = doc.add_table(rows=1, cols=2)
    table.cell(0, 0).text = "40ft container"
    table.cell(0, 1).text = "USD 2,350.00"
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()
