"""Shared fixtures for the test suite.

Image and PDF fixtures produce real files / real bytes so tests exercise
actual code paths rather than hand-crafted stubs.  Nothing here needs the
network, pandoc, or a tiktoken download.
"""

import io
from pathlib import Path

import fitz  # PyMuPDF
import pytest
from click.testing import CliRunner
from PIL import Image

from omnitea.chat_log import ChatLog


# ── CLI runner ─────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


# ── Environment ────────────────────────────────────────────────────────────


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable omnitea reads so a developer's .env can't leak in."""
    for name in (
        "OPENAI_API_KEY", "OPENAI_KEY", "ANTHROPIC_API_KEY",
        "DISCORD_TOKEN", "CHANNEL_NAME", "PROMPT_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ── Token counting ─────────────────────────────────────────────────────────


def word_count(chat_log: ChatLog) -> int:
    """A predictable stand-in for TokenCounter: one token per word."""
    return sum(len(entry.content.split()) for entry in chat_log)


@pytest.fixture
def count_words():
    return word_count


# ── Image fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def png_bytes() -> bytes:
    """A real, valid 10×10 red PNG image as raw bytes."""
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def page_png_bytes() -> bytes:
    """A 100×60 white page with a 20×10 black block at (30, 20)."""
    img = Image.new("RGB", (100, 60), color=(255, 255, 255))
    img.paste((0, 0, 0), (30, 20, 50, 30))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


# ── PDF fixtures ───────────────────────────────────────────────────────────


def make_pdf(path: Path, pages: int) -> Path:
    doc = fitz.open()
    for i in range(pages):
        page = doc.new_page(width=306, height=234)  # 4.25in × 3.25in
        page.insert_text((20, 40), f"Page {i + 1}: x^2 + y^2 = z^2")
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def pdf_writer():
    """The PDF-writing helper itself, for stubs that must produce a PDF on demand."""
    return make_pdf


@pytest.fixture
def single_page_pdf(tmp_path: Path) -> Path:
    """A real single-page PDF the size of a rendered reply card."""
    return make_pdf(tmp_path / "single.pdf", pages=1)


@pytest.fixture
def multi_page_pdf(tmp_path: Path) -> Path:
    """A real 3-page PDF with distinct text on each page."""
    return make_pdf(tmp_path / "multi.pdf", pages=3)
