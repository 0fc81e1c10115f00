"""Markdown to PDF typesetting with pandoc."""

import subprocess
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

PANDOC = "pandoc"
DEFAULT_ENGINE = "xelatex"

# Generous: the first xelatex run on a fresh container builds font caches.
PANDOC_TIMEOUT = 120


class RenderError(RuntimeError):
    """Typesetting or rasterizing a reply failed."""


@dataclass
class PageGeometry:
    """Page size and margins, in any unit LaTeX's geometry package accepts.

    The defaults give a small landscape card that reads well as a chat image.
    """

    width: str = "4.25in"
    height: str = "3.25in"
    margin: str = "0.2in"

    def pandoc_variables(self) -> list[str]:
        return [
            "-V", f"geometry:margin={self.margin}",
            "-V", f"geometry:paperwidth={self.width}",
            "-V", f"geometry:paperheight={self.height}",
        ]


def pandoc_command(
    markdown_path: Path,
    pdf_path: Path,
    geometry: PageGeometry,
    engine: str = DEFAULT_ENGINE,
) -> list[str]:
    return [
        PANDOC,
        *geometry.pandoc_variables(),
        f"--pdf-engine={engine}",
        "-o", str(pdf_path),
        str(markdown_path),
    ]


def markdown_to_pdf(
    markdown_path: Path,
    pdf_path: Path,
    geometry: PageGeometry = PageGeometry(),
    engine: str = DEFAULT_ENGINE,
) -> Path:
    """Typeset *markdown_path* into *pdf_path* and return *pdf_path*.

    Raises:
        RenderError: pandoc is missing, timed out, or exited non-zero.
    """
    cmd = pandoc_command(markdown_path, pdf_path, geometry, engine)
    logger.debug("Running {}", " ".join(cmd))

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=PANDOC_TIMEOUT,
            cwd=markdown_path.parent,
        )
    except FileNotFoundError as e:
        raise RenderError(f"{PANDOC} is not installed") from e
    except subprocess.TimeoutExpired as e:
        raise RenderError(f"{PANDOC} timed out after {PANDOC_TIMEOUT}s") from e

    if result.returncode != 0:
        raise RenderError(f"pandoc failed: {result.stderr.strip()}")
    if not pdf_path.exists():
        raise RenderError(f"pandoc reported success but wrote no PDF at {pdf_path}")
    return pdf_path
