"""PDF to image conversion using PyMuPDF."""

from pathlib import Path

import fitz  # PyMuPDF

from omnitea.typeset import RenderError

DEFAULT_DPI = 300


def pdf_to_images(pdf_path: Path, dpi: int = DEFAULT_DPI) -> list[bytes]:
    """Rasterize each page of a PDF to a PNG byte string.

    Typeset replies are small pages, so 300 DPI keeps formulas sharp when
    Discord scales the image down for the preview.
    """
    try:
        doc = fitz.open(str(pdf_path))
    except (fitz.FileDataError, FileNotFoundError, RuntimeError) as e:
        raise RenderError(f"Could not open {pdf_path}: {e}") from e

    matrix = fitz.Matrix(dpi / 72, dpi / 72)  # 72 is the base DPI in the PDF spec
    with doc:
        try:
            return [
                page.get_pixmap(matrix=matrix, colorspace=fitz.csRGB).tobytes("png")
                for page in doc
            ]
        except (RuntimeError, ValueError) as e:
            raise RenderError(f"Could not rasterize {pdf_path}: {e}") from e
