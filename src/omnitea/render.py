"""Rendering markdown replies to PNG pages.

markdown ──pandoc/xelatex──> PDF ──PyMuPDF──> PNG pages ──Pillow──> trimmed, negated PNGs
"""

import secrets
from pathlib import Path

from loguru import logger

from omnitea.imaging import trim_and_negate
from omnitea.pdf import DEFAULT_DPI, pdf_to_images
from omnitea.typeset import DEFAULT_ENGINE, PageGeometry, RenderError, markdown_to_pdf

# Page numbers on a single-card page are noise.
PREAMBLE = "\\pagenumbering{gobble}\n"


class Renderer:
    def __init__(
        self,
        work_dir: Path,
        geometry: PageGeometry = PageGeometry(),
        dpi: int = DEFAULT_DPI,
        negate: bool = True,
        engine: str = DEFAULT_ENGINE,
        keep_intermediates: bool = False,
    ) -> None:
        self.work_dir = work_dir
        self.geometry = geometry
        self.dpi = dpi
        self.negate = negate
        self.engine = engine
        self.keep_intermediates = keep_intermediates

    def __call__(self, markdown: str) -> list[Path]:
        return self.render(markdown)

    def render(self, markdown: str) -> list[Path]:
        """Typeset *markdown* and return the paths of the PNG pages, in page order.

        A single page is written to ``<stem>.png``; several pages to
        ``<stem>-0.png``, ``<stem>-1.png``, ...

        Raises:
            RenderError: typesetting or rasterizing failed.
        """
        stem = str(secrets.randbits(64))
        markdown_path = self.work_dir / f"{stem}.md"
        pdf_path = self.work_dir / f"{stem}.pdf"

        try:
            self.work_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RenderError(f"Could not create {self.work_dir}: {e}") from e

        try:
            markdown_path.write_text(PREAMBLE + markdown, encoding="utf-8")
            markdown_to_pdf(markdown_path, pdf_path, self.geometry, self.engine)
            pages = pdf_to_images(pdf_path, dpi=self.dpi)
        except OSError as e:
            raise RenderError(f"Could not write to {self.work_dir}: {e}") from e
        finally:
            if not self.keep_intermediates:
                markdown_path.unlink(missing_ok=True)
                pdf_path.unlink(missing_ok=True)

        paths: list[Path] = []
        try:
            for i, page in enumerate(pages):
                name = f"{stem}.png" if len(pages) == 1 else f"{stem}-{i}.png"
                paths.append(self.work_dir / name)
                paths[-1].write_bytes(trim_and_negate(page, negate_colours=self.negate))
        except (OSError, ValueError) as e:
            # Pillow reports undecodable pages as OSError (UnidentifiedImageError).
            for path in paths:
                path.unlink(missing_ok=True)
            raise RenderError(f"Could not finish page {len(paths) - 1}: {e}") from e

        logger.debug("Rendered {} page(s) to {}", len(paths), self.work_dir)
        return paths
