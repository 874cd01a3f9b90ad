# pacioli/renderer.py
"""HTML -> PDF rendering.

The renderer writes the target file all-or-nothing: the PDF is produced in
memory, written to a temporary file beside the target and moved into place.
"""
from __future__ import annotations

import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from .exceptions import RenderError

logger = logging.getLogger(__name__)


def load_weasyprint() -> Tuple[Optional[Any], Optional[str]]:
    """Import weasyprint lazily.

    Returns (module, error_message). ImportError covers a missing package,
    OSError missing system libraries (pango, cairo).
    """
    try:
        import weasyprint  # type: ignore
        return weasyprint, None
    except ImportError as e:
        return None, f"WeasyPrint is not installed: {e}. Install with: pip install weasyprint"
    except OSError as e:
        return None, (
            f"WeasyPrint import failed due to missing system libraries: {e}\n"
            "Ubuntu/Debian: sudo apt-get install -y libpango-1.0-0 libpangoft2-1.0-0\n"
            "macOS (Homebrew): brew install pango"
        )


def write_atomically(data: bytes, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=str(output_path.parent), prefix=f".{output_path.name}.", suffix=".part"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, output_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class PdfRenderer:
    """Turns finished markup into a PDF file at ``output_path``."""

    def render(self, markup: str, output_path: Union[str, Path], timeout: float) -> Path:
        raise NotImplementedError


class WeasyPrintRenderer(PdfRenderer):
    def __init__(self, base_url: Optional[Union[str, Path]] = None):
        # Relative asset links in templates (css, images) resolve against this
        self.base_url = str(base_url) if base_url is not None else None

    def _to_pdf_bytes(self, markup: str) -> bytes:
        weasyprint, error = load_weasyprint()
        if weasyprint is None:
            raise RenderError(error)
        return weasyprint.HTML(string=markup, base_url=self.base_url).write_pdf()

    def render(self, markup: str, output_path: Union[str, Path], timeout: float) -> Path:
        output_path = Path(output_path)
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdf-render")
        future = executor.submit(self._to_pdf_bytes, markup)
        try:
            data = future.result(timeout=timeout)
        except FutureTimeout:
            raise RenderError(f"PDF rendering timed out after {timeout}s") from None
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(f"PDF rendering failed: {e}") from e
        finally:
            # A timed-out render keeps running in the background; its bytes are discarded
            executor.shutdown(wait=False, cancel_futures=True)

        try:
            write_atomically(data, output_path)
        except OSError as e:
            raise RenderError(f"Cannot write {output_path}: {e}") from e

        logger.info("PDF written to %s (%d bytes)", output_path, len(data))
        return output_path
