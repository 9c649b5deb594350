from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Union

import fitz  # PyMuPDF

from .exceptions import UnsupportedDocumentError

TEXT_SUFFIXES = {'.txt', '.text', '.md'}


def _page_texts(doc: 'fitz.Document', limit: Optional[int] = None) -> Dict[int, str]:
    results: Dict[int, str] = {}
    for idx, page in enumerate(doc, start=1):
        if limit is not None and idx > limit:
            break
        results[idx] = page.get_text()
    return results


def extract_text(buffer: bytes, limit: Optional[int] = None) -> str:
    """Return the plain text of a PDF held in memory, pages joined by newlines."""
    with fitz.open(stream=buffer, filetype='pdf') as doc:
        pages = _page_texts(doc, limit)
    return '\n'.join(pages[number] for number in sorted(pages))


def is_text_pdf(pdf_path: str) -> bool:
    with fitz.open(pdf_path) as doc:
        text_pages = sum(1 for page in doc if len(page.get_text().strip()) > 80)
        ratio = text_pages / max(1, doc.page_count)
    return ratio > 0.55


def read_document(path: Union[str, Path], limit: Optional[int] = None) -> str:
    source = Path(path)
    if source.suffix.lower() == '.pdf':
        return extract_text(source.read_bytes(), limit=limit)
    if source.suffix.lower() in TEXT_SUFFIXES or not source.suffix:
        return source.read_text(encoding='utf-8')
    raise UnsupportedDocumentError(f'Unsupported input type: {source} (expected .pdf or a text file)')
