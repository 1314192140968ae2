# core/pdf_text.py
from typing import List, Tuple
import fitz
from core.entities import ExtractedText
from util.functions import clean_text
from util.timing import timed
import logging

logger = logging.getLogger(__name__)


def extract_pages_texts(file_bytes: bytes) -> List[Tuple[int, str]]:
    """
    Return [(page_number, page_text)] for the whole PDF.
    If parsing fails, returns [].
    """
    try:
        out: List[Tuple[int, str]] = []
        with timed(logger, "pdf.open"):
            with fitz.open(stream=file_bytes, filetype="pdf") as doc:
                pages = doc.page_count
                with timed(logger, "pdf.parse", pages=pages):
                    for i in range(pages):
                        page = doc.load_page(i)
                        txt = (page.get_text("text") or "").strip()
                        out.append((i + 1, txt))
        logger.info("pdf.pages count=%d", len(out))
        return out
    except Exception:
        # do not log payloads
        logger.error("pdf.parse.error", exc_info=True)
        return []


def extract_text(file_bytes: bytes) -> ExtractedText:
    """
    Whole-document plain text, cleaned (controls stripped, whitespace collapsed).
    An unreadable PDF yields empty text and no page count.
    """
    pages = extract_pages_texts(file_bytes)
    if not pages:
        return ExtractedText(text="", page_count=None)
    text = clean_text(" ".join(txt for _, txt in pages))
    logger.info("pdf.text pages=%d chars=%d", len(pages), len(text))
    return ExtractedText(text=text, page_count=len(pages))
