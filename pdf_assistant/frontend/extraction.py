import logging
from io import BytesIO
from typing import Protocol

import fitz  # PyMuPDF
from pypdf import PdfReader

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


class ExtractionError(Exception):
    """The document could not be parsed."""


class UnsupportedFileError(ExtractionError):
    """The upload is not a PDF."""


class TextExtractor(Protocol):
    def extract(self, uploaded_file) -> str:
        ...


def join_pages(pages) -> str:
    """Space-join the items of each page; pages follow each other with no separator"""
    return "".join(" ".join(items) for items in pages)


def _pymupdf_items(file_bytes: bytes) -> list[list[str]]:
    pages = []
    with fitz.open(stream=file_bytes, filetype="pdf") as doc:
        for page in doc:
            items = []
            for block in page.get_text("dict")["blocks"]:
                for line in block.get("lines", []):
                    for span in line["spans"]:
                        items.append(span["text"])
            pages.append(items)
    return pages


def _pypdf_items(file_bytes: bytes) -> list[list[str]]:
    reader = PdfReader(BytesIO(file_bytes))
    return [(page.extract_text() or "").splitlines() for page in reader.pages]


class PdfTextExtractor:
    """Extracts page text from an uploaded PDF.

    ``uploaded_file`` is anything shaped like Streamlit's ``UploadedFile``:
    it has ``name``, a MIME ``type`` and ``getvalue()``.
    """

    def extract(self, uploaded_file) -> str:
        if uploaded_file.type != PDF_MIME_TYPE:
            raise UnsupportedFileError(f"{uploaded_file.name} is {uploaded_file.type}, not a PDF")

        file_bytes = uploaded_file.getvalue()
        try:
            pages = _pymupdf_items(file_bytes)
        except Exception as e:
            logger.error(f"PyMuPDF failed: {str(e)}. Trying fallback...")
            try:
                pages = _pypdf_items(file_bytes)
            except Exception as fallback_e:
                logger.error(f"pypdf failed: {str(fallback_e)}")
                raise ExtractionError(f"Could not read {uploaded_file.name}") from fallback_e

        text = join_pages(pages)
        logger.info(f"Extracted {len(text)} characters from {len(pages)} pages of {uploaded_file.name}")
        return text
