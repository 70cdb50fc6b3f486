"""
Local text extractors for uploaded documents.

Each extractor returns the document's plain text.

Supports:
- PDF (pdfplumber; pypdf fallback)
- DOCX (python-docx)
- Plain text
"""
import os
import mimetypes
import warnings
import logging
from contextlib import redirect_stderr

logger = logging.getLogger(__name__)

# pdfminer font warnings are harmless for text extraction
warnings.filterwarnings("ignore", message=".*FontBBox.*")
warnings.filterwarnings("ignore", message=".*cannot be parsed as 4 floats.*")

logging.getLogger("pdfplumber").setLevel(logging.ERROR)
logging.getLogger("pypdf").setLevel(logging.ERROR)

try:
    import magic  # python-magic
except Exception:
    magic = None

# PDF
import pdfplumber
from pypdf import PdfReader

# DOCX
import docx

PDF_TYPES = {"pdf", "application/pdf"}
DOCX_TYPES = {"docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"}
TEXT_TYPES = {"txt", "text/plain"}


def detect_mime(path: str) -> str:
    if magic:
        try:
            return magic.from_file(path, mime=True)
        except Exception:
            pass
    return mimetypes.guess_type(path)[0] or "application/octet-stream"


def extract_from_pdf(path: str) -> str:
    pages = []
    try:
        with open(os.devnull, "w") as devnull:
            with redirect_stderr(devnull):
                with pdfplumber.open(path) as pdf:
                    for i, page in enumerate(pdf.pages):
                        try:
                            pages.append(page.extract_text() or "")
                        except Exception as page_error:
                            # keep the pages that did extract
                            logger.warning(f"Failed to extract text from page {i + 1} of {os.path.basename(path)}: {page_error}")
    except Exception as pdf_error:
        logger.warning(f"pdfplumber failed for {os.path.basename(path)}: {pdf_error}")
        pages = []

    if any(p.strip() for p in pages):
        return "\n".join(pages)

    # pdfplumber found no text; try pypdf
    try:
        with open(os.devnull, "w") as devnull:
            with redirect_stderr(devnull):
                reader = PdfReader(path)
                return "\n".join(page.extract_text() or "" for page in reader.pages)
    except Exception as e:
        raise ValueError(f"Failed to extract text from PDF: {e}")


def extract_from_docx(path: str) -> str:
    try:
        doc = docx.Document(path)
    except Exception as e:
        raise ValueError(f"Failed to extract text from DOCX: {e}")
    return "\n".join(para.text for para in doc.paragraphs)


def extract_from_txt(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"Failed to read text file: {e}")


def extract(path: str, file_type: str) -> str:
    """Extract text from path.

    Args:
        path: File on disk
        file_type: Extension without dot ("pdf") or MIME type ("application/pdf")

    Raises:
        ValueError: For unsupported types or unreadable files.
    """
    kind = file_type.lower().lstrip(".")
    filename = os.path.basename(path)
    if kind in PDF_TYPES:
        logger.info(f"Processing PDF: {filename}")
        return extract_from_pdf(path)
    if kind in DOCX_TYPES:
        logger.info(f"Processing DOCX: {filename}")
        return extract_from_docx(path)
    if kind in TEXT_TYPES:
        logger.info(f"Processing text: {filename}")
        return extract_from_txt(path)
    raise ValueError(f"Unsupported file type: {kind}")
