"""Document processing module: extract, normalise and chunk uploaded documents."""
import logging
import re
from pathlib import Path
from typing import Optional, Tuple

from docanalyzer.chunker import chunk_document
from docanalyzer.config import settings
from docanalyzer.extractors import detect_mime, extract
from docanalyzer.models import ChunkedDocument

logger = logging.getLogger(__name__)


def _latex(template: str):
    return lambda m: template.format(*m.groups())


def _literal(replacement: str):
    return lambda m: replacement


# Plain-text math to LaTeX / Unicode, applied in order.
_MATH_REPLACEMENTS = [
    (re.compile(r"(\d+)/(\d+)"), _latex("$\\frac{{{0}}}{{{1}}}$")),
    (re.compile(r"sqrt\(([^)]+)\)"), _latex("$\\sqrt{{{0}}}$")),
    (re.compile(r"([a-zA-Z])\^(\d+)"), _latex("${0}^{{{1}}}$")),
    (re.compile(r"([a-zA-Z])\^(\([^)]+\))"), _latex("${0}^{{{1}}}$")),
    (re.compile(r"([a-zA-Z])_(\w)"), _latex("${0}_{{{1}}}$")),
] + [
    (re.compile(rf"\b{letter}\b"), _literal(f"$\\{letter}$"))
    for letter in ("alpha", "beta", "gamma", "delta", "epsilon", "theta",
                   "lambda", "mu", "pi", "sigma", "phi", "omega")
] + [
    (re.compile(r"\+/-"), _literal("±")),
    (re.compile(r"\+-"), _literal("±")),
    (re.compile(r"<="), _literal("≤")),
    (re.compile(r">="), _literal("≥")),
    (re.compile(r"!="), _literal("≠")),
    (re.compile(r"~="), _literal("≈")),
    (re.compile(r"\binfinity\b"), _literal("∞")),
    (re.compile(r"\bsum\b"), _literal("$\\sum$")),
    (re.compile(r"\bintegral\b"), _literal("$\\int$")),
    (re.compile(r"\^2"), _literal("²")),
    (re.compile(r"\^3"), _literal("³")),
]


def process_math_notation(text: str) -> str:
    """Convert plain-text math (1/2, sqrt(x), x^2, alpha, <=) to LaTeX/Unicode."""
    for pattern, replacement in _MATH_REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return text


class DocumentProcessor:
    """Extracts text from uploaded documents and chunks it."""

    def __init__(self, max_words: Optional[int] = None):
        """Initialize the document processor.

        Args:
            max_words: Word cap per chunk (defaults to settings.default_max_words)
        """
        self.max_words = max_words or settings.default_max_words

    def file_type_for(self, file_path: Path) -> str:
        """Extension without the dot, or the sniffed MIME type when there is none."""
        if file_path.suffix:
            return file_path.suffix.lower().lstrip(".")
        return detect_mime(str(file_path))

    def extract_text(self, file_path: str, file_type: Optional[str] = None, process_math: bool = True) -> str:
        """Extract plain text from a single file.

        Args:
            file_path: Path to the document
            file_type: Extension or MIME type; derived from the path when omitted
            process_math: Apply process_math_notation to the extracted text

        Raises:
            ValueError: If the file is missing, not allowed, or unreadable.
        """
        path = Path(file_path)

        # Validate file
        if not path.exists():
            raise ValueError(f"File {path} does not exist")
        if not path.is_file():
            raise ValueError(f"{path} is not a file")
        if path.suffix and path.suffix.lower() not in settings.allowed_extensions:
            raise ValueError(
                f"File type '{path.suffix}' not allowed. Allowed types: {', '.join(settings.allowed_extensions)}"
            )

        text = extract(str(path), file_type or self.file_type_for(path))
        if process_math:
            text = process_math_notation(text)
        logger.info(f"Extracted {len(text)} characters from {path.name}")
        return text

    def process_file(self, file_path: str, file_type: Optional[str] = None,
                     process_math: bool = True) -> Tuple[str, ChunkedDocument]:
        """Extract and chunk a single file.

        Returns:
            The extracted text and its ChunkedDocument
        """
        text = self.extract_text(file_path, file_type=file_type, process_math=process_math)
        return text, chunk_document(text, self.max_words)
