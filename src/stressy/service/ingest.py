"""Text extraction and chunking for uploaded papers."""

import logging
import re
from pathlib import Path

import fitz  # PyMuPDF

from stressy.constants import DEFAULT_MAX_CHUNK_LENGTH
from stressy.models import Chunk

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
SENTENCE_BREAK = re.compile(r"(?<=[.?!])\s+")
PARAGRAPH_SEPARATOR = "\n\n"
SENTENCE_SEPARATOR = " "


def extract_text_from_pdf(data: bytes) -> str:
    """Extract all text from an in-memory PDF.

    Args:
        data: Raw PDF bytes

    Returns:
        str: Concatenated text from all pages
    """
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        return "".join(page.get_text() for page in doc)
    finally:
        doc.close()


def extract_text(data: bytes, filename: str) -> str:
    """Extract text from an uploaded file.

    PDFs go through PyMuPDF; anything else is decoded as UTF-8, with
    undecodable bytes replaced.

    Args:
        data: Raw file bytes
        filename: Original filename, used to detect PDFs

    Returns:
        str: The document text
    """
    if Path(filename).suffix.lower() == ".pdf" or data.startswith(b"%PDF"):
        text = extract_text_from_pdf(data)
    else:
        text = data.decode("utf-8", errors="replace")
    logger.info(f"  Extracted {len(text)} characters from {filename}")
    return text


class _ChunkBuffer:
    """Accumulates pieces into chunks no longer than ``max_length``."""

    def __init__(self, max_length: int) -> None:
        self.max_length = max_length
        self.text = ""
        self.chunks: list[str] = []

    def fits(self, piece: str, separator: str) -> bool:
        joiner = separator if self.text else ""
        return len(self.text) + len(joiner) + len(piece) < self.max_length

    def append(self, piece: str, separator: str) -> None:
        self.text = f"{self.text}{separator}{piece}" if self.text else piece

    def flush(self) -> None:
        if self.text:
            self.chunks.append(self.text)
        self.text = ""

    def hard_split(self, piece: str) -> None:
        """Cut ``piece`` into full-length slices; the last slice stays buffered."""
        slices = [
            piece[start : start + self.max_length]
            for start in range(0, len(piece), self.max_length)
        ]
        slices = [part for part in slices if part.strip()]
        self.chunks.extend(slices[:-1])
        self.text = slices[-1] if slices else ""


def split_text(text: str, max_chunk_length: int = DEFAULT_MAX_CHUNK_LENGTH) -> list[str]:
    """Split text into bounded segments along natural boundaries.

    Paragraphs (separated by blank lines) are packed together first. A
    paragraph that is too long on its own is packed sentence by sentence, and
    a sentence that is still too long is cut into fixed-length slices. Packing
    is greedy across these levels, so a segment is only closed when the next
    piece does not fit. Joining the segments with blank lines and splitting
    again with the same limit gives back the same segments.

    Args:
        text: The text to split
        max_chunk_length: Maximum characters per segment (default: 1000)

    Returns:
        list[str]: Segments in document order; empty for empty input

    Raises:
        ValueError: If max_chunk_length is less than 1
    """
    if max_chunk_length < 1:
        raise ValueError(f"max_chunk_length must be at least 1, got {max_chunk_length}")

    buffer = _ChunkBuffer(max_chunk_length)

    for paragraph in PARAGRAPH_BREAK.split(text):
        if not paragraph.strip():
            continue
        if buffer.fits(paragraph, PARAGRAPH_SEPARATOR):
            buffer.append(paragraph, PARAGRAPH_SEPARATOR)
            continue

        if len(paragraph) <= max_chunk_length:
            buffer.flush()
            buffer.append(paragraph, PARAGRAPH_SEPARATOR)
            continue

        # the first sentence still joins the previous paragraph with a blank line
        separator = PARAGRAPH_SEPARATOR
        for sentence in SENTENCE_BREAK.split(paragraph):
            if not sentence.strip():
                continue
            if not buffer.fits(sentence, separator):
                buffer.flush()
                if len(sentence) > max_chunk_length:
                    buffer.hard_split(sentence)
                    separator = SENTENCE_SEPARATOR
                    continue
            buffer.append(sentence, separator)
            separator = SENTENCE_SEPARATOR

    buffer.flush()
    return buffer.chunks


def chunk_text(text: str, max_chunk_length: int = DEFAULT_MAX_CHUNK_LENGTH) -> list[Chunk]:
    """Split text into ordered ``Chunk`` objects.

    Args:
        text: The text to chunk
        max_chunk_length: Maximum characters per chunk (default: 1000)

    Returns:
        list[Chunk]: Chunks with zero-based sequence indexes
    """
    return [
        Chunk(text=segment, sequence_index=idx)
        for idx, segment in enumerate(split_text(text, max_chunk_length))
    ]
