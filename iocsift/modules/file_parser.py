#!/usr/bin/env python3

"""
Module for extracting text from different file types
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path

import pdfplumber
from bs4 import BeautifulSoup
from tqdm import tqdm

from iocsift.modules.exceptions import (
    FileExistenceError,
    FileSizeError,
    HTMLProcessingError,
    PDFProcessingError,
    UnsupportedFileTypeError,
)
from iocsift.modules.logger import get_logger

MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB

EXTENSION_TYPES = {
    ".pdf": "pdf",
    ".html": "html",
    ".htm": "html",
    ".xhtml": "html",
    ".txt": "text",
    ".log": "text",
    ".md": "text",
    ".csv": "text",
    ".json": "text",
    ".xml": "text",
    ".eml": "text",
    ".ioc": "text",
}

logger = get_logger(__name__)


class FileParser(ABC):
    """Abstract base class for all file parsers."""

    def __init__(self, file_path: str, max_size: int = MAX_FILE_SIZE) -> None:
        """
        Initialize the file parser.

        Args:
            file_path: Path to the file to parse
            max_size: Maximum accepted file size in bytes

        Raises:
            FileExistenceError: If the file does not exist
            FileSizeError: If the file is larger than max_size
        """
        self.file_path = file_path

        path = Path(self.file_path)
        if not path.is_file():
            raise FileExistenceError(self.file_path)

        file_size = path.stat().st_size
        if file_size > max_size:
            raise FileSizeError(file_size / 1024 / 1024, max_size / 1024 / 1024)

    @abstractmethod
    def extract_text(self) -> str:
        """
        Extract text from the file.

        Returns:
            The extracted text content
        """


class TextParser(FileParser):
    """Read plain-text files such as logs and reports."""

    def extract_text(self) -> str:
        with Path(self.file_path).open(encoding="utf-8", errors="ignore") as f:
            content = f.read()
        logger.debug("Read %d characters from text file %s", len(content), self.file_path)
        return content


class PDFParser(FileParser):
    """Class for extracting text from PDF files."""

    def extract_text(self) -> str:
        """
        Extract page text and table rows from a PDF file.

        Returns:
            The extracted text content
        """
        logger.info("Extracting text from PDF: %s", self.file_path)

        chunks: list[str] = []
        try:
            with pdfplumber.open(self.file_path) as pdf:
                for page in tqdm(pdf.pages, desc="Processing pages", unit="page", leave=False):
                    chunks.append(str(page.extract_text() or ""))

                    # Tables often hold hash and address lists
                    for table in page.extract_tables() or []:
                        for row in table or []:
                            if row:
                                chunks.append(" ".join(str(cell) for cell in row if cell))
        except Exception as e:
            raise PDFProcessingError(str(e)) from e

        return "\n".join(chunks)


class HTMLParser(FileParser):
    """Class for extracting text from HTML files."""

    def extract_text(self) -> str:
        """
        Extract visible text and link targets from an HTML file.

        Returns:
            The extracted text content
        """
        logger.info("Extracting text from HTML: %s", self.file_path)

        try:
            with Path(self.file_path).open(encoding="utf-8", errors="ignore") as f:
                content = f.read()

            soup = BeautifulSoup(content, "html.parser")

            # Remove scripts and styles that we're not interested in
            for tag in soup(["script", "style", "meta", "noscript", "head"]):
                tag.decompose()

            links = [str(anchor["href"]) for anchor in soup.find_all("a", href=True)]
            text = soup.get_text(separator=" ", strip=True)
        except Exception as e:
            raise HTMLProcessingError(str(e)) from e

        return re.sub(r"\s+", " ", " ".join([text, *links])).strip()


def detect_file_type(file_path: str) -> str:
    """
    Detect the file type from the file extension.

    Args:
        file_path: Path to the file

    Returns:
        'pdf', 'html' or 'text'; unknown extensions are read as text
    """
    return EXTENSION_TYPES.get(Path(file_path).suffix.lower(), "text")


def get_parser(file_path: str, file_type: str | None = None) -> FileParser:
    """
    Return the parser for a file.

    Args:
        file_path: Path to the file
        file_type: Force a specific type ('pdf', 'html' or 'text')

    Returns:
        The appropriate parser for the file type

    Raises:
        UnsupportedFileTypeError: If file_type is not a known type
    """
    parsers: dict[str, type[FileParser]] = {
        "pdf": PDFParser,
        "html": HTMLParser,
        "text": TextParser,
    }
    chosen = file_type or detect_file_type(file_path)
    if chosen not in parsers:
        raise UnsupportedFileTypeError(file_path)
    return parsers[chosen](file_path)
