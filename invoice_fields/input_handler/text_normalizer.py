"""
Text Normalizer Module.

Acquired text arrives with whatever line endings and spacing the PDF
text layer, OCR engine or uploader produced. Every extractor works on
the normalized form built here.

Author: ML Engineering Team
"""

import re

from invoice_fields.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class TextNormalizer:
    """
    Collapses whitespace variance and appends the filename.

    Line breaks are preserved because date and amount patterns rely on
    them for label proximity. The filename is always appended, so the
    result is never empty.

    Example:
        >>> TextNormalizer().normalize("Total:\\t $50.00\\r\\n\\r\\n\\r\\n\\r\\nDue", "a.pdf")
        "Total: $50.00\\n\\nDue\\n\\nFilename: a.pdf"
    """

    FILENAME_PREFIX = "Filename: "

    HORIZONTAL_SPACE = re.compile(r'[ \t\f\v\u00a0]+')
    SPACE_AROUND_NEWLINE = re.compile(r' *\n *')
    EXTRA_BLANK_LINES = re.compile(r'\n{3,}')

    def normalize(self, raw: str, filename: str) -> str:
        """
        Normalize acquired text.

        Args:
            raw: Text from acquisition.
            filename: Original filename of the upload.

        Returns:
            Normalized text ending with a "Filename: <name>" line.
        """
        text = (raw or "").replace('\r\n', '\n').replace('\r', '\n')
        text = self.HORIZONTAL_SPACE.sub(' ', text)
        text = self.SPACE_AROUND_NEWLINE.sub('\n', text)
        text = self.EXTRA_BLANK_LINES.sub('\n\n', text)
        text = text.strip()

        filename_line = f"{self.FILENAME_PREFIX}{filename or ''}".rstrip()

        if text:
            normalized = f"{text}\n\n{filename_line}"
        else:
            normalized = filename_line

        logger.debug(f"Normalized text: {len(raw or '')} -> {len(normalized)} characters")
        return normalized
