"""
Plain-text order decoder
"""
import re
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class TextParser:
    """Decode TXT order files into logical lines"""

    ENCODINGS = ['utf-8-sig', 'utf-8', 'cp1252', 'latin-1']

    def __init__(self):
        """Initialize text parser"""
        pass

    def decode(self, data: bytes) -> Optional[str]:
        """
        Decode raw bytes, trying common encodings in turn

        Args:
            data: File content

        Returns:
            Decoded text, or None if no encoding fits
        """
        for encoding in self.ENCODINGS:
            try:
                return data.decode(encoding)
            except UnicodeDecodeError:
                continue
        return None

    def split_lines(self, text: str) -> List[str]:
        """
        Split text into non-empty, whitespace-collapsed lines

        Tab-delimited cells are joined with single spaces.
        """
        lines = []
        for line in re.split(r'\r?\n', text):
            # Skip separator lines
            if re.match(r'^[-=_\s]+$', line):
                continue
            line = re.sub(r'\s+', ' ', line.replace('\t', ' ')).strip()
            if line:
                lines.append(line)
        return lines

    def parse_txt(self, data: bytes) -> List[str]:
        """
        Parse TXT content into lines

        Args:
            data: File content

        Returns:
            Ordered logical lines
        """
        text = self.decode(data)
        if text is None:
            raise ValueError("Could not decode file")
        lines = self.split_lines(text)
        logger.debug(f"Decoded {len(lines)} text lines")
        return lines
