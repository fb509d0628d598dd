"""
File scanner to find order documents
"""
from pathlib import Path
from typing import List, Dict, Any, Optional
import logging

import PyPDF2

logger = logging.getLogger(__name__)

# Below this many characters on page one a PDF is treated as image-only
MIN_TEXT_CHARS = 100


class FileScanner:
    """Scan a folder (or a single file) for supported order documents"""

    SUPPORTED_EXTENSIONS = {
        '.pdf': 'pdf',
        '.txt': 'text',
        '.xls': 'excel',
        '.xlsx': 'excel'
    }

    def __init__(self, input_path: Path):
        """
        Initialize file scanner

        Args:
            input_path: Attachments folder, or one document
        """
        self.input_path = Path(input_path)

    def scan_files(self, recursive: bool = True) -> List[Dict[str, Any]]:
        """
        Scan for supported files

        Args:
            recursive: Whether to scan subdirectories

        Returns:
            List of file info dictionaries, sorted by path
        """
        files = []

        if not self.input_path.exists():
            logger.error(f"Input path does not exist: {self.input_path}")
            return files

        if self.input_path.is_file():
            candidates = [self.input_path]
        else:
            pattern = "**/*" if recursive else "*"
            candidates = sorted(self.input_path.glob(pattern))

        for file_path in candidates:
            if file_path.is_file() and file_path.suffix.lower() in self.SUPPORTED_EXTENSIONS:
                file_info = self._analyze_file(file_path)
                if file_info:
                    files.append(file_info)

        logger.info(f"Scanned {len(files)} supported files from {self.input_path}")
        return files

    def _analyze_file(self, file_path: Path) -> Optional[Dict[str, Any]]:
        """
        Collect file metadata

        Args:
            file_path: Path to file

        Returns:
            File info dictionary or None if the file cannot be inspected
        """
        try:
            file_ext = file_path.suffix.lower()
            file_type = self.SUPPORTED_EXTENSIONS[file_ext]
            stat = file_path.stat()

            return {
                "path": file_path,
                "filename": file_path.name,
                "extension": file_ext,
                "file_type": file_type,
                "is_scanned": self._is_scanned_file(file_path, file_type),
                "size": stat.st_size,
                "modified_time": stat.st_mtime
            }

        except OSError as e:
            logger.warning(f"Error analyzing file {file_path}: {e}")
            return None

    def _is_scanned_file(self, file_path: Path, file_type: str) -> bool:
        """
        Determine whether a PDF lacks a usable text layer

        Spreadsheets and text files are always digital.
        """
        if file_type != 'pdf':
            return False

        try:
            with open(file_path, 'rb') as f:
                reader = PyPDF2.PdfReader(f)
                if len(reader.pages) == 0:
                    return True
                text = reader.pages[0].extract_text()
                return not (text and len(text.strip()) > MIN_TEXT_CHARS)
        except Exception as e:
            logger.debug(f"Could not read text layer of {file_path.name}: {e}")
            return True

    def filter_scanned(self, files: List[Dict]) -> List[Dict]:
        """PDFs with no text layer (nothing to extract without OCR)"""
        return [f for f in files if f['is_scanned']]
