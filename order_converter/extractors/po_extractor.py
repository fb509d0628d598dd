"""
Purchase Order data extractor for line-oriented sources (PDF and TXT)
"""
from typing import Dict, List, Any, Optional
import logging

from .. import errors
from ..config_loader import ConfigLoader
from ..normalizer import create_template_output, create_empty_result
from .customer import extract_customer_name
from .line_classifier import LineClassifier, ParseState, DATA
from .pdf_layout import PdfLayoutReader
from .text_parser import TextParser
from .token_parser import LineParser

logger = logging.getLogger(__name__)


class PurchaseOrderExtractor:
    """Extract order lines from PDF and plain-text purchase orders"""

    def __init__(self, config: Optional[ConfigLoader] = None):
        """
        Initialize PO extractor

        Args:
            config: Configuration (limits, PDF tolerance, scan windows)
        """
        self.config = config or ConfigLoader()
        self.max_pack = int(self.config.get('limits.max_pack', 1000))
        self.customer_lines = int(self.config.get('scan.customer_lines', 40))
        self.classifier = LineClassifier(
            LineParser(max_qty=int(self.config.get('limits.max_order_qty', 10000)))
        )
        self.layout_reader = PdfLayoutReader(
            y_tolerance=float(self.config.get('pdf.row_y_tolerance', 6))
        )
        self.text_parser = TextParser()

    def extract_from_pdf(self, data: bytes) -> Dict[str, Any]:
        """
        Extract PO data from PDF bytes

        Args:
            data: PDF file content

        Returns:
            Extraction result dictionary
        """
        if not data:
            return create_empty_result(errors.EMPTY_FILE)

        try:
            lines = self.layout_reader.read_lines(data)
            logger.info(f"Rebuilt {len(lines)} lines from PDF layout")
            return self.extract_from_lines(lines)
        except Exception as e:
            logger.error(f"PDF extraction failed: {e}", exc_info=True)
            return create_empty_result(errors.PDF_EXTRACTION_FAILED)

    def extract_from_text(self, data: bytes) -> Dict[str, Any]:
        """
        Extract PO data from a TXT indent form

        Args:
            data: Text file content

        Returns:
            Extraction result dictionary
        """
        if not data or not data.strip():
            return create_empty_result(errors.EMPTY_FILE)

        try:
            lines = self.text_parser.parse_txt(data)
            return self.extract_from_lines(lines)
        except Exception as e:
            logger.error(f"TXT extraction failed: {e}", exc_info=True)
            return create_empty_result(errors.TXT_EXTRACTION_FAILED)

    def extract_from_lines(self, lines: List[str]) -> Dict[str, Any]:
        """
        Run the classification state machine over logical lines

        Args:
            lines: Ordered document lines

        Returns:
            Extraction result dictionary
        """
        customer_name = extract_customer_name(lines, self.customer_lines)
        candidates = self.collect_candidates(lines)
        logger.info(f"Customer: {customer_name}, candidate rows: {len(candidates)}")
        return create_template_output(candidates, customer_name, self.max_pack)

    def collect_candidates(self, lines: List[str]) -> List[Dict[str, Any]]:
        """Candidate records in document order"""
        candidates = []
        state = ParseState()

        for line in lines:
            state, tag, record = self.classifier.step(state, line)
            if tag == DATA:
                candidates.append(record)

        return candidates
