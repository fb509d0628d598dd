"""
Spreadsheet order extractor with header detection and column auto-mapping
"""
import io
import re
from typing import Dict, List, Any, Optional
import logging
import pandas as pd

from .. import errors, rules
from ..config_loader import ConfigLoader
from ..normalizer import create_template_output, create_empty_result
from ..packing import extract_pack_size, to_int
from .customer import extract_customer_name
from .line_classifier import LineClassifier, ParseState, DATA, STOP
from .token_parser import LineParser

logger = logging.getLogger(__name__)

_PACK_PRODUCT = re.compile(r"^\s*\d+\s*[xX*]\s*(\d+)\s*$")


def cell_text(value: Any) -> str:
    """Render a raw cell as trimmed text (``120.0`` becomes ``120``)"""
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:
            return ""
        if value.is_integer():
            return str(int(value))
    return re.sub(r"\s+", " ", str(value)).strip()


def normalize_key(value: Any) -> str:
    """Lowercase header text with punctuation folded to single spaces"""
    return re.sub(r"[^a-z0-9]+", " ", cell_text(value).lower()).strip()


class SpreadsheetExtractor:
    """Extract order lines from the first sheet of an XLS/XLSX workbook"""

    def __init__(self, config: Optional[ConfigLoader] = None):
        """
        Initialize spreadsheet extractor

        Args:
            config: Configuration (limits, scan windows)
        """
        self.config = config or ConfigLoader()
        self.max_qty = int(self.config.get('limits.max_order_qty', 10000))
        self.max_pack = int(self.config.get('limits.max_pack', 1000))
        self.header_rows = int(self.config.get('scan.header_rows', 50))
        self.customer_lines = int(self.config.get('scan.customer_lines', 40))
        self.parser = LineParser(max_qty=self.max_qty)
        self.classifier = LineClassifier(self.parser)

    def extract(self, data: bytes) -> Dict[str, Any]:
        """
        Extract order data from workbook bytes

        Args:
            data: XLS/XLSX file content

        Returns:
            Extraction result dictionary
        """
        if not data:
            return create_empty_result(errors.EMPTY_FILE)

        try:
            rows = self.read_grid(data)
            if not rows:
                return create_empty_result(errors.EMPTY_FILE)
            return self.extract_from_rows(rows)
        except Exception as e:
            logger.error(f"Excel extraction failed: {e}", exc_info=True)
            return create_empty_result(errors.EXCEL_EXTRACTION_FAILED)

    def read_grid(self, data: bytes) -> List[List[Any]]:
        """First sheet as a raw grid, blank rows dropped"""
        df = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=object)
        df = df.fillna("")
        rows = []
        for row in df.values.tolist():
            if any(cell_text(c) for c in row):
                rows.append(list(row))
        logger.debug(f"Read {len(rows)} non-blank rows")
        return rows

    def find_header_row(self, rows: List[List[Any]]) -> int:
        """
        Locate the table header within the scan window

        A header names a description column and a quantity column and
        carries no code-shaped or quantity-like value itself.

        Returns:
            Row index, or -1 if none qualifies
        """
        for i, row in enumerate(rows[:self.header_rows]):
            keys = [normalize_key(c) for c in row]
            has_desc = any(k and any(kw in k for kw in rules.DESC_COLUMN_KEYWORDS) for k in keys)
            has_qty = any(k and any(kw in k for kw in rules.QTY_COLUMN_KEYWORDS) for k in keys)
            if not (has_desc and has_qty):
                continue
            raw = " ".join(cell_text(c) for c in row)
            if self.parser.has_data_tokens(raw):
                continue
            return i
        return -1

    def create_column_mapping(self, header: List[Any]) -> Dict[str, Optional[int]]:
        """
        Map template fields onto header column indexes

        Args:
            header: Raw header row

        Returns:
            Dict of field -> column index (None when unmapped)
        """
        keys = [normalize_key(c) for c in header]

        def first(predicate, exclude=()):
            for idx, key in enumerate(keys):
                if key and idx not in exclude and predicate(key):
                    return idx
            return None

        def has_any(key, keywords):
            return any(kw in key for kw in keywords)

        def is_code_name(key):
            return has_any(key, rules.CODE_COLUMN_KEYWORDS) and not rules.CODE_COLUMN_EXCLUDED.search(key)

        # A bare "Material" column holds the SAP code when a description column exists
        desc = first(lambda k: has_any(k, rules.DESC_COLUMN_KEYWORDS)
                     and not rules.DESC_COLUMN_EXCLUDED.search(k) and not is_code_name(k))
        if desc is None:
            desc = first(lambda k: has_any(k, rules.DESC_COLUMN_KEYWORDS)
                         and not rules.DESC_COLUMN_EXCLUDED.search(k))
        if desc is None:
            desc = first(lambda k: has_any(k, rules.DESC_COLUMN_KEYWORDS))

        qty = first(lambda k: has_any(k, rules.QTY_COLUMN_KEYWORDS)
                    and not rules.QTY_COLUMN_EXCLUDED.search(k), exclude=(desc,))
        taken = (desc, qty)
        code = first(is_code_name, exclude=taken)
        box = first(lambda k: rules.BOX_COLUMN_KEYWORD in k, exclude=taken)
        pack = first(lambda k: rules.PACK_COLUMN_KEYWORD in k
                     and rules.BOX_COLUMN_KEYWORD not in k, exclude=taken)
        division = first(lambda k: bool(rules.DIVISION_COLUMN_PATTERN.search(k)),
                         exclude=taken + (code, pack, box))

        mapping = {
            "description": desc,
            "quantity": qty,
            "code": code,
            "pack": pack,
            "box": box,
            "division": division
        }
        logger.info(f"Column mapping: {mapping}")
        return mapping

    def extract_from_rows(self, rows: List[List[Any]]) -> Dict[str, Any]:
        """
        Extract from a raw grid

        Args:
            rows: Non-blank rows of the first sheet

        Returns:
            Extraction result dictionary
        """
        header_idx = self.find_header_row(rows)

        if header_idx < 0:
            logger.warning("No header row found - parsing every row heuristically")
            lines = [" ".join(cell_text(c) for c in row if cell_text(c)) for row in rows]
            customer_name = extract_customer_name(lines, self.customer_lines)
            candidates = self._collect_heuristic(lines)
            if not candidates:
                return create_empty_result(errors.TABLE_HEADER_NOT_FOUND, customer_name)
            return create_template_output(candidates, customer_name, self.max_pack)

        meta_lines = [" ".join(cell_text(c) for c in row if cell_text(c)) for row in rows[:header_idx]]
        customer_name = extract_customer_name(meta_lines, self.customer_lines)
        mapping = self.create_column_mapping(rows[header_idx])
        candidates = self._collect_mapped(rows[header_idx + 1:], mapping)
        logger.info(f"Header at row {header_idx}, candidate rows: {len(candidates)}")
        return create_template_output(candidates, customer_name, self.max_pack)

    def _collect_heuristic(self, lines: List[str]) -> List[Dict[str, Any]]:
        # The whole grid is treated as table content
        candidates = []
        state = ParseState(mode=ParseState.INSIDE_TABLE)
        for line in lines:
            state, tag, record = self.classifier.step(state, line)
            if tag == STOP:
                break
            if tag == DATA:
                candidates.append(record)
        return candidates

    def _collect_mapped(self, rows: List[List[Any]], mapping: Dict[str, Optional[int]]) -> List[Dict[str, Any]]:
        candidates = []
        division = ""
        pending_code = None

        for row in rows:
            texts = [cell_text(c) for c in row]
            non_empty = [t for t in texts if t]
            if not non_empty:
                continue
            line = " ".join(non_empty)

            if self.classifier.is_metadata(line):
                continue

            if len(non_empty) == 1:
                banner = self.classifier.detect_division(line)
                if banner:
                    division = banner
                    pending_code = None
                    continue

            if self.classifier.is_stop_line(line):
                # Totals reached; nothing below is order data
                break
            if self.classifier.is_noise(line):
                continue

            desc_text = self._cell(texts, mapping["description"])
            qty_text = self._cell(texts, mapping["quantity"])
            if desc_text and qty_text:
                record = self._record_from_columns(row, texts, mapping)
            else:
                record = self.parser.parse_line(line)
                if record is None:
                    code = self.parser.is_code_only(line)
                    if code:
                        pending_code = code
                    continue

            if record is None:
                continue

            if not record["internal_code"] and pending_code:
                record["internal_code"] = pending_code
            pending_code = None
            if not record.get("division"):
                record["division"] = division
            candidates.append(record)

        return candidates

    def _record_from_columns(self, row: List[Any], texts: List[str],
                             mapping: Dict[str, Optional[int]]) -> Optional[Dict[str, Any]]:
        qty_idx = mapping["quantity"]
        qty = to_int(row[qty_idx]) if qty_idx < len(row) else 0
        if qty < 1 or qty > self.max_qty:
            return None

        raw_description = self._cell(texts, mapping["description"])
        description = self.parser.clean_description(raw_description)
        if not self.parser.is_valid_description(description):
            return None

        return {
            "internal_code": self._cell(texts, mapping["code"]).upper(),
            "description": description,
            "raw_description": raw_description,
            "ordered_qty": qty,
            "pack": self._pack_value(self._cell(texts, mapping["pack"])),
            "box_pack": to_int(self._cell(texts, mapping["box"])),
            "division": self._cell(texts, mapping["division"]).upper()
        }

    def _pack_value(self, text: str) -> int:
        if not text:
            return 0
        product = _PACK_PRODUCT.match(text)
        if product:
            return int(product.group(1))
        return extract_pack_size(text, self.max_pack) or to_int(text)

    @staticmethod
    def _cell(texts: List[str], idx: Optional[int]) -> str:
        if idx is None or idx >= len(texts):
            return ""
        return texts[idx]
