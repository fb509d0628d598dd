"""
Token-based order line parser

Turns one cleaned line of a purchase order into a candidate record:
internal code, item description, ordered quantity.
"""
import re
from typing import Dict, List, Any, Optional, Tuple
import logging

from .. import rules
from ..packing import strip_pack_annotations

logger = logging.getLogger(__name__)

QTY_MIN = 1


def clean(text: Any = "") -> str:
    """Collapse whitespace"""
    if text is None:
        return ""
    return re.sub(r"\s+", " ", str(text)).strip()


class LineParser:
    """Decode SAP code, quantity and description from whitespace tokens"""

    def __init__(self, max_qty: int = 10000):
        """
        Initialize line parser

        Args:
            max_qty: Largest ordered quantity accepted as valid
        """
        self.max_qty = max_qty

    def is_internal_code(self, token: str) -> bool:
        """
        Check whether a token has the shape of an internal (SAP-style) code

        Pure numeric matches equal to a common dosage value or a calendar
        year are rejected.
        """
        token = str(token).strip()
        if not any(p.match(token) for p in rules.INTERNAL_CODE_PATTERNS):
            return False
        if rules.NUMERIC_CODE_PATTERN.match(token):
            number = int(token)
            if number in rules.DOSAGE_VALUES:
                return False
            if rules.YEAR_RANGE[0] <= number <= rules.YEAR_RANGE[1]:
                return False
        return True

    def validate_qty(self, value: Any) -> int:
        """Return the quantity if it is in the business-valid range, else 0"""
        token = str(value).strip()
        if not rules.INTEGER_TOKEN_PATTERN.match(token):
            return 0
        qty = int(token)
        return qty if QTY_MIN <= qty <= self.max_qty else 0

    def is_code_only(self, line: str) -> Optional[str]:
        """Return the code when the line is nothing but one internal code"""
        tokens = clean(line).split(" ")
        if len(tokens) == 1 and tokens[0] and self.is_internal_code(tokens[0]):
            return tokens[0].upper()
        return None

    def has_data_tokens(self, line: str) -> bool:
        """True if the line carries a code-shaped or a plausible quantity token"""
        for token in clean(line).split(" "):
            if self.is_internal_code(token) or self.validate_qty(token):
                return True
        return False

    def clean_description(self, text: str) -> str:
        """
        Clean an item description

        Removes bracketed notes, free/bonus annotations, multipliers,
        container words and every pack-size expression, then uppercases.
        Strength units such as ``1 MG`` are part of the product name and
        are kept.
        """
        text = clean(text)
        for pattern in rules.DESCRIPTION_STRIP_PATTERNS:
            text = pattern.sub(" ", text)
        text = strip_pack_annotations(text)
        text = rules.DESCRIPTION_TRAILING_JUNK.sub("", clean(text))
        return text.upper()

    def is_valid_description(self, description: str) -> bool:
        """Validity gate applied to a cleaned description"""
        meaningful = re.sub(r"[^A-Za-z0-9]", "", description)
        if len(meaningful) < 3:
            return False
        if meaningful.isdigit():
            return False
        if description.upper() in rules.CITY_BLOCKLIST:
            return False
        if rules.BANNED_DESCRIPTION_PATTERN.search(description):
            return False
        return True

    def parse_line(self, line: str) -> Optional[Dict[str, Any]]:
        """
        Parse one data line

        Args:
            line: A line from inside the order table

        Returns:
            Candidate record dict, or None if the line is not a valid order line
        """
        line = clean(line)
        if not line:
            return None

        tokens = line.split(" ")
        if len(tokens) < 2:
            return None

        # Leading serial number
        start = 1 if len(tokens) > 3 and rules.SERIAL_PATTERN.match(tokens[0]) else 0

        code = ""
        code_idx = -1
        for i in range(start, len(tokens)):
            if self.is_internal_code(tokens[i]):
                code = tokens[i].upper()
                code_idx = i
                break

        cursor = code_idx + 1 if code_idx >= 0 else start
        qty, qty_idx = self._find_quantity(tokens, cursor)

        if qty_idx < 0 and code_idx > start:
            # Code is really the trailing quantity ("PARA 500 TAB 1200")
            qty = self.validate_qty(tokens[code_idx])
            if qty:
                qty_idx = code_idx
                code, code_idx, cursor = "", -1, start

        if qty_idx < 0:
            return None

        desc_tokens = tokens[cursor:qty_idx]
        if not desc_tokens and code_idx > start:
            desc_tokens = tokens[start:code_idx]
        desc_tokens = self._truncate_at_price(desc_tokens)

        raw_description = " ".join(desc_tokens)
        description = self.clean_description(raw_description)

        if qty <= 0 or not self.is_valid_description(description):
            logger.debug(f"Rejected line: {line}")
            return None

        return {
            "internal_code": code,
            "description": description,
            "raw_description": raw_description,
            "ordered_qty": qty,
            "pack": 0,
            "box_pack": 0
        }

    def _find_quantity(self, tokens: List[str], stop: int) -> Tuple[int, int]:
        """Scan right to left for the ordered quantity, ignoring free/bonus qty"""
        def is_qualifier(idx):
            return 0 <= idx < len(tokens) and bool(rules.FREE_QUALIFIER_PATTERN.match(tokens[idx]))

        for i in range(len(tokens) - 1, stop - 1, -1):
            token = tokens[i]
            if rules.PRICE_TOKEN_PATTERN.match(token):
                continue
            if is_qualifier(i) or rules.FREE_ANNOTATION_TOKEN_PATTERN.match(token):
                continue
            # "FREE 5": number after a qualifier word
            if is_qualifier(i - 1):
                continue
            # "+ 10 FREE" / "10 FREE": number owned by the qualifier that follows it
            if i > 0 and tokens[i - 1] == "+":
                continue
            if is_qualifier(i + 1) and not (
                    i + 2 < len(tokens) and rules.INTEGER_TOKEN_PATTERN.match(tokens[i + 2])):
                continue
            qty = self.validate_qty(token)
            if qty:
                return qty, i
        return 0, -1

    @staticmethod
    def _truncate_at_price(desc_tokens: List[str]) -> List[str]:
        """A decimal number inside the span is a unit price; the name ends there"""
        for i, token in enumerate(desc_tokens):
            if rules.PRICE_TOKEN_PATTERN.match(token):
                return desc_tokens[:i]
        return desc_tokens
