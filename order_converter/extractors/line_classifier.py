"""
Line classification state machine

Walks the logical lines of an order document and tags each one as
metadata, division banner, header, stop, noise or data. The parse state
is an explicit value: every step takes a state and returns a new one.
"""
from typing import Dict, Any, Optional, Tuple
import logging

from .. import rules
from .token_parser import LineParser, clean

logger = logging.getLogger(__name__)

# Line tags
METADATA = "metadata"
DIVISION = "division"
HEADER = "header"
STOP = "stop"
NOISE = "noise"
DATA = "data"
PENDING = "pending"
IGNORED = "ignored"


class ParseState:
    """Cursor over one document: table mode, division context, pending code"""

    OUTSIDE_TABLE = "OUTSIDE_TABLE"
    INSIDE_TABLE = "INSIDE_TABLE"

    __slots__ = ("mode", "current_division", "pending_code")

    def __init__(self, mode: str = OUTSIDE_TABLE, current_division: str = "",
                 pending_code: Optional[str] = None):
        self.mode = mode
        self.current_division = current_division
        self.pending_code = pending_code

    @property
    def inside(self) -> bool:
        return self.mode == self.INSIDE_TABLE

    def replace(self, **changes) -> "ParseState":
        """Copy of this state with some fields changed"""
        values = {
            "mode": self.mode,
            "current_division": self.current_division,
            "pending_code": self.pending_code
        }
        values.update(changes)
        return ParseState(**values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ParseState):
            return NotImplemented
        return (self.mode, self.current_division, self.pending_code) == \
            (other.mode, other.current_division, other.pending_code)

    def __repr__(self) -> str:
        return (f"ParseState({self.mode}, division={self.current_division!r}, "
                f"pending={self.pending_code!r})")


class LineClassifier:
    """Classify purchase-order lines and drive the table state machine"""

    def __init__(self, parser: Optional[LineParser] = None):
        """
        Initialize classifier

        Args:
            parser: Token parser used for data lines
        """
        self.parser = parser or LineParser()

    def is_metadata(self, line: str) -> bool:
        return bool(rules.METADATA_PATTERN.match(line))

    def is_stop_line(self, line: str) -> bool:
        return bool(rules.TABLE_STOP_PATTERN.search(line))

    def is_noise(self, line: str) -> bool:
        return bool(rules.NOISE_PATTERN.search(line))

    def has_header_keywords(self, line: str) -> bool:
        """Line names both an item column and a quantity column"""
        lowered = line.lower()
        return (any(k in lowered for k in rules.ITEM_HEADER_KEYWORDS) and
                any(k in lowered for k in rules.QTY_HEADER_KEYWORDS))

    def is_table_header(self, line: str) -> bool:
        """Header keywords present and no code or quantity token"""
        return self.has_header_keywords(line) and not self.parser.has_data_tokens(line)

    def detect_division(self, line: str) -> Optional[str]:
        """
        Detect a division/company banner

        Args:
            line: Cleaned line

        Returns:
            The cleaned, uppercased division name, or None
        """
        labeled = rules.DIVISION_LABEL_PATTERN.search(line)
        if labeled:
            name = rules.APPROX_VALUE_PATTERN.sub("", labeled.group(1))
            name = clean(name).strip(" :-").upper()
            return name or None

        if self.is_metadata(line) or self.is_stop_line(line) or self.is_noise(line):
            return None
        if self.has_header_keywords(line):
            return None

        candidate = clean(rules.APPROX_VALUE_PATTERN.sub("", line))
        if not candidate:
            return None

        compact = candidate.replace(" ", "")
        min_len, max_len = rules.SHORT_BANNER_LENGTH
        is_short_code = (" " not in candidate and
                         min_len <= len(compact) <= max_len and
                         bool(rules.SHORT_BANNER_PATTERN.match(candidate)))
        is_caps_phrase = (bool(rules.CAPS_PHRASE_PATTERN.match(candidate)) and
                          len(candidate.split(" ")) <= rules.CAPS_PHRASE_MAX_WORDS and
                          sum(c.isalpha() for c in candidate) >= min_len)
        if not (is_short_code or is_caps_phrase):
            return None

        if rules.BUSINESS_SUFFIX_PATTERN.search(candidate):
            return None
        if candidate.upper() in rules.CITY_BLOCKLIST:
            return None
        if rules.BANNER_EXCLUDED_KEYWORDS.search(candidate):
            return None

        return candidate.upper()

    def starts_table(self, line: str) -> Tuple[bool, bool]:
        """
        Table-start detection

        Returns:
            Tuple of (started, reprocess_as_data)
        """
        if self.has_header_keywords(line):
            if self.parser.has_data_tokens(line):
                return True, True
            return True, False
        if rules.TABLE_START_CODE_PATTERN.match(line):
            return True, True
        return False, False

    def step(self, state: ParseState, line: str,
             stop_mode: str = ParseState.OUTSIDE_TABLE) -> Tuple[ParseState, str, Optional[Dict[str, Any]]]:
        """
        Advance the state machine by one line

        Args:
            state: Current parse state
            line: Raw logical line
            stop_mode: Mode entered on a table-stop line

        Returns:
            Tuple of (new state, line tag, candidate record or None)
        """
        line = clean(line)
        if not line:
            return state, IGNORED, None

        if self.is_metadata(line):
            return state, METADATA, None

        division = self.detect_division(line)
        if division:
            logger.debug(f"Division banner: {division}")
            return state.replace(mode=ParseState.INSIDE_TABLE, current_division=division,
                                 pending_code=None), DIVISION, None

        if not state.inside:
            started, as_data = self.starts_table(line)
            if not started:
                return state, IGNORED, None
            state = state.replace(mode=ParseState.INSIDE_TABLE, pending_code=None)
            if not as_data:
                return state, HEADER, None
        elif self.is_stop_line(line):
            return state.replace(mode=stop_mode, pending_code=None), STOP, None

        if self.is_noise(line):
            return state, NOISE, None

        return self._data_step(state, line)

    def _data_step(self, state: ParseState, line: str) -> Tuple[ParseState, str, Optional[Dict[str, Any]]]:
        record = self.parser.parse_line(line)
        if record is None:
            code = self.parser.is_code_only(line)
            if code:
                return state.replace(pending_code=code), PENDING, None
            return state, IGNORED, None

        if not record["internal_code"] and state.pending_code:
            record["internal_code"] = state.pending_code
        record["division"] = state.current_division
        return state.replace(pending_code=None), DATA, record
