"""
Heuristic rule tables for purchase-order line extraction

Every table in this module is plain data. The line classifier, the token
parser, the spreadsheet column mapper and the pack-size extractor only
consume these tables, so a new customer layout is usually handled by
extending a list here and adding a regression fixture under tests/.
"""
import re
from typing import List, Pattern


def _compile_any(patterns: List[str], anchored: bool = False) -> Pattern:
    body = "|".join(f"(?:{p})" for p in patterns)
    if anchored:
        body = rf"^\s*(?:{body})"
    return re.compile(body, re.IGNORECASE)


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------

# Metadata lines never belong to the table, in any state
METADATA_PREFIXES = [
    r"gstin\b",
    r"gst\s*(?:no|number|#|:)",
    r"pan\s*(?:no\b|:)",
    r"d\.?\s*l\.?\s*no\b",
    r"dl\s*(?:no\b|:)",
    r"drug\s*lic",
    r"lic(?:ense|ence)?\s*no\b",
    r"mob(?:ile)?\b",
    r"phone\b",
    r"ph\s*(?:no\b|:)",
    r"tel\b",
    r"e-?mail\b",
    r"address\b",
    r"fssai\b",
    r"tin\s*(?:no\b|:)",
    r"cin\s*(?:no\b|:)",
    r"state\s*code\b",
]
METADATA_PATTERN = _compile_any(METADATA_PREFIXES, anchored=True)

# Footer/summary lines that end the tabular region
TABLE_STOP_PATTERNS = [
    r"^\s*(?:grand|net|gross|sub)\s*total\b",
    r"^\s*total\b",
    r"\btotal\s*(?:value|order|amount|qty|quantity|items?)\b",
    r"\bnet\s*value\b",
    r"\bend\s+of\s+order\b",
    r"\bdes?patch\b",
    r"\bdispatch\b",
    r"\bauthori[sz]ed\s+signatory\b",
    r"\bterms\s*(?:&|and)?\s*conditions?\b",
    r"^\s*page\s*(?:no\.?\s*)?:?\s*\d+",
    r"\bpage\s+\d+\s+of\s+\d+\b",
    r"\bpowered\s+by\b",
    r"\be\s*&\s*o\.?\s*e\b",
]
TABLE_STOP_PATTERN = _compile_any(TABLE_STOP_PATTERNS)

# Lines consumed without changing state
NOISE_PATTERNS = [
    r"\bcancel",
    r"\bpending\b",
    r"\bauthori[sz]ed\b",
    r"\bsignatory\b",
    r"\bnotes?\s*:",
    r"\bremarks?\b",
    r"\bsplit\s*details\b",
    r"\bcontinued\b",
    r"^[-=_*\s]+$",
]
NOISE_PATTERN = _compile_any(NOISE_PATTERNS)

# Table header keywords (matched as substrings of the lowercased line)
ITEM_HEADER_KEYWORDS = ["item", "product", "desc", "particular", "material", "medicine"]
QTY_HEADER_KEYWORDS = ["qty", "quantity", "order"]

# ---------------------------------------------------------------------------
# Division banners
# ---------------------------------------------------------------------------

DIVISION_LABEL_PATTERN = re.compile(
    r"\b(?:division|divn|company|comapany|branch)\s*(?:name)?\s*[:\-]\s*(.+)$",
    re.IGNORECASE
)
# 2-6 letters plus up to 2 digits, e.g. "CVD", "GENX2"
SHORT_BANNER_PATTERN = re.compile(r"^[A-Z]{2,6}\d{0,2}$")
SHORT_BANNER_LENGTH = (3, 8)
# All-caps phrase without digits
CAPS_PHRASE_PATTERN = re.compile(r"^[A-Z][A-Z&.,'/()\- ]*$")
CAPS_PHRASE_MAX_WORDS = 5
# Keywords that mark a summary/title line, never a banner
BANNER_EXCLUDED_KEYWORDS = re.compile(
    r"\b(?:TOTAL|ORDER|INVOICE|SUMMARY|PURCHASE|INDENT|STATEMENT|DATE|BILL)\b",
    re.IGNORECASE
)
APPROX_VALUE_PATTERN = re.compile(r"\[\s*approx\s*value\s*:.*?\]", re.IGNORECASE)

BUSINESS_SUFFIXES = [
    "ENTERPRISES", "ENTERPRISE", "DISTRIBUTORS", "DISTRIBUTOR", "AGENCIES",
    "AGENCY", "PHARMACEUTICALS", "PHARMA", "PHARMACY", "HEALTHCARE",
    "MEDICALS", "MEDICAL", "MEDICOS", "CHEMISTS", "DRUGS", "TRADERS",
    "TRADING", "STORES", "SURGICALS", "CORPORATION", "LIMITED", "LTD",
    "PVT", "LLP", "INC",
]
BUSINESS_SUFFIX_PATTERN = re.compile(
    r"\b(?:" + "|".join(BUSINESS_SUFFIXES) + r")\b\.?", re.IGNORECASE
)

CITY_BLOCKLIST = {
    "AGRA", "AHMEDABAD", "ALLAHABAD", "AMRITSAR", "BANGALORE", "BENGALURU",
    "BHOPAL", "BHUBANESWAR", "CHANDIGARH", "CHENNAI", "COIMBATORE",
    "DEHRADUN", "DELHI", "NEW DELHI", "GOA", "GURGAON", "GURUGRAM",
    "GUWAHATI", "HYDERABAD", "INDORE", "JAIPUR", "JALANDHAR", "KANPUR",
    "KOCHI", "KOLKATA", "LUCKNOW", "LUDHIANA", "MADURAI", "MEERUT", "MOGA",
    "MUMBAI", "MYSORE", "NAGPUR", "NASHIK", "NOIDA", "PATNA", "PRAYAGRAJ",
    "PUNE", "RAIPUR", "RAJKOT", "RANCHI", "SURAT", "THANE", "VADODARA",
    "VARANASI", "VIJAYAWADA", "VISAKHAPATNAM",
}

# ---------------------------------------------------------------------------
# Token extraction
# ---------------------------------------------------------------------------

SERIAL_PATTERN = re.compile(r"^\d{1,3}[.)]?$")
INTERNAL_CODE_PATTERNS = [
    re.compile(r"^\d{4,8}$"),
    re.compile(r"^[A-Z]{4,6}\d{4}$", re.IGNORECASE),
    re.compile(r"^[A-Z]\d{4,6}$", re.IGNORECASE),
]
NUMERIC_CODE_PATTERN = re.compile(r"^\d+$")
TABLE_START_CODE_PATTERN = re.compile(r"^\d{4,7}(?:\s|$)")
# Numeric tokens that look like codes but are strengths or years
DOSAGE_VALUES = {5, 10, 20, 25, 50, 100, 250, 500, 650, 1000}
YEAR_RANGE = (2000, 2100)

INTEGER_TOKEN_PATTERN = re.compile(r"^\d+$")
PRICE_TOKEN_PATTERN = re.compile(r"^\d*\.\d+$")
FREE_QUALIFIER_PATTERN = re.compile(r"^(?:free|bonus|scheme|schm|sch)$", re.IGNORECASE)
# Free quantity glued to its qualifier, e.g. "+10FREE"
FREE_ANNOTATION_TOKEN_PATTERN = re.compile(r"^\+?\d+(?:free|bonus)$", re.IGNORECASE)

# Applied in order to the raw description span
DESCRIPTION_STRIP_PATTERNS = [
    re.compile(r"\[[^\]]*\]"),
    re.compile(r"\+\s*\d+\s*(?:free|bonus)\b", re.IGNORECASE),
    re.compile(r"\*\s*\d+"),
    re.compile(r"\b(?:strips?|box(?:es)?|bottles?|vials?|packs?)\b", re.IGNORECASE),
]
DESCRIPTION_TRAILING_JUNK = re.compile(r"^[\s\-*,.:;/]+|[\s\-*,.:;/]+$")

BANNED_DESCRIPTION_KEYWORDS = [
    "TOTAL", "SUBTOTAL", "GST", "GSTIN", "CGST", "SGST", "IGST", "TAX",
    "TAXABLE", "DISCOUNT", "AMOUNT", "ROUND OFF", "NET VALUE", "INVOICE",
    "BALANCE", "VAT", "HSN", "BREAKUP",
]
BANNED_DESCRIPTION_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(k) for k in BANNED_DESCRIPTION_KEYWORDS) + r")\b",
    re.IGNORECASE
)

# ---------------------------------------------------------------------------
# Pack-size inference, in priority order. Group 1 is the pack value.
# ---------------------------------------------------------------------------

PACK_SIZE_PATTERNS = [
    ("parenthesized_s", re.compile(r"\(\s*(\d+)\s*['’\"`]?\s*S\s*\)", re.IGNORECASE)),
    ("count_s", re.compile(r"(?<![\d.])(\d+)\s*['’\"`]?\s*S\b", re.IGNORECASE)),
    ("tablets", re.compile(r"(?<![\d.])(\d+)\s*(?:tablets|tabs)\b", re.IGNORECASE)),
    ("capsules", re.compile(r"(?<![\d.])(\d+)\s*(?:capsules|caps)\b", re.IGNORECASE)),
    ("fraction", re.compile(r"(?<![\d.])\d+\s*/\s*(\d+)(?![\d.])")),
    ("ml", re.compile(r"(?<![\d.])(\d+)\s*ml\b", re.IGNORECASE)),
    ("gm", re.compile(r"(?<![\d.])(\d+)\s*gms?\b", re.IGNORECASE)),
]

# ---------------------------------------------------------------------------
# Spreadsheet column mapping (matched on normalized header text)
# ---------------------------------------------------------------------------

DESC_COLUMN_KEYWORDS = ["item", "product", "desc", "particular", "material"]
QTY_COLUMN_KEYWORDS = ["qty", "quantity", "order"]
QTY_COLUMN_EXCLUDED = re.compile(r"free|scheme|schm|bonus|date|\bno\b")
CODE_COLUMN_KEYWORDS = ["sap", "code", "mat"]
CODE_COLUMN_EXCLUDED = re.compile(r"desc|name")
DESC_COLUMN_EXCLUDED = re.compile(r"code|sap|\bno\b|\bid\b")
PACK_COLUMN_KEYWORD = "pack"
BOX_COLUMN_KEYWORD = "box"
DIVISION_COLUMN_PATTERN = re.compile(r"\b(?:dvn|div|division|company)\b")

# ---------------------------------------------------------------------------
# Customer name
# ---------------------------------------------------------------------------

CUSTOMER_LABEL_PATTERN = re.compile(
    r"(?:supplier|party\s*name|buyer|customer(?:\s*name)?|bill\s*to|ship\s*to)\s*[:\-]\s*(.+)",
    re.IGNORECASE
)
CUSTOMER_SUFFIX_PATTERN = re.compile(
    r"^(?:M/S\.?\s*)?([A-Z][A-Z\s&.']*?\b(?:" + "|".join(BUSINESS_SUFFIXES) + r"))\b"
)
CUSTOMER_CLEANUP_PATTERNS = [
    re.compile(r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}"),
    re.compile(r"\b(?:address|gstin|gst|pan|dl\s*no|mob|mobile|email|phone|fssai|tin)[\s:].*", re.IGNORECASE),
    re.compile(r"[,;:\-]+$"),
]
DEFAULT_CUSTOMER_NAME = "UNKNOWN CUSTOMER"
