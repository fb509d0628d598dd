"""
Customer name resolution, shared by all source formats
"""
from typing import List
import re

from .. import rules
from .token_parser import clean


def clean_customer_name(text: str) -> str:
    """Strip dates and trailing metadata fragments"""
    name = clean(text)
    for pattern in rules.CUSTOMER_CLEANUP_PATTERNS:
        name = pattern.sub("", name).strip()
    return clean(name)


def extract_customer_name(lines: List[str], max_lines: int = 40) -> str:
    """
    Find the ordering customer in the top of a document

    Looks for an explicit label ("Supplier:", "Bill To:" ...) or an
    all-caps name ending in a business suffix such as ENTERPRISES or LTD.

    Args:
        lines: Document lines in order
        max_lines: How many leading lines to scan

    Returns:
        Customer name, or "UNKNOWN CUSTOMER"
    """
    for raw in lines[:max_lines]:
        line = clean(raw)
        if not line or rules.METADATA_PATTERN.match(line):
            continue

        for pattern in (rules.CUSTOMER_LABEL_PATTERN, rules.CUSTOMER_SUFFIX_PATTERN):
            match = pattern.search(line)
            if not match:
                continue
            customer = clean_customer_name(match.group(1))
            if len(customer) > 3 and not re.search(r"\d{10}", customer):
                return customer

    return rules.DEFAULT_CUSTOMER_NAME
