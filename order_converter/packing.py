"""
Pack-size inference and box-pack reconciliation

Shared by the extractors (initial enrichment) and by the conversion pass
that re-validates user-edited rows, so both apply the same formula.
"""
from collections import Counter
from typing import Dict, List, Tuple
import re
import logging

from . import rules

logger = logging.getLogger(__name__)

DEFAULT_MAX_PACK = 1000
_LEADING_NUMBER = re.compile(r"^(-?\d+(?:\.\d+)?)(?![\d.])")


def extract_pack_size(description: str, max_pack: int = DEFAULT_MAX_PACK) -> int:
    """
    Infer the pack size from a product description

    All matches of every pattern are collected; the value seen most often
    wins, ties going to the higher-priority pattern and then to the
    earliest position in the text.

    Args:
        description: Raw or cleaned item description
        max_pack: Largest pack value accepted

    Returns:
        Pack size, or 0 if none could be inferred
    """
    if not description:
        return 0

    counts = Counter()
    first_seen: Dict[int, Tuple[int, int]] = {}

    for priority, (_, pattern) in enumerate(rules.PACK_SIZE_PATTERNS):
        for match in pattern.finditer(description):
            value = int(match.group(1))
            if value <= 0 or value > max_pack:
                continue
            counts[value] += 1
            rank = (priority, match.start())
            if value not in first_seen or rank < first_seen[value]:
                first_seen[value] = rank

    if not counts:
        return 0

    return min(counts, key=lambda v: (-counts[v], first_seen[v]))


def strip_pack_annotations(text: str) -> str:
    """Remove every pack-size expression from text"""
    # Each pass shortens the text, so this terminates
    while True:
        stripped = text
        for _, pattern in rules.PACK_SIZE_PATTERNS:
            stripped = pattern.sub(" ", stripped)
        stripped = " ".join(stripped.split())
        if stripped == text:
            return stripped
        text = stripped


def calc_box_pack(qty: int, pack: int) -> int:
    """Number of boxes implied by a unit quantity"""
    if not qty or not pack or pack <= 0:
        return 0
    return int(qty) // int(pack)


def to_int(value, default: int = 0) -> int:
    """
    Read an integer out of a cell or token

    Whole floats (``120.0``) are accepted, fractional ones are not.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or not value.is_integer():
            return default
        return int(value)

    match = _LEADING_NUMBER.match(str(value).strip().replace(",", ""))
    if not match:
        return default
    number = float(match.group(1))
    if not number.is_integer():
        return default
    return int(number)


def reconcile_pack(qty: int,
                   pack: int,
                   box_pack: int,
                   description: str,
                   max_pack: int = DEFAULT_MAX_PACK) -> Tuple[int, int, List[Tuple[str, str]]]:
    """
    Fill in the pack and recompute the box pack

    Box pack is derived by formula whenever the pack is known; a recorded
    value that disagrees is corrected. Running this twice is a no-op.

    Args:
        qty: Ordered unit quantity
        pack: Explicit pack size (0 when unknown)
        box_pack: Recorded box pack (0 when absent)
        description: Item description to infer the pack from
        max_pack: Largest pack value accepted

    Returns:
        Tuple of (pack, box_pack, warnings) where warnings are (field, message)
    """
    warnings = []

    if pack < 0 or pack > max_pack:
        pack = 0
    if pack == 0:
        pack = extract_pack_size(description, max_pack)
        if pack > 0:
            warnings.append(("PACK", f"Auto-extracted: {pack}"))

    if pack > 0 and qty > 0:
        expected = calc_box_pack(qty, pack)
        if box_pack != expected:
            if box_pack > 0:
                warnings.append(("BOX PACK", f"Corrected: {expected} (was {box_pack})"))
            else:
                warnings.append(("BOX PACK", f"Calculated: {expected}"))
            box_pack = expected
    elif pack == 0:
        box_pack = 0

    return pack, box_pack, warnings


def row_warnings(row_number: int, warnings: List[Tuple[str, str]]) -> List[Dict[str, object]]:
    """Attach a sheet row number to (field, message) warnings"""
    return [
        {"row": row_number, "field": field, "message": message}
        for field, message in warnings
    ]


def enrich_candidate(candidate: Dict[str, object],
                     max_pack: int = DEFAULT_MAX_PACK) -> List[Tuple[str, str]]:
    """
    Apply pack inference and box reconciliation to a candidate in place

    The pack is inferred from the raw description span when present, so
    annotations that cleaning removes still count.

    Returns:
        The (field, message) warnings raised for this candidate
    """
    source = candidate.get("raw_description") or candidate.get("description", "")
    pack, box_pack, warnings = reconcile_pack(
        to_int(candidate.get("ordered_qty")),
        to_int(candidate.get("pack")),
        to_int(candidate.get("box_pack")),
        str(source),
        max_pack
    )
    candidate["pack"] = pack
    candidate["box_pack"] = box_pack
    if warnings:
        logger.debug(f"Pack reconciliation for '{candidate.get('description')}': {warnings}")
    return warnings
