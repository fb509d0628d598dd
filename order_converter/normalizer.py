"""
Output normalization - map candidate records onto the fixed order template
"""
from typing import Dict, List, Any, Optional
import logging

from . import errors, rules
from .packing import enrich_candidate, row_warnings, DEFAULT_MAX_PACK

logger = logging.getLogger(__name__)

TEMPLATE_COLUMNS = [
    "CODE",
    "CUSTOMER NAME",
    "SAPCODE",
    "ITEMDESC",
    "ORDERQTY",
    "BOX PACK",
    "PACK",
    "DVN"
]
NUMERIC_COLUMNS = ("ORDERQTY", "BOX PACK", "PACK")

# (id, field name, column, confidence when the sample is empty or optional)
FIELD_MANIFEST = [
    ("code", "Code", "CODE", "high"),
    ("customer", "Customer Name", "CUSTOMER NAME", "high"),
    ("sapcode", "SAP Code", "SAPCODE", None),
    ("itemdesc", "Item Description", "ITEMDESC", "high"),
    ("orderqty", "Order Quantity", "ORDERQTY", "high"),
    ("boxpack", "Box Pack", "BOX PACK", "medium"),
    ("pack", "Pack", "PACK", "medium"),
    ("dvn", "Division", "DVN", "medium"),
]


def to_order_line(candidate: Dict[str, Any], customer_name: str) -> Dict[str, Any]:
    """Map one candidate record to the eight template columns"""
    return {
        "CODE": candidate.get("code") or "",
        "CUSTOMER NAME": candidate.get("customer_name") or customer_name or rules.DEFAULT_CUSTOMER_NAME,
        "SAPCODE": candidate.get("internal_code") or "",
        "ITEMDESC": candidate.get("description") or "",
        "ORDERQTY": int(candidate.get("ordered_qty") or 0),
        "BOX PACK": int(candidate.get("box_pack") or 0),
        "PACK": int(candidate.get("pack") or 0),
        "DVN": candidate.get("division") or ""
    }


def create_extracted_fields_metadata(data_rows: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Field-confidence manifest built from the first row"""
    if not data_rows:
        return []

    sample = data_rows[0]
    fields = []
    for field_id, name, column, confidence in FIELD_MANIFEST:
        value = sample.get(column)
        if confidence is None:
            confidence = "high" if value else "medium"
        if value in (None, ""):
            value = 0 if column in NUMERIC_COLUMNS else ""
        fields.append({
            "id": field_id,
            "fieldName": name,
            "sampleValue": str(value),
            "autoMapped": column,
            "confidence": confidence
        })
    return fields


def create_empty_result(error: Optional[str] = None,
                        customer_name: str = rules.DEFAULT_CUSTOMER_NAME) -> Dict[str, Any]:
    """Result carrying no rows, used for every failure"""
    return {
        "meta": {"customerName": customer_name},
        "headers": list(TEMPLATE_COLUMNS),
        "dataRows": [],
        "extractedFields": [],
        "warnings": [],
        "error": error
    }


def create_template_output(candidates: List[Dict[str, Any]],
                           customer_name: str,
                           max_pack: int = DEFAULT_MAX_PACK) -> Dict[str, Any]:
    """
    Enrich candidates and build the extraction result

    Args:
        candidates: Candidate records that passed the line validity gate
        customer_name: Document-level customer name
        max_pack: Largest pack value accepted

    Returns:
        Extraction result dictionary
    """
    if not candidates:
        return create_empty_result(errors.NO_DATA_ROWS, customer_name)

    data_rows = []
    warnings = []
    for idx, candidate in enumerate(candidates):
        row_number = idx + 2
        warnings.extend(row_warnings(row_number, enrich_candidate(candidate, max_pack)))
        data_rows.append(to_order_line(candidate, customer_name))

    logger.info(f"Normalized {len(data_rows)} rows for {customer_name} ({len(warnings)} warnings)")

    return {
        "meta": {"customerName": customer_name},
        "headers": list(TEMPLATE_COLUMNS),
        "dataRows": data_rows,
        "extractedFields": create_extracted_fields_metadata(data_rows),
        "warnings": warnings,
        "error": None
    }
