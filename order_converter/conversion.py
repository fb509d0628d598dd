"""
Conversion pass - re-validate (possibly edited) order lines before export
Rejects rows with no description or an out-of-range quantity and
recomputes pack and box pack with the same rules as extraction.
"""
from typing import Dict, List, Any, Optional, Tuple
import logging

from .config_loader import ConfigLoader
from .normalizer import TEMPLATE_COLUMNS
from .packing import reconcile_pack, row_warnings, to_int

logger = logging.getLogger(__name__)

FALLBACK_CUSTOMER_NAME = "UNKNOWN"


class OrderConverter:
    """Validate and enrich template rows for export"""

    def __init__(self, config: Optional[ConfigLoader] = None):
        """
        Initialize order converter

        Args:
            config: Configuration (quantity and pack limits)
        """
        self.config = config or ConfigLoader()
        self.max_qty = int(self.config.get('limits.max_order_qty', 10000))
        self.max_pack = int(self.config.get('limits.max_pack', 1000))

    def validate_row(self, row: Dict[str, Any], idx: int) -> Tuple[Dict[str, Any], List[Dict], List[Dict]]:
        """
        Validate one row and fill in pack / box pack

        Args:
            row: Order line keyed by template column
            idx: 0-based index of the row (reported as idx + 2)

        Returns:
            Tuple of (row copy, errors, warnings)
        """
        row = dict(row)
        row_number = idx + 2

        description = str(row.get("ITEMDESC") or "").strip()
        if len(description) < 2:
            return row, [{"row": row_number, "field": "ITEMDESC",
                          "message": "Missing item description"}], []

        qty = to_int(row.get("ORDERQTY"))
        if qty < 1 or qty > self.max_qty:
            return row, [{"row": row_number, "field": "ORDERQTY",
                          "message": "Invalid quantity"}], []

        pack, box_pack, found = reconcile_pack(
            qty,
            to_int(row.get("PACK")),
            to_int(row.get("BOX PACK")),
            description,
            self.max_pack
        )
        row["ITEMDESC"] = description
        row["ORDERQTY"] = qty
        row["PACK"] = pack
        row["BOX PACK"] = box_pack

        return row, [], row_warnings(row_number, found)

    def convert_rows(self, rows: List[Dict[str, Any]],
                     meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Validate every row and shape the export table

        Args:
            rows: Order lines keyed by template column
            meta: Document metadata (customerName fallback)

        Returns:
            Dict with rows, errors, warnings, recordsProcessed, recordsFailed
        """
        meta = meta or {}
        output = []
        all_errors = []
        all_warnings = []

        for idx, row in enumerate(rows):
            validated, row_errors, warnings = self.validate_row(row, idx)
            if row_errors:
                all_errors.extend(row_errors)
                continue
            all_warnings.extend(warnings)

            output.append({
                "CODE": validated.get("CODE") or "",
                "CUSTOMER NAME": (validated.get("CUSTOMER NAME")
                                  or meta.get("customerName")
                                  or FALLBACK_CUSTOMER_NAME),
                "SAPCODE": validated.get("SAPCODE") or "",
                "ITEMDESC": validated["ITEMDESC"],
                "ORDERQTY": validated["ORDERQTY"],
                "BOX PACK": validated["BOX PACK"],
                "PACK": validated["PACK"],
                "DVN": validated.get("DVN") or ""
            })

        logger.info(f"Converted rows - valid: {len(output)}, errors: {len(all_errors)}, "
                    f"warnings: {len(all_warnings)}")

        return {
            "headers": list(TEMPLATE_COLUMNS),
            "rows": output,
            "errors": all_errors,
            "warnings": all_warnings,
            "recordsProcessed": len(output),
            "recordsFailed": len(all_errors)
        }


def convert_rows(rows: List[Dict[str, Any]],
                 meta: Optional[Dict[str, Any]] = None,
                 config: Optional[ConfigLoader] = None) -> Dict[str, Any]:
    """Convert rows with a default-configured converter"""
    return OrderConverter(config).convert_rows(rows, meta)
