"""
Extraction error codes

Every code is reported on the result, never raised across the
extraction boundary.
"""

EMPTY_FILE = "EMPTY_FILE"
UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
TABLE_HEADER_NOT_FOUND = "TABLE_HEADER_NOT_FOUND"
NO_DATA_ROWS = "NO_DATA_ROWS"
PDF_EXTRACTION_FAILED = "PDF_EXTRACTION_FAILED"
EXCEL_EXTRACTION_FAILED = "EXCEL_EXTRACTION_FAILED"
TXT_EXTRACTION_FAILED = "TXT_EXTRACTION_FAILED"

ERROR_MESSAGES = {
    EMPTY_FILE: "File is empty",
    UNSUPPORTED_FORMAT: "Unsupported file format",
    TABLE_HEADER_NOT_FOUND: "Could not locate the order table header",
    NO_DATA_ROWS: "No data rows found in file",
    PDF_EXTRACTION_FAILED: "Failed to extract PDF text",
    EXCEL_EXTRACTION_FAILED: "Failed to read Excel file",
    TXT_EXTRACTION_FAILED: "Failed to read text file",
}


def describe(code: str) -> str:
    """Human-readable message for an error code"""
    return ERROR_MESSAGES.get(code, "Extraction failed")
