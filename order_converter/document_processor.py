"""
Document processor - format dispatch and batch orchestration

``extract_document`` is the in-memory entry point: bytes and a file name
in, an extraction result out. ``DocumentProcessor`` wraps it for folders
of attachments, writing results and processing logs.
"""
from pathlib import Path
from typing import Dict, List, Any, Optional
import json
import logging

from . import errors
from .config_loader import ConfigLoader
from .conversion import OrderConverter
from .excel_converter import ExcelConverter
from .extractors.excel_extractor import SpreadsheetExtractor
from .extractors.po_extractor import PurchaseOrderExtractor
from .file_scanner import FileScanner
from .normalizer import create_empty_result
from .utils.logging_utils import ProcessingLogger

logger = logging.getLogger(__name__)

FORMATS = {
    '.pdf': 'pdf',
    '.xls': 'excel',
    '.xlsx': 'excel',
    '.txt': 'text'
}


def select_format(filename: str) -> Optional[str]:
    """Format name for a file name suffix, or None if unsupported"""
    return FORMATS.get(Path(filename or "").suffix.lower())


def extract_document(data: Optional[bytes], filename: str,
                     config: Optional[ConfigLoader] = None) -> Dict[str, Any]:
    """
    Extract order lines from one document

    Args:
        data: Raw file content
        filename: Original file name (selects the extractor)
        config: Configuration; defaults are used when omitted

    Returns:
        Extraction result dictionary; failures are reported in ``error``
    """
    if not data:
        return create_empty_result(errors.EMPTY_FILE)
    fmt = select_format(filename)
    if fmt is None:
        logger.warning(f"Unsupported format: {filename}")
        return create_empty_result(errors.UNSUPPORTED_FORMAT)

    if fmt == 'pdf':
        return PurchaseOrderExtractor(config).extract_from_pdf(data)
    if fmt == 'excel':
        return SpreadsheetExtractor(config).extract(data)
    return PurchaseOrderExtractor(config).extract_from_text(data)


class DocumentProcessor:
    """Batch processing of order attachments"""

    def __init__(self, config: Optional[ConfigLoader] = None):
        """Initialize processor"""
        self.config = config or ConfigLoader()
        self.order_converter = OrderConverter(self.config)
        self.excel_converter = ExcelConverter()

        log_file = Path(self.config.get('paths.log_file', 'Output/ProcessingLog.json'))
        self.processing_logger = ProcessingLogger(log_file)

    def process_file(self, file_info: Dict[str, Any], output_folder: Path,
                     write_excel: bool = False) -> Dict[str, Any]:
        """
        Process a single file

        Args:
            file_info: File information from FileScanner
            output_folder: Where result files are written
            write_excel: Also write the converted order template workbook

        Returns:
            Processing result dictionary
        """
        file_path = Path(file_info['path'])
        filename = file_info['filename']
        file_type = file_info['file_type']
        notes = "Scanned PDF (no text layer)" if file_info.get('is_scanned') else ""

        logger.info(f"Processing: {filename}")

        try:
            data = file_path.read_bytes()
        except OSError as e:
            logger.error(f"Cannot read {filename}: {e}")
            self.processing_logger.log_processing(
                filename, file_type, 'error', error=errors.EMPTY_FILE, notes=str(e)
            )
            return {"status": "error", "filename": filename, "error": errors.EMPTY_FILE}

        result = extract_document(data, filename, self.config)
        customer_name = result["meta"]["customerName"]
        rows_count = len(result["dataRows"])
        warnings_count = len(result["warnings"])

        output_folder = Path(output_folder)
        output_folder.mkdir(parents=True, exist_ok=True)
        output_path = output_folder / f"{file_path.stem}_extracted.json"
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(result, f, indent=2, ensure_ascii=False)

        excel_path = None
        if write_excel and result["dataRows"]:
            converted = self.order_converter.convert_rows(result["dataRows"], result["meta"])
            excel_path = output_folder / f"{file_path.stem}_order.xlsx"
            if not self.excel_converter.write_order_template(converted["rows"], excel_path):
                excel_path = None

        if result["error"]:
            self.processing_logger.log_processing(
                filename, file_type, 'error',
                customer_name=customer_name,
                error=result["error"],
                output_file=str(output_path),
                notes=notes or errors.describe(result["error"])
            )
            return {
                "status": "error",
                "filename": filename,
                "error": result["error"],
                "message": errors.describe(result["error"]),
                "output_file": str(output_path)
            }

        self.processing_logger.log_processing(
            filename, file_type, 'success',
            customer_name=customer_name,
            rows_count=rows_count,
            warnings_count=warnings_count,
            output_file=str(output_path),
            notes=notes
        )
        return {
            "status": "success",
            "filename": filename,
            "customer_name": customer_name,
            "rows_count": rows_count,
            "warnings_count": warnings_count,
            "output_file": str(output_path),
            "excel_file": str(excel_path) if excel_path else None
        }

    def process_folder(self, input_path: Path, output_folder: Optional[Path] = None,
                       write_excel: bool = False) -> Dict[str, Any]:
        """
        Process all supported files under a folder (or one file)

        Args:
            input_path: Attachments folder or a single document
            output_folder: Result folder (defaults to paths.output_folder)
            write_excel: Also write order template workbooks

        Returns:
            Processing statistics
        """
        logger.info(f"Processing: {input_path}")
        output_folder = Path(output_folder or self.config.get('paths.output_folder', 'Output'))

        scanner = FileScanner(input_path)
        files = scanner.scan_files()
        scanned = scanner.filter_scanned(files)
        if scanned:
            logger.warning(f"{len(scanned)} PDF(s) have no text layer and will likely yield no rows")

        results: List[Dict[str, Any]] = []
        for file_info in files:
            results.append(self.process_file(file_info, output_folder, write_excel))

        self.processing_logger.save_logs()

        return {
            "total_files": len(files),
            "scanned_files": [f['filename'] for f in scanned],
            "results": results,
            "statistics": self.processing_logger.get_statistics()
        }
