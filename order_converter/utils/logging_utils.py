"""
Logging utilities for processing tracking
"""
import json
import csv
import logging
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Any, Optional

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    'Timestamp',
    'File Name',
    'File Type',
    'Customer',
    'Rows Extracted',
    'Warnings',
    'Status',
    'Error Code',
    'Output File',
    'Notes'
]


class ProcessingLogger:
    """Structured per-file log of order extraction runs"""

    def __init__(self, log_file: Optional[Path] = None):
        """
        Initialize logger

        Args:
            log_file: Path to JSON log file; a CSV log is kept beside it
        """
        self.log_file = Path(log_file) if log_file else None
        self.logs: List[Dict[str, Any]] = []

        if self.log_file:
            self.csv_log_file = self.log_file.parent / f"{self.log_file.stem}_conversion_log.csv"
            self._init_csv_log()
        else:
            self.csv_log_file = None

    def _init_csv_log(self) -> None:
        """Create the CSV log with headers if it doesn't exist"""
        if self.csv_log_file and not self.csv_log_file.exists():
            self.csv_log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.csv_log_file, 'w', newline='', encoding='utf-8') as f:
                csv.writer(f).writerow(CSV_HEADERS)

    def log_processing(self,
                       filename: str,
                       file_type: str,
                       status: str,
                       customer_name: str = "",
                       rows_count: int = 0,
                       warnings_count: int = 0,
                       error: Optional[str] = None,
                       output_file: Optional[str] = None,
                       notes: str = "") -> None:
        """
        Log a processing event

        Args:
            filename: Source filename
            file_type: Detected file type
            status: Processing status (success, error)
            customer_name: Customer resolved for the document
            rows_count: Order lines extracted
            warnings_count: Pack/box warnings raised
            error: Error code if any
            output_file: Written JSON result path
            notes: Free-text remark (e.g. scanned PDF)
        """
        timestamp = datetime.now().isoformat()

        log_entry = {
            "timestamp": timestamp,
            "filename": filename,
            "file_type": file_type,
            "customer_name": customer_name,
            "rows_count": rows_count,
            "warnings_count": warnings_count,
            "status": status,
            "error": error,
            "output_file": output_file,
            "notes": notes
        }
        self.logs.append(log_entry)

        if self.log_file:
            self.save_logs()
        if self.csv_log_file:
            self._write_csv_entry(log_entry)

        if status == "success":
            logger.info(f"Processed {filename} -> {customer_name} ({rows_count} rows, {warnings_count} warnings)")
        else:
            logger.error(f"Error processing {filename}: {error}")

    def _write_csv_entry(self, entry: Dict[str, Any]) -> None:
        """Append a single entry to the CSV log"""
        self.csv_log_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.csv_log_file, 'a', newline='', encoding='utf-8') as f:
            csv.writer(f).writerow([
                entry["timestamp"],
                entry["filename"],
                entry["file_type"],
                entry["customer_name"],
                entry["rows_count"],
                entry["warnings_count"],
                entry["status"],
                entry["error"] or "",
                entry["output_file"] or "",
                entry["notes"]
            ])

    def save_logs(self) -> None:
        """Save logs to JSON file"""
        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, 'w', encoding='utf-8') as f:
                json.dump(self.logs, f, indent=2, ensure_ascii=False)

    def get_statistics(self) -> Dict[str, Any]:
        """Get processing statistics"""
        total = len(self.logs)
        successful = sum(1 for log in self.logs if log['status'] == 'success')
        errors = sum(1 for log in self.logs if log['status'] == 'error')

        error_codes: Dict[str, int] = {}
        for log in self.logs:
            if log['error']:
                error_codes[log['error']] = error_codes.get(log['error'], 0) + 1

        return {
            "total_files": total,
            "successful": successful,
            "errors": errors,
            "total_rows": sum(log['rows_count'] for log in self.logs),
            "total_warnings": sum(log['warnings_count'] for log in self.logs),
            "error_codes": error_codes,
            "success_rate": (successful / total * 100) if total > 0 else 0
        }
