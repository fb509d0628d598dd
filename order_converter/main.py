"""
Main entry point for the order converter (CLI)
"""
import sys
from pathlib import Path
import argparse
import logging

from .document_processor import DocumentProcessor
from .config_loader import ConfigLoader

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description='Purchase order to order-template converter'
    )
    parser.add_argument(
        '--input', '-i',
        type=str,
        default=None,
        help='Input folder or file (default: paths.input_folder)'
    )
    parser.add_argument(
        '--output', '-o',
        type=str,
        default=None,
        help='Output folder (default: paths.output_folder)'
    )
    parser.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help='Path to a config.json overriding the defaults'
    )
    parser.add_argument(
        '--max-qty',
        type=int,
        default=None,
        help='Override limits.max_order_qty for this run'
    )
    parser.add_argument(
        '--excel', '-x',
        action='store_true',
        help='Also write the converted order template workbook per document'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log per-line decisions'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = ConfigLoader(Path(args.config) if args.config else None)
    if args.max_qty is not None:
        config.set('limits.max_order_qty', args.max_qty)
    input_path = Path(args.input or config.get('paths.input_folder', 'attachments'))

    if not input_path.exists():
        logger.error(f"Input path does not exist: {input_path}")
        sys.exit(1)

    processor = DocumentProcessor(config)
    result = processor.process_folder(input_path, args.output, write_excel=args.excel)

    stats = result['statistics']
    logger.info("=" * 50)
    logger.info("Processing Complete!")
    logger.info(f"Total files: {stats['total_files']}")
    logger.info(f"Successful: {stats['successful']}")
    logger.info(f"Errors: {stats['errors']}")
    for code, count in sorted(stats['error_codes'].items()):
        logger.info(f"  {code}: {count}")
    logger.info(f"Order lines extracted: {stats['total_rows']}")
    logger.info(f"Pack/box warnings: {stats['total_warnings']}")
    if result['scanned_files']:
        logger.info(f"Scanned PDFs: {', '.join(result['scanned_files'])}")
    logger.info(f"Success rate: {stats['success_rate']:.1f}%")
    logger.info("=" * 50)


if __name__ == '__main__':
    main()
