#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Retail Sales Cleaning Pipeline

Runs the pipeline over the built-in dataset (or a CSV export) and prints
every report view.

Usage:
    python main.py [--input FILE] [--output-dir DIR] [--view NAME] [--no-save]
    python main.py --write-sample data/raw/sales_data.csv
"""

import argparse
import sys
import logging

from src.retail_pipeline import RetailSalesPipeline, PipelineError, VIEW_NAMES
from src.utils import Config, setup_logging, write_sample_dataset

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Clean the retail sales dataset and print the report views"
    )
    parser.add_argument("--input", help="CSV file to load instead of the built-in dataset")
    parser.add_argument("--output-dir", help="Directory for CSV/JSON outputs")
    parser.add_argument("--view", action="append", choices=VIEW_NAMES,
                        help="Only print this view (repeatable)")
    parser.add_argument("--no-save", action="store_true", help="Do not write output files")
    parser.add_argument("--write-sample", metavar="FILE",
                        help="Write the built-in dataset as CSV and exit")
    parser.add_argument("--log-level", help="Logging level (default from LOG_LEVEL)")
    return parser

def main(argv=None) -> int:
    """Main execution function."""
    parser = build_parser()
    args = parser.parse_args(argv)
    config = Config()
    if args.log_level:
        config.LOG_LEVEL = args.log_level

    try:
        setup_logging(config, log_file=None if args.no_save else "pipeline.log")
    except ValueError as e:
        parser.error(str(e))
    logger = logging.getLogger(__name__)

    if args.write_sample:
        stats = write_sample_dataset(args.write_sample)
        logger.info(f"Sample data written: {stats}")
        return 0

    try:
        pipeline = RetailSalesPipeline(
            config=config,
            input_file=args.input,
            output_dir=args.output_dir
        )
        results = pipeline.run(save=not args.no_save)
    except PipelineError as e:
        logger.error(f"Pipeline execution failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"Could not read or write pipeline files: {e}")
        return 1

    _print_results(results, args.view or VIEW_NAMES)
    return 0

def _print_results(results: dict, view_names) -> None:
    """Print the data quality tables and the selected views."""
    print("\n" + "=" * 70)
    print("RETAIL SALES PIPELINE RESULTS")
    print("=" * 70)

    print("\n" + results['raw_quality'].format_text())
    for name in view_names:
        print("\n" + results['views'][name].format_text())
    print("\n" + results['quality_report'].format_text())

    if results['saved_files']:
        print("\nGenerated outputs:")
        for artefact, file_path in results['saved_files'].items():
            print(f"   - {artefact}: {file_path}")

    print("=" * 70)

if __name__ == '__main__':
    sys.exit(main())
