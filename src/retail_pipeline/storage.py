# ========================
# src/retail_pipeline/storage.py
# ========================

"""
Data Storage Module

Writes report views, the cleaned table and a run summary to an output directory.
"""

import csv
import json
import logging
from datetime import date
from typing import Any, Dict, List, Mapping
from pathlib import Path

from .reporting import ReportTable

logger = logging.getLogger(__name__)

CLEANED_COLUMNS = [
    'order_id', 'customer_name', 'email', 'phone', 'category',
    'order_date_raw', 'order_date', 'revenue', 'discount_percent', 'imputed_fields',
]

class DataSaver:
    """
    Saves pipeline outputs as CSV and JSON files.
    """

    def __init__(self, output_dir: str = "data/processed"):
        """
        Initialize the data saver.

        Args:
            output_dir (str): Directory to save output files
        """
        self.output_dir = Path(output_dir)
        logger.info(f"DataSaver initialized with output directory: {self.output_dir}")

    def save_all_data(self,
                      views: Mapping[str, ReportTable],
                      cleaned_records: List[Dict[str, Any]],
                      summary: Dict[str, Any]) -> Dict[str, str]:
        """
        Save every output of a run.

        Args:
            views (mapping): View name to ReportTable, including quality tables
            cleaned_records (list): Cleaned order records
            summary (dict): JSON-serializable run summary

        Returns:
            dict: Mapping of artefact name to saved file path
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        saved_files = {}

        for name, table in views.items():
            saved_files[name] = self.save_view(table)

        saved_files['cleaned_orders'] = self.save_cleaned_records(cleaned_records)
        saved_files['summary'] = self._save_summary(summary)
        saved_files['data_dictionary'] = self.create_data_dictionary()

        logger.info(f"All data saved successfully to {len(saved_files)} files")
        return saved_files

    def save_view(self, table: ReportTable) -> str:
        """Save one report view as <name>.csv."""
        file_path = self.output_dir / f"{table.name}.csv"
        self._write_csv(file_path, table.columns, table.to_dict()['rows'])
        return str(file_path)

    def save_cleaned_records(self, records: List[Dict[str, Any]]) -> str:
        """Save the cleaned order table; dates as YYYY-MM-DD, empty when absent."""
        file_path = self.output_dir / "cleaned_orders.csv"
        rows = []
        for record in records:
            row = {col: record.get(col) for col in CLEANED_COLUMNS}
            if isinstance(row['order_date'], date):
                row['order_date'] = row['order_date'].isoformat()
            row['imputed_fields'] = ';'.join(record.get('imputed_fields', []))
            rows.append(row)
        self._write_csv(file_path, CLEANED_COLUMNS, rows)
        return str(file_path)

    def _save_summary(self, summary_data: Dict[str, Any]) -> str:
        """Save the run summary as JSON."""
        file_path = self.output_dir / "run_summary.json"

        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(summary_data, f, indent=2, ensure_ascii=False, default=str)

        logger.info(f"Summary saved to {file_path}")
        return str(file_path)

    def _write_csv(self, file_path: Path, headers: List[str], data_items: List[Dict]) -> None:
        """Write data to CSV file."""
        try:
            with open(file_path, 'w', newline='', encoding='utf-8') as f:
                writer = csv.DictWriter(f, fieldnames=headers)
                writer.writeheader()
                writer.writerows(data_items)

            logger.info(f"Saved {len(data_items)} records to {file_path}")

        except OSError as e:
            logger.error(f"Error writing CSV file {file_path}: {e}")
            raise

    def create_data_dictionary(self) -> str:
        """Create a data dictionary explaining all output files."""
        file_path = self.output_dir / "DATA_DICTIONARY.md"

        content = """# Data Dictionary

This document describes the files written by a pipeline run.

## cleaned_orders.csv
One row per order after deduplication, imputation and date normalization.

| Column | Type | Description |
|--------|------|-------------|
| order_id | integer | Unique order identifier |
| customer_name | string | Customer name as recorded |
| email | string | Email, or "not_provided@email.com" when missing |
| phone | string | Phone, or "Not Provided" when missing |
| category | string | Electronics, Clothing or Furniture |
| order_date_raw | string | Order date exactly as received |
| order_date | date | Canonical YYYY-MM-DD date, empty when unrecognized |
| revenue | float | Order revenue |
| discount_percent | float | Discount (0-100); missing values use the mean of recorded discounts |
| imputed_fields | string | Semicolon-separated list of fields that were filled |

## category_summary.csv
Orders, total and average revenue, and share of total revenue per category.

## discount_band_summary.csv
Orders and revenue per discount band: Low (<=10%), Medium (11-20%), High (>20%).

## monthly_trend.csv
Orders and revenue per calendar month (YYYY-MM). Orders without a date are excluded.

## customer_summary.csv
Orders, revenue, average discount, first and latest order date per customer,
with a Repeat Customer / Single Purchase classification.

## value_band_summary.csv
Orders and revenue per order value band: >=2000, 1000-1999, <1000.

## category_month_revenue.csv
Revenue per product category and month.

## business_insights.csv
Headline findings: top category, peak month, loyalty status and discount
range of the highest-revenue order.

## raw_quality.csv / quality_report.csv
Data quality profile before cleaning and the fixes applied by the run.

## run_summary.json
Cleaning statistics and stage timings for the run.
"""

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)

        logger.info(f"Data dictionary created at {file_path}")
        return str(file_path)
