# ========================
# src/utils/sample_data.py
# ========================

"""
Sample Dataset

The fixed retail sales dataset the pipeline was built around, plus a helper
to write it out as CSV for file-based runs.
"""

import csv
import logging
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    'order_id',
    'customer_name',
    'email',
    'phone',
    'category',
    'order_date',
    'revenue',
    'discount_percent',
]

# Missing emails, phones and discounts, mixed date formats and one exact
# duplicate (104 repeats 101) are intentional.
SAMPLE_ORDERS: List[Dict[str, Any]] = [
    {'order_id': 101, 'customer_name': 'John Doe', 'email': 'john@email.com', 'phone': '9876543210',
     'category': 'Electronics', 'order_date': '12/31/2023', 'revenue': 1200.00, 'discount_percent': 10.0},
    {'order_id': 102, 'customer_name': 'Alice Smith', 'email': None, 'phone': '9898989898',
     'category': 'Clothing', 'order_date': '01-05-2024', 'revenue': 500.00, 'discount_percent': None},
    {'order_id': 103, 'customer_name': 'Bob Miller', 'email': 'bob@email.com', 'phone': None,
     'category': 'Electronics', 'order_date': '2024/01/12', 'revenue': 3000.00, 'discount_percent': 20.0},
    {'order_id': 104, 'customer_name': 'John Doe', 'email': 'john@email.com', 'phone': '9876543210',
     'category': 'Electronics', 'order_date': '12/31/2023', 'revenue': 1200.00, 'discount_percent': 10.0},
    {'order_id': 105, 'customer_name': 'David White', 'email': 'david@email.com', 'phone': '9123456789',
     'category': 'Furniture', 'order_date': '02-15-2024', 'revenue': 2500.00, 'discount_percent': 15.0},
    {'order_id': 106, 'customer_name': 'Emma Brown', 'email': 'emma@email.com', 'phone': '9234567890',
     'category': 'Clothing', 'order_date': '2024-03-08', 'revenue': 700.00, 'discount_percent': 5.0},
    {'order_id': 107, 'customer_name': 'Chris Green', 'email': None, 'phone': '9345678901',
     'category': 'Furniture', 'order_date': '04/10/2024', 'revenue': 1800.00, 'discount_percent': 25.0},
    {'order_id': 108, 'customer_name': 'Alice Smith', 'email': 'alice@email.com', 'phone': None,
     'category': 'Clothing', 'order_date': '03-08-2024', 'revenue': 500.00, 'discount_percent': None},
]


def get_sample_orders() -> List[Dict[str, Any]]:
    """Return a fresh copy of the sample rows so callers may mutate them."""
    return [dict(row) for row in SAMPLE_ORDERS]


def write_sample_dataset(file_path: str) -> Dict[str, Any]:
    """
    Write the sample dataset to a CSV file.

    Absent values are written as empty cells, which the CSV loader reads
    back as absent.

    Args:
        file_path (str): Destination CSV path

    Returns:
        dict: Generation statistics
    """
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for row in SAMPLE_ORDERS:
            writer.writerow({k: ('' if v is None else v) for k, v in row.items()})

    missing = {
        field: sum(1 for row in SAMPLE_ORDERS if row[field] is None)
        for field in ('email', 'phone', 'discount_percent')
    }
    logger.info(f"Sample dataset written to {path} ({len(SAMPLE_ORDERS)} rows)")
    return {
        'file_path': str(path),
        'total_rows': len(SAMPLE_ORDERS),
        'missing_values': missing,
    }
