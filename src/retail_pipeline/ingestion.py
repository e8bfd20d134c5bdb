# ========================
# src/retail_pipeline/ingestion.py
# ========================

"""
Data Ingestion Module

Reads raw order rows (built-in literals or CSV) and validates them into
order records. Any field-type violation aborts the load.
"""

import csv
import logging
import re
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .errors import MalformedInputError
from ..utils.sample_data import CSV_COLUMNS, get_sample_orders

logger = logging.getLogger(__name__)

_ORDER_ID_PATTERN = re.compile(r"[+-]?[0-9]+")

class CSVReader:
    """
    A CSV reader that yields rows in chunks so large exports can be
    validated without holding the raw text in memory twice.
    """

    def __init__(self, file_path):
        """
        Initialize the CSV reader.

        Args:
            file_path (str): Path to the CSV file to read
        """
        self.file_path = file_path
        self.header = []
        logger.info(f"Initialized CSVReader for file: {file_path}")

    def read_in_chunks(self, chunk_size):
        """
        A generator that yields a list of dictionaries for each chunk of data.

        Args:
            chunk_size (int): The number of rows to yield per chunk.

        Yields:
            list[dict]: A list of dictionaries representing a chunk of rows.
        """
        try:
            with open(self.file_path, 'r', newline='', encoding='utf-8') as f:
                reader = csv.DictReader(f)
                self.header = reader.fieldnames
                logger.debug(f"CSV header: {self.header}")

                chunk = []
                row_count = 0

                for row in reader:
                    chunk.append(row)
                    row_count += 1

                    if len(chunk) == chunk_size:
                        logger.debug(f"Yielding chunk with {len(chunk)} rows")
                        yield chunk
                        chunk = []

                if chunk:
                    logger.debug(f"Yielding final chunk with {len(chunk)} rows")
                    yield chunk

                logger.info(f"Total rows read: {row_count}")

        except FileNotFoundError:
            logger.error(f"File '{self.file_path}' was not found")
            raise


class RecordLoader:
    """
    Validates raw rows into order records.

    A record is a plain dict with the keys order_id, customer_name, email,
    phone, category, order_date_raw, order_date, revenue, discount_percent
    and imputed_fields.
    """

    def __init__(self, supported_categories: Optional[Iterable[str]] = None):
        """
        Args:
            supported_categories (iterable): Allowed category labels; any
                non-empty label is accepted when omitted.
        """
        self.supported_categories = (
            frozenset(supported_categories) if supported_categories is not None else None
        )
        self.records_loaded = 0

    def load(self, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Validate every row and return the records in input order.

        Raises:
            MalformedInputError: On the first row that violates a constraint.
        """
        records = []
        seen_ids = set()

        for position, row in enumerate(rows, start=1):
            record = self._build_record(row, position)
            if record['order_id'] in seen_ids:
                raise MalformedInputError(
                    "duplicate order identifier", order_id=record['order_id'], field='order_id'
                )
            seen_ids.add(record['order_id'])
            records.append(record)

        self.records_loaded = len(records)
        logger.info(f"Loaded {len(records)} order records")
        return records

    def load_sample(self) -> List[Dict[str, Any]]:
        """Load the built-in sample dataset."""
        return self.load(get_sample_orders())

    def load_csv(self, file_path: str, chunk_size: int = 1000) -> List[Dict[str, Any]]:
        """Load and validate a CSV export with the standard column layout."""
        reader = CSVReader(file_path)
        return self.load(self._iter_csv_rows(reader, chunk_size))

    def _iter_csv_rows(self, reader: CSVReader, chunk_size: int) -> Iterator[Dict[str, Any]]:
        header_checked = False
        try:
            for chunk in reader.read_in_chunks(chunk_size):
                if not header_checked:
                    self._check_header(reader.header)
                    header_checked = True
                for row in chunk:
                    if None in row:
                        raise MalformedInputError(f"row has more cells than the header: {row[None]}",
                                                  order_id=row.get('order_id'))
                    # Empty cells are absent values
                    yield {k: (None if v is None or v.strip() == '' else v.strip()) for k, v in row.items()}
        except UnicodeDecodeError as e:
            logger.error(f"File '{reader.file_path}' is not valid UTF-8: {e}")
            raise MalformedInputError(f"CSV file must be UTF-8 encoded: {e.reason} at byte {e.start}")
        # A header-only or empty file yields no chunks
        if not header_checked:
            self._check_header(reader.header)

    @staticmethod
    def _check_header(header: Optional[List[str]]) -> None:
        if not header:
            raise MalformedInputError("CSV file has no header row")
        missing = [col for col in CSV_COLUMNS if col not in header]
        if missing:
            raise MalformedInputError(f"CSV is missing columns: {', '.join(missing)}")

    def _build_record(self, row: Dict[str, Any], position: int) -> Dict[str, Any]:
        order_id = self._parse_order_id(row.get('order_id'), position)

        customer_name = row.get('customer_name')
        if not isinstance(customer_name, str) or not customer_name.strip():
            raise MalformedInputError("customer name must be non-empty text",
                                      order_id=order_id, field='customer_name')

        category = row.get('category')
        if not isinstance(category, str) or not category.strip():
            raise MalformedInputError("category must be non-empty text",
                                      order_id=order_id, field='category')
        if self.supported_categories is not None and category not in self.supported_categories:
            raise MalformedInputError(f"unknown category {category!r}",
                                      order_id=order_id, field='category')

        raw_date = row.get('order_date')
        if not isinstance(raw_date, str) or not raw_date.strip():
            raise MalformedInputError("order date must be non-empty text",
                                      order_id=order_id, field='order_date')

        revenue = self._parse_number(row.get('revenue'), order_id, 'revenue')
        if revenue is None:
            raise MalformedInputError("revenue is required", order_id=order_id, field='revenue')
        if revenue < 0:
            raise MalformedInputError(f"revenue must be non-negative, got {revenue}",
                                      order_id=order_id, field='revenue')

        discount = self._parse_number(row.get('discount_percent'), order_id, 'discount_percent')
        if discount is not None and not 0.0 <= discount <= 100.0:
            raise MalformedInputError(f"discount must be within [0, 100], got {discount}",
                                      order_id=order_id, field='discount_percent')

        return {
            'order_id': order_id,
            'customer_name': customer_name,
            'email': self._optional_text(row.get('email'), order_id, 'email'),
            'phone': self._optional_text(row.get('phone'), order_id, 'phone'),
            'category': category,
            'order_date_raw': raw_date,
            'order_date': None,
            'revenue': revenue,
            'discount_percent': discount,
            'imputed_fields': [],
        }

    @staticmethod
    def _parse_order_id(value: Any, position: int) -> int:
        if isinstance(value, bool):
            raise MalformedInputError(f"row {position}: order id must be an integer", field='order_id')
        if isinstance(value, int):
            return value
        if isinstance(value, str) and _ORDER_ID_PATTERN.fullmatch(value.strip()):
            return int(value)
        raise MalformedInputError(f"row {position}: order id must be an integer, got {value!r}",
                                  field='order_id')

    @staticmethod
    def _parse_number(value: Any, order_id: int, field: str) -> Optional[float]:
        """Convert a numeric field to float; None stays absent."""
        if value is None:
            return None
        if isinstance(value, bool):
            raise MalformedInputError(f"{field} must be numeric, got {value!r}",
                                      order_id=order_id, field=field)
        try:
            number = float(value)
        except (ValueError, TypeError):
            raise MalformedInputError(f"{field} must be numeric, got {value!r}",
                                      order_id=order_id, field=field)
        if number != number or number in (float('inf'), float('-inf')):
            raise MalformedInputError(f"{field} must be finite, got {value!r}",
                                      order_id=order_id, field=field)
        return number

    @staticmethod
    def _optional_text(value: Any, order_id: int, field: str) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            raise MalformedInputError(f"{field} must be text, got {value!r}",
                                      order_id=order_id, field=field)
        return value
