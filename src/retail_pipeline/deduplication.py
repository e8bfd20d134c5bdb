# ========================
# src/retail_pipeline/deduplication.py
# ========================

"""
Deduplication Module

Collapses exact duplicate orders, keeping the copy with the lowest order id.
"""

import logging
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

DUPLICATE_KEY_FIELDS = ('customer_name', 'email', 'order_date_raw', 'revenue')


def duplicate_key(record: Dict[str, Any]) -> Tuple:
    """Key on which two orders count as exact duplicates. None matches only None."""
    return tuple(record[field] for field in DUPLICATE_KEY_FIELDS)


def find_duplicates(records: List[Dict[str, Any]]) -> Dict[int, int]:
    """
    Map every discarded order id to the id of the order that survives it.

    The survivor of each key is the record with the smallest order id,
    regardless of where it appears in the input.
    """
    survivors: Dict[Tuple, int] = {}
    for record in records:
        key = duplicate_key(record)
        current = survivors.get(key)
        if current is None or record['order_id'] < current:
            survivors[key] = record['order_id']

    return {
        record['order_id']: survivors[duplicate_key(record)]
        for record in records
        if survivors[duplicate_key(record)] != record['order_id']
    }


def deduplicate(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return the survivors in their original relative order."""
    discarded = find_duplicates(records)
    return [record for record in records if record['order_id'] not in discarded]


class Deduplicator:
    """Pipeline stage wrapper around deduplicate() that keeps removal stats."""

    def __init__(self):
        self.records_in = 0
        self.duplicates_removed = 0
        self.removed: Dict[int, int] = {}

    def run(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self.records_in = len(records)
        self.removed = find_duplicates(records)
        for removed_id, kept_id in sorted(self.removed.items()):
            logger.debug(f"Order {removed_id} is an exact duplicate of order {kept_id}; dropped")

        result = [record for record in records if record['order_id'] not in self.removed]
        self.duplicates_removed = len(self.removed)
        logger.info(f"Deduplication: {len(result)}/{self.records_in} records kept, "
                    f"{self.duplicates_removed} duplicates removed")
        return result

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'records_in': self.records_in,
            'duplicates_removed': self.duplicates_removed,
            'removed_order_ids': sorted(self.removed),
        }
