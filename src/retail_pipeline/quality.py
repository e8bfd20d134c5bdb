# ========================
# src/retail_pipeline/quality.py
# ========================

"""
Data Quality Module

Profiles the raw table before cleaning and summarizes what cleaning fixed.
"""

import logging
from typing import Any, Dict, List

from .deduplication import find_duplicates
from .reporting import ReportTable

logger = logging.getLogger(__name__)

CHECKED_FIELDS = ('email', 'phone', 'discount_percent')


def _describe(records: List[Dict[str, Any]]) -> str:
    return ",".join(f"ID:{r['order_id']}-{r['customer_name']}" for r in records)


def assess_raw_quality(records: List[Dict[str, Any]]) -> ReportTable:
    """Count missing values and exact duplicates in a freshly loaded table."""
    rows = [{'issue': 'Total Records', 'count': len(records), 'details': 'N/A'}]

    labels = {'email': 'Missing Emails', 'phone': 'Missing Phones', 'discount_percent': 'Missing Discounts'}
    for field in CHECKED_FIELDS:
        missing = [r for r in records if r[field] is None]
        rows.append({'issue': labels[field], 'count': len(missing), 'details': _describe(missing)})

    duplicates = find_duplicates(records)
    details = ",".join(f"ID:{removed} duplicates ID:{kept}" for removed, kept in sorted(duplicates.items()))
    rows.append({'issue': 'Exact Duplicates', 'count': len(duplicates), 'details': details})

    logger.info(f"Raw quality profile: {len(records)} records, {len(duplicates)} exact duplicates")
    return ReportTable('raw_quality', ['issue', 'count', 'details'], rows)


def completeness_percent(records: List[Dict[str, Any]]) -> float:
    """Share of checked fields (email, phone, discount, date) that hold a value."""
    fields = CHECKED_FIELDS + ('order_date',)
    total = len(records) * len(fields)
    if not total:
        return 100.0
    present = sum(1 for r in records for field in fields if r.get(field) is not None)
    return round(present / total * 100, 2)


def build_quality_report(raw_records: List[Dict[str, Any]],
                         cleaned_records: List[Dict[str, Any]],
                         stats: Dict[str, Any]) -> ReportTable:
    """
    Final quality report for a run.

    Args:
        raw_records (list): The table as loaded
        cleaned_records (list): The table after all cleaning stages
        stats (dict): Merged statistics from the cleaning stages
    """
    rows = [
        {'section': 'Records Processed', 'metric': 'Original Count', 'value': len(raw_records)},
        {'section': 'Records Processed', 'metric': 'Duplicates Removed', 'value': stats.get('duplicates_removed', 0)},
        {'section': 'Records Processed', 'metric': 'Final Clean Records', 'value': len(cleaned_records)},
        {'section': 'Missing Data Fixed', 'metric': 'Emails', 'value': stats.get('emails_filled', 0)},
        {'section': 'Missing Data Fixed', 'metric': 'Phone Numbers', 'value': stats.get('phones_filled', 0)},
        {'section': 'Missing Data Fixed', 'metric': 'Discount Rates', 'value': stats.get('discounts_filled', 0)},
        {'section': 'Date Normalization', 'metric': 'Unrecognized Dates', 'value': stats.get('dates_unrecognized', 0)},
        {'section': 'Data Quality Score', 'metric': 'Completeness (%)', 'value': completeness_percent(cleaned_records)},
    ]
    return ReportTable('quality_report', ['section', 'metric', 'value'], rows)
