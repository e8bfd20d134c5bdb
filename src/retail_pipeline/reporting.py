# ========================
# src/retail_pipeline/reporting.py
# ========================

"""
Reporting Module

Read-only aggregate views over the cleaned order table. Every view is
recomputed from the records on each call and never modifies them.
"""

import logging
from collections import OrderedDict, defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..utils.config import Config

logger = logging.getLogger(__name__)

VIEW_NAMES = [
    'category_summary',
    'discount_band_summary',
    'monthly_trend',
    'customer_summary',
    'value_band_summary',
    'category_month_revenue',
    'business_insights',
]


class ReportTable:
    """A named table: ordered column names plus one dict per row."""

    def __init__(self, name: str, columns: List[str], rows: List[Dict[str, Any]]):
        self.name = name
        self.columns = list(columns)
        self.rows = rows

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ReportTable):
            return NotImplemented
        return (self.name, self.columns, self.rows) == (other.name, other.columns, other.rows)

    def column(self, name: str) -> List[Any]:
        return [row[name] for row in self.rows]

    def find(self, column: str, value: Any) -> Optional[Dict[str, Any]]:
        """First row whose `column` equals `value`, or None."""
        for row in self.rows:
            if row.get(column) == value:
                return row
        return None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form; dates become ISO strings."""
        return {
            'name': self.name,
            'columns': self.columns,
            'rows': [{col: _plain(row.get(col)) for col in self.columns} for row in self.rows],
        }

    def format_text(self) -> str:
        """Render as a fixed-width text table for terminal output."""
        cells = [[_display(row.get(col)) for col in self.columns] for row in self.rows]
        widths = [
            max([len(col)] + [len(line[i]) for line in cells])
            for i, col in enumerate(self.columns)
        ]
        header = "  ".join(col.ljust(w) for col, w in zip(self.columns, widths))
        lines = [self.name.replace('_', ' ').upper(), header, "  ".join('-' * w for w in widths)]
        for line in cells:
            lines.append("  ".join(value.ljust(w) for value, w in zip(line, widths)))
        if not cells:
            lines.append("(no rows)")
        return "\n".join(lines)


def _plain(value: Any) -> Any:
    return value.isoformat() if isinstance(value, date) else value


def _display(value: Any) -> str:
    if value is None:
        return '-'
    if isinstance(value, float):
        return f"{value:,.2f}"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _mean(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _decimal_sum(values: Iterable[float]) -> Decimal:
    return sum((Decimal(str(value)) for value in values), Decimal(0))


def revenue_share(total: Decimal, grand_total: Decimal) -> float:
    """
    Percentage of grand_total, rounded half-up to 2 decimals.

    Revenues are 2-decimal amounts summed as Decimal, so .xx5 ties round up
    the same way DECIMAL arithmetic does.
    """
    if not grand_total:
        return 0.0
    share = total / grand_total * 100
    return float(share.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


class ReportingEngine:
    """
    Computes the fixed battery of reporting views over a cleaned table.

    The engine keeps a reference to the records but only reads them.
    """

    def __init__(self, records: List[Dict[str, Any]], config: Optional[Config] = None):
        self.records = records
        self.config = config or Config()

    def _group(self, key: Callable[[Dict[str, Any]], Any],
               records: Optional[Iterable[Dict[str, Any]]] = None) -> Dict[Any, List[Dict[str, Any]]]:
        groups = defaultdict(list)
        for record in (self.records if records is None else records):
            groups[key(record)].append(record)
        return groups

    def _dated_records(self) -> List[Dict[str, Any]]:
        return [record for record in self.records if record['order_date'] is not None]

    # ------------------------------------------------------------------
    # Band helpers
    # ------------------------------------------------------------------

    def discount_band(self, discount: float) -> str:
        low = self.config.LOW_DISCOUNT_MAX
        medium = self.config.MEDIUM_DISCOUNT_MAX
        if discount <= low:
            return f"Low (<={low:g}%)"
        if discount <= medium:
            return f"Medium ({low + 1:g}-{medium:g}%)"
        return f"High (>{medium:g}%)"

    def value_band(self, revenue: float) -> str:
        high = self.config.HIGH_VALUE_MIN
        medium = self.config.MEDIUM_VALUE_MIN
        if revenue >= high:
            return f"High Value (>={high:g})"
        if revenue >= medium:
            return f"Medium Value ({medium:g}-{high - 1:g})"
        return f"Regular Value (<{medium:g})"

    def _band_rows(self, label_column: str, key: Callable[[Dict[str, Any]], str]) -> List[Dict[str, Any]]:
        rows = []
        for label, members in self._group(key).items():
            revenues = [r['revenue'] for r in members]
            rows.append({
                label_column: label,
                'order_count': len(members),
                'total_revenue': sum(revenues),
                'average_revenue': _mean(revenues),
                'average_discount': _mean([r['discount_percent'] for r in members]),
            })
        rows.sort(key=lambda row: (-row['average_revenue'], row[label_column]))
        return rows

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def category_summary(self) -> ReportTable:
        """Order count, revenue and revenue share per category."""
        grand_total = _decimal_sum(record['revenue'] for record in self.records)
        rows = []
        for category, members in self._group(lambda r: r['category']).items():
            revenues = [r['revenue'] for r in members]
            total = sum(revenues)
            share = revenue_share(_decimal_sum(revenues), grand_total)
            rows.append({
                'category': category,
                'order_count': len(members),
                'total_revenue': total,
                'average_order_value': _mean(revenues),
                'revenue_share_percent': share,
            })
        rows.sort(key=lambda row: (-row['total_revenue'], row['category']))
        return ReportTable(
            'category_summary',
            ['category', 'order_count', 'total_revenue', 'average_order_value', 'revenue_share_percent'],
            rows,
        )

    def discount_band_summary(self) -> ReportTable:
        rows = self._band_rows('discount_range', lambda r: self.discount_band(r['discount_percent']))
        return ReportTable(
            'discount_band_summary',
            ['discount_range', 'order_count', 'total_revenue', 'average_revenue', 'average_discount'],
            rows,
        )

    def monthly_trend(self) -> ReportTable:
        """Orders per calendar month; records without a date are left out."""
        groups = self._group(lambda r: r['order_date'].strftime('%Y-%m'), self._dated_records())
        rows = []
        for month in sorted(groups):
            members = groups[month]
            revenues = [r['revenue'] for r in members]
            rows.append({
                'month': month,
                'month_name': members[0]['order_date'].strftime('%B %Y'),
                'order_count': len(members),
                'total_revenue': sum(revenues),
                'average_order_value': _mean(revenues),
            })
        return ReportTable(
            'monthly_trend',
            ['month', 'month_name', 'order_count', 'total_revenue', 'average_order_value'],
            rows,
        )

    def customer_summary(self) -> ReportTable:
        rows = []
        for name, members in self._group(lambda r: r['customer_name']).items():
            revenues = [r['revenue'] for r in members]
            dates = [r['order_date'] for r in members if r['order_date'] is not None]
            rows.append({
                'customer_name': name,
                'order_count': len(members),
                'total_revenue': sum(revenues),
                'average_order_value': _mean(revenues),
                'average_discount': _mean([r['discount_percent'] for r in members]),
                'first_order': min(dates) if dates else None,
                'latest_order': max(dates) if dates else None,
                'customer_type': 'Repeat Customer' if len(members) > 1 else 'Single Purchase',
            })
        rows.sort(key=lambda row: (-row['total_revenue'], row['customer_name']))
        return ReportTable(
            'customer_summary',
            ['customer_name', 'order_count', 'total_revenue', 'average_order_value',
             'average_discount', 'first_order', 'latest_order', 'customer_type'],
            rows,
        )

    def value_band_summary(self) -> ReportTable:
        rows = self._band_rows('order_value_band', lambda r: self.value_band(r['revenue']))
        return ReportTable(
            'value_band_summary',
            ['order_value_band', 'order_count', 'total_revenue', 'average_revenue', 'average_discount'],
            rows,
        )

    def category_month_revenue(self) -> ReportTable:
        """Revenue per (category, month) pair, for heatmap-style exports."""
        groups = self._group(
            lambda r: (r['category'], r['order_date'].strftime('%Y-%m')), self._dated_records()
        )
        rows = []
        for category, month in sorted(groups):
            members = groups[(category, month)]
            rows.append({
                'category': category,
                'month': month,
                'month_name': members[0]['order_date'].strftime('%B'),
                'revenue': sum(r['revenue'] for r in members),
            })
        return ReportTable('category_month_revenue', ['category', 'month', 'month_name', 'revenue'], rows)

    def business_insights(self) -> ReportTable:
        rows = []

        categories = self.category_summary()
        if categories.rows:
            top = categories.rows[0]
            rows.append({'insight': 'Top Revenue Category', 'value': top['category'],
                         'detail': _money(top['total_revenue'])})

        if self.records:
            top_revenue = max(r['revenue'] for r in self.records)
            top_orders = [r for r in self.records if r['revenue'] == top_revenue]
            discounts = [r['discount_percent'] for r in top_orders]
            rows.append({'insight': 'Most Effective Discount Range',
                         'value': f"{min(discounts):g}% - {max(discounts):g}%",
                         'detail': _money(top_revenue)})

        months = self.monthly_trend()
        if months.rows:
            peak = sorted(months.rows, key=lambda row: (-row['total_revenue'], row['month']))[0]
            rows.append({'insight': 'Peak Sales Month', 'value': peak['month_name'],
                         'detail': _money(peak['total_revenue'])})

        customers = self.customer_summary()
        if customers.rows:
            repeat_purchases = len(self.records) - len(customers.rows)
            repeaters = sorted(row['customer_name'] for row in customers.rows
                               if row['customer_type'] == 'Repeat Customer')
            if repeat_purchases:
                value = f"{repeat_purchases} Repeat Purchases"
                detail = ", ".join(repeaters)
            else:
                value, detail = 'All Single Purchase', ''
            rows.append({'insight': 'Customer Loyalty Status', 'value': value, 'detail': detail})

        return ReportTable('business_insights', ['insight', 'value', 'detail'], rows)

    def view(self, name: str) -> ReportTable:
        """Compute one view by name. Raises KeyError for unknown names."""
        if name not in VIEW_NAMES:
            raise KeyError(f"Unknown view: {name}")
        return getattr(self, name)()

    def all_views(self) -> 'OrderedDict[str, ReportTable]':
        views = OrderedDict((name, self.view(name)) for name in VIEW_NAMES)
        logger.info(f"Computed {len(views)} report views over {len(self.records)} records")
        return views
