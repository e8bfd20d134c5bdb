# ========================
# tests/test_reporting.py
# ========================

import unittest
import copy
import sys
import os
from datetime import date
from decimal import Decimal

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.retail_pipeline.ingestion import RecordLoader
from src.retail_pipeline.deduplication import Deduplicator
from src.retail_pipeline.imputation import Imputer
from src.retail_pipeline.date_normalization import DateNormalizer
from src.retail_pipeline.reporting import ReportingEngine, ReportTable, VIEW_NAMES, revenue_share
from src.retail_pipeline.quality import assess_raw_quality, build_quality_report, completeness_percent

def clean_sample():
    """Load and clean the built-in dataset."""
    records = Deduplicator().run(RecordLoader().load_sample())
    Imputer().run(records)
    return DateNormalizer().run(records)

class TestReportingEngine(unittest.TestCase):

    def setUp(self):
        self.records = clean_sample()
        self.engine = ReportingEngine(self.records)

    def test_category_summary(self):
        view = self.engine.category_summary()

        self.assertEqual(view.column('category'), ['Furniture', 'Electronics', 'Clothing'])
        electronics = view.find('category', 'Electronics')
        self.assertEqual(electronics['order_count'], 2)
        self.assertAlmostEqual(electronics['total_revenue'], 4200.00)
        self.assertAlmostEqual(electronics['average_order_value'], 2100.00)
        self.assertEqual(electronics['revenue_share_percent'], 41.18)

        clothing = view.find('category', 'Clothing')
        self.assertEqual(clothing['order_count'], 3)
        self.assertAlmostEqual(clothing['total_revenue'], 1700.00)

    def test_category_shares_sum_to_100(self):
        view = self.engine.category_summary()
        # one rounding step per share
        total = sum(Decimal(str(share)) for share in view.column('revenue_share_percent'))
        self.assertLessEqual(abs(total - 100), Decimal('0.01'))

    def test_category_share_rounds_half_up(self):
        rows = [
            {'order_id': 1, 'customer_name': 'A', 'category': 'Books',
             'order_date': '2024-01-05', 'revenue': 100.0, 'discount_percent': 5},
            {'order_id': 2, 'customer_name': 'B', 'category': 'Toys',
             'order_date': '2024-01-06', 'revenue': 3100.0, 'discount_percent': 5},
        ]
        view = ReportingEngine(RecordLoader().load(rows)).category_summary()

        # 100 / 3200 is exactly 3.125%
        self.assertEqual(view.find('category', 'Books')['revenue_share_percent'], 3.13)
        self.assertEqual(view.find('category', 'Toys')['revenue_share_percent'], 96.88)
        self.assertEqual(revenue_share(Decimal('0'), Decimal('0')), 0.0)

    def test_category_summary_empty_table(self):
        self.assertEqual(len(ReportingEngine([]).category_summary()), 0)

    def test_discount_band_summary(self):
        view = self.engine.discount_band_summary()

        self.assertEqual(view.column('discount_range'), ['High (>20%)', 'Medium (11-20%)', 'Low (<=10%)'])
        medium = view.find('discount_range', 'Medium (11-20%)')
        self.assertEqual(medium['order_count'], 4)
        self.assertAlmostEqual(medium['total_revenue'], 6500.0)
        self.assertAlmostEqual(medium['average_revenue'], 1625.0)
        self.assertAlmostEqual(medium['average_discount'], 16.25)

        low = view.find('discount_range', 'Low (<=10%)')
        self.assertEqual(low['order_count'], 2)
        self.assertAlmostEqual(low['average_discount'], 7.5)

    def test_band_boundaries(self):
        self.assertEqual(self.engine.discount_band(10.0), 'Low (<=10%)')
        self.assertEqual(self.engine.discount_band(10.5), 'Medium (11-20%)')
        self.assertEqual(self.engine.discount_band(20.0), 'Medium (11-20%)')
        self.assertEqual(self.engine.discount_band(20.01), 'High (>20%)')
        self.assertEqual(self.engine.value_band(2000.0), 'High Value (>=2000)')
        self.assertEqual(self.engine.value_band(1000.0), 'Medium Value (1000-1999)')
        self.assertEqual(self.engine.value_band(999.99), 'Regular Value (<1000)')

    def test_monthly_trend(self):
        view = self.engine.monthly_trend()

        self.assertEqual(view.column('month'), ['2023-12', '2024-01', '2024-02', '2024-03', '2024-04'])
        january = view.find('month', '2024-01')
        self.assertEqual(january['month_name'], 'January 2024')
        self.assertEqual(january['order_count'], 2)
        self.assertAlmostEqual(january['total_revenue'], 3500.0)
        self.assertAlmostEqual(january['average_order_value'], 1750.0)

    def test_monthly_trend_excludes_absent_dates(self):
        records = copy.deepcopy(self.records)
        records[0]['order_date'] = None  # order 101, the only December order
        view = ReportingEngine(records).monthly_trend()

        self.assertNotIn('2023-12', view.column('month'))
        self.assertEqual(sum(view.column('order_count')), 6)

    def test_customer_summary(self):
        view = self.engine.customer_summary()

        self.assertEqual(view.column('customer_name'),
                         ['Bob Miller', 'David White', 'Chris Green', 'John Doe', 'Alice Smith', 'Emma Brown'])
        alice = view.find('customer_name', 'Alice Smith')
        self.assertEqual(alice['order_count'], 2)
        self.assertAlmostEqual(alice['total_revenue'], 1000.0)
        self.assertAlmostEqual(alice['average_discount'], 15.0)
        self.assertEqual(alice['first_order'], date(2024, 1, 5))
        self.assertEqual(alice['latest_order'], date(2024, 3, 8))
        self.assertEqual(alice['customer_type'], 'Repeat Customer')
        self.assertEqual(view.find('customer_name', 'John Doe')['customer_type'], 'Single Purchase')

    def test_customer_summary_without_dates(self):
        records = copy.deepcopy(self.records)
        for record in records:
            record['order_date'] = None
        bob = ReportingEngine(records).customer_summary().find('customer_name', 'Bob Miller')
        self.assertIsNone(bob['first_order'])
        self.assertIsNone(bob['latest_order'])

    def test_value_band_summary(self):
        view = self.engine.value_band_summary()

        self.assertEqual(view.column('order_value_band'),
                         ['High Value (>=2000)', 'Medium Value (1000-1999)', 'Regular Value (<1000)'])
        high = view.find('order_value_band', 'High Value (>=2000)')
        self.assertEqual(high['order_count'], 2)
        self.assertAlmostEqual(high['total_revenue'], 5500.0)
        regular = view.find('order_value_band', 'Regular Value (<1000)')
        self.assertEqual(regular['order_count'], 3)
        self.assertAlmostEqual(regular['average_discount'], 35.0 / 3)

    def test_category_month_revenue(self):
        view = self.engine.category_month_revenue()

        self.assertEqual(len(view), 6)
        self.assertEqual(view.rows[0], {'category': 'Clothing', 'month': '2024-01',
                                        'month_name': 'January', 'revenue': 500.0})
        clothing_march = [r for r in view if r['category'] == 'Clothing' and r['month'] == '2024-03']
        self.assertAlmostEqual(clothing_march[0]['revenue'], 1200.0)

    def test_business_insights(self):
        view = self.engine.business_insights()
        insights = {row['insight']: row for row in view}

        self.assertEqual(insights['Top Revenue Category']['value'], 'Furniture')
        self.assertEqual(insights['Top Revenue Category']['detail'], '$4,300.00')
        self.assertEqual(insights['Peak Sales Month']['value'], 'January 2024')
        self.assertEqual(insights['Customer Loyalty Status']['value'], '1 Repeat Purchases')
        self.assertEqual(insights['Customer Loyalty Status']['detail'], 'Alice Smith')
        self.assertEqual(insights['Most Effective Discount Range']['value'], '20% - 20%')

    def test_views_are_deterministic_and_read_only(self):
        before = copy.deepcopy(self.records)
        first = self.engine.all_views()
        second = self.engine.all_views()

        self.assertEqual(list(first), VIEW_NAMES)
        for name in VIEW_NAMES:
            self.assertEqual(first[name], second[name])
        self.assertEqual(self.records, before)

    def test_unknown_view(self):
        with self.assertRaises(KeyError):
            self.engine.view('not_a_view')

    def test_report_table_serialization(self):
        table = self.engine.customer_summary()
        data = table.to_dict()

        self.assertEqual(data['name'], 'customer_summary')
        self.assertEqual(data['columns'], table.columns)
        alice = [row for row in data['rows'] if row['customer_name'] == 'Alice Smith'][0]
        self.assertEqual(alice['first_order'], '2024-01-05')

        text = table.format_text()
        self.assertIn('CUSTOMER SUMMARY', text)
        self.assertIn('Alice Smith', text)
        self.assertIn('(no rows)', ReportTable('empty', ['a'], []).format_text())

class TestDataQuality(unittest.TestCase):

    def test_raw_quality_profile(self):
        view = assess_raw_quality(RecordLoader().load_sample())
        issues = {row['issue']: row for row in view}

        self.assertEqual(issues['Total Records']['count'], 8)
        self.assertEqual(issues['Missing Emails']['count'], 2)
        self.assertEqual(issues['Missing Emails']['details'], 'ID:102-Alice Smith,ID:107-Chris Green')
        self.assertEqual(issues['Missing Phones']['count'], 2)
        self.assertEqual(issues['Missing Discounts']['count'], 2)
        self.assertEqual(issues['Exact Duplicates']['count'], 1)
        self.assertEqual(issues['Exact Duplicates']['details'], 'ID:104 duplicates ID:101')

    def test_quality_report(self):
        raw = RecordLoader().load_sample()
        cleaned = clean_sample()
        stats = {'duplicates_removed': 1, 'emails_filled': 2, 'phones_filled': 2,
                 'discounts_filled': 2, 'dates_unrecognized': 0}
        view = build_quality_report(raw, cleaned, stats)
        metrics = {row['metric']: row['value'] for row in view}

        self.assertEqual(metrics['Original Count'], 8)
        self.assertEqual(metrics['Final Clean Records'], 7)
        self.assertEqual(metrics['Discount Rates'], 2)
        self.assertEqual(metrics['Completeness (%)'], 100.0)

    def test_completeness_counts_absent_dates(self):
        cleaned = clean_sample()
        cleaned[0]['order_date'] = None
        self.assertEqual(completeness_percent(cleaned), round(27 / 28 * 100, 2))
        self.assertEqual(completeness_percent([]), 100.0)

if __name__ == '__main__':
    unittest.main()
