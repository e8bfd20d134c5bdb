# ========================
# tests/test_pipeline.py
# ========================

import unittest
import contextlib
import io
import json
import logging
import os
import sys
import tempfile
from pathlib import Path
from unittest import mock

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.retail_pipeline.orchestrator import RetailSalesPipeline
from src.retail_pipeline.errors import MalformedInputError, InsufficientDataError
from src.retail_pipeline.reporting import VIEW_NAMES
from src.utils.config import Config
from src.utils.logging_setup import resolve_level, setup_logging
from src.utils.sample_data import get_sample_orders, write_sample_dataset

import main as cli

def _reset_logging():
    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)

class TestRetailSalesPipeline(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.output_dir = os.path.join(self.tmp.name, 'processed')

    def tearDown(self):
        self.tmp.cleanup()

    def test_run_sample_without_saving(self):
        pipeline = RetailSalesPipeline(output_dir=self.output_dir)
        results = pipeline.run(save=False)

        self.assertEqual(results['pipeline_status'], 'completed')
        self.assertEqual(results['source'], 'built-in sample dataset')
        self.assertEqual(list(results['views']), VIEW_NAMES)
        self.assertEqual(results['saved_files'], {})
        self.assertFalse(os.path.exists(self.output_dir))

        stats = results['cleaning_stats']
        self.assertEqual(stats['records_loaded'], 8)
        self.assertEqual(stats['duplicates_removed'], 1)
        self.assertEqual(stats['records_cleaned'], 7)
        self.assertEqual(stats['discount_mean'], 15.0)
        self.assertEqual(stats['dates_unrecognized'], 0)

        electronics = results['views']['category_summary'].find('category', 'Electronics')
        self.assertEqual(electronics['order_count'], 2)
        self.assertAlmostEqual(electronics['total_revenue'], 4200.00)

    def test_raw_table_is_not_mutated_by_cleaning(self):
        pipeline = RetailSalesPipeline(output_dir=self.output_dir)
        pipeline.run(save=False)

        self.assertEqual(len(pipeline.raw_records), 8)
        self.assertIsNone(pipeline.raw_records[1]['email'])
        self.assertIsNone(pipeline.raw_records[1]['order_date'])
        self.assertEqual(pipeline.cleaned_records[1]['email'], 'not_provided@email.com')

    def test_performance_checkpoints(self):
        results = RetailSalesPipeline(output_dir=self.output_dir).run(save=False)
        checkpoints = results['performance']['checkpoints']

        self.assertEqual([c['name'] for c in checkpoints],
                         ['load', 'deduplicate', 'impute', 'normalize_dates', 'report'])
        self.assertEqual(checkpoints[0]['records'], 8)
        self.assertEqual(checkpoints[1]['records'], 7)
        self.assertEqual(checkpoints[0]['metadata'], {})
        self.assertEqual(checkpoints[1]['metadata']['removed_order_ids'], [104])
        self.assertEqual(checkpoints[2]['metadata']['discounts_filled'], 2)
        self.assertEqual(checkpoints[3]['metadata']['dates_unrecognized'], 0)

    def test_run_saves_outputs(self):
        results = RetailSalesPipeline(output_dir=self.output_dir).run(save=True)
        saved = results['saved_files']

        for name in VIEW_NAMES + ['raw_quality', 'quality_report', 'cleaned_orders',
                                  'summary', 'data_dictionary']:
            self.assertIn(name, saved)
            self.assertTrue(Path(saved[name]).exists(), name)

        with open(saved['cleaned_orders'], encoding='utf-8') as f:
            lines = f.read().splitlines()
        self.assertEqual(len(lines), 8)  # header + 7 records
        self.assertIn('2024-01-12', lines[3])

        with open(saved['summary'], encoding='utf-8') as f:
            summary = json.load(f)
        self.assertEqual(summary['cleaning_stats']['records_cleaned'], 7)
        self.assertEqual(summary['view_row_counts']['monthly_trend'], 5)

    def test_csv_input_matches_sample(self):
        input_file = os.path.join(self.tmp.name, 'sales_data.csv')
        write_sample_dataset(input_file)

        from_csv = RetailSalesPipeline(input_file=input_file, output_dir=self.output_dir).run(save=False)
        from_literal = RetailSalesPipeline(output_dir=self.output_dir).run(save=False)

        for name in VIEW_NAMES:
            self.assertEqual(from_csv['views'][name], from_literal['views'][name])

    def test_malformed_input_aborts_without_output(self):
        rows = get_sample_orders()
        rows[3]['revenue'] = 'twelve hundred'
        pipeline = RetailSalesPipeline(rows=rows, output_dir=self.output_dir)

        with self.assertRaises(MalformedInputError) as ctx:
            pipeline.run(save=True)
        self.assertEqual(ctx.exception.order_id, 104)
        self.assertFalse(os.path.exists(self.output_dir))

    def test_insufficient_discount_data_aborts(self):
        rows = get_sample_orders()
        for row in rows:
            row['discount_percent'] = None
        pipeline = RetailSalesPipeline(rows=rows, output_dir=self.output_dir)

        with self.assertRaises(InsufficientDataError):
            pipeline.run(save=True)
        self.assertFalse(os.path.exists(self.output_dir))

    def test_unrecognized_date_is_excluded_from_monthly_trend(self):
        rows = get_sample_orders()
        # 101 and its duplicate 104 share the bad literal
        rows[0]['order_date'] = '99/99/9999'
        rows[3]['order_date'] = '99/99/9999'
        results = RetailSalesPipeline(rows=rows, output_dir=self.output_dir).run(save=False)

        self.assertEqual(results['cleaning_stats']['dates_unrecognized'], 1)
        self.assertNotIn('2023-12', results['views']['monthly_trend'].column('month'))
        john = results['views']['customer_summary'].find('customer_name', 'John Doe')
        self.assertIsNone(john['first_order'])

    def test_category_restriction_from_config(self):
        config = Config({'supported_categories': ['Electronics']})
        with self.assertRaises(MalformedInputError):
            RetailSalesPipeline(config=config, output_dir=self.output_dir).run(save=False)

class TestConfig(unittest.TestCase):

    def test_defaults_are_valid(self):
        config = Config()
        self.assertTrue(all(config.validate_config().values()))
        self.assertEqual(config.EMAIL_SENTINEL, 'not_provided@email.com')

    def test_environment_and_overrides(self):
        with mock.patch.dict(os.environ, {'PHONE_SENTINEL': 'N/A', 'LOW_DISCOUNT_MAX': '30'}):
            config = Config({'log_level': 'DEBUG'})
        self.assertEqual(config.PHONE_SENTINEL, 'N/A')
        self.assertEqual(config.LOG_LEVEL, 'DEBUG')
        self.assertFalse(config.validate_config()['discount_bands'])

    def test_file_round_trip(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'config.json')
            Config({'high_value_min': 5000.0}).save_to_file(path)
            loaded = Config.load_from_file(path)
        self.assertEqual(loaded.HIGH_VALUE_MIN, 5000.0)

class TestLoggingSetup(unittest.TestCase):

    def tearDown(self):
        _reset_logging()

    def test_file_receives_debug_while_console_stays_at_level(self):
        with tempfile.TemporaryDirectory() as tmp:
            config = Config({'log_dir': os.path.join(tmp, 'logs'), 'log_level': 'info'})
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                log_path = setup_logging(config, log_file='pipeline.log')
                logging.getLogger('retail.test').debug("per-record detail")
                logging.getLogger('retail.test').info("stage finished")
            _reset_logging()

            self.assertEqual(log_path, Path(tmp) / 'logs' / 'pipeline.log')
            file_text = log_path.read_text(encoding='utf-8')
            self.assertIn("[DEBUG] retail.test: per-record detail", file_text)
            self.assertIn("[INFO] retail.test: stage finished", file_text)

        self.assertNotIn("per-record detail", out.getvalue())
        self.assertIn("stage finished", out.getvalue())

    def test_console_only_without_log_file(self):
        self.assertIsNone(setup_logging(Config({'log_level': 'WARNING'})))
        root = logging.getLogger()
        self.assertEqual(root.level, logging.WARNING)
        self.assertEqual(len(root.handlers), 1)
        self.assertEqual(logging.getLogger('uvicorn.access').level, logging.WARNING)

    def test_unknown_level_rejected(self):
        self.assertEqual(resolve_level('debug'), logging.DEBUG)
        with self.assertRaises(ValueError):
            resolve_level('LOUD')

class TestCommandLine(unittest.TestCase):

    def tearDown(self):
        _reset_logging()

    def test_prints_selected_view(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            exit_code = cli.main(['--no-save', '--view', 'category_summary'])

        self.assertEqual(exit_code, 0)
        text = out.getvalue()
        self.assertIn('CATEGORY SUMMARY', text)
        self.assertIn('Electronics', text)
        self.assertNotIn('MONTHLY TREND', text)

    def test_write_sample_and_run_from_csv(self):
        with tempfile.TemporaryDirectory() as tmp, \
                mock.patch.dict(os.environ, {'PIPELINE_LOG_DIR': os.path.join(tmp, 'logs')}):
            csv_path = os.path.join(tmp, 'raw', 'sales.csv')
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                self.assertEqual(cli.main(['--write-sample', csv_path]), 0)
                exit_code = cli.main(['--input', csv_path, '--output-dir', os.path.join(tmp, 'out')])
            _reset_logging()

            self.assertEqual(exit_code, 0)
            self.assertTrue(os.path.exists(os.path.join(tmp, 'out', 'category_summary.csv')))
            self.assertTrue(os.path.exists(os.path.join(tmp, 'logs', 'pipeline.log')))

    def test_fatal_error_exit_code(self):
        with tempfile.TemporaryDirectory() as tmp:
            bad_csv = os.path.join(tmp, 'bad.csv')
            with open(bad_csv, 'w', encoding='utf-8') as f:
                f.write("order_id,customer_name\n1,A\n")
            with contextlib.redirect_stdout(io.StringIO()):
                exit_code = cli.main(['--no-save', '--input', bad_csv])

        self.assertEqual(exit_code, 1)

    def test_non_utf8_input_exit_code(self):
        with tempfile.TemporaryDirectory() as tmp:
            latin1_csv = os.path.join(tmp, 'latin1.csv')
            with open(latin1_csv, 'wb') as f:
                f.write(b"order_id,customer_name,email,phone,category,order_date,revenue,discount_percent\n"
                        b"101,Jos\xe9 Ruiz,,,Electronics,12-15-2023,1500.00,10\n")
            with contextlib.redirect_stdout(io.StringIO()):
                exit_code = cli.main(['--no-save', '--input', latin1_csv])

        self.assertEqual(exit_code, 1)

    def test_unknown_log_level_is_usage_error(self):
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as ctx:
            cli.main(['--no-save', '--log-level', 'LOUD'])
        self.assertEqual(ctx.exception.code, 2)

if __name__ == '__main__':
    unittest.main()
