# ========================
# src/retail_pipeline/orchestrator.py
# ========================

"""
Pipeline Orchestrator Module

Runs Loader -> Deduplicator -> Imputer -> Date Normalizer -> Reporting in
order, handing the table from one stage to the next.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from .ingestion import RecordLoader
from .deduplication import Deduplicator
from .imputation import Imputer
from .date_normalization import DateNormalizer
from .quality import assess_raw_quality, build_quality_report
from .reporting import ReportingEngine
from .storage import DataSaver
from .errors import PipelineError
from ..utils.performance_monitor import monitor_performance
from ..utils.config import Config

logger = logging.getLogger(__name__)

class RetailSalesPipeline:
    """
    Orchestrates the retail sales cleaning pipeline.
    Coordinates loading, cleaning, reporting and storing data.
    """

    def __init__(self,
                 config: Optional[Config] = None,
                 input_file: Optional[str] = None,
                 output_dir: Optional[str] = None,
                 rows: Optional[List[Dict[str, Any]]] = None):
        """
        Initialize the pipeline.

        Args:
            config (Config): Configuration object
            input_file (str): CSV file to load; the built-in dataset is used
                when neither input_file nor rows is given
            output_dir (str): Directory for output files
            rows (list): Raw rows to load instead of a file
        """
        self.config = config or Config()
        self.input_file = input_file or self.config.DEFAULT_INPUT_FILE or None
        self.output_dir = output_dir or self.config.DEFAULT_OUTPUT_DIR
        self.rows = rows

        self.loader = RecordLoader(self.config.SUPPORTED_CATEGORIES)
        self.deduplicator = Deduplicator()
        self.imputer = Imputer(self.config.EMAIL_SENTINEL, self.config.PHONE_SENTINEL)
        self.date_normalizer = DateNormalizer()
        self.saver = DataSaver(self.output_dir)

        self.raw_records: List[Dict[str, Any]] = []
        self.cleaned_records: List[Dict[str, Any]] = []

        logger.info("RetailSalesPipeline initialized:")
        logger.info(f"  Source: {self.source_description}")
        logger.info(f"  Output: {self.output_dir}")

    @property
    def source_description(self) -> str:
        if self.rows is not None:
            return f"{len(self.rows)} in-memory rows"
        return self.input_file or "built-in sample dataset"

    def load(self) -> List[Dict[str, Any]]:
        """Run the Loader stage only."""
        if self.rows is not None:
            return self.loader.load(self.rows)
        if self.input_file:
            return self.loader.load_csv(self.input_file, self.config.DEFAULT_CHUNK_SIZE)
        return self.loader.load_sample()

    def run(self, save: bool = True) -> Dict[str, Any]:
        """
        Execute the complete pipeline from start to finish.

        Args:
            save (bool): Write outputs to the output directory

        Returns:
            dict: Views, quality tables, statistics and saved files

        Raises:
            PipelineError: MalformedInputError or InsufficientDataError;
                nothing is written when either is raised.
        """
        logger.info(f"Starting retail sales pipeline for {self.source_description}...")

        try:
            with monitor_performance("RetailSalesPipeline") as monitor:
                self.raw_records = self.load()
                monitor.add_checkpoint('load', len(self.raw_records))

                raw_quality = assess_raw_quality(self.raw_records)

                # Later stages mutate in place; keep the loaded table intact
                table = self.deduplicator.run(copy.deepcopy(self.raw_records))
                monitor.add_checkpoint('deduplicate', len(table), self.deduplicator.get_statistics())

                table = self.imputer.run(table)
                monitor.add_checkpoint('impute', len(table), self.imputer.get_statistics())

                table = self.date_normalizer.run(table)
                monitor.add_checkpoint('normalize_dates', len(table), self.date_normalizer.get_statistics())
                self.cleaned_records = table

                views = ReportingEngine(self.cleaned_records, self.config).all_views()
                monitor.add_checkpoint('report', len(self.cleaned_records))
        except PipelineError as e:
            logger.error(f"Pipeline aborted: {e}")
            raise

        cleaning_stats = self.get_cleaning_stats()
        quality_report = build_quality_report(self.raw_records, self.cleaned_records, cleaning_stats)

        results = {
            'pipeline_status': 'completed',
            'source': self.source_description,
            'output_directory': self.output_dir,
            'views': views,
            'raw_quality': raw_quality,
            'quality_report': quality_report,
            'cleaning_stats': cleaning_stats,
            'performance': monitor.summary,
            'saved_files': {},
        }

        if save:
            logger.info("Saving pipeline outputs...")
            tables = dict(views)
            tables['raw_quality'] = raw_quality
            tables['quality_report'] = quality_report
            results['saved_files'] = self.saver.save_all_data(
                tables, self.cleaned_records, self._build_summary(results)
            )

        logger.info("Pipeline finished successfully.")
        self._log_final_summary(results)
        return results

    def get_cleaning_stats(self) -> Dict[str, Any]:
        """Merged statistics of the cleaning stages."""
        return {
            'records_loaded': len(self.raw_records),
            **self.deduplicator.get_statistics(),
            **self.imputer.get_statistics(),
            **self.date_normalizer.get_statistics(),
            'records_cleaned': len(self.cleaned_records),
        }

    def _build_summary(self, results: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'pipeline_status': results['pipeline_status'],
            'source': results['source'],
            'cleaning_stats': results['cleaning_stats'],
            'view_row_counts': {name: len(table) for name, table in results['views'].items()},
            'performance': results['performance'],
        }

    def _log_final_summary(self, results: Dict[str, Any]) -> None:
        """Log final pipeline summary."""
        stats = results['cleaning_stats']

        logger.info("=" * 60)
        logger.info("PIPELINE EXECUTION SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Source: {results['source']}")
        logger.info(f"Records loaded: {stats['records_loaded']}")
        logger.info(f"Duplicates removed: {stats['duplicates_removed']}")
        logger.info(f"Records cleaned: {stats['records_cleaned']}")
        logger.info(f"Unrecognized dates: {stats['dates_unrecognized']}")
        logger.info(f"Views computed: {len(results['views'])}")
        for artefact, file_path in results['saved_files'].items():
            logger.info(f"  - {artefact}: {file_path}")
        logger.info("=" * 60)
