# ========================
# src/retail_pipeline/__init__.py
# ========================

"""
Retail Sales Pipeline Package

Core components of the retail sales cleaning and reporting pipeline:
- ingestion: CSV / literal loading and record validation
- deduplication: exact-duplicate removal
- imputation: sentinel and mean filling of missing values
- date_normalization: raw date literal lookup
- reporting: aggregate report views
- quality: data quality profile and report
- storage: output management
- orchestrator: pipeline coordination
"""

from .errors import (
    PipelineError,
    MalformedInputError,
    InsufficientDataError,
    UnrecognizedDateFormatError,
)
from .ingestion import CSVReader, RecordLoader
from .deduplication import Deduplicator, deduplicate
from .imputation import Imputer, compute_discount_mean
from .date_normalization import DateNormalizer, normalize_date, KNOWN_DATE_LITERALS
from .reporting import ReportingEngine, ReportTable, VIEW_NAMES
from .storage import DataSaver
from .orchestrator import RetailSalesPipeline

__all__ = [
    'PipelineError',
    'MalformedInputError',
    'InsufficientDataError',
    'UnrecognizedDateFormatError',
    'CSVReader',
    'RecordLoader',
    'Deduplicator',
    'deduplicate',
    'Imputer',
    'compute_discount_mean',
    'DateNormalizer',
    'normalize_date',
    'KNOWN_DATE_LITERALS',
    'ReportingEngine',
    'ReportTable',
    'VIEW_NAMES',
    'DataSaver',
    'RetailSalesPipeline'
]

__version__ = "1.0.0"
