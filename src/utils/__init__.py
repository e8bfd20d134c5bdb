# ========================
# src/utils/__init__.py
# ========================

"""
Utilities Package

Common utilities and helper functions for the retail sales pipeline.
"""

from .config import Config
from .performance_monitor import monitor_performance, PerformanceMonitor
from .logging_setup import setup_logging
from .sample_data import SAMPLE_ORDERS, get_sample_orders, write_sample_dataset

__all__ = [
    'Config',
    'monitor_performance',
    'PerformanceMonitor',
    'setup_logging',
    'SAMPLE_ORDERS',
    'get_sample_orders',
    'write_sample_dataset'
]
