# ========================
# src/utils/performance_monitor.py
# ========================

"""
Performance Monitoring Utilities

Tracks per-stage timing and process memory for a pipeline run.
"""

import time
import os
import logging
from contextlib import contextmanager
from typing import Dict, Any, List, Optional

import psutil

logger = logging.getLogger(__name__)

class PerformanceMonitor:
    """
    Performance monitoring utility for the pipeline.
    Records a checkpoint after every stage with elapsed time, memory and
    the number of records the stage produced.
    """

    def __init__(self, name: str = "Pipeline"):
        """
        Initialize performance monitor.

        Args:
            name (str): Name for this monitoring session
        """
        self.name = name
        self.start_time = None
        self.end_time = None
        self.peak_memory_mb = 0.0
        self.checkpoints: List[Dict[str, Any]] = []
        self._last_mark = None
        self.summary: Dict[str, Any] = {}

        logger.debug(f"PerformanceMonitor initialized: {name}")

    def start_monitoring(self) -> None:
        """Start performance monitoring."""
        self.start_time = time.perf_counter()
        self._last_mark = self.start_time
        self.peak_memory_mb = self._get_memory_usage_mb()

        logger.info(f"{self.name} - Performance monitoring started")
        logger.debug(f"Initial memory usage: {self.peak_memory_mb:.2f} MB")

    def add_checkpoint(self, name: str, records: Optional[int] = None,
                       metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Record the end of a stage.

        Args:
            name (str): Stage name
            records (int): Records remaining after the stage
            metadata (dict): Stage statistics, e.g. counters from get_statistics()
        """
        now = time.perf_counter()
        memory_mb = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, memory_mb)

        checkpoint = {
            'name': name,
            'stage_seconds': now - (self._last_mark or now),
            'memory_mb': memory_mb,
            'records': records,
            'metadata': metadata or {}
        }
        self._last_mark = now
        self.checkpoints.append(checkpoint)
        logger.debug(f"Checkpoint '{name}': {checkpoint}")

    def stop_monitoring(self) -> Dict[str, Any]:
        """
        Stop monitoring and return performance summary.

        Returns:
            dict: Performance statistics
        """
        self.end_time = time.perf_counter()
        total_time = self.end_time - self.start_time if self.start_time else 0

        summary = {
            'name': self.name,
            'total_processing_time_seconds': total_time,
            'peak_memory_usage_mb': self.peak_memory_mb,
            'checkpoints': self.checkpoints
        }

        logger.info(
            f"{self.name} - Finished in {total_time:.4f}s, "
            f"{len(self.checkpoints)} stages, peak memory {self.peak_memory_mb:.2f} MB"
        )
        return summary

    def _get_memory_usage_mb(self) -> float:
        """Get current resident memory in MB."""
        process = psutil.Process(os.getpid())
        return process.memory_info().rss / (1024 * 1024)

@contextmanager
def monitor_performance(name: str = "Pipeline"):
    """
    Context manager for easy performance monitoring.

    Args:
        name (str): Name for this monitoring session

    Yields:
        PerformanceMonitor: Monitor instance
    """
    monitor = PerformanceMonitor(name)
    monitor.start_monitoring()
    try:
        yield monitor
    finally:
        monitor.summary = monitor.stop_monitoring()
