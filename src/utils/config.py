# ========================
# src/utils/config.py
# ========================

"""
Configuration Management

Centralized configuration for the retail sales pipeline with environment support.
"""

import os
from typing import Dict, Any, Optional

class Config:
    """
    Configuration class for the retail sales pipeline.
    Supports environment variables and default values.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict (dict): Optional configuration overrides
        """
        # Ingestion
        self.DEFAULT_CHUNK_SIZE = int(os.getenv('PIPELINE_CHUNK_SIZE', '1000'))

        # File Paths
        self.DEFAULT_INPUT_FILE = os.getenv('PIPELINE_INPUT_FILE', '')
        self.DEFAULT_OUTPUT_DIR = os.getenv('PIPELINE_OUTPUT_DIR', 'data/processed')
        self.LOG_DIR = os.getenv('PIPELINE_LOG_DIR', 'logs')

        # Imputation Sentinels
        self.EMAIL_SENTINEL = os.getenv('EMAIL_SENTINEL', 'not_provided@email.com')
        self.PHONE_SENTINEL = os.getenv('PHONE_SENTINEL', 'Not Provided')

        # Allowed product categories
        self.SUPPORTED_CATEGORIES = ['Electronics', 'Clothing', 'Furniture']

        # Reporting Band Thresholds
        self.LOW_DISCOUNT_MAX = float(os.getenv('LOW_DISCOUNT_MAX', '10'))
        self.MEDIUM_DISCOUNT_MAX = float(os.getenv('MEDIUM_DISCOUNT_MAX', '20'))
        self.HIGH_VALUE_MIN = float(os.getenv('HIGH_VALUE_MIN', '2000'))
        self.MEDIUM_VALUE_MIN = float(os.getenv('MEDIUM_VALUE_MIN', '1000'))

        # API Settings
        self.API_PORT = int(os.getenv('API_PORT', '8000'))

        # Logging Configuration
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

        # Override with provided config
        if config_dict:
            self._update_from_dict(config_dict)

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        for key, value in config_dict.items():
            if hasattr(self, key.upper()):
                setattr(self, key.upper(), value)

    def validate_config(self) -> Dict[str, bool]:
        """
        Validate configuration values.

        Returns:
            dict: Validation results for each setting
        """
        validations = {}

        validations['chunk_size'] = self.DEFAULT_CHUNK_SIZE > 0
        validations['discount_bands'] = 0.0 <= self.LOW_DISCOUNT_MAX < self.MEDIUM_DISCOUNT_MAX <= 100.0
        validations['value_bands'] = 0.0 <= self.MEDIUM_VALUE_MIN < self.HIGH_VALUE_MIN
        validations['sentinels'] = bool(self.EMAIL_SENTINEL) and bool(self.PHONE_SENTINEL)
        validations['categories'] = len(self.SUPPORTED_CATEGORIES) > 0
        validations['api_port'] = 1000 <= self.API_PORT <= 65535

        # Validate log level
        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        validations['log_level'] = self.LOG_LEVEL.upper() in valid_log_levels

        return validations

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            attr: getattr(self, attr)
            for attr in dir(self)
            if not attr.startswith('_') and not callable(getattr(self, attr))
        }

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to JSON file."""
        import json
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'Config':
        """Load configuration from JSON file."""
        import json
        with open(file_path, 'r') as f:
            config_dict = json.load(f)
        return cls(config_dict)

    def __str__(self) -> str:
        """String representation of configuration."""
        lines = ["Configuration Settings:"]
        config_dict = self.to_dict()
        for key, value in sorted(config_dict.items()):
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
