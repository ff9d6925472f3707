"""Transfer configuration"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional
import logging

import yaml

from .errors import ConfigError
from .transfer.driver import DEFAULT_MAX_FAILURES
from .transfer.store import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class TransferConfig:
    """
    Transfer configuration

    Priority (highest to lowest):
    1. Command line arguments
    2. YAML config file
    3. Default values
    """
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_failures: int = DEFAULT_MAX_FAILURES
    output_dir: Path = field(default_factory=lambda: Path('./received'))
    watch_dir: Path = field(default_factory=lambda: Path('./outbox'))
    log_level: str = 'INFO'
    monitor_interval: float = 0.2  # seconds between progress lines per source

    @classmethod
    def from_file(cls, path: Path) -> 'TransferConfig':
        """Load configuration from a YAML file, defaults if it does not exist"""
        path = Path(path)
        if not path.exists():
            logger.debug(f"No config file at {path}, using defaults")
            return cls()

        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")

        config = cls()
        config.update(**data)
        return config

    def update(self, **overrides):
        """Apply non-None overrides, then validate"""
        for name, value in overrides.items():
            if value is None:
                continue
            if name in ('output_dir', 'watch_dir'):
                value = Path(value)
            setattr(self, name, value)
        self.validate()
        return self

    def validate(self):
        if not isinstance(self.chunk_size, int) or self.chunk_size <= 0:
            raise ConfigError(f"chunk_size must be a positive integer, got {self.chunk_size!r}")
        if not isinstance(self.max_failures, int) or self.max_failures <= 0:
            raise ConfigError(f"max_failures must be a positive integer, got {self.max_failures!r}")
        if self.monitor_interval < 0:
            raise ConfigError(f"monitor_interval must not be negative, got {self.monitor_interval!r}")

        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    def to_dict(self) -> dict:
        return {
            'chunk_size': self.chunk_size,
            'max_failures': self.max_failures,
            'output_dir': str(self.output_dir),
            'watch_dir': str(self.watch_dir),
            'log_level': self.log_level,
            'monitor_interval': self.monitor_interval
        }
