"""
Dispatch configuration

Reads settings from a TSV file (key<TAB>value, '#' comments allowed).
Falls back to environment variables, then to defaults.

Settings:
    field_arity  OBJECT_DISPATCH_FIELD_ARITY  'reject' (default) or 'ignore'
    trace        OBJECT_DISPATCH_TRACE        give runtime instances a SelfLogger
    log_dir      OBJECT_DISPATCH_LOG_DIR      mirror self-logs to TSV here
"""

import os
import csv
from pathlib import Path
from typing import Dict, Mapping, Optional

from .core.errors import ConfigError


FIELD_ARITY_MODES = ('reject', 'ignore')

ENV_PREFIX = 'OBJECT_DISPATCH_'

_TRUE = ('1', 'true', 'yes', 'on')


class DispatchConfig:
    """Settings shared by dispatchers and the object runtime"""

    def __init__(
        self,
        field_arity: str = 'reject',
        trace: bool = False,
        log_dir: Optional[Path | str] = None,
    ):
        if field_arity not in FIELD_ARITY_MODES:
            raise ConfigError(
                f"field_arity must be one of {FIELD_ARITY_MODES}, got {field_arity!r}"
            )
        self.field_arity = field_arity
        self.trace = trace
        self.log_dir = Path(log_dir) if log_dir else None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'DispatchConfig':
        """Load configuration from environment variables"""
        return cls._from_values(_env_values(environ))

    @classmethod
    def from_file(
        cls,
        config_file: Path | str = 'object_dispatch.tsv',
        environ: Optional[Mapping[str, str]] = None,
    ) -> 'DispatchConfig':
        """
        Load configuration from a TSV file.

        Keys missing from the file (or the whole file, if it doesn't exist)
        fall back to environment variables.
        """
        values = _env_values(environ)

        config_file = Path(config_file)
        if config_file.exists():
            with open(config_file, 'r', encoding='utf-8') as f:
                reader = csv.reader(
                    (line for line in f if line.strip() and not line.startswith('#')),
                    delimiter='\t'
                )
                for row in reader:
                    if len(row) < 2:
                        raise ConfigError(f"Malformed config row in {config_file}: {row!r}")
                    values[row[0].strip().lower()] = row[1].strip()

        return cls._from_values(values)

    @classmethod
    def _from_values(cls, values: Dict[str, str]) -> 'DispatchConfig':
        """Build a config from raw string values"""
        return cls(
            field_arity=values.get('field_arity', 'reject').strip().lower(),
            trace=values.get('trace', '').strip().lower() in _TRUE,
            log_dir=values.get('log_dir') or None,
        )

    def as_dict(self) -> Dict[str, object]:
        return {
            'field_arity': self.field_arity,
            'trace': self.trace,
            'log_dir': str(self.log_dir) if self.log_dir else None,
        }

    def __repr__(self) -> str:
        return (
            f"DispatchConfig(field_arity={self.field_arity!r}, "
            f"trace={self.trace!r}, log_dir={self.log_dir!r})"
        )


# Global instance (lazy loaded)
_config = None


def get_config() -> DispatchConfig:
    """Get the global dispatch configuration"""
    global _config
    if _config is None:
        _config = DispatchConfig.from_file()
    return _config


def reload_config() -> DispatchConfig:
    """Reload configuration from file and environment"""
    global _config
    _config = DispatchConfig.from_file()
    return _config


def _env_values(environ: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Helper: OBJECT_DISPATCH_* variables keyed by lowercase setting name"""
    if environ is None:
        environ = os.environ
    return {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in environ.items()
        if key.startswith(ENV_PREFIX)
    }
