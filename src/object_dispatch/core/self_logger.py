"""
Self-Logger

Each object logs to itself (not to an external logging system).

Design:
- Entries are kept in memory, in order, on the logger itself
- Optionally mirrored to a TSV file (human-readable, grep-able):
  logs/{object_id}/log.tsv under the configured base directory
- Append-only (immutable history)
- Log rotation when the TSV file exceeds a size limit
- Query logs with filters (level, custom fields)

A dispatcher given a SelfLogger records every message it resolves, so an
instance can be asked what happened to it.
"""

import csv
from pathlib import Path
from datetime import datetime
from typing import Optional, List, Dict, Any, Union


LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class SelfLogger:
    """
    Self-logging for objects.

    Without a base_dir, entries only live in memory. With one, every entry is
    also appended to logs/{object_id}/log.tsv.
    """

    def __init__(
        self,
        object_id: str,
        base_dir: Optional[Path | str] = None,
        max_log_size: Optional[int] = None,
    ):
        """
        Initialize self-logger.

        Args:
            object_id: ID of the object (e.g., 'point2d-1')
            base_dir: Base directory for TSV log storage (None = memory only)
            max_log_size: Maximum log file size in bytes before rotation
                         (default: 10MB)
        """
        self.object_id = object_id
        self.max_log_size = max_log_size or (10 * 1024 * 1024)  # 10MB default
        self._entries: List[Dict[str, Any]] = []

        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.log_dir = None
        self.log_file = None

        if self.base_dir is not None:
            self.log_dir = self.base_dir / 'logs' / object_id
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.log_dir / 'log.tsv'

    def log(
        self,
        level: str,
        message: str,
        **kwargs,
    ) -> None:
        """
        Log an entry.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            message: Log message
            **kwargs: Additional fields to log (token, args, etc.)
        """
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")

        entry = {
            'timestamp': datetime.now().isoformat(),
            'level': level,
            'message': message,
            **kwargs,
        }

        # Remove None values (don't log empty fields)
        entry = {k: v for k, v in entry.items() if v is not None}

        self._entries.append(entry)

        if self.log_file is not None:
            self._write_tsv(entry)

    def debug(self, message: str, **kwargs) -> None:
        """Log DEBUG level message"""
        self.log('DEBUG', message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log INFO level message"""
        self.log('INFO', message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log WARNING level message"""
        self.log('WARNING', message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Log ERROR level message"""
        self.log('ERROR', message, **kwargs)

    def critical(self, message: str, **kwargs) -> None:
        """Log CRITICAL level message"""
        self.log('CRITICAL', message, **kwargs)

    def get_logs(
        self,
        level: Optional[Union[str, List[str]]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        **filters,
    ) -> List[Dict[str, Any]]:
        """
        Get log entries, oldest first.

        Args:
            level: Filter by level (string or list of strings)
            limit: Maximum number of entries to return
            offset: Number of entries to skip
            **filters: Additional filters (e.g., token='dot')

        Returns:
            List of log entries (dictionaries)
        """
        entries = list(self._entries)

        if level is not None:
            if isinstance(level, str):
                level = [level]
            entries = [e for e in entries if e.get('level') in level]

        for key, value in filters.items():
            entries = [e for e in entries if e.get(key) == value]

        if offset > 0:
            entries = entries[offset:]

        if limit is not None:
            entries = entries[:limit]

        return entries

    def read_tsv(self) -> List[Dict[str, str]]:
        """
        Read mirrored entries back from disk (rotated files first).

        Values come back as strings, as stored.
        """
        if self.log_file is None:
            return []

        files = sorted(self.log_dir.glob('log-*.tsv'))
        if self.log_file.exists():
            files.append(self.log_file)

        rows = []
        for path in files:
            with open(path, 'r', newline='') as f:
                reader = csv.DictReader(f, delimiter='\t')
                for row in reader:
                    rows.append(row)
        return rows

    def __len__(self) -> int:
        return len(self._entries)

    def _write_tsv(self, entry: Dict[str, Any]) -> None:
        """Append one entry to the TSV mirror"""
        self._rotate_if_needed()

        fieldnames = self._get_fieldnames()
        known = len(fieldnames)
        for key in entry.keys():
            if key not in fieldnames:
                fieldnames.append(key)

        is_new_file = not self.log_file.exists()

        if not is_new_file and len(fieldnames) > known:
            self._rewrite_with_header(fieldnames)

        with open(self.log_file, 'a', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, delimiter='\t')

            if is_new_file:
                writer.writeheader()

            writer.writerow(entry)

    def _rewrite_with_header(self, fieldnames: List[str]) -> None:
        """Rewrite the current file so its header carries every column"""
        with open(self.log_file, 'r', newline='') as f:
            rows = list(csv.DictReader(f, delimiter='\t'))

        with open(self.log_file, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, delimiter='\t')
            writer.writeheader()
            writer.writerows(rows)

    def _get_fieldnames(self) -> List[str]:
        """Get existing fieldnames from log file"""
        if not self.log_file.exists():
            return ['timestamp', 'level', 'message']

        with open(self.log_file, 'r', newline='') as f:
            reader = csv.DictReader(f, delimiter='\t')
            return list(reader.fieldnames or ['timestamp', 'level', 'message'])

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size"""
        if not self.log_file.exists():
            return

        size = self.log_file.stat().st_size
        if size < self.max_log_size:
            return

        # Rotate: rename current log to log-TIMESTAMP.tsv
        timestamp = datetime.now().strftime('%Y%m%d-%H%M%S-%f')
        self.log_file.rename(self.log_dir / f'log-{timestamp}.tsv')
