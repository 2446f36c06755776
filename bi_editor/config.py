"""
config.py - Configuration for the BI editor
"""
import os
from typing import Optional, Tuple
from dataclasses import dataclass, field

from bi_editor.util.sql_builder import identifier_re


def _parse_pk(raw: Optional[str]) -> Tuple[str, ...]:
    return tuple(s.strip() for s in (raw or "").split(",") if s.strip())


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class EditorConfig:
    """Configuration for the BI editor, fixed at startup"""

    # Database configuration
    database: str = ":memory:"
    read_only: bool = False
    pool_size: int = 10
    pool_timeout: float = 30.0

    # Target table
    table: str = ""
    pk_columns: Tuple[str, ...] = field(default_factory=tuple)
    row_limit: int = 200

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> 'EditorConfig':
        """Load configuration from environment variables"""
        defaults = cls()
        return cls(
            database=os.getenv('EDITOR_DATABASE', defaults.database),
            read_only=_parse_bool(os.getenv('EDITOR_READ_ONLY'), defaults.read_only),
            pool_size=int(os.getenv('EDITOR_POOL_SIZE', str(defaults.pool_size))),
            pool_timeout=float(os.getenv('EDITOR_POOL_TIMEOUT', str(defaults.pool_timeout))),
            table=os.getenv('APP_TABLE', defaults.table).strip(),
            pk_columns=_parse_pk(os.getenv('APP_PK')),
            row_limit=int(os.getenv('APP_LIMIT', str(defaults.row_limit))),
            host=os.getenv('HOST', defaults.host),
            port=int(os.getenv('PORT', str(defaults.port))),
            log_level=os.getenv('LOG_LEVEL', defaults.log_level).upper(),
        )

    def validate(self) -> None:
        """Validate configuration settings"""
        errors = []

        if not self.table:
            errors.append("APP_TABLE is required")
        elif not identifier_re.fullmatch(self.table):
            errors.append(f"APP_TABLE is not a valid identifier: {self.table}")

        if not self.pk_columns:
            errors.append("APP_PK is required (e.g. col1,col2)")
        for pk in self.pk_columns:
            if not identifier_re.fullmatch(pk):
                errors.append(f"APP_PK column is not a valid identifier: {pk}")

        if self.row_limit <= 0:
            errors.append("row_limit must be positive")

        if self.pool_size <= 0:
            errors.append("pool_size must be positive")

        if self.pool_timeout <= 0:
            errors.append("pool_timeout must be positive")

        if not 0 < self.port < 65536:
            errors.append("port must be between 1 and 65535")

        if errors:
            raise ValueError(f"Configuration validation errors: {'; '.join(errors)}")
