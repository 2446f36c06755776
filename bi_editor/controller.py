"""
EditorController - validates change-sets and coordinates the data layer.
Coordinates: Config -> Identifier Guard -> Backend
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from .backends.duckdb_backend import DuckDBBackend, create_backend_from_uri
from .config import EditorConfig
from .errors import ChangeValidationError
from .types.snapshot import Change, Snapshot
from .util.sql_builder import identifier_re, is_bi_col

logger = logging.getLogger(__name__)


def validate_changes(raw_changes: Any, pk_cols: Sequence[str]) -> List[Change]:
    """
    Validate a whole change-set before anything touches storage.

    Any invalid entry rejects the entire request. Checks, per change:
    a pk object and a set object are present, every set key is an editable
    column (BI, not a PK column, valid identifier), and every configured PK
    column is present in pk.
    """
    if not isinstance(raw_changes, list):
        raise ChangeValidationError("Invalid body: expected {changes: [...]}")

    pk_set = set(pk_cols)
    changes = []
    for raw in raw_changes:
        if not isinstance(raw, Mapping):
            raise ChangeValidationError("Invalid change: expected an object")
        pk = raw.get("pk")
        set_values = raw.get("set")
        if not isinstance(pk, Mapping):
            raise ChangeValidationError("Invalid change: missing pk")
        if not isinstance(set_values, Mapping):
            raise ChangeValidationError("Invalid change: missing set")

        for col in set_values:
            if not is_bi_col(col) or col in pk_set:
                raise ChangeValidationError(f"Column not allowed (not BI): {col}")
            if not identifier_re.fullmatch(str(col)):
                raise ChangeValidationError(f"Invalid identifier: {col}")

        for col in pk_cols:
            if col not in pk:
                raise ChangeValidationError(f"Missing PK {col} in pk")

        changes.append(Change(pk=dict(pk), set_values=dict(set_values)))
    return changes


class EditorController:
    """
    Controller for the single-table editor.
    Table, PK columns and row limit come from the injected config.
    """
    def __init__(self, config: EditorConfig, backend: Optional[DuckDBBackend] = None):
        self.config = config
        self.backend = backend or create_backend_from_uri(
            config.database,
            read_only=config.read_only,
            pool_size=config.pool_size,
            pool_timeout=config.pool_timeout,
        )

    def get_snapshot(self) -> Snapshot:
        return self.backend.fetch_snapshot(
            self.config.table, self.config.row_limit, self.config.pk_columns
        )

    def get_data(self) -> Dict[str, Any]:
        return self.get_snapshot().to_dict()

    def apply_update(self, raw_changes: Any) -> int:
        """Validate then persist a change-set; returns the updated row count."""
        changes = validate_changes(raw_changes, self.config.pk_columns)
        updated = self.backend.apply_changes(self.config.table, self.config.pk_columns, changes)
        logger.info("Applied %d change(s) to %s, %d row(s) updated",
                    len(changes), self.config.table, updated)
        return updated

    def close(self):
        self.backend.close()
