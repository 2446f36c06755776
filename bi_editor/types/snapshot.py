"""
Snapshot types - the table data exchanged between the data layer, the API
and the grid client.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Cell:
    column: str
    value: Any
    editable: bool = False


@dataclass(frozen=True)
class Row:
    """Ordered, immutable mapping of column name to value."""
    cells: Tuple[Cell, ...] = ()

    @staticmethod
    def from_mapping(values: Mapping[str, Any], editable: Sequence[str] = ()) -> "Row":
        editable_set = set(editable)
        return Row(tuple(Cell(col, val, col in editable_set) for col, val in values.items()))

    @property
    def columns(self) -> List[str]:
        return [c.column for c in self.cells]

    def get(self, column: str, default: Any = None) -> Any:
        for cell in self.cells:
            if cell.column == column:
                return cell.value
        return default

    def cell(self, column: str) -> Optional[Cell]:
        for cell in self.cells:
            if cell.column == column:
                return cell
        return None

    def replace(self, column: str, value: Any) -> "Row":
        """Return a copy of the row with one cell's value swapped."""
        if self.cell(column) is None:
            raise KeyError(column)
        return Row(tuple(
            Cell(c.column, value, c.editable) if c.column == column else c
            for c in self.cells
        ))

    def as_dict(self) -> Dict[str, Any]:
        return {c.column: c.value for c in self.cells}

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class Snapshot:
    table: str
    limit: int
    pk: Tuple[str, ...]
    columns: Tuple[str, ...]
    bi_cols: Tuple[str, ...]
    rows: Tuple[Row, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """JSON payload served by GET /data."""
        return {
            "table": self.table,
            "limit": self.limit,
            "pk": list(self.pk),
            "columns": list(self.columns),
            "biCols": list(self.bi_cols),
            "rows": [r.as_dict() for r in self.rows],
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Snapshot":
        bi_cols = tuple(d.get("biCols", []))
        return Snapshot(
            table=d.get("table", ""),
            limit=d.get("limit", 0),
            pk=tuple(d.get("pk", [])),
            columns=tuple(d.get("columns", [])),
            bi_cols=bi_cols,
            rows=tuple(Row.from_mapping(r, bi_cols) for r in d.get("rows", [])),
        )


@dataclass
class Change:
    """One row-level edit: primary-key values plus the new values to set."""
    pk: Dict[str, Any]
    set_values: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"pk": dict(self.pk), "set": dict(self.set_values)}

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Change":
        return Change(pk=dict(d.get("pk") or {}), set_values=dict(d.get("set") or {}))
