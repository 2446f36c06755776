"""
grid_state.py - Client-side grid state for the BI editor

Keeps the last loaded snapshot and a working copy side by side, tracks which
cells are dirty, renders the editable HTML table and turns the differences
into a change-set for POST /update.
"""
from html import escape
from typing import Any, Dict, List, Tuple

from bi_editor.types.snapshot import Change, Row, Snapshot


def cell_text(value: Any) -> str:
    """Text shown for a value; null renders as the empty string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def values_differ(original: Any, current: Any) -> bool:
    return cell_text(original) != cell_text(current)


class GridState:
    """Loaded snapshot plus working rows, compared cell by cell"""

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot
        self.working: Tuple[Row, ...] = tuple(snapshot.rows)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GridState":
        return cls(Snapshot.from_dict(payload))

    def _check_row(self, row_index: int) -> None:
        if not 0 <= row_index < len(self.working):
            raise IndexError(f"Row index {row_index} out of range (0..{len(self.working) - 1})")

    @property
    def editable(self) -> Tuple[str, ...]:
        return self.snapshot.bi_cols

    def set_cell(self, row_index: int, column: str, value: Any) -> bool:
        """
        Store an edit in the working copy.

        Returns True when the cell now differs from the loaded value.
        """
        if column not in self.editable:
            raise KeyError(f"Column is not editable: {column}")
        self._check_row(row_index)
        rows = list(self.working)
        rows[row_index] = rows[row_index].replace(column, value)
        self.working = tuple(rows)
        return self.is_changed(row_index, column)

    def get_cell(self, row_index: int, column: str) -> Any:
        self._check_row(row_index)
        return self.working[row_index].get(column)

    def is_changed(self, row_index: int, column: str) -> bool:
        self._check_row(row_index)
        original = self.snapshot.rows[row_index].get(column)
        return values_differ(original, self.working[row_index].get(column))

    def dirty_cells(self) -> List[Tuple[int, str]]:
        return [
            (i, col)
            for i in range(len(self.working))
            for col in self.editable
            if self.is_changed(i, col)
        ]

    def build_changes(self) -> List[Change]:
        """One Change per row with differing editable cells; clean rows are skipped."""
        changes = []
        for old_row, new_row in zip(self.snapshot.rows, self.working):
            set_values = {
                col: new_row.get(col)
                for col in self.editable
                if values_differ(old_row.get(col), new_row.get(col))
            }
            if not set_values:
                continue
            pk = {k: old_row.get(k) for k in self.snapshot.pk}
            changes.append(Change(pk=pk, set_values=set_values))
        return changes

    def render_html(self) -> str:
        editable = set(self.editable)
        columns = self.snapshot.columns

        header = "".join(
            f"<th>{escape(col)}{' (editable)' if col in editable else ''}</th>"
            for col in columns
        )
        body = []
        for i, row in enumerate(self.working):
            cells = []
            for col in columns:
                text = escape(cell_text(row.get(col)), quote=True)
                if col in editable:
                    css = ' class="changed"' if self.is_changed(i, col) else ""
                    cells.append(
                        f'<td><input data-row="{i}" data-col="{escape(col)}"{css} value="{text}"></td>'
                    )
                else:
                    cells.append(f'<td class="readonly">{text}</td>')
            body.append(f"<tr>{''.join(cells)}</tr>")

        return (
            f"<table><thead><tr>{header}</tr></thead>"
            f"<tbody>{''.join(body)}</tbody></table>"
        )
