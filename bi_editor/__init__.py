"""
bi_editor package - inline spreadsheet-style editor for the BI columns of one table.

Expose the controller, config and client-side grid state.
"""
from .config import EditorConfig
from .controller import EditorController
from .grid_state import GridState

__all__ = ["EditorConfig", "EditorController", "GridState"]
