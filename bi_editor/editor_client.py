"""
editor_client.py - Async client driving the editor over HTTP

Mirrors the browser page: load a snapshot, edit through GridState, save the
change-set and reload. Save and Reload are disabled while a save is in
flight; failures are surfaced as status text and never retried.
"""
import logging
from typing import Any, Optional

import httpx

from bi_editor.grid_state import GridState

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        return response.json().get("error") or fallback
    except ValueError:
        return fallback


class EditorClient:
    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        self.state: Optional[GridState] = None
        self.status = ""
        self.save_enabled = False
        self.reload_enabled = True

    async def load(self) -> bool:
        self.status = "Loading data..."
        self.save_enabled = False
        try:
            response = await self.client.get("/data")
        except httpx.HTTPError as e:
            logger.error("Load failed: %s", e)
            self.status = str(e)
            return False

        if response.status_code != 200:
            self.status = _error_message(response, "Error loading")
            return False

        payload = response.json()
        self.state = GridState.from_payload(payload)
        self.status = f"Ready. Table: {payload['table']}. Rows: {len(payload['rows'])}."
        self.save_enabled = True
        return True

    def edit(self, row_index: int, column: str, value: Any) -> bool:
        if self.state is None:
            raise RuntimeError("No data loaded; call load() before editing")
        return self.state.set_cell(row_index, column, value)

    async def save(self) -> Optional[int]:
        """Post pending edits; returns the updated row count, or None."""
        changes = self.state.build_changes() if self.state else []
        if not changes:
            self.status = "No changes to save."
            return None

        self.save_enabled = False
        self.reload_enabled = False
        self.status = f"Saving changes ({len(changes)} rows)..."
        try:
            response = await self.client.post(
                "/update", json={"changes": [c.to_dict() for c in changes]}
            )
        except httpx.HTTPError as e:
            logger.error("Save failed: %s", e)
            self.status = str(e)
            self.save_enabled = True
            self.reload_enabled = True
            return None

        if response.status_code != 200:
            self.status = _error_message(response, "Error saving")
            self.save_enabled = True
            self.reload_enabled = True
            return None

        updated = response.json()["updatedRows"]
        # reload replaces both snapshot and working copy
        await self.load()
        self.status = f"Updated rows: {updated}. {self.status}"
        self.reload_enabled = True
        return updated
