"""
rest_api.py - REST API for the BI editor

GET  /data    current snapshot of the configured table
POST /update  apply a change-set in one transaction
GET  /health  liveness probe
GET  /        static grid page
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from bi_editor.config import EditorConfig
from bi_editor.controller import EditorController
from bi_editor.errors import ChangeValidationError, EditorError

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


# Pydantic models for API requests/responses
class UpdateRequest(BaseModel):
    """Change-set posted by the grid"""
    changes: Optional[List[Any]] = None


class UpdateResponse(BaseModel):
    updatedRows: int


class DataResponse(BaseModel):
    """Snapshot served to the grid"""
    table: str
    limit: int
    pk: List[str]
    columns: List[str]
    biCols: List[str]
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class EditorAPI:
    """REST API implementation for the single-table editor"""

    def __init__(self, controller: EditorController, serve_static: bool = True):
        self.controller = controller
        self.app = FastAPI(title="BI Editor API")
        self._setup_error_handlers()
        self._setup_routes()
        if serve_static:
            self.app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")

    def _setup_error_handlers(self):
        """Every error leaves the API as {"error": message}"""

        @self.app.exception_handler(StarletteHTTPException)
        async def http_error_handler(request: Request, exc: StarletteHTTPException):
            return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

        @self.app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            return JSONResponse(
                status_code=400,
                content={"error": "Invalid body: expected {changes: [...]}"},
            )

        @self.app.exception_handler(Exception)
        async def unhandled_error_handler(request: Request, exc: Exception):
            logger.exception("Unhandled error on %s", request.url.path)
            return JSONResponse(status_code=500, content={"error": str(exc)})

    def _setup_routes(self):
        """Setup all API routes"""

        @self.app.get("/health", response_class=PlainTextResponse)
        def health_check():
            return "ok"

        @self.app.get("/data", response_model=DataResponse)
        def data_endpoint():
            try:
                # serialize here so encoding failures keep the error shape
                return JSONResponse(content=jsonable_encoder(DataResponse(**self.controller.get_data())))
            except (EditorError, ValueError) as e:
                logger.error("Failed to load data: %s", e)
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.post("/update", response_model=UpdateResponse)
        def update_endpoint(request: UpdateRequest):
            try:
                updated = self.controller.apply_update(request.changes)
                return UpdateResponse(updatedRows=updated)
            except ChangeValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except EditorError as e:
                logger.error("Update failed, batch rolled back: %s", e)
                raise HTTPException(status_code=500, detail=str(e))

    def get_app(self):
        """Get the FastAPI application instance"""
        return self.app


def create_api(config: EditorConfig, controller: Optional[EditorController] = None, **kwargs) -> EditorAPI:
    """Create the API with a controller built from the given config"""
    return EditorAPI(controller or EditorController(config), **kwargs)
