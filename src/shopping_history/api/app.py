"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import HTMLResponse

from shopping_history.api.models import (
    AnalysisRequest,
    AnalysisResponse,
    RecordCreateRequest,
    RecordDeleteResponse,
    RecordListResponse,
    RecordResponse,
    ScanDraftResponse,
)
from shopping_history.api.page import INDEX_HTML
from shopping_history.app_logging import configure_logging
from shopping_history.containers import AppContainer
from shopping_history.services.guards import OperationInProgressError
from shopping_history.services.history import filter_history
from shopping_history.services.images import ImageDecodeError
from shopping_history.services.inference import InferenceError
from shopping_history.services.scans import DraftNotFoundError


def create_app(container: AppContainer) -> FastAPI:  # noqa: C901, PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Shopping History Analyzer", lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        """Serve the single-page UI."""
        return HTMLResponse(INDEX_HTML)

    @app.post("/scans")
    async def create_scan(
        request: Request, file: UploadFile = File(...)
    ) -> ScanDraftResponse:
        """Read name and price from an uploaded receipt or price tag."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await file.read()
        if not image_bytes:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST, "The uploaded file is empty."
            )
        try:
            with state_container.scan_guard.hold():
                draft = await state_container.scan_service.scan(image_bytes)
        except OperationInProgressError as exc:
            raise HTTPException(status.HTTP_409_CONFLICT, str(exc)) from exc
        except ImageDecodeError as exc:
            logger.warning(
                "Rejected undecodable upload", extra={"upload_name": file.filename}
            )
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                _format_error(state_container, exc.__cause__ or exc, str(exc)),
            ) from exc
        except InferenceError as exc:
            raise HTTPException(
                status.HTTP_502_BAD_GATEWAY,
                _format_error(state_container, exc.__cause__ or exc, str(exc)),
            ) from exc
        return ScanDraftResponse.from_draft(draft)

    @app.delete("/scans/{draft_id}")
    async def cancel_scan(draft_id: str, request: Request) -> dict[str, str]:
        """Discard a scan the user does not want to keep."""
        state_container: AppContainer = request.app.state.container
        if not state_container.scan_service.cancel(draft_id):
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Scan not found.")
        return {"status": "ok"}

    @app.post("/records", status_code=status.HTTP_201_CREATED)
    async def create_record(
        payload: RecordCreateRequest, request: Request
    ) -> RecordResponse:
        """Store a confirmed scan as a purchase record."""
        state_container: AppContainer = request.app.state.container
        try:
            record, _ = state_container.scan_service.confirm(
                payload.draft_id,
                name=payload.name,
                price=payload.price,
                location=payload.location,
            )
        except DraftNotFoundError as exc:
            raise HTTPException(
                status.HTTP_404_NOT_FOUND,
                "This scan has expired. Please upload the image again.",
            ) from exc
        return RecordResponse(
            record=record, warning=state_container.record_store.warning
        )

    @app.get("/records")
    async def list_records(
        request: Request,
        search: str | None = None,
        on_date: str | None = Query(default=None, alias="date"),
    ) -> RecordListResponse:
        """Return the history filtered by name and day, newest first."""
        state_container: AppContainer = request.app.state.container
        records = filter_history(
            state_container.record_store.records,
            search_term=search,
            on_date=_parse_day(on_date),
        )
        return RecordListResponse(records=records, total=len(records))

    @app.delete("/records/{record_id}")
    async def delete_record(record_id: str, request: Request) -> RecordDeleteResponse:
        """Delete a record by id."""
        state_container: AppContainer = request.app.state.container
        if not state_container.record_store.remove(record_id):
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Record not found.")
        return RecordDeleteResponse(
            removed=True, warning=state_container.record_store.warning
        )

    @app.post("/analysis")
    async def analyze(payload: AnalysisRequest, request: Request) -> AnalysisResponse:
        """Answer a question about the recorded purchases."""
        state_container: AppContainer = request.app.state.container
        if not payload.query.strip():
            return AnalysisResponse(answer=None)
        records = state_container.record_store.records
        if not records:
            raise HTTPException(
                status.HTTP_409_CONFLICT,
                "Add some records before asking about your history.",
            )
        try:
            with state_container.analysis_guard.hold():
                answer = await state_container.analysis_service.analyze(
                    payload.query, records
                )
        except OperationInProgressError as exc:
            raise HTTPException(status.HTTP_409_CONFLICT, str(exc)) from exc
        except InferenceError as exc:
            raise HTTPException(
                status.HTTP_502_BAD_GATEWAY,
                _format_error(state_container, exc.__cause__ or exc, str(exc)),
            ) from exc
        return AnalysisResponse(answer=answer)

    return app


def _parse_day(raw: str | None) -> date | None:
    """Parse a YYYY-MM-DD query value; blank means no filter."""
    if raw is None or not raw.strip():
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError as exc:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "Dates must use the YYYY-MM-DD format.",
        ) from exc


def _format_error(
    state_container: AppContainer, exc: BaseException, fallback: str
) -> str:
    """Return a user-facing error message with local debug info."""
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
