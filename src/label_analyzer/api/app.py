"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from label_analyzer.api.models import (
    AnalysisResponse,
    ErrorResponse,
    ImageAnalysisRequest,
    TextAnalysisRequest,
)
from label_analyzer.app_logging import configure_logging
from label_analyzer.config import parse_allowed_origins
from label_analyzer.containers import AppContainer
from label_analyzer.domain.errors import (
    InvalidRequest,
    LabelAnalysisError,
    MissingInput,
)
from label_analyzer.services.images import decode_image_payload


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.cors_allowed_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(LabelAnalysisError)
    async def analysis_error_handler(
        request: Request, exc: LabelAnalysisError
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        logger.warning(
            "Label analysis failed: %s",
            exc.code,
            extra={"path": request.url.path},
        )
        body = ErrorResponse(
            error=exc.code, message=_format_error_message(state_container, exc)
        )
        return JSONResponse(status_code=exc.status_code, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Rejected malformed request: %s", exc.errors())
        return await analysis_error_handler(request, InvalidRequest())

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/analyze/text")
    async def analyze_text(
        payload: TextAnalysisRequest,
        request: Request,
        x_session_id: str | None = Header(default=None),
    ) -> AnalysisResponse:
        """Analyze ingredient text entered by the user."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.analysis_service.analyze_text(
            payload.text, session_id=x_session_id
        )
        return AnalysisResponse.from_result(result)

    @app.post("/analyze/image")
    async def analyze_image(
        payload: ImageAnalysisRequest,
        request: Request,
        x_session_id: str | None = Header(default=None),
    ) -> AnalysisResponse:
        """Read a label photo and analyze its ingredients."""
        state_container: AppContainer = request.app.state.container
        if payload.image is None:
            raise MissingInput("Please select a label photo to analyze.")
        image_bytes = decode_image_payload(payload.image)
        result = await state_container.analysis_service.analyze_image(
            image_bytes, session_id=x_session_id
        )
        return AnalysisResponse.from_result(result)

    return app


def _format_error_message(
    state_container: AppContainer, exc: LabelAnalysisError
) -> str:
    """Return the user-facing message, with the root cause when running locally."""
    cause = exc.__cause__
    if state_container.settings.environment == "local" and cause is not None:
        detail = f"{type(cause).__name__}: {cause}".strip()
        return f"{exc.message} (debug: {detail})"
    return exc.message
