from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware

from tendermatch.api.errors import register_error_handlers
from tendermatch.api.schemas import (
    ErrorResponse,
    JobStatusResponse,
    MatchRequest,
    MatchResponse,
    ProfileResponse,
)
from tendermatch.config.settings import Settings
from tendermatch.database.connection import close_pool, init_pool
from tendermatch.database.repositories.profile_repository import ProfileRepository
from tendermatch.database.repositories.tender_repository import TenderRepository
from tendermatch.logging.logger import Log
from tendermatch.matching.engine import MatchingEngine
from tendermatch.processor.exceptions import InvalidArgumentError
from tendermatch.processor.tracker import ProcessingJobTracker, build_tracker


def _errors(*codes: int) -> dict[int | str, dict[str, Any]]:
    """OpenAPI error responses for a route. 500 is documented on every route."""
    return {code: {"model": ErrorResponse} for code in (*codes, 500)}


def get_tracker(request: Request) -> ProcessingJobTracker:
    return request.app.state.tracker


def get_engine(request: Request) -> MatchingEngine:
    return request.app.state.engine


def get_profile_repo(request: Request) -> ProfileRepository:
    return request.app.state.profile_repo


def create_app(
    *,
    tracker: ProcessingJobTracker,
    engine: MatchingEngine,
    profile_repo: ProfileRepository,
    max_upload_bytes: int = 10 * 1024 * 1024,
    cors_origins: list[str] | None = None,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]] | None = None,
) -> FastAPI:
    """Wire the HTTP routes around already-built components."""
    app = FastAPI(title="Tender Match", lifespan=lifespan)
    app.state.tracker = tracker
    app.state.engine = engine
    app.state.profile_repo = profile_repo
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    register_error_handlers(app)

    @app.post(
        "/documents",
        status_code=status.HTTP_201_CREATED,
        response_model=JobStatusResponse,
        responses=_errors(413, 415, 422),
    )
    def upload_document(
        file: UploadFile = File(...),
        user_id: int = Form(...),
        company_name: str | None = Form(None),
        tracker: ProcessingJobTracker = Depends(get_tracker),
    ) -> JobStatusResponse:
        # Reads at most one byte past the cap.
        content = file.file.read(max_upload_bytes + 1)
        result = tracker.submit(
            user_id=user_id,
            file_name=file.filename or "document.pdf",
            content=content,
            mime_type=file.content_type or "",
            company_name=company_name,
        )
        return JobStatusResponse.from_submit(result)

    @app.post(
        "/documents/{document_id}/process",
        status_code=status.HTTP_202_ACCEPTED,
        response_model=JobStatusResponse,
        responses=_errors(404, 502),
    )
    def process_document(
        document_id: int,
        user_id: int | None = None,
        tracker: ProcessingJobTracker = Depends(get_tracker),
    ) -> JobStatusResponse:
        return JobStatusResponse.from_status(tracker.trigger(document_id, user_id=user_id))

    @app.get("/jobs/{job_id}", response_model=JobStatusResponse, responses=_errors(404))
    def job_status(
        job_id: int,
        tracker: ProcessingJobTracker = Depends(get_tracker),
    ) -> JobStatusResponse:
        return JobStatusResponse.from_status(tracker.get_status(job_id))

    @app.get(
        "/documents/{document_id}/status",
        response_model=JobStatusResponse,
        responses=_errors(404),
    )
    def document_status(
        document_id: int,
        tracker: ProcessingJobTracker = Depends(get_tracker),
    ) -> JobStatusResponse:
        return JobStatusResponse.from_status(tracker.get_status_for_document(document_id))

    @app.post("/match", response_model=MatchResponse, responses=_errors(400, 404))
    def match_tenders(
        body: MatchRequest,
        engine: MatchingEngine = Depends(get_engine),
        profile_repo: ProfileRepository = Depends(get_profile_repo),
    ) -> MatchResponse:
        if body.profile is not None:
            profile = body.profile.to_profile(user_id=body.user_id or 0)
        elif body.user_id is not None:
            profile = profile_repo.find_by_user_id(body.user_id)
        else:
            raise InvalidArgumentError("Either user_id or profile is required")
        return MatchResponse.from_ranked(engine.match(profile, limit=body.limit))

    @app.get("/profiles/{user_id}", response_model=ProfileResponse, responses=_errors(404))
    def get_profile(
        user_id: int,
        profile_repo: ProfileRepository = Depends(get_profile_repo),
    ) -> ProfileResponse:
        return ProfileResponse.from_profile(profile_repo.find_by_user_id(user_id))

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


def build_app(settings: Settings | None = None) -> FastAPI:
    """Build the production app: real repositories, adapters and the DB pool."""
    settings = settings or Settings()
    Log.configure(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        init_pool(settings)
        Log.info("API started")
        try:
            yield
        finally:
            close_pool()

    engine = MatchingEngine(
        TenderRepository(),
        default_limit=settings.match_default_limit,
        max_limit=settings.match_max_limit,
        fallback_score_ceiling=settings.match_fallback_score_ceiling,
    )
    return create_app(
        tracker=build_tracker(settings),
        engine=engine,
        profile_repo=ProfileRepository(),
        max_upload_bytes=settings.max_upload_bytes,
        cors_origins=settings.api_cors_origins,
        lifespan=lifespan,
    )
