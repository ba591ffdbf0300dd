"""FastAPI application entrypoint for autodocify service mode."""

from __future__ import annotations

import asyncio
import base64
import binascii
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..config import load_config
from ..errors import (
    ConfigurationError,
    GenerationFailure,
    InvalidSection,
    InvalidTone,
    SchemaViolation,
    SessionError,
    ValidationError,
)
from ..inputs import FIELD_FILE
from ..logging import get_logger
from ..models import DocumentSet, SubmissionForm, UploadedArchive
from ..session import DocumentSession

T = TypeVar("T")

logger = get_logger("service")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ZipUpload(_CamelModel):
    filename: str = "upload.zip"
    content_type: str
    data: str


class GenerateRequest(_CamelModel):
    github_url: Optional[str] = None
    zip_file: Optional[ZipUpload] = None
    codebase_input: Optional[str] = None
    ui_description: Optional[str] = None
    ui_only_mode: bool = False


class RegenerateRequest(_CamelModel):
    section: str
    tone: str
    custom_prompt: Optional[str] = None


class EditRequest(_CamelModel):
    content: str


class Documents(_CamelModel):
    readme: Optional[str] = None
    api_docs: Optional[str] = None
    user_manual: Optional[str] = None
    faq: Optional[str] = None


class GenerateResponse(_CamelModel):
    data: Optional[Documents] = None
    message: str


class RegeneratedSection(_CamelModel):
    section: str
    regenerated_content: str


class RegenerateResponse(_CamelModel):
    data: Optional[RegeneratedSection] = None
    message: str


class ArchiveResult(_CamelModel):
    file_name: str
    mime_type: str
    content: str
    message: str


class ArchiveResponse(_CamelModel):
    data: ArchiveResult
    message: str


class SectionResult(_CamelModel):
    section: str
    path: str
    status: str
    error: Optional[str] = None


class PushResult(_CamelModel):
    success: bool
    results: List[SectionResult]


class PushResponse(_CamelModel):
    data: PushResult
    message: str


class HealthResponse(BaseModel):
    status: str


def _default_session() -> DocumentSession:
    return DocumentSession.from_config(load_config())


def create_app(
    session_factory: Callable[[], DocumentSession] = _default_session,
) -> FastAPI:
    """Create the FastAPI application exposing the documentation pipeline."""

    app = FastAPI(title="AutoDocify Service", version="1.0.0")
    # One session per application instance; concurrent sessions are not shared.
    app.state.session = session_factory()

    def get_session() -> DocumentSession:
        return app.state.session

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse, response_model_by_alias=True)
    async def generate(payload: GenerateRequest) -> GenerateResponse:
        form = _to_form(payload)
        session = get_session()
        documents = await _run_blocking(lambda: session.generate(form))
        if documents is None:
            return GenerateResponse(message="Superseded by a newer submission.")
        return GenerateResponse(data=_to_documents(documents), message="Documentation generated.")

    @app.post("/regenerate", response_model=RegenerateResponse, response_model_by_alias=True)
    async def regenerate(payload: RegenerateRequest) -> RegenerateResponse:
        session = get_session()
        content = await _run_blocking(
            lambda: session.regenerate(payload.section, payload.tone, payload.custom_prompt)
        )
        if content is None:
            return RegenerateResponse(message="Superseded by a newer submission.")
        return RegenerateResponse(
            data=RegeneratedSection(section=payload.section, regenerated_content=content),
            message=f"Regenerated {payload.section} with a {payload.tone} tone.",
        )

    @app.get("/documents", response_model=Documents, response_model_by_alias=True)
    async def documents() -> Documents:
        return _to_documents(get_session().snapshot())

    @app.put("/documents/{section}", response_model=Documents, response_model_by_alias=True)
    async def edit_section(section: str, payload: EditRequest) -> Documents:
        session = get_session()
        session.edit(section, payload.content)
        return _to_documents(session.snapshot())

    @app.post("/export/archive", response_model=ArchiveResponse, response_model_by_alias=True)
    async def export_archive() -> ArchiveResponse:
        archive = get_session().export_archive()
        result = ArchiveResult(
            file_name=archive.file_name,
            mime_type=archive.mime_type,
            content=archive.content,
            message=archive.message,
        )
        return ArchiveResponse(data=result, message=archive.message)

    @app.post("/export/remote", response_model=PushResponse, response_model_by_alias=True)
    async def export_remote() -> PushResponse:
        session = get_session()
        report = await _run_blocking(session.push)
        results = [
            SectionResult(
                section=outcome.section,
                path=outcome.path,
                status=outcome.status,
                error=outcome.error,
            )
            for outcome in report.outcomes
        ]
        message = "Export finished." if report.success else "Export finished with failures."
        return PushResponse(data=PushResult(success=report.success, results=results), message=message)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})

    @app.exception_handler(InvalidSection)
    async def invalid_section_handler(_: Request, exc: InvalidSection) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(InvalidTone)
    async def invalid_tone_handler(_: Request, exc: InvalidTone) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(_: Request, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(SessionError)
    async def session_error_handler(_: Request, exc: SessionError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(GenerationFailure)
    async def generation_failure_handler(_: Request, exc: GenerationFailure) -> JSONResponse:
        if isinstance(exc, SchemaViolation):
            logger.warning("Generation response violated the schema: %s", exc)
        else:
            logger.error("Generation failed: %s", exc)
        return JSONResponse(status_code=502, content={"detail": exc.reason})

    return app


async def _run_blocking(func: Callable[[], T]) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def _to_form(payload: GenerateRequest) -> SubmissionForm:
    archive = None
    if payload.zip_file is not None:
        try:
            data = base64.b64decode(payload.zip_file.data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(FIELD_FILE, "Archive data must be base64 encoded.") from exc
        archive = UploadedArchive(
            filename=payload.zip_file.filename,
            content_type=payload.zip_file.content_type,
            data=data,
        )
    return SubmissionForm(
        github_url=payload.github_url,
        zip_file=archive,
        codebase_text=payload.codebase_input,
        ui_description=payload.ui_description,
        ui_only_mode=payload.ui_only_mode,
    )


def _to_documents(documents: DocumentSet) -> Documents:
    values: Dict[str, Any] = {
        "readme": documents.readme,
        "api_docs": documents.api_docs,
        "user_manual": documents.user_manual,
        "faq": documents.faq,
    }
    return Documents(**values)


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
