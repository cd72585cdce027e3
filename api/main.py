import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core import db
from core.config import get_settings
from core.errors import NotFoundError, StorageError, ValidationError
from core.log import configure_logging
from persons import router as persons_router
from persons.enrichment import EnrichmentClient
from persons.service import PersonService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    # Initialize the DB pool and the outbound HTTP client once per process.
    await db.init_pool(settings)
    enricher = EnrichmentClient.from_settings(settings)
    try:
        if settings.run_migrations:
            await db.apply_migrations()
        app.state.person_service = PersonService(enricher)
        yield
    finally:
        await enricher.aclose()
        await db.close_pool()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _validation_error(_: Request, exc: ValidationError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


async def _request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request."
    logger.debug("invalid_request errors=%s", errors)
    return _error(status.HTTP_400_BAD_REQUEST, message)


async def _not_found(_: Request, exc: NotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


async def _storage_error(_: Request, exc: StorageError) -> JSONResponse:
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal storage error")


def create_app(*, use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(title="persons api", lifespan=lifespan if use_lifespan else None)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(StorageError, _storage_error)
    app.include_router(persons_router.router, tags=["persons"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "persons api"}

    return app


load_dotenv()
configure_logging(get_settings().log_level)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port)
