import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Body, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .db import Database, get_session
from .errors import BookstoreError, Internal, ValidationError, status_for
from .middleware import install_middleware
from .models import BookEnvelope, BookList, Message
from .repository import BookRepository
from .telemetry import configure_logging, configure_otel, instrument_app
from .validation import ValidationMode, describe_errors, validate

logger = logging.getLogger(__name__)

router = APIRouter()


def get_book_repository(session: Session = Depends(get_session)) -> BookRepository:
    return BookRepository(session)


@router.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "ok"}


@router.get("/books", response_model=BookList, tags=["books"])
def list_books(repository: BookRepository = Depends(get_book_repository)) -> BookList:
    return BookList(books=repository.list_all())


@router.post("/books", response_model=BookEnvelope, status_code=status.HTTP_201_CREATED, tags=["books"])
def create_book(payload: Any = Body(...), repository: BookRepository = Depends(get_book_repository)) -> BookEnvelope:
    fields = validate(payload, ValidationMode.CREATE)
    return BookEnvelope(book=repository.create(fields))


@router.get("/books/{isbn}", response_model=BookEnvelope, tags=["books"])
def get_book(isbn: str, repository: BookRepository = Depends(get_book_repository)) -> BookEnvelope:
    return BookEnvelope(book=repository.get_by_isbn(isbn))


@router.put("/books/{isbn}", response_model=BookEnvelope, tags=["books"])
def update_book(
    isbn: str,
    payload: Any = Body(...),
    repository: BookRepository = Depends(get_book_repository),
) -> BookEnvelope:
    fields = validate(payload, ValidationMode.UPDATE)
    return BookEnvelope(book=repository.update(isbn, fields))


@router.delete("/books/{isbn}", response_model=Message, tags=["books"])
def delete_book(isbn: str, repository: BookRepository = Depends(get_book_repository)) -> Message:
    repository.delete(isbn)
    return Message(message="Book deleted")


async def bookstore_error_handler(request: Request, exc: BookstoreError) -> JSONResponse:
    status_code = status_for(exc)
    log = logger.warning if status_code >= 500 else logger.info
    log(
        "request.failed",
        extra={"path": request.url.path, "method": request.method, "status": status_code, "error": exc.message},
    )
    return JSONResponse(status_code=status_code, content=exc.to_payload(status_code))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await bookstore_error_handler(request, ValidationError(details=describe_errors(exc.errors())))


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("store.failure", extra={"path": request.url.path, "method": request.method})
    return await bookstore_error_handler(request, Internal())


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled", extra={"path": request.url.path, "method": request.method})
    return await bookstore_error_handler(request, Internal())


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or get_settings()
    database = database or Database.from_settings(settings)
    configure_logging(settings)
    if settings.otel_enabled:
        configure_otel(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.create_all()
        yield
        database.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="A small Books API over a single relational table keyed by ISBN.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    app.include_router(router)
    app.add_exception_handler(BookstoreError, bookstore_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
    install_middleware(app, settings)

    if settings.otel_enabled:
        instrument_app(app)
    return app
