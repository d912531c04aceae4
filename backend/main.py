import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes.agents import router as agents_router
from api.routes.analysis import router as analysis_router
from api.routes.users import router as users_router
from api.routes.zotero import router as zotero_router
from src.config.log import setup_logging
from src.database.db.models import Base
from src.database.db.session import engine
from src.exceptions import InputValidationError, PaperCardsError, UnexpectedServerError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Create any missing tables on startup
    Base.metadata.create_all(bind=engine)
    logger.info("🚀 PaperCards API started")
    yield


app = FastAPI(title="PaperCards API", lifespan=lifespan)

# 开发环境允许所有来源，生产环境限制为指定来源
is_dev = os.getenv("ENV", "development") == "development"
cors_origins = (
    ["*"]
    if is_dev
    else [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True if not is_dev else False,  # "*" 时不能设置 credentials=True
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.include_router(agents_router)
app.include_router(analysis_router)
app.include_router(users_router)
app.include_router(zotero_router)


@app.exception_handler(PaperCardsError)
async def paper_cards_error_handler(request: Request, exc: PaperCardsError):
    content = {"error": exc.kind, "details": exc.message}
    if isinstance(exc, UnexpectedServerError) and exc.error_type:
        content["type"] = exc.error_type
    if exc.status_code >= 500:
        logger.error(f"💥 {request.method} {request.url.path}: {exc.kind}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    err = InputValidationError("; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in exc.errors()
    ))
    return JSONResponse(status_code=err.status_code, content={"error": err.kind, "details": err.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": UnexpectedServerError.__name__,
            "details": str(exc),
            "type": exc.__class__.__name__,
        },
    )


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}
