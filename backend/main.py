from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging

from api_graph import router as graph_router
from api_health import router as health_router
from api_operations import router as operations_router
from config import CORS_ORIGINS
from errors import (
    ConceptGraphError,
    ExtractionError,
    GatewayError,
    GraphCycleError,
    InputValidationError,
    OutputValidationError,
)

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger("kflow")


app = FastAPI(
    title="KFlow Backend",
    description="LLM-driven concept graph operations: expand, synthesize, explore and trace knowledge graphs.",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(operations_router)
app.include_router(graph_router)


def status_code_for(exc: ConceptGraphError) -> int:
    if isinstance(exc, InputValidationError):
        return 400
    if isinstance(exc, GraphCycleError):
        return 409
    if isinstance(exc, (GatewayError, ExtractionError, OutputValidationError)):
        return 502
    return 500


# Centralized error handling
@app.exception_handler(ConceptGraphError)
async def concept_graph_exception_handler(request: Request, exc: ConceptGraphError):
    """
    Map operation failures onto HTTP status codes.
    Caller mistakes (400, 409) log at WARNING, backend failures (502) at ERROR.
    """
    status_code = status_code_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        extra={
            "status_code": status_code,
            "method": request.method,
            "path": request.url.path,
            "exception_type": type(exc).__name__,
        },
    )

    content = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, GraphCycleError):
        content["cycle"] = exc.cycle
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Handle HTTP exceptions (4xx, 5xx).
    Logs the error with appropriate level and returns JSON response.
    """
    if exc.status_code >= 500:
        logger.error(
            f"HTTP {exc.status_code} error on {request.method} {request.url.path}",
            extra={
                "status_code": exc.status_code,
                "method": request.method,
                "path": request.url.path,
                "detail": exc.detail,
            },
        )
    else:
        logger.warning(
            f"HTTP {exc.status_code} error on {request.method} {request.url.path}: {exc.detail}",
            extra={
                "status_code": exc.status_code,
                "method": request.method,
                "path": request.url.path,
                "detail": exc.detail,
            },
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle request validation errors (422).
    These are client errors, so log at WARNING level.
    """
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "errors": exc.errors(),
        },
    )
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError):
    # pydantic v2 may put the raw exception object under "ctx"
    return [
        {k: (v if k != "ctx" else {ck: str(cv) for ck, cv in v.items()}) for k, v in err.items()}
        for err in exc.errors()
    ]


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    Logs full stack trace but returns sanitized error message to client.
    """
    logger.exception(
        f"Unhandled exception on {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


@app.get("/")
def read_root():
    return {"status": "ok", "message": "KFlow backend is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
