from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from ..core.logging import setup_logging
from ..core.config import settings
from ..core.exceptions import InvoiceAPIError
from .routers import health, invoices, upload

logger = setup_logging()
app = FastAPI(title="Invoice Extraction API")


@app.exception_handler(InvoiceAPIError)
async def invoice_api_exception_handler(request: Request, exc: InvoiceAPIError):
    if exc.status_code >= 500:
        logger.bind(details=exc.details).error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Add custom exception handler for validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": "Invalid request", "details": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


# CORS_ORIGINS can be set in .env as comma-separated list
# Example: CORS_ORIGINS=http://localhost:3000,https://your-frontend.com
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials="*" not in allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(upload.router)
app.include_router(invoices.router)

# Uploaded files are served verbatim, so anyone who can guess a stored name can fetch it
Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount(settings.uploads_public_path, StaticFiles(directory=settings.upload_dir), name="uploads")


def run():
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    uvicorn.run("src.api.main:app", host=settings.host, port=settings.port)
