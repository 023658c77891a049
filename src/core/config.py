from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("invoice-extraction-api", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Server
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(5000, alias="PORT")

    # CORS allowed origins (comma-separated list)
    cors_origins: str = Field("*", alias="CORS_ORIGINS")

    # Persistence
    storage_backend: Literal["sqlite", "memory"] = Field("sqlite", alias="STORAGE_BACKEND")
    database_path: str = Field("invoices.db", alias="DATABASE_PATH")

    # Uploads
    upload_dir: str = Field("uploads", alias="UPLOAD_DIR")
    upload_max_bytes: int = Field(10 * 1024 * 1024, alias="UPLOAD_MAX_BYTES")
    upload_allowed_extensions: str = Field(".jpg,.jpeg,.png,.pdf", alias="UPLOAD_ALLOWED_EXTENSIONS")
    uploads_public_path: str = Field("/uploads", alias="UPLOADS_PUBLIC_PATH")

    # Extraction pipeline: "direct" sends the file to the model, "ocr" sends OCR text
    extraction_strategy: Literal["direct", "ocr"] = Field("direct", alias="EXTRACTION_STRATEGY")

    # LLM (OpenAI-compatible endpoint)
    llm_base_url: str | None = Field(default=None, alias="LLM_BASE_URL")
    llm_api_key: str | None = Field(default=None, alias="LLM_API_KEY")
    llm_deployment: str | None = Field(default=None, alias="LLM_DEPLOYMENT")
    llm_timeout_seconds: float = Field(60.0, alias="LLM_TIMEOUT_SECONDS")

    # Azure Document Intelligence (OCR)
    az_di_endpoint: str | None = Field(default=None, alias="AZ_DI_ENDPOINT")
    az_di_api_key: str | None = Field(default=None, alias="AZ_DI_API_KEY")

    # Listing
    page_size_default: int = Field(20, alias="PAGE_SIZE_DEFAULT")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def allowed_extensions(self) -> set[str]:
        return {
            ext.strip().lower() if ext.strip().startswith(".") else f".{ext.strip().lower()}"
            for ext in self.upload_allowed_extensions.split(",")
            if ext.strip()
        }

    @property
    def llm_configured(self) -> bool:
        return bool(self.llm_api_key and self.llm_deployment)

    @property
    def ocr_configured(self) -> bool:
        return bool(self.az_di_endpoint and self.az_di_api_key)

settings = Settings()
