from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docworker"
    db_username: str = "docworker"
    db_password: str = "secret"
    db_pool_max_size: int = 10

    queue_concurrency: int = 5
    max_job_attempts: int = 3
    visibility_timeout_seconds: int = 300
    retry_delay_seconds: int = 10
    job_poll_interval_seconds: int = 5

    storage_backend: str = "local"
    storage_root: str = "/app/files"
    s3_endpoint_url: str = ""
    s3_bucket: str = "uploads"
    s3_access_key: str = ""
    s3_secret_key: str = ""
    s3_region: str = "us-east-1"

    pdf_engine: str = "pdfplumber"
    ocr_required_types: str = "pdf,png,jpg,jpeg"
    ocr_languages: str = "vie+eng"
    ocr_dpi: int = 300
    tesseract_cmd: str = ""
    pdf_ocr_min_chars_per_page: int = 20

    classification_lexicon_path: str = ""
    keyword_limit: int = 10

    notifier: str = "log"

    def ocr_types(self) -> frozenset[str]:
        """File extensions (lowercase, no dot) that require OCR at upload time."""
        return frozenset(
            part.strip().lower().lstrip(".")
            for part in self.ocr_required_types.split(",")
            if part.strip()
        )
