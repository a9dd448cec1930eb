from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "bpmnhub"
    db_username: str = "bpmnhub"
    db_password: str = "secret"

    max_upload_size_bytes: int = 50 * 1024 * 1024
    accepted_upload_extensions: list[str] = [".pdf", ".doc", ".docx", ".txt"]
    upload_timeout_seconds: int = 300

    max_result_attempts: int = 3
    result_poll_interval_seconds: int = 5

    default_created_by: str = "system"
