import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.paths import resolve_backend_path


def _env_files() -> list[str]:
    base = resolve_backend_path(".env")
    env = os.getenv("APPLY_ENVIRONMENT", "").strip().lower()
    files = [str(base)]
    if env and env != "development":
        files.append(str(resolve_backend_path(f".env.{env}")))
    else:
        files.append(str(resolve_backend_path(".env.local")))
    return files


class Settings(BaseSettings):
    app_name: str = "Candidate Apply"
    environment: str = "development"

    runs_api_url: str = Field(
        default="https://api.test.smartytalent.eu/v1/runs",
        validation_alias=AliasChoices("APPLY_RUNS_API_URL", "RUNS_API_URL"),
    )
    runs_api_key: str = ""
    runs_api_timeout_seconds: float = 15

    default_tenant: str = "default"
    global_theme_tenant: str = "smartytalent"
    theme_base_url: str = "https://cdn.smartytalent.eu"
    cdn_base_url: str = "https://cdn.test-smartytalent.eu"
    cdn_timeout_seconds: float = 5

    default_language: str = "en"
    supported_languages: list[str] = ["en", "pl"]
    language_cookie_name: str = "st_lang"
    language_cookie_max_age: int = 60 * 60 * 24 * 365
    tracking_cookie_name: str = "st_tracking"
    tracking_cookie_max_age: int = 60 * 30
    tracking_chain_max: int = 10

    max_file_size: int = 10 * 1024 * 1024
    allowed_file_types: list[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ]
    allowed_file_extensions: list[str] = [".pdf", ".doc", ".docx"]

    publish_apply_event_url: str = Field(
        default="",
        validation_alias=AliasChoices("APPLY_PUBLISH_APPLY_EVENT_URL", "PUBLISH_APPLY_EVENT_URL"),
    )
    sm_env: str = Field(default="dev", validation_alias=AliasChoices("APPLY_SM_ENV", "SM_ENV"))
    redis_url: str = Field(default="", validation_alias=AliasChoices("APPLY_REDIS_URL", "REDIS_URL"))

    google_application_credentials: str = Field(
        default="secrets/google-service-account.json",
        validation_alias=AliasChoices(
            "APPLY_GOOGLE_APPLICATION_CREDENTIALS",
            "GOOGLE_APPLICATION_CREDENTIALS",
        ),
    )
    drive_root_folder_id: str = Field(
        default="",
        validation_alias=AliasChoices("APPLY_DRIVE_ROOT_FOLDER_ID", "APPLY_BUCKET_FOLDER_ID"),
    )

    apply_rate_limit_per_min: int = 10
    apply_rate_limit_window_seconds: int = 60

    model_config = SettingsConfigDict(env_prefix="APPLY_", env_file=_env_files(), extra="ignore")

    @property
    def event_bus_name(self) -> str:
        return f"sm-{self.sm_env}-app-apply-eventbus"

    @property
    def event_source(self) -> str:
        return f"sm:{self.sm_env}:app"


settings = Settings()


def is_valid_file_type(filename: str | None, content_type: str | None) -> bool:
    ext = Path(filename or "").suffix.lower()
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    return mime in settings.allowed_file_types or ext in settings.allowed_file_extensions


def is_valid_file_size(size: int) -> bool:
    return size <= settings.max_file_size
