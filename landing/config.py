from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Контент сайта
    CONTENT_DIR: str = "locales"
    CONTENT_FILENAME: str = "common.json"
    DEFAULT_LANGUAGE: str = "ru"
    SUPPORTED_LANGUAGES: list[str] | str = Field(default_factory=lambda: ["ru", "en"])

    # Админ-панель
    ADMIN_PASSWORD: str = ""
    ADMIN_SESSION_TTL_MINUTES: int = Field(default=120, ge=1, le=1440)

    # Публикация (git)
    GIT_REPO_DIR: str = "."
    GIT_REMOTE: str = "origin"
    GIT_BRANCH: str = "main"
    GIT_COMMIT_PREFIX: str = "Update content via admin panel"
    GIT_TIMEOUT_SECONDS: float = 60.0

    # Логи
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Веб-сервер
    WEB_HOST: str = "0.0.0.0"
    WEB_PORT: int = 8080
    CORS_ORIGINS: list[str] | str = Field(default_factory=lambda: ["*"])

    # Заявки
    CONTACT_DELAY_SECONDS: float = Field(default=0.5, ge=0.0)
    QUICK_CONSULTATION_DELAY_SECONDS: float = Field(default=0.8, ge=0.0)

    # Прокси (если нужно)
    HTTP_PROXY_URL: str | None = None

    # HTTP клиенты
    HTTP_TIMEOUT_CONNECT: float = 3.0
    HTTP_TIMEOUT_READ: float = 60.0
    HTTP_TIMEOUT_WRITE: float = 15.0
    HTTP_TIMEOUT_TOTAL: float = 90.0
    HTTP_RETRY_ATTEMPTS: int = 1
    HTTP_RETRY_BACKOFF_INITIAL: float = 0.5
    HTTP_RETRY_BACKOFF_MAX: float = 8.0
    HTTP_RETRY_STATUS_CODES: tuple[int, ...] = (500, 502, 503, 504)
    HTTP_CIRCUIT_BREAKER_MAX_FAILURES: int = 5
    HTTP_CIRCUIT_BREAKER_BASE_DELAY: float = 1.0
    HTTP_CIRCUIT_BREAKER_MAX_DELAY: float = 30.0

    # Генерация для текстового квеста
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_IMAGE_MODEL: str = "gpt-image-1"
    ADVENTURE_IMAGE_SIZE: str = "1536x1024"  # 1344x768 for z-ai style providers
    ADVENTURE_IMAGES_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("SUPPORTED_LANGUAGES", "CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_csv(cls, v):
        if v in (None, ""):
            return []
        if isinstance(v, (list, tuple, set)):
            return [str(item).strip() for item in v if str(item).strip()]
        return [part.strip() for part in str(v).split(",") if part.strip()]

    @field_validator("SUPPORTED_LANGUAGES", mode="after")
    @classmethod
    def _lower_languages(cls, v):
        return [code.lower() for code in v]

    @field_validator("DEFAULT_LANGUAGE", mode="before")
    @classmethod
    def _lower_default(cls, v):
        return str(v or "ru").strip().lower()

    @property
    def languages(self) -> list[str]:
        """Supported language codes with the default one always first."""

        codes = [self.DEFAULT_LANGUAGE]
        for code in self.SUPPORTED_LANGUAGES:
            if code not in codes:
                codes.append(code)
        return codes


settings = Settings()
