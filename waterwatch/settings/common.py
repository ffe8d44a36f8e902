# Standard library imports
from typing import Annotated, Any, Literal

# Third-party imports
from pydantic import AnyUrl, BeforeValidator, computed_field
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)

class CommonSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # General settings
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["dev", "staging", "production"] = "dev"
    DEBUG_MODE: bool = False
    PROJECT_NAME: str = "Community Water Watch"

    # Backend credentials: the service refuses to start without them
    POSTGRES_SERVER: str
    POSTGRES_PORT: int
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str

    # Overrides the computed Postgres URI (tests point this at sqlite+aiosqlite)
    DATABASE_URL: str | None = None

    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return str(
            MultiHostUrl.build(
                scheme="postgresql+asyncpg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_SERVER,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )

    # CORS settings
    BACKEND_CORS_ORIGINS: Annotated[list[AnyUrl] | str, BeforeValidator(parse_cors)] = [
        AnyUrl("http://localhost/"),
        AnyUrl("http://localhost:5173/"),
        AnyUrl("http://localhost:8000/"),
    ]

    @computed_field  # type: ignore[prop-decorator, misc]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Optional settings
    SENTRY_DSN: str | None = None

    # JWT settings
    JWT_ALGORITHM: str = "HS256"
    JWT_SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day

    # Create missing tables when the backend client opens (no migration tool)
    CREATE_SCHEMA_ON_STARTUP: bool = True

    # Redis settings (real-time change feed)
    REDIS_URL: str
    REALTIME_CHANNEL_PREFIX: str = "realtime"

    # Admin account seeded at startup
    ADMIN_EMAIL: str = "admin@waterwatch.local"
    ADMIN_PASSWORD: str = "change-me-please"

    # Map defaults
    DEFAULT_CENTER: tuple[float, float] = (28.6139, 77.2090)  # New Delhi
    DEFAULT_ZOOM: int = 10
    GEOLOCATION_TIMEOUT_MS: int = 5000
    GEOLOCATION_URL: str = "http://ip-api.com/json/{ip}"
    MAP_SESSION_IDLE_SECONDS: int = 60 * 30  # 30 minutes
    MAX_MAP_SESSIONS: int = 1000

    # Weather settings
    OPENWEATHER_API_KEY: str | None = None
    OPENWEATHER_BASE_URL: str = "https://api.openweathermap.org/data/2.5"
    WEATHER_TIMEOUT_SECONDS: float = 10.0

    # Generative model settings
    GEMINI_API_KEY: str | None = None
    GEMINI_MODELS: list[str] = [
        "gemini-2.0-flash",
        "gemini-1.5-pro",
        "gemini-pro",
        "gemini-1.5-pro-latest",
    ]
    GEMINI_MAX_OUTPUT_TOKENS: int = 1000
    GEMINI_TEMPERATURE: float = 0.7
    GEMINI_MAX_RETRIES: int = 3
    GEMINI_RETRY_DELAY_SECONDS: float = 1.0

    # Issue listings
    MY_REPORTS_LIMIT: int = 100
    NOTIFICATIONS_LIMIT: int = 20
