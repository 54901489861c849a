# app/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Account Service API"

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Create tables on startup (development only, use aerich migrations otherwise)
    db_generate_schemas: bool = _env_flag("DB_GENERATE_SCHEMAS", "false")

    # GET /users is public unless this is turned off
    public_user_list: bool = _env_flag("PUBLIC_USER_LIST", "true")

    # Avatar upload limits
    avatar_max_bytes: int = int(os.getenv("AVATAR_MAX_BYTES", "1000000"))
    avatar_size: int = int(os.getenv("AVATAR_SIZE", "250"))

    # Upper bound for a single HTTP request, in seconds
    request_timeout_seconds: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

    # SMTP settings for welcome/farewell mail; mail is skipped when host or sender is missing
    smtp_host: str | None = os.getenv("SMTP_HOST")
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
    smtp_username: str | None = os.getenv("SMTP_USERNAME")
    smtp_password: str | None = os.getenv("SMTP_PASSWORD")
    smtp_use_tls: bool = _env_flag("SMTP_USE_TLS", "true")
    mail_from: str | None = os.getenv("MAIL_FROM")

settings = Settings()  # Instantiate configuration
