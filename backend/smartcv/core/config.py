from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    DATABASE_URL: str = "sqlite:///./smartcv.db"

    # Google Gemini API
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Google Sign-In (OAuth client used to verify ID tokens)
    GOOGLE_CLIENT_ID: str = ""

    # Cloudinary blob storage
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    CLOUDINARY_FOLDER: str = "smart-cv-uploads"

    # JWT Authentication
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Uploads
    MAX_UPLOAD_SIZE_MB: int = 10

    # When true, GET /cvs/{id} applies the same ownership check as PUT/DELETE
    ENFORCE_CV_READ_OWNERSHIP: bool = False

    # Application
    APP_NAME: str = "Smart CV Assistant"
    DEBUG: bool = True
    BACKEND_CORS_ORIGINS: str = (
        "http://localhost:5173,"
        "http://127.0.0.1:5173"
    )


settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the process settings (overridable in tests)."""
    return settings
