import os

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:3002",
    "http://localhost:3005",
    "http://localhost:5173",
    "http://localhost:5174",
]


class Settings:
    def __init__(self):
        self.app_name = "Invoice Mailer"
        self.api_version = "1.0.0"
        self.environment = os.getenv("APP_ENV", "development")
        self.secret_key = os.getenv("SECRET_KEY", "CHANGE_ME")
        self.SECRET_KEY = self.secret_key
        self.access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.access_token_expire_minutes
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./invoices.db")
        self.upload_dir = os.getenv("UPLOAD_DIR", "uploads")
        self.app_base_url = os.getenv("APP_BASE_URL", "http://localhost:8000").rstrip("/")
        self.brevo_api_key = os.getenv("BREVO_API_KEY", "")
        self.brevo_base_url = os.getenv("BREVO_BASE_URL", "https://api.brevo.com/v3").rstrip("/")
        self.sender_email = os.getenv("BREVO_SENDER_EMAIL", "no-reply@yourdomain.com")
        self.sender_name = os.getenv("BREVO_SENDER_NAME", "Invoice System")
        origins = os.getenv("CORS_ORIGINS")
        self.cors_origins = (
            [origin.strip() for origin in origins.split(",") if origin.strip()] if origins else list(DEFAULT_CORS_ORIGINS)
        )
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
