import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing"""


class Settings:
    """Process-wide configuration read from the environment"""

    def __init__(self):
        self.supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
        self.supabase_service_key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

        self.host: str = os.getenv("API_HOST", "0.0.0.0")
        self.port: int = int(os.getenv("API_PORT", 8000))
        self.environment: str = os.getenv("ENVIRONMENT", "development")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        self.cors_origins: List[str] = [
            origin.strip()
            for origin in os.getenv("CLIENT_URL", "").split(",")
            if origin.strip()
        ]

        self.invoice_prefix: str = os.getenv("INVOICE_PREFIX", "CI")
        self.business_name: str = os.getenv("BUSINESS_NAME", "Crown Interiors")
        self.business_tagline: str = os.getenv(
            "BUSINESS_TAGLINE", "Quality Carpentry & Interior Works"
        )
        self.storage_bucket: str = os.getenv("STORAGE_BUCKET", "invoices")

        self.rate_limit_max: int = int(os.getenv("RATE_LIMIT_MAX", 100))
        self.rate_limit_window: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", 15 * 60))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def require_supabase(self):
        if not self.supabase_url or not self.supabase_service_key:
            raise ConfigurationError(
                "Missing Supabase environment variables. "
                "Check SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY in .env"
            )
        return self.supabase_url, self.supabase_service_key


@lru_cache()
def get_settings() -> Settings:
    return Settings()
