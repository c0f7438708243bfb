import os
from dotenv import load_dotenv

load_dotenv()


def _split(value: str):
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    # Gemini Configuration
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "") or None
    GEMINI_GENERATION_MODEL = os.getenv("GEMINI_GENERATION_MODEL", "gemini-2.5-flash")
    GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "0.4"))
    GEMINI_MAX_OUTPUT_TOKENS = int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", "4096"))
    PROMPT_TEMPLATE_PATH = os.getenv("PROMPT_TEMPLATE_PATH", "") or None

    # Record store (Postgres)
    DATABASE_URL = os.getenv("DATABASE_URL", "") or None

    # Object store
    STORAGE_URL = (os.getenv("STORAGE_URL", "") or "").rstrip("/") or None
    STORAGE_SERVICE_KEY = os.getenv("STORAGE_SERVICE_KEY", "") or None
    STORAGE_TIMEOUT = int(os.getenv("STORAGE_TIMEOUT", "60"))
    PAPER_BUCKET = os.getenv("PAPER_BUCKET", "exam-papers")
    MARKING_SCHEME_BUCKET = os.getenv("MARKING_SCHEME_BUCKET", "marking-schemes")

    # CORS Configuration
    CORS_ORIGINS = _split(os.getenv("CORS_ORIGINS", "*"))
    CORS_ALLOW_METHODS = _split(os.getenv("CORS_ALLOW_METHODS", "GET,POST,PUT,DELETE,OPTIONS"))
    CORS_ALLOW_HEADERS = _split(
        os.getenv("CORS_ALLOW_HEADERS", "Content-Type,Authorization,X-Client-Info,Apikey")
    )

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    def missing_storage_settings(self):
        """Names of unset record/object store settings"""
        required = {
            "DATABASE_URL": self.DATABASE_URL,
            "STORAGE_URL": self.STORAGE_URL,
            "STORAGE_SERVICE_KEY": self.STORAGE_SERVICE_KEY,
        }
        return [name for name, value in required.items() if not value]

    @property
    def gemini_configured(self) -> bool:
        return bool(self.GEMINI_API_KEY)


config = Config()
