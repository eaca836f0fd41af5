"""
Application settings for the customers and receipts backends.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Customers database
    DATABASE_URL: str = "sqlite:///./data/customers.db"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:4200", "http://localhost:5173"]

    # Local storage
    DATA_DIR: str = "./data"

    # Customer screen
    SEARCH_MIN_CHARS: int = 2
    MESSAGE_TTL_SECONDS: int = 3
    IMPORT_MAX_BYTES: int = 5 * 1024 * 1024

    # Receipt form / OCR
    OCR_LANGUAGE: str = "chi_tra+eng"
    TESSERACT_CMD: Optional[str] = None
    IMAGE_HEIGHT_DEFAULT: int = 160
    IMAGE_HEIGHT_MIN: int = 120
    IMAGE_HEIGHT_MAX: int = 320
    PRINT_IMAGE_SCALE: float = 1.4
    REPORT_OWNER: str = "Victor"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
