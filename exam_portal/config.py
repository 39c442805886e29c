# exam_portal/config.py
import os
from typing import List
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application configuration read from the environment."""

    def __init__(self):
        self.app_name = os.getenv("APP_NAME", "Exam Portal API")
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./exam_portal.db")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

        # Cosmetic latency applied to login and register
        self.auth_delay_seconds = float(os.getenv("AUTH_DELAY_SECONDS", "0.8"))

        self.pass_mark = int(os.getenv("PASS_MARK", "60"))
        self.cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
