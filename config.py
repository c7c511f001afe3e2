import os
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Settings(BaseModel):
    """Process configuration, read once at startup."""
    model_config = ConfigDict(frozen=True)

    google_cloud_project: Optional[str] = None
    google_cloud_location: str = "us-central1"
    gemini_model: str = "gemini-2.5-pro"
    google_client_id: Optional[str] = None
    rate_limit_per_minute: int = 30
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    port: int = 3000

    @property
    def gemini_configured(self) -> bool:
        return bool(self.google_cloud_project)

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            google_cloud_project=os.getenv("GOOGLE_CLOUD_PROJECT") or None,
            google_cloud_location=os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1"),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-pro"),
            google_client_id=os.getenv("GOOGLE_CLIENT_ID") or None,
            rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "30")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=int(os.getenv("PORT", "3000")),
        )
