"""Service configuration read from the environment."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict

from chiptable_backend.engine.models import MAX_SEATS


class Settings(BaseModel):
    max_seats: int = MAX_SEATS
    write_retries: int = 5
    subscriber_queue_size: int = 16
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_env(cls) -> Settings:
        origins = os.environ.get("CHIPTABLE_CORS_ORIGINS", "*")
        return cls(
            max_seats=int(os.environ.get("CHIPTABLE_MAX_SEATS", str(MAX_SEATS))),
            write_retries=int(os.environ.get("CHIPTABLE_WRITE_RETRIES", "5")),
            subscriber_queue_size=int(os.environ.get("CHIPTABLE_SUBSCRIBER_QUEUE_SIZE", "16")),
            log_level=os.environ.get("CHIPTABLE_LOG_LEVEL", "INFO").upper(),
            cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
        )


settings = Settings.from_env()
