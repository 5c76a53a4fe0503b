from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

LOG_LEVELS = ("debug", "info", "warn", "warning", "error")


class ClientLogRecord(BaseModel):
    """Log line shipped by the browser. Unknown fields are kept as context."""
    model_config = ConfigDict(extra="allow")

    level: str = "info"
    message: Optional[str] = None

    @field_validator("level")
    @classmethod
    def _level(cls, v: str) -> str:
        v = (v or "info").strip().lower()
        return v if v in LOG_LEVELS else "info"
