"""Beklenmeyen (500) hatalar: main.py'deki genel handler her birini bir satır olarak yazar."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class ErrorLog(SQLModel, table=True):
    __tablename__ = "error_logs"

    id: int | None = Field(default=None, primary_key=True)
    request_id: str | None = Field(default=None, index=True, max_length=64)  # X-Request-ID ile eşleşir
    endpoint: str | None = None
    method: str | None = Field(default=None, max_length=10)
    error_type: str | None = Field(default=None, max_length=120)
    error_message: str | None = None
    stack_trace: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
