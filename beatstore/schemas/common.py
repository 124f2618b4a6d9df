"""Shared response models for endpoints that return simple JSON dicts."""

from pydantic import BaseModel


class CacheClearResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    detail: str
    field: str | None = None
