"""Shared schema types: error responses."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    type: str
    title: str
    status: int
    detail: str | dict | list
    instance: str
