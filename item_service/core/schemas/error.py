"""RFC 7807 Problem Details response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ProblemDetail(BaseModel):
    """Problem Details for HTTP APIs (RFC 7807)."""

    type: str = Field(default="about:blank", description="Problem type identifier")
    title: str = Field(description="Short summary of the problem type")
    status: int = Field(description="HTTP status code")
    detail: str | None = Field(default=None, description="Explanation of this occurrence")
    instance: str | None = Field(default=None, description="URI of this occurrence")


class ValidationError(BaseModel):
    """A single field-level validation failure."""

    field: str = Field(description="Dotted path of the offending field")
    message: str = Field(description="What is wrong with it")
    type: str | None = Field(default=None, description="Validator error code")
    value: Any | None = Field(default=None, description="Rejected input")


class ValidationProblemDetail(ProblemDetail):
    """Problem detail carrying every field error of a request."""

    errors: list[ValidationError] = Field(default_factory=list)
