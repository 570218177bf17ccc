"""Pydantic request and response models for the ColorIA API.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``.
GenerateResponse
    Successful generation result; the field is serialised as ``imageUrl``.
ErrorResponse
    Body of every error response, ``{"error": message}``.
HealthResponse
    Body of ``GET /api/health``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/generate`` endpoint.

    Attributes:
        prompt: Text prompt describing the image.  Blank prompts are
            rejected by the route with ``400 {"error": "Prompt is required"}``
            rather than by schema validation, so the error shape stays the
            same for every failure.
    """

    prompt: str = Field(
        default="",
        description="Text prompt describing the image to generate.",
    )


class GenerateResponse(BaseModel):
    """Response body for a successful generation."""

    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(
        ...,
        alias="imageUrl",
        description="Temporary URL of the generated image.",
    )


class ErrorResponse(BaseModel):
    """Response body for every failed request."""

    error: str = Field(..., description="Human-readable error message.")


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
