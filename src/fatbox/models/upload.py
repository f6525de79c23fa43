"""Upload data models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FinishRequest(BaseModel):
    """Fields accepted by the finish endpoint.

    Every field is optional at the model level; presence of the required
    ones is checked by the endpoint so that it can answer 400 itself.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    upload_id: Optional[str] = Field(None, alias="uploadId")
    filename: Optional[str] = None
    destination: Optional[str] = None
    userhash: Optional[str] = None
    time: Optional[str] = None


class ChunkResponse(BaseModel):
    """Response model for a received chunk."""

    message: str


class UploadURLResponse(BaseModel):
    """Response model for a relayed file."""

    url: str


class ErrorResponse(BaseModel):
    """Response model for validation and upload failures."""

    error: str
    details: Optional[str] = None


class NotFoundResponse(BaseModel):
    """Response model for unmatched routes."""

    message: str
    error: str = "Not Found"
    statusCode: int = 404
