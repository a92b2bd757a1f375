"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DownloadImageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    link: str | None = Field(None, description="Link to the design preview or bundle")
    id: str | None = Field(None, description="Opaque caller id")
    img_no: str | None = Field(None, alias="imgNo", description="Image number")

    @field_validator("id", "img_no", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value
