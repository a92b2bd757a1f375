"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"


class ErrorResponse(BaseModel):
    success: bool = False
    message: str = ""


class DownloadImageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    folder_name: str = Field(..., alias="folderName")
    zip_path: str = Field(..., alias="zipPath")
    preview_path: str = Field(..., alias="previewPath")
    zip_url: str = Field("", alias="zipUrl")
    preview_url: str = Field("", alias="previewUrl")
    oversize_assets: list[str] = Field(default_factory=list, alias="oversizeAssets")
    processing_time_ms: float = Field(0.0, alias="processingTimeMs")
