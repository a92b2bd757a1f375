"""Error taxonomy for the bundle pipeline.

Each error carries the HTTP status the API layer reports it with.
"""

from __future__ import annotations


class DesignSyncError(Exception):
    status_code: int = 500


class InvalidLinkError(DesignSyncError):
    status_code = 400


class DownloadError(DesignSyncError):
    status_code = 502


class ExtractionError(DesignSyncError):
    status_code = 422


class ClassificationError(DesignSyncError):
    """Markup could not be classified (e.g. no background layer → zero canvas)."""

    status_code = 422


class RasterizationError(DesignSyncError):
    status_code = 500


class PathTraversalError(DesignSyncError):
    status_code = 403
