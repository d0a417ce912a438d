"""Error kinds shared by the report and narration pipelines.

Every external call boundary converts provider-specific failures into one of
these classes so controllers only ever deal with a closed set. Each kind
carries the HTTP status the API layer responds with.
"""

from __future__ import annotations

from fastapi import status


class PipelineError(RuntimeError):
    """Base class for classified pipeline failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR


class ConfigurationError(PipelineError):
    """A credential, bucket, or model identifier is not configured."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ValidationError(PipelineError):
    """The incoming request is malformed or incomplete."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(PipelineError):
    """An external provider returned a non-success result."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        upstream_status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.upstream_status = upstream_status
        self.body = body


class ParseError(PipelineError):
    """Model output could not be parsed into the expected structure."""

    status_code = status.HTTP_502_BAD_GATEWAY


class StorageError(PipelineError):
    """Writing or publishing a stored object failed."""

    status_code = status.HTTP_502_BAD_GATEWAY


class ReportNotFoundError(PipelineError):
    """No report exists for the requested (user, report) identity."""

    status_code = status.HTTP_404_NOT_FOUND


__all__ = [
    "PipelineError",
    "ConfigurationError",
    "ValidationError",
    "UpstreamError",
    "ParseError",
    "StorageError",
    "ReportNotFoundError",
]
