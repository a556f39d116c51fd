"""
Mail.Ru Cloud exception hierarchy.

All exceptions inherit from MailRuCloudError for easy catching.
"""

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Domain error codes carried by CloudOperationError."""

    NONE = 0
    PATH_NOT_EXISTS = 1
    UPLOADING_SIZE_LIMIT = 2
    DOWNLOADING_SIZE_LIMIT = 3
    DIFFERENT_PARENT_PATHS = 4
    HISTORY_NOT_EXISTS = 5
    NOT_SUPPORTED_OPERATION = 6
    PUBLIC_LINK_NOT_EXISTS = 7


class MailRuCloudError(Exception):
    """Base exception for all mailru_cloud errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class NotAuthorizedError(MailRuCloudError):
    """Credentials, cookies or token are missing, or the server rejected the session."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, field=field)
        self.field = field


class CloudOperationError(MailRuCloudError):
    """
    A cloud operation failed for a domain reason.

    ``parameter`` names the argument of the failed call the error refers to,
    so callers can tell "bad source path" from "bad destination folder".
    """

    code: ErrorCode = ErrorCode.NONE

    def __init__(self, message: str, *, parameter: str | None = None) -> None:
        super().__init__(message, parameter=parameter, code=self.code.name)
        self.parameter = parameter


class PathNotExistsError(CloudOperationError):
    """Path does not exist in the cloud."""

    code = ErrorCode.PATH_NOT_EXISTS


class PublicLinkNotExistsError(CloudOperationError):
    """Public link does not exist."""

    code = ErrorCode.PUBLIC_LINK_NOT_EXISTS


class HistoryNotExistsError(CloudOperationError):
    """No file history record matches the requested revision."""

    code = ErrorCode.HISTORY_NOT_EXISTS


class DifferentParentPathsError(CloudOperationError):
    """Entries of a bulk request do not share one parent folder."""

    code = ErrorCode.DIFFERENT_PARENT_PATHS


class UploadingSizeLimitError(CloudOperationError):
    """Payload exceeds the account or server upload ceiling."""

    code = ErrorCode.UPLOADING_SIZE_LIMIT


class DownloadingSizeLimitError(CloudOperationError):
    """Requested content exceeds the server download ceiling."""

    code = ErrorCode.DOWNLOADING_SIZE_LIMIT


class NotSupportedOperationError(CloudOperationError):
    """Operation is not available for the account's tariff."""

    code = ErrorCode.NOT_SUPPORTED_OPERATION


class APIError(MailRuCloudError):
    """Unclassified non-success status or malformed response body."""

    def __init__(
        self, message: str, *, status_code: int | None = None, endpoint: str | None = None
    ) -> None:
        super().__init__(message, status_code=status_code, endpoint=endpoint)
        self.status_code = status_code
        self.endpoint = endpoint


class TransferCancelledError(MailRuCloudError):
    """A transfer was cancelled by the caller."""

    def __init__(self, message: str = "Transfer cancelled", *, transferred: int = 0) -> None:
        super().__init__(message, transferred=transferred)
        self.transferred = transferred
