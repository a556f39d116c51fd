"""
Mail.Ru Cloud Python Client.

An async Python client for Mail.Ru Cloud with streaming, cancellable transfers.

Example:
    ```python
    from mailru_cloud import Credentials, MailRuCloudClient

    async with MailRuCloudClient(Credentials("user@mail.ru", "password")) as client:
        await client.login()

        # List files
        root = await client.get_folder()
        print(root.format_tree())

        # Download a file
        await client.download_to_path("/docs/report.pdf", "downloads")
    ```
"""

from mailru_cloud.client import MailRuCloudClient
from mailru_cloud.config import MailRuCloudConfig
from mailru_cloud.core.cancellation import CancellationToken
from mailru_cloud.core.size import Size, StorageUnit
from mailru_cloud.exceptions import (
    APIError,
    CloudOperationError,
    DifferentParentPathsError,
    DownloadingSizeLimitError,
    ErrorCode,
    HistoryNotExistsError,
    MailRuCloudError,
    NotAuthorizedError,
    NotSupportedOperationError,
    PathNotExistsError,
    PublicLinkNotExistsError,
    TransferCancelledError,
    UploadingSizeLimitError,
)
from mailru_cloud.models.account import AuthState, Credentials, DiskUsage, Rate
from mailru_cloud.models.entries import CloudEntry, CloudFile, CloudFolder, EntryKind, History
from mailru_cloud.services.folder_service import RemoteFolder
from mailru_cloud.services.transfer import ProgressEvent

__version__ = "0.1.0"

__all__ = [
    # Main client
    "MailRuCloudClient",
    "MailRuCloudConfig",
    "RemoteFolder",
    # Models
    "AuthState",
    "Credentials",
    "DiskUsage",
    "Rate",
    "EntryKind",
    "CloudEntry",
    "CloudFile",
    "CloudFolder",
    "History",
    "Size",
    "StorageUnit",
    "ProgressEvent",
    "CancellationToken",
    # Exceptions
    "MailRuCloudError",
    "NotAuthorizedError",
    "CloudOperationError",
    "ErrorCode",
    "PathNotExistsError",
    "PublicLinkNotExistsError",
    "HistoryNotExistsError",
    "DifferentParentPathsError",
    "UploadingSizeLimitError",
    "DownloadingSizeLimitError",
    "NotSupportedOperationError",
    "APIError",
    "TransferCancelledError",
]
