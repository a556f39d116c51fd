"""
Business logic services for Mail.Ru Cloud.
"""

from mailru_cloud.services.auth_service import AuthService
from mailru_cloud.services.entry_service import EntryService
from mailru_cloud.services.file_service import DownloadStream, FileService
from mailru_cloud.services.folder_service import RemoteFolder
from mailru_cloud.services.shard_service import ShardService
from mailru_cloud.services.transfer import (
    ProgressableContent,
    ProgressEvent,
    ProgressTracker,
    copy_stream,
)

__all__ = [
    "AuthService",
    "DownloadStream",
    "EntryService",
    "FileService",
    "ProgressEvent",
    "ProgressTracker",
    "ProgressableContent",
    "RemoteFolder",
    "ShardService",
    "copy_stream",
]
