"""
Mail.Ru Cloud API client layer.

Provides async HTTP communication with the authentication and cloud hosts.
"""

from mailru_cloud.api.http_client import AsyncHttpClient, Host, Session, sanitize_for_log
from mailru_cloud.api.request_builder import API_VERSION, ConflictMode, build_form_fields

__all__ = [
    "API_VERSION",
    "AsyncHttpClient",
    "ConflictMode",
    "Host",
    "Session",
    "build_form_fields",
    "sanitize_for_log",
]
