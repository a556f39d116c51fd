"""
Mail.Ru Cloud client configuration.
"""

from dataclasses import dataclass

_MIB = 1024 * 1024


@dataclass(frozen=True, kw_only=True)
class MailRuCloudConfig:
    """
    Attributes:
        auth_url: Base URL of the authentication host.
        cloud_url: Base URL of the cloud operations host.
        public_link_prefix: Prefix of every public (weblink) URL.
        domain: Mail domain sent with the login form.
        user_agent: User-Agent header value.
        timeout: Request timeout in seconds, None for unbounded waits.
        block_size: Transfer block size in bytes.
        folder_refresh_interval: Seconds before a cached folder listing is re-validated.
        restricted_upload_limit: Upload ceiling in bytes for the free tier.
        extended_upload_limit: Upload ceiling in bytes for paid tiers.
    """

    auth_url: str = "https://auth.mail.ru"
    cloud_url: str = "https://cloud.mail.ru"
    public_link_prefix: str = "https://cloud.mail.ru/public/"
    domain: str = "mail.ru"
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/67.0.3396.87 Safari/537.36"
    )
    timeout: float | None = None
    block_size: int = 8192
    folder_refresh_interval: float = 1.0
    restricted_upload_limit: int = 2048 * _MIB
    extended_upload_limit: int = 32768 * _MIB

    def __post_init__(self) -> None:
        if not self.auth_url or not self.cloud_url:
            msg = "auth_url and cloud_url are required"
            raise ValueError(msg)
        if not self.public_link_prefix.endswith("/"):
            msg = "public_link_prefix must end with '/'"
            raise ValueError(msg)
        if self.timeout is not None and self.timeout <= 0:
            msg = "timeout must be positive or None"
            raise ValueError(msg)
        if self.block_size <= 0:
            msg = "block_size must be positive"
            raise ValueError(msg)
        if self.folder_refresh_interval < 0:
            msg = "folder_refresh_interval must be non-negative"
            raise ValueError(msg)
        if self.restricted_upload_limit <= 0 or self.extended_upload_limit <= 0:
            msg = "upload limits must be positive"
            raise ValueError(msg)
