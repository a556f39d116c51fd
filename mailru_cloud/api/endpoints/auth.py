"""Authentication and account endpoints."""

from typing import Any

from mailru_cloud.api.http_client import AsyncHttpClient, Host, Session, unwrap_body
from mailru_cloud.api.request_builder import API_VERSION
from mailru_cloud.core.size import Size
from mailru_cloud.exceptions import APIError, NotAuthorizedError
from mailru_cloud.models.account import CostItem, DiskUsage, Duration, Rate


async def post_credentials(http: AsyncHttpClient, email: str, password: str, domain: str) -> bool:
    """
    Submit the login form to the authentication host.

    Returns:
        True if the server answered with a success status.
    """
    response = await http.request(
        "POST",
        "/cgi-bin/auth",
        host=Host.AUTH,
        data={"Login": email, "Domain": domain, "Password": password},
    )
    return response.is_success


async def ensure_sdc_cookies(http: AsyncHttpClient, return_to: str) -> bool:
    """
    Obtain the SDC cookies that confirm the login for the cloud host.

    Args:
        http: Configured async HTTP client.
        return_to: Cloud home URL the authentication host redirects to.

    Returns:
        True if the server answered with a success status.
    """
    response = await http.request("GET", "/sdc", host=Host.AUTH, params={"from": return_to})
    return response.is_success


async def get_csrf_token(http: AsyncHttpClient) -> str:
    """Fetch the CSRF token used as the API token of the session."""
    body = await http.request_body("GET", "/api/v2/tokens/csrf")
    return _require_token(body, "/api/v2/tokens/csrf")


async def get_disk_usage(http: AsyncHttpClient, session: Session) -> DiskUsage:
    """
    Get disk usage; the server reports MiB.

    Raises:
        NotAuthorizedError: If the server rejects the session.
    """
    endpoint = "/api/v2/user/space"
    response = await http.request(
        "GET",
        endpoint,
        params={"api": API_VERSION, "email": session.email, "token": session.token},
    )
    if not response.is_success:
        msg = "The client is not authorized"
        raise NotAuthorizedError(msg, field="session")

    body = unwrap_body(response, endpoint)
    try:
        return DiskUsage(
            total=Size.from_mebibytes(int(body["total"])),
            used=Size.from_mebibytes(int(body["used"])),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise APIError("Malformed disk usage", endpoint=endpoint) from e


async def get_rates(http: AsyncHttpClient, session: Session) -> list[Rate]:
    """Get every tariff known for the account, active or not."""
    endpoint = "/api/v2/billing/rates"
    body = await http.request_body(
        "GET",
        endpoint,
        params={
            "api": API_VERSION,
            "email": session.email,
            "x-email": session.email,
            "token": session.token,
        },
    )
    try:
        return [_parse_rate(r) for r in body["rates"]]
    except (KeyError, TypeError, ValueError) as e:
        raise APIError("Malformed rates", endpoint=endpoint) from e


async def get_download_token(http: AsyncHttpClient, fields: dict[str, Any]) -> str:
    """Request a one-time download token for public link access."""
    endpoint = "/api/v2/tokens/download"
    body = await http.request_body("POST", endpoint, data=fields)
    return _require_token(body, endpoint)


def _require_token(body: Any, endpoint: str) -> str:
    token = body.get("token") if isinstance(body, dict) else None
    if not token:
        raise APIError("Response has no token", endpoint=endpoint)
    return token


def _parse_rate(data: dict[str, Any]) -> Rate:
    rate_id = data["id"]
    return Rate(
        id=rate_id,
        name=data.get("name") or rate_id,
        is_active=bool(data.get("active")),
        is_available=bool(data.get("available")),
        size=Size(int(data.get("size") or 0)),
        costs=tuple(_parse_cost(c) for c in data.get("cost") or ()),
    )


def _parse_cost(data: dict[str, Any]) -> CostItem:
    return CostItem(
        id=data["id"],
        cost=int(data.get("cost") or 0),
        special_cost=int(data.get("special_cost") or 0),
        currency=data.get("currency", ""),
        duration=Duration.parse(data.get("duration")),
        special_duration=Duration.parse(data.get("special_duration")),
    )
