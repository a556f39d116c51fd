"""Common form fields of mutating cloud requests."""

from enum import StrEnum
from typing import Any

from mailru_cloud.api.http_client import Session

API_VERSION = 2


class ConflictMode(StrEnum):
    """What the server does when the target path is taken."""

    RENAME = "rename"
    REWRITE = "rewrite"


def build_form_fields(
    session: Session,
    *,
    home: str | None = None,
    conflict: ConflictMode | None = ConflictMode.RENAME,
) -> dict[str, Any]:
    """
    Assemble the mandatory field set of a mutating request.

    Args:
        session: Current session (token and email).
        home: Target cloud path, omitted when empty.
        conflict: Conflict policy, None to omit the field (history, publish,
            download token requests reject it).

    Returns:
        Ordered form fields ready to be url-encoded.
    """
    fields: dict[str, Any] = {}
    if conflict is not None:
        fields["conflict"] = conflict.value
    fields["api"] = API_VERSION
    fields["token"] = session.token
    fields["email"] = session.email
    fields["x-email"] = session.email
    if home:
        fields["home"] = home
    return fields
