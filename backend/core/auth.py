from typing import Optional

from fastapi import Header

from core.errors import AuthRequiredError


def require_username(x_username: Optional[str] = Header(default=None)) -> str:
    """
    Acting identity for mutations and reports.

    The header is a label only; nothing checks that it is truthful.
    """
    username = (x_username or "").strip()
    if not username:
        raise AuthRequiredError()
    return username
