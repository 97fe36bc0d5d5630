"""Shared helpers for integration tests."""

from __future__ import annotations

from typing import Optional

from mealsync.config import get_settings


def auth_headers(member_id: Optional[int] = None) -> dict[str, str]:
    headers: dict[str, str] = {}
    token = get_settings().api_token
    if token:
        headers["Authorization"] = f"Bearer {token}"
    if member_id is not None:
        headers["X-Member-ID"] = str(member_id)
    return headers
