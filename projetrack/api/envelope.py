"""Uniform response envelope: `{success, message, data?, pagination?}`."""

from __future__ import annotations

from typing import Any

from projetrack.schemas.responses import Pagination


def ok(data: Any = None, message: str = "") -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def paginated(data: list[Any], page: int, page_size: int, total: int) -> dict[str, Any]:
    body = ok(data)
    body["pagination"] = Pagination.build(page, page_size, total)
    return body


def failure(message: str, data: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if data is not None:
        body["data"] = data
    return body
