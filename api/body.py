from __future__ import annotations  # Bounded JSON body reader

import json
from typing import Any

from fastapi import Request


class RequestBodyError(Exception):  # Structural problem with the request body
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BodyTooLargeError(RequestBodyError):  # Body exceeded the configured ceiling
    status_code = 413

    def __init__(self) -> None:
        super().__init__("Request body too large")


async def read_json_body(request: Request, limit: int) -> Any:  # Stream the body, stopping at the ceiling
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise BodyTooLargeError()

    buffer = bytearray()
    async for chunk in request.stream():
        if len(buffer) + len(chunk) > limit:
            raise BodyTooLargeError()
        buffer.extend(chunk)

    try:
        return json.loads(buffer)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise RequestBodyError("Invalid JSON") from exc


async def read_json_object(request: Request, limit: int) -> dict:  # Body must decode to a JSON object
    payload = await read_json_body(request, limit)
    if not isinstance(payload, dict):
        raise RequestBodyError("Invalid request body")
    return payload


__all__ = ["BodyTooLargeError", "RequestBodyError", "read_json_body", "read_json_object"]
