"""
Request parameter helpers.

- `parse_int`: lenient integer coercion for path ids.
- `read_body`: request body as a flat dict (JSON object or urlencoded form).

Neither helper validates anything. Values the store cannot use are rejected
by the store.
"""

from __future__ import annotations

import json
import re
from typing import Any

from fastapi import Request

_INT_PREFIX = re.compile(r"([+-]?)(?:0[xX]([0-9a-fA-F]*)|([0-9]+))")

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class MalformedBody(ValueError):
    """The request body claimed a content type it could not be decoded as."""


def parse_int(raw: str | None) -> int | None:
    """
    Coerce a path segment to an integer the lenient way.

    Leading whitespace and an optional sign are allowed, then the longest
    run of digits is taken (`0x` switches to hex) and trailing garbage is
    ignored: " 42abc" -> 42, "-7" -> -7, "0x1f" -> 31.

    Returns None when no digits lead the string. None is sent to the store
    as NULL, so `WHERE id = $1` matches nothing and the caller gets an empty
    result instead of an error.
    """
    if raw is None:
        return None
    match = _INT_PREFIX.match(raw.lstrip())
    if match is None:
        return None

    sign, hex_digits, digits = match.groups()
    if hex_digits is not None:
        if not hex_digits:
            return None
        value = int(hex_digits, 16)
    else:
        value = int(digits, 10)
    return -value if sign == "-" else value


def _media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";", 1)[0].strip().lower()


async def read_body(request: Request) -> dict[str, Any]:
    """
    Return the request body as a dict.

    JSON bodies must decode; a JSON value that is not an object yields an
    empty dict. Urlencoded forms are flattened to their last value per key.
    Any other (or missing) content type yields an empty dict.
    """
    media_type = _media_type(request)

    if media_type == JSON_CONTENT_TYPE:
        raw = await request.body()
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedBody(f"Invalid JSON body: {exc}") from exc
        return data if isinstance(data, dict) else {}

    if media_type == FORM_CONTENT_TYPE:
        try:
            form = await request.form()
        except Exception as exc:
            raise MalformedBody(f"Invalid form body: {exc}") from exc
        return {key: value for key, value in form.items()}

    return {}
