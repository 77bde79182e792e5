"""Request body parsing shared by the JSON and form endpoints."""
from __future__ import annotations

import json
from typing import Any

from fastapi import Request
from starlette.datastructures import UploadFile

from blog_api.core.exceptions import ValidationError
from blog_api.core.storage import PendingUpload

FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def request_payload(request: Request) -> dict[str, Any]:
    """Return the body as a flat dict; uploaded files become ``PendingUpload`` values."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_TYPES):
        form = await request.form()
        data: dict[str, Any] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if not value.filename:
                    continue
                data[key] = PendingUpload(value.filename, await value.read(), value.content_type or "")
            else:
                data[key] = value
        return data

    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except ValueError:
        raise ValidationError(errors={"body": ["The request body must be valid JSON."]})
    if not isinstance(payload, dict):
        raise ValidationError(errors={"body": ["The request body must be a JSON object."]})
    return payload
