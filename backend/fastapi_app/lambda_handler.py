from __future__ import annotations

import json

from mangum import Mangum

from backend.fastapi_app.main import app


def _get_path(d, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def _base_path(event) -> str:
    """ステージ名 (/dev, /prod) を API Gateway のベースパスとして返す"""
    stage = _get_path(event, "requestContext", "stage")
    if not stage or stage == "$default":
        return "/"
    return f"/{stage}"


def handler(event, context):
    body = event.get("body") or ""

    print(
        json.dumps(
            {
                "diag": "load_data_request",
                "stage": _get_path(event, "requestContext", "stage"),
                "method": _get_path(event, "requestContext", "http", "method"),
                "rawPath": event.get("rawPath"),
                "body_length": len(body),
                "base64_encoded": bool(event.get("isBase64Encoded")),
            },
            ensure_ascii=False,
        )
    )

    asgi = Mangum(app, api_gateway_base_path=_base_path(event))
    return asgi(event, context)
