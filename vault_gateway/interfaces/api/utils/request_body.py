"""请求体读取"""

import json
import uuid
from typing import Any

from fastapi import Request

from vault_gateway.domain.exceptions import ValidationError


async def read_json_body(request: Request) -> Any:
    """解析 JSON 请求体；空请求体视为 {}"""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"Invalid JSON body: {e}") from None


def request_id_from(request: Request) -> str:
    """沿用调用方的 X-Request-Id，没有则生成一个"""
    return request.headers.get("x-request-id") or str(uuid.uuid4())
