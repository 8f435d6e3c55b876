"""凭证加载器

加载顺序：
1. 环境变量（生产）：SKYFLOW_API_KEY，或 SKYFLOW_CLIENT_ID 等 Service Account 字段
2. JSON 文件（开发）：settings.skyflow_credentials_file

凭证形态只在进程启动时判定一次，结果是 ApiKeyCredentials 或 ServiceAccountCredentials。
日志只记录认证类型与上下文键名，不记录任何密钥。
"""

import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vault_gateway.config import Settings
from vault_gateway.domain.exceptions import ConfigError
from vault_gateway.domain.value_objects.credentials import (
    ApiKeyCredentials,
    Credentials,
    ServiceAccountCredentials,
)

logger = logging.getLogger(__name__)

CONTEXT_ENV_PREFIX = "SKYFLOW_CONTEXT_"

# Service Account 必需字段：(属性名, JSON 文件中的键名)
SERVICE_ACCOUNT_FIELDS = (
    ("client_id", "clientID"),
    ("client_name", "clientName"),
    ("token_uri", "tokenURI"),
    ("key_id", "keyID"),
    ("private_key", "privateKey"),
)


@dataclass
class CredentialsConfig:
    """加载结果

    属性：
        credentials: 进程级凭证
        batching: 文件中配置的批大小（操作名 → batchSize），可能为空
        context: 静态上下文属性
    """

    credentials: Credentials
    batching: dict[str, int] = field(default_factory=dict)
    context: dict[str, str] = field(default_factory=dict)


def _camel_case(name: str) -> str:
    return re.sub(r"_([a-z])", lambda m: m.group(1).upper(), name.lower())


def extract_context_from_env(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """收集 SKYFLOW_CONTEXT_* 环境变量，键名转为 camelCase

    示例：
        SKYFLOW_CONTEXT_FUNCTION_NAME=my-function -> {"functionName": "my-function"}
    """
    environ = os.environ if environ is None else environ
    return {
        _camel_case(key[len(CONTEXT_ENV_PREFIX) :]): value
        for key, value in environ.items()
        if key.startswith(CONTEXT_ENV_PREFIX) and len(key) > len(CONTEXT_ENV_PREFIX)
    }


def _service_account(values: Mapping[str, Any], context: dict[str, str]) -> ServiceAccountCredentials:
    resolved: dict[str, str] = {}
    for attr, json_key in SERVICE_ACCOUNT_FIELDS:
        value = values.get(attr) or values.get(json_key)
        if not value:
            raise ConfigError(f"Missing required service account credential: {json_key}")
        resolved[attr] = str(value)
    return ServiceAccountCredentials(**resolved, context=context)


def _api_key(api_key: str) -> ApiKeyCredentials:
    if not api_key.startswith("sky-"):
        logger.warning('API key does not start with "sky-"')
    return ApiKeyCredentials(api_key=api_key)


def _parse_batching(raw: Any) -> dict[str, int]:
    batching: dict[str, int] = {}
    if not isinstance(raw, dict):
        return batching
    for operation in ("tokenize", "detokenize"):
        size = (raw.get(operation) or {}).get("batchSize")
        if size is None:
            continue
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise ConfigError(f"Invalid batching.{operation}.batchSize: {size}")
        batching[operation] = size
    return batching


def _load_from_file(path: Path) -> CredentialsConfig:
    if not path.exists():
        raise ConfigError(
            "Configuration not found. Set environment variables or create "
            f"{path.name}"
        )
    try:
        file_config = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid credentials file {path}: {e}") from e

    raw = file_config.get("credentials")
    if not isinstance(raw, dict) or not raw:
        raise ConfigError("Missing required config: credentials")

    context = {str(k): str(v) for k, v in (file_config.get("context") or {}).items()}
    credentials: Credentials
    if raw.get("apiKey"):
        credentials = _api_key(str(raw["apiKey"]))
    else:
        credentials = _service_account(raw, context)
    return CredentialsConfig(
        credentials=credentials,
        batching=_parse_batching(file_config.get("batching")),
        context=context,
    )


def load_credentials(
    settings: Settings, environ: Mapping[str, str] | None = None
) -> CredentialsConfig:
    """加载进程级凭证

    异常：
        ConfigError: 凭证缺失或不完整（stub 后端除外）
    """
    context = extract_context_from_env(environ)

    if settings.skyflow_api_key or settings.skyflow_client_id:
        logger.info("Loading credentials from environment variables")
        credentials: Credentials
        if settings.skyflow_api_key:
            credentials = _api_key(settings.skyflow_api_key)
        else:
            credentials = _service_account(
                {
                    "client_id": settings.skyflow_client_id,
                    "client_name": settings.skyflow_client_name,
                    "token_uri": settings.skyflow_token_uri,
                    "key_id": settings.skyflow_key_id,
                    "private_key": settings.skyflow_private_key,
                },
                context,
            )
        loaded = CredentialsConfig(credentials=credentials, context=context)
    else:
        path = Path(settings.skyflow_credentials_file)
        if settings.vault_backend == "stub" and not path.exists():
            logger.info("Stub vault backend: running without credentials")
            return CredentialsConfig(credentials=ApiKeyCredentials(api_key=""), context=context)
        logger.info("Loading credentials from %s", path)
        loaded = _load_from_file(path)

    logger.info(
        "Configuration loaded successfully: authType=%s, contextKeys=%s",
        loaded.credentials.auth_type,
        sorted(loaded.context),
    )
    return loaded
