"""Domain 值对象

导出所有领域值对象，方便其他模块导入
"""

from vault_gateway.domain.value_objects.batch_result import BatchResult
from vault_gateway.domain.value_objects.client_key import ClientKey, VaultTarget
from vault_gateway.domain.value_objects.credentials import (
    ApiKeyCredentials,
    Credentials,
    ServiceAccountCredentials,
)
from vault_gateway.domain.value_objects.redaction_type import RedactionType
from vault_gateway.domain.value_objects.vault_environment import VaultEnvironment
from vault_gateway.domain.value_objects.vault_operation import VaultOperation

__all__ = [
    "ApiKeyCredentials",
    "BatchResult",
    "ClientKey",
    "Credentials",
    "RedactionType",
    "ServiceAccountCredentials",
    "VaultEnvironment",
    "VaultOperation",
    "VaultTarget",
]
