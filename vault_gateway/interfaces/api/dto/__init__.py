"""API DTO"""

from vault_gateway.interfaces.api.dto.vault_dto import (
    ErrorDetail,
    ErrorResponse,
    ProcessMetadata,
    ProcessResponse,
    RowIndexedErrorResponse,
    RowIndexedResponse,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "ProcessMetadata",
    "ProcessResponse",
    "RowIndexedErrorResponse",
    "RowIndexedResponse",
]
