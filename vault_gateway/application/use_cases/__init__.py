"""Application Use Cases - 四个 vault 操作"""

from vault_gateway.application.use_cases.detokenize import DetokenizeInput, DetokenizeUseCase
from vault_gateway.application.use_cases.query import QueryInput, QueryUseCase
from vault_gateway.application.use_cases.tokenize import TokenizeInput, TokenizeUseCase
from vault_gateway.application.use_cases.tokenize_byot import (
    TokenizeByotInput,
    TokenizeByotUseCase,
)

__all__ = [
    "DetokenizeInput",
    "DetokenizeUseCase",
    "QueryInput",
    "QueryUseCase",
    "TokenizeByotInput",
    "TokenizeByotUseCase",
    "TokenizeInput",
    "TokenizeUseCase",
]
