"""API Container (composition root state holder).

This module only defines types/structure for objects created in the real
composition root (`vault_gateway/interfaces/api/main.py`).
"""

from __future__ import annotations

from dataclasses import dataclass

from vault_gateway.application.services.client_cache import VaultClientCache
from vault_gateway.application.services.vault_gateway_service import VaultGatewayService
from vault_gateway.config import Settings


@dataclass(frozen=True, slots=True)
class ApiContainer:
    """Typed container attached to `app.state.container`."""

    settings: Settings
    client_cache: VaultClientCache
    gateway: VaultGatewayService
