"""Vendor registry and factory for switch session creation."""

from __future__ import annotations

from typing import Callable

from vlsrctl.switchctrl.base.provisioning import ProvisioningSession
from vlsrctl.switchctrl.base.transport import ShellTransport
from vlsrctl.switchctrl.models.config import SwitchConfig, VendorModel

_VENDOR_REGISTRY: dict[VendorModel, type[ProvisioningSession]] = {}


def register_vendor(*models: VendorModel) -> Callable[[type[ProvisioningSession]], type[ProvisioningSession]]:
    """Decorator to register a session class for one or more switch models.

    Usage::

        @register_vendor(VendorModel.POWERCONNECT_6224, VendorModel.POWERCONNECT_6248)
        class DellPowerConnectSession(ProvisioningSession):
            ...
    """

    def decorator(cls: type[ProvisioningSession]) -> type[ProvisioningSession]:
        for model in models:
            _VENDOR_REGISTRY[VendorModel(model)] = cls
        return cls

    return decorator


def create_session(config: SwitchConfig, transport: ShellTransport | None = None) -> ProvisioningSession:
    """Create an (unconnected) session for the configured switch model.

    Args:
        config: Switch address, credentials and model.
        transport: Pre-built transport; by default the session spawns one
            for ``config.session_type`` on connect.

    Raises:
        ValueError: If no session class handles ``config.model``.
    """
    cls = _VENDOR_REGISTRY.get(config.model)
    if cls is None:
        available = ", ".join(list_models())
        raise ValueError(f"Unknown switch model '{config.model.value}'. Available: {available}")
    return cls(config, transport=transport)


def list_models() -> list[str]:
    """Return a sorted list of registered model names."""
    return sorted(model.value for model in _VENDOR_REGISTRY)
