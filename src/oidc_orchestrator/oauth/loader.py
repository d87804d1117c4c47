from __future__ import annotations

import importlib
from typing import Any

from oidc_orchestrator.oauth.errors import ConfigurationError


def import_object(path: str) -> Any:
    """Resolve ``package.module:attribute`` (or ``package.module.attribute``)."""
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ConfigurationError(f"Invalid import path {path!r}", error="configuration_error")
    try:
        module = importlib.import_module(module_name)
        return getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(
            f"Cannot import {path!r}",
            error="configuration_error",
            description=str(exc),
        ) from exc
