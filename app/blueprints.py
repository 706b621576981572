"""Plugin discovery and blueprint registration."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path

from flask import Blueprint, Flask

from common.logging import get_logger

PLUGIN_PACKAGE = "plugins"
PROJECT_ROOT = Path(__file__).resolve().parent.parent

logger = get_logger(__name__)


def discover_plugins(package: str = PLUGIN_PACKAGE) -> list[str]:
    """Return dotted paths of the plugin packages, sorted by name."""

    package_path = PROJECT_ROOT / package
    if not package_path.is_dir():
        return []
    return sorted(
        f"{package}.{module_info.name}"
        for module_info in pkgutil.iter_modules([str(package_path)])
        if module_info.ispkg
    )


def plugin_blueprints(dotted: str) -> list[Blueprint]:
    """Collect the ``blueprints`` list exported by ``<plugin>.api``."""

    module = importlib.import_module(f"{dotted}.api")
    found = list(getattr(module, "blueprints", None) or [])
    for blueprint in found:
        if not isinstance(blueprint, Blueprint):
            raise TypeError(f"{dotted}.api.blueprints holds a {type(blueprint).__name__}, not a Blueprint")
    return found


def register_plugin_blueprints(app: Flask, package: str = PLUGIN_PACKAGE) -> list[str]:
    registered: list[str] = []
    for dotted in discover_plugins(package):
        for bp in plugin_blueprints(dotted):
            app.register_blueprint(bp)
            logger.debug("registered blueprint %s at %s", bp.name, bp.url_prefix)
            registered.append(bp.name)
    return registered


__all__ = ["discover_plugins", "plugin_blueprints", "register_plugin_blueprints"]
