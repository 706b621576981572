"""Application factory for the calculation workbench."""

from __future__ import annotations

import importlib
from pathlib import Path

import yaml
from flask import Flask
from werkzeug.exceptions import HTTPException

from common.errors import InternalAppError, from_http_exception
from common.logging import get_logger, install_request_logging
from common.responses import fail, ok

from . import config as config_module
from .blueprints import PROJECT_ROOT, discover_plugins, register_plugin_blueprints

CONFIG_PATH = PROJECT_ROOT / "config.yml"

logger = get_logger(__name__)


def _load_yaml_config(path: Path = CONFIG_PATH) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _load_manifests(plugin_settings: dict) -> list[dict[str, str]]:
    manifests: list[dict[str, str]] = []
    for dotted in discover_plugins():
        module = importlib.import_module(dotted)
        manifest = getattr(module, "manifest", None)
        if not manifest:
            continue
        entry = dict(manifest)
        overrides = plugin_settings.get(entry.get("blueprint"), {}) or {}
        if overrides.get("summary"):
            entry["summary"] = overrides["summary"]
        manifests.append(entry)
    manifests.sort(key=lambda item: item["title"].lower())
    return manifests


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)
    app.config.from_object(config_module.BaseConfig)

    yaml_config = _load_yaml_config()
    site_settings = yaml_config.get("site", {}) or {}
    plugin_settings = yaml_config.get("plugins", {}) or {}

    app.config["SITE_SETTINGS"] = site_settings
    if "max_content_length_kb" in site_settings:
        try:
            app.config["MAX_CONTENT_LENGTH"] = int(float(site_settings["max_content_length_kb"]) * 1024)
        except (TypeError, ValueError):
            logger.warning("ignoring invalid max_content_length_kb=%r", site_settings["max_content_length_kb"])
    app.config["PLUGIN_SETTINGS"] = plugin_settings

    config_obj = config_module.config_for(config_name)
    if config_obj is not None:
        app.config.from_object(config_obj)

    install_request_logging(app)
    app.config["PLUGIN_BLUEPRINTS"] = register_plugin_blueprints(app)
    app.config["PLUGIN_MANIFESTS"] = _load_manifests(plugin_settings)

    @app.after_request
    def apply_response_headers(response):
        """Attach strict security headers to every outgoing response."""

        configured = app.config.get("RESPONSE_HEADERS", {})
        for header, value in configured.items():
            if header not in response.headers:
                response.headers[header] = value
        return response

    @app.route("/")
    def home():
        site = app.config.get("SITE_SETTINGS", {})
        return ok(
            {
                "title": site.get("title", "Calculation Workbench"),
                "plugins": app.config.get("PLUGIN_MANIFESTS", []),
            }
        )

    @app.route("/healthz")
    def healthz():
        return ok({"status": "ok"})

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        return fail(from_http_exception(error))

    @app.errorhandler(Exception)
    def unhandled_error(error: Exception):
        logger.exception("unhandled error")
        return fail(InternalAppError(message="Internal server error"))

    return app


__all__ = ["create_app"]
