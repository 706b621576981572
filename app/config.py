"""Configuration classes for the Flask application.

``create_app`` applies :class:`BaseConfig`, then ``config.yml`` site settings,
then the class named by its argument or by ``CALCBENCH_CONFIG``.
"""

from __future__ import annotations

import os
import secrets

CONFIG_ENV = "CALCBENCH_CONFIG"


def _load_secret() -> str:
    secret = os.environ.get("CALCBENCH_SECRET")
    if secret:
        return secret
    return secrets.token_urlsafe(64)


class BaseConfig:
    SECRET_KEY = _load_secret()
    MAX_CONTENT_LENGTH = 256 * 1024  # 256 KiB
    RESPONSE_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
        "Referrer-Policy": "no-referrer",
        "Cache-Control": "no-store",
    }
    DEV_HOST = "127.0.0.1"
    DEV_PORT = 5001


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True


CONFIGS: dict[str, type[BaseConfig]] = {
    "BaseConfig": BaseConfig,
    "DevelopmentConfig": DevelopmentConfig,
    "TestingConfig": TestingConfig,
}


def config_for(name: str | None) -> type[BaseConfig] | None:
    """Resolve ``name`` (or ``$CALCBENCH_CONFIG``) to a config class.

    Returns ``None`` when neither is set; an unknown name raises ``ValueError``.
    """

    name = name or os.environ.get(CONFIG_ENV)
    if not name:
        return None
    try:
        return CONFIGS[name]
    except KeyError:
        raise ValueError(f"Unknown config '{name}'; expected one of {', '.join(CONFIGS)}") from None


__all__ = ["BaseConfig", "CONFIGS", "DevelopmentConfig", "TestingConfig", "config_for"]
