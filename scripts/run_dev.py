"""Development entry point.

``CALCBENCH_HOST`` and ``CALCBENCH_PORT`` (or ``PORT``) override the
``DEV_HOST``/``DEV_PORT`` of the active config, ``DevelopmentConfig`` unless
``CALCBENCH_CONFIG`` names another.
"""

import os

from app import create_app
from app.config import CONFIG_ENV


def _resolve_port(default: int) -> int:
    value = os.getenv("CALCBENCH_PORT") or os.getenv("PORT")
    if not value:
        return default
    try:
        port = int(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid port '{value}'. Set CALCBENCH_PORT to a number.") from exc
    if not 0 < port < 65536:
        raise SystemExit(f"Port {port} is out of range.")
    return port


def main() -> None:
    app = create_app(os.getenv(CONFIG_ENV) or "DevelopmentConfig")
    host = os.getenv("CALCBENCH_HOST") or app.config["DEV_HOST"]
    app.run(host=host, port=_resolve_port(app.config["DEV_PORT"]), debug=app.debug)


if __name__ == "__main__":
    main()
