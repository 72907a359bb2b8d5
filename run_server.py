"""
Development uvicorn runner.

Host and port come from the HOST / PORT settings; code reload is enabled
outside of production.

Usage: python run_server.py
"""

from __future__ import annotations

from uvicorn import Config, Server

from orchestra.core.config import get_settings


def main() -> None:
    settings = get_settings()
    reload = settings.app_env != "production"
    config = Config(
        app="orchestra.main:app",
        host=settings.host,
        port=settings.port,
        reload=reload,
        reload_dirs=["orchestra"] if reload else None,
        log_config=None,
    )

    server = Server(config=config)
    server.run()


if __name__ == "__main__":
    main()
