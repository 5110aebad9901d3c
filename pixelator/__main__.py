"""Serve the pixelation worker over HTTP: ``python -m pixelator`` or the ``pixelator`` script.

``PORT`` and ``LOG_LEVEL`` come from the environment (see :mod:`pixelator.config`).
"""

from __future__ import annotations

from .app import create_app
from .config import SETTINGS

app = create_app()


def main() -> None:
    """Listen for ``POST /worker`` messages on every interface."""
    app.run(host="0.0.0.0", port=SETTINGS.port, debug=False)


if __name__ == "__main__":
    main()
