from __future__ import annotations

import logging

from aof.application.container import build_container
from aof.config import get_app_paths, load_settings
from aof.logging_config import setup_logging
from aof.ui.app import App


def main() -> None:
    paths = get_app_paths()
    setup_logging(paths.logs_dir, level=logging.INFO)

    container = build_container(load_settings(), paths.exports_dir)

    app = App(
        export_service=container.exports,
        dispatch_service=container.dispatch,
        logs_dir=str(paths.logs_dir),
        exports_dir=str(paths.exports_dir),
    )
    app.mainloop()


if __name__ == "__main__":
    main()
