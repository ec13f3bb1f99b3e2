"""Allow running FocusFlow as a module: python -m focusflow."""

import sys

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .logging_setup import setup_logger
from .app import FocusFlowApp


def main() -> None:
    logger = setup_logger()
    init_db()
    logger.info("FocusFlow starting")

    app = QApplication(sys.argv)
    app.setApplicationName("FocusFlow")
    app.setOrganizationName("FocusFlow")
    app.setQuitOnLastWindowClosed(False)

    flow = FocusFlowApp()
    flow.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
