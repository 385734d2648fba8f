import logging
import signal
import sys

from PySide6 import QtGui

from clipboard_indicator.app import AppController
from clipboard_indicator.config import APP_DIR, APP_NAME


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    app = QtGui.QGuiApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setQuitOnLastWindowClosed(False)

    APP_DIR.mkdir(parents=True, exist_ok=True)

    controller = AppController(app)
    signal.signal(signal.SIGINT, lambda *_: controller.quit())
    rc = app.exec()
    sys.exit(rc)


if __name__ == "__main__":
    main()
