import logging

from core.common.app_context import AppContext
from framework.gui.main_window import MainWindow


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = MainWindow(AppContext.build())
    app.mainloop()


if __name__ == "__main__":
    main()
