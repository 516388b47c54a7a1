import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication, QMainWindow

from .config import Settings, load_settings
from .constants import APP_NAME
from .modules.customer.module import CustomerAccountModule
from .utils.loggers import get_logger


class MainWindow(QMainWindow):
    def __init__(self, customer_id: int, settings: Settings, *, opening_due_amount: float = 0.0):
        super().__init__()
        self.setWindowTitle(f"{APP_NAME} - Customer #{customer_id}")
        self.setWindowFlag(Qt.WindowMinimizeButtonHint, True)
        self.setWindowFlag(Qt.WindowMaximizeButtonHint, True)
        self.setMinimumSize(820, 520)

        self.module = CustomerAccountModule(customer_id, settings, opening_due_amount=opening_due_amount)
        self.setCentralWidget(self.module.get_widget())

    def closeEvent(self, event):
        self.module.teardown()
        super().closeEvent(event)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="ledger-console", description="Customer account reconciliation console")
    p.add_argument("--customer-id", type=int, required=True, help="customer to open")
    p.add_argument("--opening-due", type=float, default=0.0, help="customer's opening due amount")
    p.add_argument("--api-base-url", default=None, help="override LEDGER_API_BASE_URL")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    if args.api_base_url:
        settings = replace(settings, api_base_url=args.api_base_url.rstrip("/"))
    log = get_logger(level=settings.log_level)
    log.info("Opening customer %s against %s", args.customer_id, settings.api_base_url)

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    win = MainWindow(args.customer_id, settings, opening_due_amount=args.opening_due)
    win.show()
    win.module.load_current_tab()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
