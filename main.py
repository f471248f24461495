import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from inkcomplete.ui.markdown_window import MarkdownWindow, default_data_dir

VERBOSE_ARG = "--verbose"
DATA_DIR_ARG = "--data-dir="


def _split_startup_args(argv: list[str]) -> tuple[list[str], bool, Path]:
    filtered: list[str] = []
    verbose = False
    data_dir = default_data_dir()
    for arg in argv:
        if arg == VERBOSE_ARG:
            verbose = True
            continue
        if arg.startswith(DATA_DIR_ARG):
            value = arg[len(DATA_DIR_ARG):].strip()
            if value:
                data_dir = Path(value).expanduser()
            continue
        filtered.append(arg)
    return filtered, verbose, data_dir


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    cli_args, verbose, data_dir = _split_startup_args(sys.argv[1:])
    _configure_logging(verbose)

    app = QApplication([sys.argv[0], *cli_args])
    app.setStyle("Fusion")
    app.setApplicationName(MarkdownWindow.APP_NAME)
    window = MarkdownWindow(data_dir)
    if cli_args:
        window.open_file(cli_args[0])
    window.show()
    sys.exit(app.exec())
