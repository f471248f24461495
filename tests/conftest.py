import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from inkcomplete.completion.settings_schema import NormalizedCompletionConfig  # noqa: E402
from inkcomplete.settings_models import default_completion_settings  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def make_config():
    """Build a normalized config from defaults plus overrides."""

    def _make(**overrides):
        data = default_completion_settings()
        data.update(overrides)
        return NormalizedCompletionConfig.from_mapping(data)

    return _make


@pytest.fixture
def config(make_config):
    return make_config()
