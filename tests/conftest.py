import json
import logging

import pytest

from json_translator.logging_config import LOGGER_NAME

# Settings read from the environment; cleared so a developer's shell or .env
# never leaks into a test run.
TRANSLATOR_ENV_VARS = [
    'OPENAI_API_KEY',
    'OPENAI_API_ENDPOINT',
    'CUSTOM_PROMPT',
    'MODEL_NAME',
    'BATCH_SIZE',
    'TRANSLATOR_CONFIG_FILE',
]


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """
    Function-scoped, autouse fixture that runs every test in an empty working
    directory with the translator's environment variables unset.
    """
    for name in TRANSLATOR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

    yield

    # Undo any setup_logger() call so handlers never outlive their test.
    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        handler.close()
        package_logger.removeHandler(handler)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def locale_dir(tmp_path):
    """A locales/ directory holding a small English source document."""
    locales = tmp_path / 'locales'
    locales.mkdir()
    source = {
        "app.title": "My App",
        "nav.home": "Home",
        "welcome.html": "<b>Welcome</b> back, <i>friend</i>!",
        "footer.note": "First line\nSecond line",
        "spacer": "   ",
    }
    with open(locales / 'en.json', 'w', encoding='utf-8') as f:
        json.dump(source, f, ensure_ascii=False, indent=2)
    return locales
