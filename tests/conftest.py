import logging
import time
from pathlib import Path

import pytest

from divcards.config import Config
from divcards.database import Database
from divcards.filters.parser import FilterParser


@pytest.fixture(autouse=True)
def reset_root_logging():
    """
    Restore root logger handlers/level after each test.

    setup_logging() replaces the root handlers; without this the file
    handler of one test would keep writing into another test's tmp_path.
    """
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level

    yield

    for handler in list(root_logger.handlers):
        if handler not in saved_handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(saved_level)


@pytest.fixture
def temp_config(tmp_path):
    """
    Provide a fresh Config.

    This fixture GUARANTEES a clean config or fails loudly.
    """
    config_path = tmp_path / f"config_{id(tmp_path)}_{time.time_ns()}.json"
    config = Config(config_file=config_path)

    assert config.selected_filter_id is None, \
        f"FIXTURE CONTAMINATED! selected_filter_id={config.selected_filter_id}, file={config.config_file}"
    assert config.get_filters_dir() is None, \
        f"FIXTURE CONTAMINATED! filters_dir={config.get_filters_dir()}, file={config.config_file}"

    return config


@pytest.fixture
def temp_db(tmp_path):
    db_path = tmp_path / f"db_{id(tmp_path)}_{time.time_ns()}.db"
    db = Database(db_path=db_path)
    yield db
    db.close()


@pytest.fixture
def parser():
    return FilterParser()


def pytest_collection_modifyitems(config, items):
    """Assign tier markers based on test location."""
    for item in items:
        path = Path(str(item.fspath)).as_posix()

        if "/tests/unit/" in path:
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)
