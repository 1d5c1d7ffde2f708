from typing import Any
import pytest


def pytest_addoption(parser: Any) -> None:
    parser.addoption("--run-slow", action="store_true", help="run slow end-to-end fits")


def pytest_configure(config: Any) -> None:
    config.addinivalue_line("markers", "slow: mark test as running a full optimization")


def pytest_collection_modifyitems(config: Any, items: Any) -> None:
    # do slow tests?
    if not config.getoption("--run-slow"):
        noslow = pytest.mark.skip(reason="Slow tests disabled (use --run-slow to activate).")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(noslow)
