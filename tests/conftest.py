from __future__ import annotations

import sys
from pathlib import Path

import pytest

_PROCESS_TEST_FILES = {
    "test_process_runner.py",
}


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    skip_windows = pytest.mark.skip(reason="requires a POSIX /bin/sh")
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))
        name = path.name

        if "integration" in path.parts:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)

        if ("integration" in path.parts or name in _PROCESS_TEST_FILES) and sys.platform.startswith("win"):
            item.add_marker(skip_windows)


@pytest.fixture
def posix_shell(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.delenv("TERMDECK_SHELL", raising=False)
    return "/bin/sh"
