"""Shared fixtures for integration tests."""

from __future__ import annotations

import logging
import textwrap

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

ConfigWriter = Callable[[str], None]


@pytest.fixture
def project(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> Iterator[Path]:
    """An empty working directory with a clean environment."""
    for name in (
        "BAGKEEPER_STATE_URL",
        "BAGKEEPER_API_TOKEN",
        "BAGKEEPER_TARGET_RANK",
        "BAGKEEPER_DRY_RUN",
        "BAGKEEPER_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    caplog.set_level(logging.INFO)

    root = logging.getLogger()
    before = list(root.handlers)
    yield tmp_path
    for handler in root.handlers[:]:
        if handler not in before:
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def write_config(project: Path) -> ConfigWriter:
    """Write ``[tool.bagkeeper]`` into the project's ``pyproject.toml``."""

    def _write(body: str) -> None:
        (project / "pyproject.toml").write_text(
            "[tool.bagkeeper]\n" + textwrap.dedent(body)
        )

    return _write
