"""Tests for the command-line runner's exit behaviour."""

from __future__ import annotations

import logging

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from bagkeeper.interfaces.config import RunConfig
from bagkeeper.interfaces.runner import run
from bagkeeper.shared.exceptions import ConfigurationError, ProviderError


@pytest.fixture(autouse=True)
def detach_run_logs() -> Iterator[None]:
    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for handler in root.handlers[:]:
        if handler not in before:
            root.removeHandler(handler)
            handler.close()


def _patch_config(config: RunConfig):
    return patch(
        "bagkeeper.interfaces.runner.RunConfig.from_toml", return_value=config
    )


def _patch_execute(**kwargs: object):
    return patch("bagkeeper.interfaces.runner._execute", new=AsyncMock(**kwargs))


class TestRunExit:
    def test_clean_run_returns(self) -> None:
        with _patch_config(RunConfig()), _patch_execute(return_value=True) as ex:
            run("plan")

        ex.assert_awaited_once()
        assert ex.await_args.args[1] == "plan"

    def test_unclean_run_exits_1(self) -> None:
        with (
            _patch_config(RunConfig()),
            _patch_execute(return_value=False),
            pytest.raises(SystemExit, match="1"),
        ):
            run()

    def test_configuration_error_exits_1(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with (
            patch(
                "bagkeeper.interfaces.runner.RunConfig.from_toml",
                side_effect=ConfigurationError("bad rank"),
            ),
            pytest.raises(SystemExit, match="1"),
        ):
            run()

        assert "bagkeeper failed: bad rank" in caplog.text

    def test_provider_error_exits_1(self, caplog: pytest.LogCaptureFixture) -> None:
        with (
            _patch_config(RunConfig()),
            _patch_execute(side_effect=ProviderError("GET /bags: HTTP 503")),
            pytest.raises(SystemExit, match="1"),
        ):
            run()

        assert "HTTP 503" in caplog.text

    def test_unexpected_error_is_logged_with_traceback(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with (
            _patch_config(RunConfig()),
            _patch_execute(side_effect=RuntimeError("boom")),
            pytest.raises(SystemExit, match="1"),
        ):
            run()

        assert "Unexpected error" in caplog.text
        assert "RuntimeError" in caplog.text


class TestRunLog:
    def test_log_dir_receives_run_log(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO)
        log_dir = tmp_path / "logs"
        config = RunConfig(log_dir=str(log_dir))

        with _patch_config(config), _patch_execute(return_value=True):
            run()

        (log_file,) = log_dir.glob("*-bagkeeper.log")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "Writing run log" in log_file.read_text()
