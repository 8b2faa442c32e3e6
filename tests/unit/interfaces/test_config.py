"""Tests for RunConfig."""

from __future__ import annotations

import textwrap

from pathlib import Path

import pytest

from bagkeeper.interfaces.config import RunConfig
from bagkeeper.shared.constants import DEFAULT_STATE_URL, DEFAULT_TARGET_RANK
from bagkeeper.shared.exceptions import ConfigurationError
from bagkeeper.shared.types import PivotStrategy, SortStrategy

_ENV_VARS = (
    "BAGKEEPER_STATE_URL",
    "BAGKEEPER_API_TOKEN",
    "BAGKEEPER_TARGET_RANK",
    "BAGKEEPER_DRY_RUN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write_toml(tmp_path: Path, content: str) -> None:
    (tmp_path / "pyproject.toml").write_text(textwrap.dedent(content))


class TestRunConfig:
    def test_from_toml_with_defaults(self, tmp_path: Path) -> None:
        config = RunConfig.from_toml(tmp_path)

        assert config.state_url == DEFAULT_STATE_URL
        assert config.api_token is None
        assert config.target_rank == DEFAULT_TARGET_RANK
        assert not config.dry_run
        assert not config.uses_snapshot

    def test_env_overrides_toml(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        _write_toml(
            tmp_path,
            """\
            [tool.bagkeeper]
            target_rank = 500
            state_url = "http://from-toml"
        """,
        )
        monkeypatch.setenv("BAGKEEPER_STATE_URL", "http://from-env")
        monkeypatch.setenv("BAGKEEPER_API_TOKEN", "secret")
        monkeypatch.setenv("BAGKEEPER_TARGET_RANK", "1_000")
        monkeypatch.setenv("BAGKEEPER_DRY_RUN", "true")

        config = RunConfig.from_toml(tmp_path)

        assert config.state_url == "http://from-env"
        assert config.api_token == "secret"
        assert config.target_rank == 1_000
        assert config.dry_run

    def test_blank_env_falls_back_to_toml(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        _write_toml(
            tmp_path,
            """\
            [tool.bagkeeper]
            target_rank = 500
        """,
        )
        monkeypatch.setenv("BAGKEEPER_TARGET_RANK", "  ")

        assert RunConfig.from_toml(tmp_path).target_rank == 500

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("BAGKEEPER_TARGET_RANK", "0"),
            ("BAGKEEPER_TARGET_RANK", "ten"),
            ("BAGKEEPER_DRY_RUN", "perhaps"),
        ],
    )
    def test_invalid_env_values(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, name: str, value: str
    ) -> None:
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError, match=name):
            RunConfig.from_toml(tmp_path)

    def test_requires_a_state_source(self, tmp_path: Path) -> None:
        _write_toml(
            tmp_path,
            """\
            [tool.bagkeeper]
            state_url = ""
        """,
        )
        with pytest.raises(ConfigurationError, match="state_url or snapshot_path"):
            RunConfig.from_toml(tmp_path)

    def test_snapshot_path_alone_is_enough(self, tmp_path: Path) -> None:
        _write_toml(
            tmp_path,
            """\
            [tool.bagkeeper]
            state_url = ""
            snapshot_path = "state.json"
        """,
        )
        config = RunConfig.from_toml(tmp_path)

        assert config.uses_snapshot


class TestCommands:
    def test_rebalance_command_carries_strategies(self) -> None:
        config = RunConfig(
            target_rank=7,
            sort_strategy=SortStrategy.FULL,
            pivot_strategy=PivotStrategy.SETTLED,
        )

        cmd = config.rebalance_command()

        assert cmd.target_rank == 7
        assert cmd.sort_strategy == SortStrategy.FULL
        assert cmd.pivot_strategy == PivotStrategy.SETTLED
        assert not cmd.dry_run

    def test_plan_mode_forces_dry_run(self) -> None:
        assert RunConfig().rebalance_command(force_dry_run=True).dry_run
        assert RunConfig(dry_run=True).rebalance_command().dry_run

    def test_inspect_command(self) -> None:
        cmd = RunConfig(target_rank=3).inspect_command()

        assert cmd.target_rank == 3
        assert cmd.sort_strategy == SortStrategy.SEMI
