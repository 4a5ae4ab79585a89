"""Tests for configuration loading."""

import pytest
from pathlib import Path

from cc_brain.config import load_config

ENV_KEYS = ["CC_BRAIN_DIR", "CLAUDE_PROJECT_DIR", "CC_BRAIN_LOG_LEVEL"]


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    def test_defaults(self, tmp_path: Path):
        config = load_config()
        assert config.brain_dir.parts[-2:] == (".claude", "brain")
        assert config.project_dir.resolve() == tmp_path.resolve()
        assert config.log_level == "WARNING"

    def test_env_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CC_BRAIN_DIR", str(tmp_path / "brain"))
        monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(tmp_path / "proj"))
        monkeypatch.setenv("CC_BRAIN_LOG_LEVEL", "DEBUG")

        config = load_config()
        assert config.brain_dir == tmp_path / "brain"
        assert config.project_dir == tmp_path / "proj"
        assert config.log_level == "DEBUG"

    def test_toml_file(self, tmp_path: Path):
        toml_path = tmp_path / "custom.toml"
        toml_path.write_text(f"""
brain_dir = "{(tmp_path / 'toml-brain').as_posix()}"
log_level = "INFO"
""")
        config = load_config(toml_path)
        assert config.brain_dir == tmp_path / "toml-brain"
        assert config.log_level == "INFO"

    def test_toml_discovered_in_cwd(self, tmp_path: Path):
        (tmp_path / "cc-brain.toml").write_text('log_level = "ERROR"\n')
        config = load_config()
        assert config.log_level == "ERROR"

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CC_BRAIN_DIR", str(tmp_path / "env-brain"))
        toml_path = tmp_path / "cc-brain.toml"
        toml_path.write_text('brain_dir = "/somewhere/else"\n')

        config = load_config(toml_path)
        assert config.brain_dir == tmp_path / "env-brain"  # env wins
