"""Tests for the command-line entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from codegrade.interfaces.main import main
from codegrade.shared.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CODEGRADE_MODEL", raising=False)


class TestMainExitCodes:
    def test_missing_target_dir_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit, match="1"):
            main([str(tmp_path / "does-not-exist")])

    def test_no_source_files_exits(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").write_text("nothing to grade")
        with pytest.raises(SystemExit, match="1"):
            main([str(tmp_path)])

    @patch("codegrade.interfaces.main.load_codegrade_config")
    def test_configuration_error_exits(self, mock_load: MagicMock) -> None:
        mock_load.side_effect = ConfigurationError("bad config")
        with pytest.raises(SystemExit, match="1"):
            main([])

    @patch("codegrade.interfaces.main._execute_pipeline")
    def test_unexpected_error_exits(
        self, mock_pipeline: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        mock_pipeline.side_effect = RuntimeError("kaboom")
        with pytest.raises(SystemExit, match="1"):
            main([])
        assert "Unexpected error" in caplog.text

    @patch("codegrade.interfaces.main._execute_pipeline")
    def test_defaults_to_current_directory(
        self, mock_pipeline: MagicMock, tmp_path: Path
    ) -> None:
        mock_pipeline.side_effect = ConfigurationError("stop here")
        with pytest.raises(SystemExit):
            main([])
        target = mock_pipeline.call_args.args[1]
        assert target == Path.cwd()

    @patch("codegrade.interfaces.batch_analyzer.create_text_agent")
    def test_unreadable_prompt_template_exits(
        self,
        mock_create_agent: MagicMock,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.codegrade]\nprompt_template = "rubrics/missing.md"\n'
        )
        (tmp_path / "LoginTest.java").write_text("class LoginTest {}")

        with pytest.raises(SystemExit, match="1"):
            main([str(tmp_path)])

        assert "Failed to load analysis prompt template" in caplog.text
        mock_create_agent.assert_not_called()
