"""Shared fixtures for integration tests."""

from __future__ import annotations

import json
import textwrap

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def java_project(tmp_path: Path) -> Path:
    """Create a small Maven test-automation project."""
    root = tmp_path / "project"
    files = {
        "pom.xml": "<project><artifactId>checkout-tests</artifactId></project>",
        "src/test/java/LoginTest.java": textwrap.dedent("""\
            public class LoginTest {
                @Test
                public void login() throws Exception {
                    Thread.sleep(2000);
                    assertTrue(page.isLoggedIn());
                }
            }
        """),
        "src/test/java/CartTest.java": "public class CartTest {}\n",
        "src/test/java/pages/LoginPage.java": "public class LoginPage {}\n",
        "target/classes/Ignored.java": "public class Ignored {}\n",
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A current directory with a pyproject.toml tuned for fast tests."""
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    (cwd / "pyproject.toml").write_text(
        textwrap.dedent("""\
            [tool.codegrade]
            model = "google-gla:gemini-2.5-flash"
            max_items_per_batch = 1
            retry_attempts = 2
            retry_delay_ms = 0
            debug_dir = "debug"
        """)
    )
    monkeypatch.chdir(cwd)
    monkeypatch.delenv("CODEGRADE_MODEL", raising=False)
    return cwd


def _grading_reply(file_name: str, score: float) -> str:
    """A model reply grading a single file, wrapped in prose and a fence."""
    category = {
        "score": score,
        "positive_points": [f"{file_name} is readable"],
        "negative_points": [],
        "observations": f"{file_name} reviewed.",
    }
    record: dict[str, Any] = {
        "project_summary": {
            "project_name": "checkout-tests",
            "total_files": 1,
            "total_classes": 1,
            "analysis_date": "2026-10-19",
            "project_type": "Test Automation",
        },
        "grades": {
            "architecture": category,
            "code_quality": category,
            "validations": category,
            "error_handling": category,
            "overall": {
                "weighted_score": score,
                "final_grade": "B",
                "summary": f"Graded {file_name}.",
            },
        },
        "common_problems": [
            {
                "title": "Hard-coded sleeps",
                "description": "Thread.sleep instead of waits.",
                "severity": "high",
                "occurrences": 1,
                "affected_files": [file_name],
            }
        ],
        "top_issues": [],
        "recommendations": [
            {
                "category": "validations",
                "priority": "high",
                "description": "Use explicit waits",
                "impact": "Less flakiness",
            }
        ],
    }
    return f"Here is my analysis:\n```json\n{json.dumps(record, indent=2)}\n```"


ReplyFn = Callable[[str], str]


@pytest.fixture
def fake_agent_factory() -> Callable[[ReplyFn], MagicMock]:
    """Build a ``create_text_agent`` replacement whose replies depend on the prompt."""

    def _factory(reply_for: ReplyFn) -> MagicMock:
        async def _run(prompt: str) -> MagicMock:
            mock_usage = MagicMock()
            mock_usage.input_tokens = 1_000
            mock_usage.output_tokens = 250
            mock_usage.requests = 1
            mock_result = MagicMock()
            mock_result.output = reply_for(prompt)
            mock_result.usage.return_value = mock_usage
            return mock_result

        mock_agent = MagicMock()
        mock_agent.run = AsyncMock(side_effect=_run)
        return MagicMock(return_value=mock_agent)

    return _factory


@pytest.fixture
def grading_reply() -> Callable[[str, float], str]:
    return _grading_reply
