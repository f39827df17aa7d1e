"""Tests for the command line interface."""

import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from conftest import make_settings
from knowledge_assistant.cli import SecretRedactingFilter, cli
from knowledge_assistant.db.database import create_session_maker


@pytest.fixture
def runner(tmp_path):
    """CLI runner bound to a throwaway SQLite file.

    Every command runs its own event loop, so connections are never pooled.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}", poolclass=NullPool)
    with (
        patch("knowledge_assistant.cli.settings", make_settings()),
        patch("knowledge_assistant.db.database.engine", engine),
        patch("knowledge_assistant.db.database.async_session_maker", create_session_maker(engine)),
    ):
        yield CliRunner()


class TestCommands:
    """Tests for the CLI commands."""

    def test_init_database(self, runner):
        result = runner.invoke(cli, ["init-database"])
        assert result.exit_code == 0
        assert "Database initialized" in result.output

    def test_teach_then_stats(self, runner):
        result = runner.invoke(cli, ["teach", "What is the wifi password?", "guest123"])
        assert result.exit_code == 0
        assert "Learned: 'what is the wifi password' -> guest123" in result.output

        again = runner.invoke(cli, ["teach", "What is the wifi password?", "guest456"])
        assert "Updated:" in again.output

        stats = runner.invoke(cli, ["stats"])
        assert stats.exit_code == 0
        assert "Knowledge entries: 1" in stats.output

    def test_ask_calculation(self, runner):
        result = runner.invoke(cli, ["ask", "what is 2 + 3"])
        assert result.exit_code == 0
        assert "2 + 3 = 5" in result.output
        assert "Conversation:" in result.output

    def test_feedback_value_out_of_range(self, runner):
        result = runner.invoke(cli, ["feedback", "some-id", "5"])
        assert result.exit_code == 2

    def test_feedback_unknown_conversation(self, runner):
        result = runner.invoke(cli, ["feedback", "no-such-conversation", "1"])
        assert result.exit_code == 1

    def test_sweep_cache(self, runner):
        result = runner.invoke(cli, ["sweep-cache"])
        assert result.exit_code == 0
        assert "Removed 0 expired cache entries." in result.output

    def test_reverify_needs_ai(self, runner):
        result = runner.invoke(cli, ["reverify"])
        assert result.exit_code == 1

    def test_purge_requires_confirmation(self, runner):
        runner.invoke(cli, ["teach", "office hours", "9 to 5"])

        aborted = runner.invoke(cli, ["purge-knowledge"], input="n\n")
        assert aborted.exit_code == 1

        result = runner.invoke(cli, ["purge-knowledge", "--yes"])
        assert result.exit_code == 0
        assert "Deleted 1 knowledge entries." in result.output


class TestSecretRedactingFilter:
    """Tests for SecretRedactingFilter."""

    def _redact(self, message: str) -> str:
        record = logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)
        SecretRedactingFilter().filter(record)
        return record.msg

    def test_api_key(self):
        assert self._redact("api_key=abcdefghijklmnopqrstuvwxyz") == "api_key=[REDACTED]"

    def test_anthropic_key(self):
        assert self._redact("using sk-ant-abcdef123456789") == "using [REDACTED]"

    def test_admin_token(self):
        assert self._redact("admin_token: hunter2") == "admin_token: [REDACTED]"

    def test_plain_message_untouched(self):
        assert self._redact("Resolved query via knowledge") == "Resolved query via knowledge"
