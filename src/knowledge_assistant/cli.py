"""CLI commands for the knowledge assistant."""

import asyncio
import logging
import re
import sys

import click

from knowledge_assistant.config import settings


class SecretRedactingFilter(logging.Filter):
    """Masks API keys, tokens and passwords in log messages."""

    SECRET_PATTERNS = [
        (re.compile(r"(api[_-]?key[\s:=]+)[\w-]{20,}", re.IGNORECASE), r"\1[REDACTED]"),
        (re.compile(r"(x-api-key[\s:=\"']+)[\w-]{20,}", re.IGNORECASE), r"\1[REDACTED]"),
        (re.compile(r"sk-ant-[\w-]{10,}"), "[REDACTED]"),
        (re.compile(r"((?:admin[_-]?)?token[\s:=]+)\S+", re.IGNORECASE), r"\1[REDACTED]"),
        (re.compile(r"(password[\s:=]+)\S+", re.IGNORECASE), r"\1[REDACTED]"),
        (re.compile(r"(bearer\s+)[\w-]+", re.IGNORECASE), r"\1[REDACTED]"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            for pattern, replacement in self.SECRET_PATTERNS:
                record.msg = pattern.sub(replacement, record.msg)
        return True


logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging with secret redaction."""
    logging.basicConfig(
        level=logging.DEBUG if verbose or settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    root = logging.getLogger()
    if not any(isinstance(f, SecretRedactingFilter) for f in root.filters):
        root.addFilter(SecretRedactingFilter())
    if verbose:
        root.setLevel(logging.DEBUG)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """Knowledge Assistant CLI."""
    configure_logging(verbose)


@cli.command()
def init_database() -> None:
    """Initialize the database schema."""
    asyncio.run(_init_database())


async def _init_database() -> None:
    """Async implementation of init-database command."""
    from knowledge_assistant.db.database import init_db

    await init_db()
    click.echo("Database initialized successfully!")


@cli.command()
@click.argument("query")
@click.option("--user", "-u", "user_id", help="Ask as this user id")
def ask(query: str, user_id: str | None) -> None:
    """Ask a question (or teach a fact in plain language)."""
    asyncio.run(_ask(query, user_id))


async def _ask(query: str, user_id: str | None) -> None:
    """Async implementation of ask command."""
    from knowledge_assistant.db.database import async_session_maker, init_db
    from knowledge_assistant.orchestrator import Orchestrator
    from knowledge_assistant.providers.gateway import ProviderGateway

    await init_db()
    orchestrator = Orchestrator(settings, async_session_maker, ProviderGateway.from_settings(settings))
    result = await orchestrator.resolve(query, user_id=user_id)

    click.echo(result.response)
    click.echo(f"\n  [{result.kind} / {result.source}, confidence {result.confidence:.2f}]")
    if result.conversation_id:
        click.echo(f"  Conversation: {result.conversation_id}")


@cli.command()
@click.argument("question")
@click.argument("answer")
@click.option("--user", "-u", "user_id", help="Owner of the fact (omit for a public fact)")
def teach(question: str, answer: str, user_id: str | None) -> None:
    """Store ANSWER as the answer to QUESTION."""
    asyncio.run(_teach(question, answer, user_id))


async def _teach(question: str, answer: str, user_id: str | None) -> None:
    """Async implementation of teach command."""
    from knowledge_assistant.db.database import async_session_maker, init_db
    from knowledge_assistant.exceptions import InvalidQueryError, StoreUnavailableError
    from knowledge_assistant.knowledge.mutation import KnowledgeMutator

    await init_db()
    mutator = KnowledgeMutator(settings, async_session_maker)
    try:
        outcome = await mutator.learn(question, answer, owner_user_id=user_id)
    except (InvalidQueryError, StoreUnavailableError) as e:
        click.echo(f"Could not learn: {e}", err=True)
        sys.exit(1)

    action = "Updated" if outcome.merged else "Learned"
    click.echo(f"{action}: '{outcome.entry.normalized_query}' -> {outcome.entry.response}")
    click.echo(f"  Entry: {outcome.entry.id} (confidence {outcome.entry.confidence:.2f})")


@cli.command()
@click.argument("conversation_id")
@click.argument("value", type=click.IntRange(-1, 1))
def feedback(conversation_id: str, value: int) -> None:
    """Rate a conversation: 1 (helpful), 0 (neutral) or -1 (wrong)."""
    asyncio.run(_feedback(conversation_id, value))


async def _feedback(conversation_id: str, value: int) -> None:
    """Async implementation of feedback command."""
    from knowledge_assistant.db.database import async_session_maker, init_db
    from knowledge_assistant.exceptions import ConversationNotFoundError
    from knowledge_assistant.knowledge.feedback import FeedbackUpdater

    await init_db()
    try:
        outcome = await FeedbackUpdater(settings, async_session_maker).apply_feedback(conversation_id, value)
    except ConversationNotFoundError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    click.echo(f"Feedback {value:+d} recorded for {conversation_id}")
    if outcome.new_confidence is not None:
        click.echo(
            f"  Knowledge {outcome.knowledge_id}: confidence "
            f"{outcome.previous_confidence:.2f} -> {outcome.new_confidence:.2f}"
        )


@cli.command()
def sweep_cache() -> None:
    """Delete response cache entries older than the retention window."""
    asyncio.run(_sweep_cache())


async def _sweep_cache() -> None:
    """Async implementation of sweep-cache command."""
    from knowledge_assistant.cache.response_cache import ResponseCache
    from knowledge_assistant.db.database import async_session_maker, init_db

    await init_db()
    deleted = await ResponseCache(settings, async_session_maker).sweep()
    click.echo(f"Removed {deleted} expired cache entries.")


@cli.command()
@click.option("--limit", "-l", type=int, default=None, help="Maximum entries to check")
def reverify(limit: int | None) -> None:
    """Re-check possibly outdated knowledge against the AI providers."""
    asyncio.run(_reverify(limit))


async def _reverify(limit: int | None) -> None:
    """Async implementation of reverify command."""
    from knowledge_assistant.db.database import async_session_maker, init_db
    from knowledge_assistant.knowledge.reverification import KnowledgeReverifier
    from knowledge_assistant.providers.gateway import ProviderGateway

    await init_db()
    gateway = ProviderGateway.from_settings(settings)
    if not gateway.ai_enabled:
        click.echo("Error: re-verification needs AI_ENABLED and at least one AI provider.", err=True)
        sys.exit(1)

    report = await KnowledgeReverifier(settings, async_session_maker, gateway).reverify_knowledge(limit)
    click.echo("\nRe-verification complete!")
    click.echo(f"  Checked: {report.checked}")
    click.echo(f"  Updated: {report.updated}")
    click.echo(f"  Unchanged: {report.unchanged}")
    click.echo(f"  No answer: {report.no_answer}")
    click.echo(f"  Failed: {report.failed}")


@cli.command()
@click.confirmation_option(prompt="Delete all learned knowledge (system entries are kept)?")
def purge_knowledge() -> None:
    """Delete all learned knowledge except system entries."""
    asyncio.run(_purge_knowledge())


async def _purge_knowledge() -> None:
    """Async implementation of purge-knowledge command."""
    from knowledge_assistant.db.database import async_session_maker, init_db
    from knowledge_assistant.knowledge import store

    await init_db()
    deleted = await store.purge_knowledge(settings, async_session_maker)
    click.echo(f"Deleted {deleted} knowledge entries.")


@cli.command()
def stats() -> None:
    """Show knowledge store statistics."""
    asyncio.run(_stats())


async def _stats() -> None:
    """Async implementation of stats command."""
    from knowledge_assistant.db.database import async_session_maker, init_db
    from knowledge_assistant.knowledge import store

    await init_db()
    counts = await store.count_entries(async_session_maker)
    click.echo(f"Knowledge entries: {sum(counts.values())}")
    for source, count in sorted(counts.items()):
        click.echo(f"  {source}: {count}")


@cli.command()
@click.option("--host", "-h", default="127.0.0.1", help="Host to bind")
@click.option("--port", "-p", type=int, default=8000, help="Port to run on")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP API."""
    import uvicorn

    click.echo(f"Starting API on http://{host}:{port}")
    uvicorn.run("knowledge_assistant.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
