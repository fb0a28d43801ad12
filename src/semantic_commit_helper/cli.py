"""
Command line interface for the semantic_commit_helper tool.

This module defines the ``main`` click group used as the entry point of
the ``checkupcodes`` command. ``commit`` reads the staged changes,
generates three candidate messages, lets the user pick and optionally
edit one, records it in the audit log and creates the commit.
``generate`` only prints the candidates. ``config``, ``set-model`` and
``models`` inspect and change the model configuration.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, Optional, Tuple

import click

from semantic_commit_helper import MESSAGE_COUNT, __version__
from semantic_commit_helper.config.loader import (
    ConfigurationError,
    get_available_models,
    load_config,
    set_default_model,
)
from semantic_commit_helper.diff.diff_extractor import extract_diffs
from semantic_commit_helper.history.commit_log import log_commit_to_file
from semantic_commit_helper.llm.commit_message_generator import (
    CommitMessage,
    PipelineContext,
    generate_commit_message,
)
from semantic_commit_helper.llm.errors import LLMError
from semantic_commit_helper.vcs.git_client import GitClient, GitError

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests). When logging is configured by
# the CLI, root handlers will be added and messages will propagate.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_NO_REPO = 3
EXIT_NO_CHANGES = 4
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_LLM_FAILURE = 7
EXIT_CANCELLED = 8


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Simple progress indicator for user feedback."""

    def __init__(self, message: str):
        self.message = message
        self.start_time = 0.0

    def __enter__(self):
        self.start_time = time.time()
        click.echo(f"⠋ {self.message}...", nl=False)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.time() - self.start_time
        mark = "✗" if exc_type is not None else "✓"
        click.echo(f"\r{mark} {self.message} (took {elapsed:.1f}s)")
        return False


def print_info(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}")


def print_warning(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}")


def print_error(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def print_remediation(exc: Exception) -> None:
    remediation = getattr(exc, "remediation", None)
    if remediation:
        click.echo("")
        for line in remediation.splitlines():
            click.echo(f"  {line}", err=True)


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def load_staged_changes(start_dir: Path) -> Tuple[GitClient, Dict[str, str]]:
    """Return the Git client and the staged changeset for ``start_dir``.

    Raises
    ------
    click.exceptions.Exit
        With EXIT_NO_REPO outside a repository, EXIT_NO_CHANGES when
        nothing is staged, EXIT_VCS_FAILURE when Git fails.
    """
    repo_root = GitClient.find_repo_root(start_dir)
    if repo_root is None:
        print_error("No Git repository found in current directory or parent directories.")
        raise click.exceptions.Exit(EXIT_NO_REPO)

    client = GitClient(repo_root)
    try:
        staged = client.get_staged_files()
        if not staged:
            print_error("No staged files found. Please stage some files first using `git add`")
            raise click.exceptions.Exit(EXIT_NO_CHANGES)
        changeset = extract_diffs(client, staged)
    except GitError as exc:
        print_error(f"Git error: {exc}")
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)

    print_success(f"Found {len(changeset)} staged file{'s' if len(changeset) != 1 else ''}")
    for path in changeset:
        print_info(path, indent=1)
    return client, changeset


def generate_messages(changeset: Dict[str, str], model: Optional[str]) -> CommitMessage:
    """Run the generation pipeline, mapping its errors onto exit codes."""
    try:
        context = PipelineContext.from_environment()
        with ProgressIndicator("Analyzing staged files and generating messages"):
            return generate_commit_message(changeset, model, context)
    except ConfigurationError as exc:
        print_error(f"Configuration error: {exc}")
        print_remediation(exc)
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
    except LLMError as exc:
        print_error(f"Error generating commit message: {exc}")
        print_remediation(exc)
        raise click.exceptions.Exit(EXIT_LLM_FAILURE)


def print_messages(result: CommitMessage) -> None:
    for index, message in enumerate(result.messages, start=1):
        click.echo(f"{index}) {message}")


def choose_message(result: CommitMessage) -> Optional[str]:
    """Ask the user to pick one of the messages; ``None`` means cancel."""
    click.echo(f"\nPlease choose a commit message by entering its number (1-{MESSAGE_COUNT}):")
    print_messages(result)
    answer = click.prompt(
        f"\nEnter your choice (1-{MESSAGE_COUNT}) or any other key to cancel",
        default="",
        show_default=False,
    ).strip()
    if answer.isdigit() and 1 <= int(answer) <= len(result.messages):
        return result.messages[int(answer) - 1]
    return None


def edit_message(message: str) -> str:
    """Offer to edit ``message``; empty input keeps it unchanged."""
    click.echo("\nSelected commit message:")
    click.echo(message)
    if not click.confirm("\nDo you want to edit this message?", default=False):
        return message
    click.echo(f"\nCurrent message: {message}")
    click.echo("(Enter your new message or press Enter to keep the current message)")
    edited = click.prompt("New message", default="", show_default=False).strip()
    return edited or message


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="checkupcodes")
def main(verbose: bool) -> None:
    """🤖 AI-powered commit message generator."""
    # force=True reconfigures handlers on every invocation (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )


@main.command()
@click.option("-m", "--model", "model", default=None, help="Specify AI model to use.")
def commit(model: Optional[str]) -> None:
    """Generate and apply a commit message for staged files."""
    try:
        client, changeset = load_staged_changes(Path.cwd())
        result = generate_messages(changeset, model)

        selected = choose_message(result)
        if selected is None:
            print_warning("Commit cancelled.")
            raise click.exceptions.Exit(EXIT_CANCELLED)

        log_commit_to_file(selected)
        selected = edit_message(selected)

        try:
            client.commit(selected)
        except GitError as exc:
            print_error(f"Failed to create commit: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)
        print_success("Commit created successfully!")
    except click.exceptions.Exit:
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)


@main.command()
@click.option("-m", "--model", "model", default=None, help="Specify AI model to use.")
def generate(model: Optional[str]) -> None:
    """Generate commit messages for staged changes without committing."""
    try:
        _client, changeset = load_staged_changes(Path.cwd())
        result = generate_messages(changeset, model)
        click.echo("\nGenerated commit messages:")
        print_messages(result)
    except click.exceptions.Exit:
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)


def _load_config_or_exit():
    try:
        return load_config()
    except ConfigurationError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)


@main.command("config")
def show_config() -> None:
    """Show current AI configuration."""
    config = _load_config_or_exit()
    click.echo("\nCurrent Configuration:")
    click.echo("--------------------")
    click.echo(f"Default Model: {click.style(config.default_model, fg='green')}")
    click.echo("\nAvailable Models:")
    for name in get_available_models(config):
        profile = config.models[name]
        marker = click.style("→", fg="green") if name == config.default_model else " "
        click.echo(f"\n{marker} {click.style(name, bold=True)}:")
        click.echo(f"  API URL: {profile.api_url}")
        click.echo(f"  Temperature: {profile.temperature}")
        click.echo(f"  Top P: {profile.top_p}")


@main.command("set-model")
@click.argument("model")
def set_model(model: str) -> None:
    """Set default AI model."""
    try:
        set_default_model(model)
    except ConfigurationError as exc:
        print_error(str(exc))
        config = _load_config_or_exit()
        click.echo("\nAvailable models:")
        for name in get_available_models(config):
            click.echo(f"- {name}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
    print_success(f"Default model set to: {click.style(model, bold=True)}")


@main.command()
def models() -> None:
    """List all available AI models for commit message generation."""
    config = _load_config_or_exit()
    click.echo("\nAvailable AI Models:")
    click.echo("------------------")
    for name in get_available_models(config):
        icon = "🌐" if config.models[name].is_chat_completion else "🤖"
        click.echo(f"{icon} {click.style(name, bold=True)}")
    click.echo("\nUsage:")
    click.echo("  Set default model:")
    click.echo(f"  {click.style('checkupcodes set-model <model-name>', fg='cyan')}")
    click.echo("\n  Use specific model for one commit:")
    click.echo(f"  {click.style('checkupcodes commit -m <model-name>', fg='cyan')}")
