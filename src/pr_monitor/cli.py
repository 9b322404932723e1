"""CLI entry point for pr monitor."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from pr_monitor.adapters.github import GitHubGraphQLClient, GitHubPullRequestSource, RetryPolicy
from pr_monitor.adapters.notifications import DesktopNotifier, LogNotifier, SlackNotifier
from pr_monitor.config import Settings, get_settings
from pr_monitor.core import (
    ExcludedLabels,
    IgnoreList,
    Notifier,
    PollOutcome,
    PullRequest,
    ReadStateTracker,
    StateStore,
)
from pr_monitor.logging_setup import setup_logging
from pr_monitor.use_cases import NotificationDispatcher, PullRequestMonitor, PullRequestWatcher

app = typer.Typer(help="Keep track of pull requests that involve you.", no_args_is_help=True)
ignore_app = typer.Typer(help="Manage ignored pull requests (owner:repo:number).", no_args_is_help=True)
labels_app = typer.Typer(help="Manage excluded labels.", no_args_is_help=True)
app.add_typer(ignore_app, name="ignore")
app.add_typer(labels_app, name="labels")

ConfigOption = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to config.yaml")


def _load(config: Path) -> Settings:
    settings = get_settings(config)
    setup_logging(settings.logging.level, settings.logging.json)
    return settings


def _build_source(settings: Settings) -> GitHubPullRequestSource:
    if not settings.github_token:
        typer.echo("✗ GITHUB_TOKEN is not set", err=True)
        raise typer.Exit(code=1)

    retry_policy = RetryPolicy(
        max_attempts=settings.retry.max_attempts,
        initial_delay=settings.retry.initial_delay,
        max_delay=settings.retry.max_delay,
        jitter=settings.retry.jitter,
    )
    client = GitHubGraphQLClient(
        token=settings.github_token,
        endpoint=settings.github.endpoint,
        timeout=settings.github.timeout,
        retry_policy=retry_policy,
    )
    return GitHubPullRequestSource(client, page_size=settings.github.page_size)


def _build_notifiers(settings: Settings) -> list[Notifier]:
    notifiers: list[Notifier] = []
    if settings.notifications.desktop:
        notifiers.append(DesktopNotifier())
    if settings.slack_webhook_url:
        notifiers.append(SlackNotifier(settings.slack_webhook_url))
    return notifiers or [LogNotifier()]


def _format_pull_request(pr: PullRequest) -> str:
    draft = " [draft]" if pr.is_draft else ""
    labels = f" ({', '.join(sorted(pr.label_names))})" if pr.labels else ""
    return f"{pr.repository_owner}/{pr.repository_name}#{pr.number}{draft} {pr.title}{labels}"


def _print_outcome(outcome: PollOutcome, tracker: ReadStateTracker) -> None:
    typer.echo("")
    if outcome.error:
        typer.echo(f"⚠️  Poll failed, showing previous results: {outcome.error}")

    for item in outcome.items:
        marker = "●" if tracker.is_unread(item.id, item.updated_at) else " "
        icons = "".join(category.icon for category in item.categories)
        typer.echo(f"{marker} {icons:<8} {item.updated_at}  {_format_pull_request(item.pull_request)}")
        typer.echo(f"           id: {item.id}")

    typer.echo(f"\n{len(outcome.items)} open pull requests, {outcome.unread_count} unread")
    if outcome.rate_limit:
        rate = outcome.rate_limit
        typer.echo(f"Rate limit: {rate.remaining}/{rate.limit} remaining (cost {rate.cost}, resets {rate.reset_at})")


@app.command()
def watch(
    once: bool = typer.Option(False, "--once", help="Run a single poll cycle and exit"),
    interval: Optional[float] = typer.Option(None, "--interval", help="Seconds between polls"),
    config: Path = ConfigOption,
) -> None:
    """Poll your pull requests and notify about new and updated ones."""
    settings = _load(config)
    source = _build_source(settings)
    store = StateStore(settings.state_dir)
    tracker = ReadStateTracker(store)

    monitor = PullRequestMonitor(
        source=source,
        ignore_list=IgnoreList(store),
        excluded_labels=ExcludedLabels(store),
        tracker=tracker,
        dispatcher=NotificationDispatcher(_build_notifiers(settings)),
        login=settings.github.login,
    )

    outcomes: list[PollOutcome] = []

    async def on_cycle(outcome: PollOutcome) -> None:
        outcomes[:] = [outcome]
        _print_outcome(outcome, tracker)

    try:
        asyncio.run(
            monitor.run_forever(
                interval=interval or settings.polling.list_interval,
                max_cycles=1 if once else None,
                on_cycle=on_cycle,
            )
        )
    except KeyboardInterrupt:
        typer.echo("\nStopped.")

    if once and outcomes and not outcomes[-1].succeeded:
        raise typer.Exit(code=1)


@app.command()
def show(
    owner: str,
    repo: str,
    number: int,
    follow: bool = typer.Option(False, "--watch", help="Keep refreshing the pull request"),
    config: Path = ConfigOption,
) -> None:
    """Show a single pull request, optionally refreshing it."""
    settings = _load(config)
    watcher = PullRequestWatcher(_build_source(settings), owner, repo, number)
    tracker = ReadStateTracker(StateStore(settings.state_dir))

    async def on_update(pr: Optional[PullRequest]) -> None:
        if watcher.last_error:
            typer.echo(f"⚠️  Refresh failed: {watcher.last_error}")
        if pr is None:
            return
        status = "unread" if tracker.is_unread(pr.id, pr.updated_at) else "read"
        typer.echo(f"{_format_pull_request(pr)}")
        typer.echo(f"  {pr.url}")
        typer.echo(f"  state: {pr.state}, review: {pr.review_decision or '-'}, updated: {pr.updated_at} ({status})")
        typer.echo(f"  {pr.commit_count} commits, {pr.comment_count + pr.review_count} comments")

    try:
        asyncio.run(
            watcher.run_forever(
                interval=settings.polling.detail_interval,
                max_cycles=None if follow else 1,
                on_update=on_update,
            )
        )
    except KeyboardInterrupt:
        typer.echo("\nStopped.")

    if watcher.pull_request is None:
        raise typer.Exit(code=1)


@app.command()
def read(
    item_id: str = typer.Argument(..., help="Pull request id"),
    updated_at: str = typer.Argument(..., help="updatedAt timestamp being acknowledged"),
    config: Path = ConfigOption,
) -> None:
    """Mark a pull request as read up to the given update."""
    settings = _load(config)
    tracker = ReadStateTracker(StateStore(settings.state_dir))
    status = tracker.mark_as_read(item_id, updated_at)
    typer.echo(f"✓ {item_id} read up to {status.last_updated_at}")


@app.command("reset-read")
def reset_read(config: Path = ConfigOption) -> None:
    """Forget all read statuses."""
    settings = _load(config)
    ReadStateTracker(StateStore(settings.state_dir)).clear()
    typer.echo("✓ Read statuses cleared")


@ignore_app.command("add")
def ignore_add(key: str, config: Path = ConfigOption) -> None:
    """Ignore a pull request by owner:repo:number."""
    settings = _load(config)
    IgnoreList(StateStore(settings.state_dir)).add(key)
    typer.echo(f"✓ Ignoring {key}")


@ignore_app.command("remove")
def ignore_remove(key: str, config: Path = ConfigOption) -> None:
    """Stop ignoring a pull request."""
    settings = _load(config)
    IgnoreList(StateStore(settings.state_dir)).remove(key)
    typer.echo(f"✓ No longer ignoring {key}")


@ignore_app.command("list")
def ignore_list(config: Path = ConfigOption) -> None:
    """List ignored pull requests."""
    settings = _load(config)
    for key in IgnoreList(StateStore(settings.state_dir)).items():
        typer.echo(key)


@ignore_app.command("clear")
def ignore_clear(config: Path = ConfigOption) -> None:
    """Remove every ignored pull request."""
    settings = _load(config)
    IgnoreList(StateStore(settings.state_dir)).clear()
    typer.echo("✓ Ignore list cleared")


@labels_app.command("add")
def labels_add(label: str, config: Path = ConfigOption) -> None:
    """Hide pull requests carrying this label."""
    settings = _load(config)
    ExcludedLabels(StateStore(settings.state_dir)).add(label)
    typer.echo(f"✓ Excluding label {label}")


@labels_app.command("remove")
def labels_remove(label: str, config: Path = ConfigOption) -> None:
    """Show pull requests with this label again."""
    settings = _load(config)
    ExcludedLabels(StateStore(settings.state_dir)).remove(label)
    typer.echo(f"✓ Label {label} no longer excluded")


@labels_app.command("toggle")
def labels_toggle(label: str, config: Path = ConfigOption) -> None:
    """Flip exclusion of a label."""
    settings = _load(config)
    excluded = ExcludedLabels(StateStore(settings.state_dir)).toggle(label)
    typer.echo(f"✓ Label {label} {'excluded' if excluded else 'included'}")


@labels_app.command("list")
def labels_list(config: Path = ConfigOption) -> None:
    """List excluded labels."""
    settings = _load(config)
    for label in ExcludedLabels(StateStore(settings.state_dir)).items():
        typer.echo(label)


@labels_app.command("clear")
def labels_clear(config: Path = ConfigOption) -> None:
    """Remove every label exclusion."""
    settings = _load(config)
    ExcludedLabels(StateStore(settings.state_dir)).clear()
    typer.echo("✓ Excluded labels cleared")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
