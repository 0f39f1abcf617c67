from __future__ import annotations

from dataclasses import replace

import click

from gent import ai_provider, git, github
from gent.branch import extract_issue_number
from gent.config import (
    PROVIDERS,
    Config,
    load_agent_instructions,
    load_config,
    set_runtime_provider,
)
from gent.labels import all_labels, sort_by_priority, workflow_labels, workflow_status
from gent.progress import read_progress
from gent.prompts import build_implementation_prompt
from gent.services import workflow

CLI_ERRORS = (git.GitError, github.GitHubUnavailableError, ai_provider.AIProviderError)

STATUSES = ("ready", "in-progress", "completed", "blocked", "all")

provider_option = click.option(
    "-p",
    "--provider",
    type=click.Choice(PROVIDERS),
    default=None,
    help="AI provider to use for this command.",
)


def _prepare(provider: str | None = None) -> Config:
    """Apply a provider override and check gh auth. Returns the active config."""
    if provider:
        set_runtime_provider(provider)
    if not github.check_gh_auth():
        raise click.ClickException(
            "Not authenticated with GitHub. Run 'gh auth login' first."
        )
    return load_config()


def _require_provider(config: Config) -> None:
    if not ai_provider.is_provider_available(config.provider):
        name = ai_provider.display_name(config.provider)
        raise click.ClickException(f"{name} CLI not found. Install {config.provider} first.")


@click.command("setup-labels")
def setup_labels() -> None:
    """Create or update the workflow labels on the GitHub repository."""
    config = _prepare()
    labels = all_labels(config)
    failed = []
    for label in labels:
        try:
            github.create_label(label)
        except github.GitHubUnavailableError as e:
            failed.append(label.name)
            click.echo(click.style(f"  x {label.name}: {e}", fg="red"), err=True)
        else:
            click.echo(f"  {click.style('ok', fg='green')} {label.name}")
    if failed:
        raise click.ClickException(f"{len(failed)} of {len(labels)} labels failed.")
    click.echo(f"Created {len(labels)} labels.")


@click.command()
@click.argument("description")
@click.option("-t", "--title", default=None, help="Override the issue title.")
@click.option("--type", "issue_type", default=None, help="Issue type label (e.g. fix).")
@click.option("--no-ai", is_flag=True, help="Post the description without the AI write-up.")
@click.option("-y", "--yes", is_flag=True, help="Create without asking for confirmation.")
@provider_option
def create(
    description: str,
    title: str | None,
    issue_type: str | None,
    no_ai: bool,
    yes: bool,
    provider: str | None,
) -> None:
    """Create a GitHub issue from DESCRIPTION.

    By default the AI provider writes the issue body and picks its type,
    priority, risk and area labels.
    """
    config = _prepare(provider)
    if issue_type is not None and issue_type not in config.labels.types:
        raise click.BadParameter(
            f"must be one of {', '.join(config.labels.types)}", param_hint="--type"
        )

    if no_ai:
        draft = workflow.plain_ticket(description, config, issue_type or "feature")
    else:
        _require_provider(config)
        click.echo(f"Writing ticket with {ai_provider.display_name(config.provider)}...")
        try:
            draft = workflow.generate_ticket(description, config)
        except ai_provider.AIProviderError as e:
            raise click.ClickException(str(e)) from e
        if issue_type is not None:
            labels = [label for label in draft.labels if not label.startswith("type:")]
            draft = replace(draft, labels=(*labels, f"type:{issue_type}"))
    if title:
        draft = replace(draft, title=title)

    click.echo(click.style(draft.title, bold=True))
    click.echo("Labels: " + ", ".join(draft.labels))
    click.echo()
    click.echo(draft.body)
    click.echo()
    if not yes and not click.confirm("Create this issue?", default=True):
        click.echo("Cancelled.")
        return

    try:
        number = github.create_issue(draft.title, draft.body, labels=list(draft.labels))
    except github.GitHubUnavailableError as e:
        raise click.ClickException(str(e)) from e
    click.echo(click.style(f"Created issue #{number}", fg="green"))


@click.command("list")
@click.option(
    "-s",
    "--status",
    type=click.Choice(STATUSES),
    default="ready",
    show_default=True,
    help="Workflow status to show.",
)
@click.option("-l", "--label", default=None, help="Only issues with this label.")
@click.option("-n", "--limit", type=int, default=20, show_default=True)
def list_cmd(status: str, label: str | None, limit: int) -> None:
    """List open issues by workflow status, highest priority first."""
    config = _prepare()
    labels = [label] if label else []
    if status != "all":
        labels.append(workflow_labels(config)[status])
    try:
        issues = github.list_issues(labels=labels or None, limit=limit)
    except github.GitHubUnavailableError as e:
        raise click.ClickException(str(e)) from e
    if not issues:
        click.echo("No issues found.")
        return
    for issue in sort_by_priority(issues, config):
        click.echo(
            f"#{issue.number:<5} "
            f"{'[' + workflow_status(issue.labels, config) + ']':<14} "
            f"{'[' + workflow.issue_type(issue) + ']':<11} {issue.title}"
        )


@click.command()
@click.argument("issue_number", type=int, required=False)
@click.option("-a", "--auto", is_flag=True, help="Pick the highest-priority ready issue.")
@provider_option
def run(issue_number: int | None, auto: bool, provider: str | None) -> None:
    """Implement an issue with the AI provider.

    Checks out the issue's branch, marks the issue in progress and hands the
    terminal to the provider until it exits.
    """
    if issue_number is None and not auto:
        raise click.UsageError("Provide an issue number or use --auto.")
    config = _prepare(provider)
    _require_provider(config)
    ready = workflow_labels(config)["ready"]

    try:
        if auto:
            issues = sort_by_priority(github.list_issues(labels=[ready]), config)
            if not issues:
                raise click.ClickException(f"No open issues labelled {ready}.")
            issue = issues[0]
            click.echo(f"Auto-selected #{issue.number}: {issue.title}")
        else:
            issue = github.get_issue(issue_number)
            if ready not in issue.labels and not click.confirm(
                f"#{issue.number} is not labelled {ready}. Continue anyway?",
                default=False,
            ):
                return
        branch = workflow.start_issue(issue, config, git.default_branch())
    except CLI_ERRORS as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"On branch {branch}")

    prompt = build_implementation_prompt(
        issue,
        config,
        agent_instructions=load_agent_instructions(config),
        progress=read_progress(config),
    )
    name = ai_provider.display_name(config.provider)
    try:
        code = ai_provider.run_interactive(prompt, config)
    except ai_provider.AIProviderError as e:
        raise click.ClickException(str(e)) from e
    if code != 0:
        click.echo(click.style(f"{name} exited with status {code}", fg="yellow"), err=True)
    else:
        click.echo(f"{name} session finished. Review the changes, then run 'gent pr'.")


@click.command()
@click.option("-d", "--draft", is_flag=True, help="Open the pull request as a draft.")
@click.option("--no-ai", is_flag=True, help="Describe the PR with the commit list only.")
@provider_option
def pr(draft: bool, no_ai: bool, provider: str | None) -> None:
    """Push the current branch and open a pull request for it."""
    config = _prepare(provider)
    try:
        if git.is_on_main_branch():
            raise click.ClickException("Cannot open a pull request from the base branch.")
        existing = github.get_pr_status()
        if existing is not None and existing.state == "open":
            raise click.ClickException(f"A pull request already exists: {existing.url}")

        branch = git.current_branch()
        base = git.default_branch()
        commits = git.commits_since_base(base)
        if not commits:
            raise click.ClickException(f"No commits since {base}.")

        issue = None
        number = extract_issue_number(branch)
        if number is not None:
            try:
                issue = github.get_issue(number)
            except github.GitHubUnavailableError as e:
                click.echo(f"Could not fetch issue #{number}: {e}", err=True)

        if git.unpushed_commits_exist():
            click.echo(f"Pushing {branch}...")
            git.push_branch(branch)

        body = None
        if not no_ai and ai_provider.is_provider_available(config.provider):
            name = ai_provider.display_name(config.provider)
            click.echo(f"Writing description with {name}...")
            try:
                body = workflow.generate_pr_body(
                    issue, commits, git.changed_files(base), config
                )
            except ai_provider.AIProviderError as e:
                click.echo(f"{name} failed, listing commits instead: {e}", err=True)
        if body is None:
            body = workflow.plain_pr_body(issue, commits)

        url = github.create_pull_request(
            workflow.pr_title(issue, commits, branch), body, base=base, draft=draft
        )
    except CLI_ERRORS as e:
        raise click.ClickException(str(e)) from e

    if issue is not None:
        workflow.mark_completed(issue.number, config)
    click.echo(click.style("Pull request created", fg="green"))
    click.echo(url)
    if draft:
        click.echo("Created as draft. Mark it ready for review when done.")
