"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Option
from typing_extensions import Annotated

from renote.configuration.env import Settings
from renote.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError
from renote.configuration.models import ChangelogConfig, GitHubConfig, ReleaseConfig
from renote.configuration.reconcile import reconcile_github_configuration
from renote.release.driver import run_changelog_workflow, run_release_workflow
from renote.release.exceptions import ReleaseError
from renote.utils.constants import DEFAULT_SINCE_DAYS
from renote.utils.helpers import split_values
from renote.utils.log import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False, help="Release changelog and release note generation for GitHub repositories.")


@typer_app.callback()
def main_callback(
    ctx: typer.Context,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug logging.")] = False,
    github_api_url: Annotated[str | None, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = None,
    github_pat_token: Annotated[str | None, Option(envvar="GITHUB_PAT_TOKEN", help="GitHub Personal Access Token.")] = None,
    github_app_id: Annotated[int | None, Option(envvar="GITHUB_APP_ID", help="GitHub App ID.")] = None,
    github_app_private_key_path: Annotated[Path | None, Option(envvar="GITHUB_APP_PRIVATE_KEY_PATH", help="Path to GitHub App private key.")] = None,
    github_app_installation_id: Annotated[int | None, Option(envvar="GITHUB_APP_INSTALLATION_ID", help="GitHub App Installation ID.")] = None,
) -> None:
    """Store the GitHub connection options for the selected command."""
    settings = Settings()
    configure_logging(debug or settings.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["github_api_url"] = github_api_url
    ctx.obj["github_pat_token"] = github_pat_token
    ctx.obj["github_app_id"] = github_app_id
    ctx.obj["github_app_private_key_path"] = github_app_private_key_path
    ctx.obj["github_app_installation_id"] = github_app_installation_id


def github_config_from_context(ctx: typer.Context) -> GitHubConfig:
    """Reconcile the GitHub connection options stored by the callback."""
    try:
        return asyncio.run(
            reconcile_github_configuration(
                settings=ctx.obj["settings"],
                cli_github_api_url=ctx.obj["github_api_url"],
                cli_github_pat_token=ctx.obj["github_pat_token"],
                cli_github_app_id=ctx.obj["github_app_id"],
                cli_github_app_private_key_path=ctx.obj["github_app_private_key_path"],
                cli_github_app_installation_id=ctx.obj["github_app_installation_id"],
            )
        )
    except GitHubAuthenticationConfigurationUndefinedError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc


@typer_app.command(name="changelog")
def changelog_cli(
    ctx: typer.Context,
    owner: Annotated[str, Option(help="GitHub owner.")],
    repo: Annotated[list[str], Option(help="GitHub repository, repeat or comma-separate for several.")],
    branch: Annotated[str, Option(help="Branch the tags were cut from.")],
    tag: Annotated[str, Option(help="Tag to generate the changelog for. Empty means the branch head.")],
    prev_tag: Annotated[str | None, Option(help="Previous tag. Found automatically when omitted.")] = None,
    since_days: Annotated[int, Option(help="Search changes since days when the previous tag time is unknown.")] = DEFAULT_SINCE_DAYS,
    public: Annotated[bool, Option(help="Use the last public release as previous tag, not a pre-release.")] = False,
    markdown_folding: Annotated[bool, Option(help="Fold the changelog of each repository.")] = False,
) -> None:
    """Create a changelog for repositories between tags."""
    settings: Settings = ctx.obj["settings"]
    config = ChangelogConfig(
        github=github_config_from_context(ctx),
        owner=owner,
        repos=split_values(repo),
        branch=branch,
        tag=tag,
        previous_tag=prev_tag or None,
        since_days=since_days,
        public_only=public,
        fold=markdown_folding,
        work_dir=settings.RENOTE_WORK_DIR,
    )
    try:
        changelog = asyncio.run(run_changelog_workflow(config))
    except (ReleaseError, ValueError, RuntimeError) as exc:
        typer.secho(f"Failed to generate changelog: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    typer.echo(changelog)


@typer_app.command(name="release")
def release_cli(
    ctx: typer.Context,
    owner: Annotated[str, Option(help="GitHub owner.")],
    repo: Annotated[str, Option(help="GitHub repository.")],
    tag: Annotated[str, Option(help="Release tag.")],
    milestone: Annotated[str, Option(help="Milestone of the release.")],
    branch: Annotated[str, Option(help="Branch the release targets.")],
    label: Annotated[list[str] | None, Option(help="Labels to search issues outside the milestone.")] = None,
    exclude_label: Annotated[list[str] | None, Option(help="Labels of issues to leave out.")] = None,
    section_label: Annotated[list[str] | None, Option("--section-label", "-s", help="Labels defining the note sections, in order.")] = None,
    contributor: Annotated[list[str] | None, Option("--contributor", "-c", help="Extra contributors to credit.")] = None,
    pre_note: Annotated[str | None, Option(help="File (or text) added before the generated note.")] = None,
    post_note: Annotated[str | None, Option(help="File (or text) appended after the generated note.")] = None,
    since_days: Annotated[int, Option(help="Search issues updated within this many days.")] = DEFAULT_SINCE_DAYS,
    filter_issue_hook: Annotated[str | None, Option(help="Program narrowing the found issues.")] = None,
    publish: Annotated[bool, Option(help="Create the GitHub release with the generated note.")] = False,
    note_title: Annotated[str | None, Option(help="Release title.")] = None,
    draft: Annotated[bool, Option(help="Create a draft release.")] = False,
    pre_release: Annotated[bool, Option(help="Create a pre-release.")] = False,
) -> None:
    """Create a release note from the issues of a milestone."""
    config = ReleaseConfig(
        github=github_config_from_context(ctx),
        owner=owner,
        repo=repo,
        tag=tag,
        milestone=milestone,
        branch=branch,
        labels=split_values(label),
        exclude_labels=split_values(exclude_label),
        section_labels=split_values(section_label),
        contributors=split_values(contributor),
        pre_note=pre_note,
        post_note=post_note,
        since_days=since_days,
        filter_issue_hook=filter_issue_hook,
        publish=publish,
        note_title=note_title,
        draft=draft,
        pre_release=pre_release,
    )
    try:
        note = asyncio.run(run_release_workflow(config))
    except (ReleaseError, ValueError, RuntimeError) as exc:
        typer.secho(f"Failed to create release note: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    typer.echo(note)


if __name__ == "__main__":
    typer_app()
