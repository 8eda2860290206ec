"""Reconciles configuration between CLI arguments and environment variables."""

from pathlib import Path

from renote.configuration.env import Settings
from renote.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError
from renote.configuration.models import GitHubAuthenticationType, GitHubConfig

_APP_SETTINGS = (
    ("GitHub App ID", "--github-app-id", "GITHUB_APP_ID"),
    ("GitHub App private key path", "--github-app-private-key-path", "GITHUB_APP_PRIVATE_KEY_PATH"),
    ("GitHub App installation ID", "--github-app-installation-id", "GITHUB_APP_INSTALLATION_ID"),
)


async def validate_github_authentication_configuration(
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
) -> GitHubAuthenticationType:
    """Validates the GitHub authentication configuration.

    Exactly one of a PAT or a complete set of GitHub App credentials must be
    provided.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If neither or both are
            provided, or if the GitHub App configuration is incomplete.

    Returns:
        GitHubAuthenticationType: The type of GitHub authentication to use.
    """
    app_values = (github_app_id, github_app_private_key_path, github_app_installation_id)

    if github_pat_token and any(app_values):
        raise GitHubAuthenticationConfigurationUndefinedError("Both PAT and GitHub App configurations are defined. Please use one or the other.")

    if github_pat_token:
        return GitHubAuthenticationType.PAT

    if all(app_values):
        return GitHubAuthenticationType.APP

    if any(app_values):
        missing = [
            f"{name} (command line option {cli_name}, environment variable {env_name})"
            for (name, cli_name, env_name), value in zip(_APP_SETTINGS, app_values)
            if not value
        ]
        raise GitHubAuthenticationConfigurationUndefinedError("Incomplete GitHub App configuration - missing settings include " + ", ".join(missing))

    raise GitHubAuthenticationConfigurationUndefinedError(
        "No GitHub authentication configuration provided. Please provide either a PAT or a GitHub App configuration."
    )


async def reconcile_github_configuration(
    settings: Settings,
    cli_github_api_url: str | None = None,
    cli_github_pat_token: str | None = None,
    cli_github_app_id: int | None = None,
    cli_github_app_private_key_path: Path | None = None,
    cli_github_app_installation_id: int | None = None,
) -> GitHubConfig:
    """Merge CLI values over environment settings and validate the result.

    CLI values take precedence; anything left unset falls back to the
    environment (or the .env file).
    """
    github_pat_token = cli_github_pat_token or settings.GITHUB_PAT_TOKEN
    github_app_id = cli_github_app_id or settings.GITHUB_APP_ID
    github_app_private_key_path = cli_github_app_private_key_path or settings.GITHUB_APP_PRIVATE_KEY_PATH
    github_app_installation_id = cli_github_app_installation_id or settings.GITHUB_APP_INSTALLATION_ID

    github_auth_type = await validate_github_authentication_configuration(
        github_pat_token=github_pat_token,
        github_app_id=github_app_id,
        github_app_private_key_path=github_app_private_key_path,
        github_app_installation_id=github_app_installation_id,
    )
    return GitHubConfig(
        github_api_url=cli_github_api_url or settings.GITHUB_API_URL,
        github_authentication_type=github_auth_type,
        github_pat_token=github_pat_token if github_auth_type == GitHubAuthenticationType.PAT else None,
        github_app_id=github_app_id,
        github_app_private_key_path=github_app_private_key_path,
        github_app_installation_id=github_app_installation_id,
    )
