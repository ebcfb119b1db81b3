"""Decorate GitLab merge requests with code-quality analysis results."""

import logging
import os

import click
from dotenv import load_dotenv


@click.command()
@click.argument("report", type=click.Path(exists=True, dir_okay=False))
@click.option("--api-url", help="GitLab API URL, e.g. https://gitlab.example.com/api/v4")
@click.option("--repository-slug", help="Project path, e.g. my-group/my-project")
@click.option("--gitlab-token", envvar="GITLAB_TOKEN", help="GitLab personal access token")
@click.option("--public-url", envvar="SONAR_PUBLIC_URL", help="Public URL of the dashboard")
@click.option("-v", "--verbose", is_flag=True, help="Log HTTP traffic")
def main(
    report: str,
    api_url: str | None,
    repository_slug: str | None,
    gitlab_token: str | None,
    public_url: str | None,
    verbose: bool,
) -> None:
    """Post the status and review comments of an analysis REPORT to its merge request."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if gitlab_token:
        os.environ["GITLAB_TOKEN"] = gitlab_token
    if public_url:
        os.environ["SONAR_PUBLIC_URL"] = public_url

    from .config import API_URL_PROPERTY, REPOSITORY_SLUG_PROPERTY
    from .decorator import MergeRequestDecorator
    from .exceptions import DecorationError
    from .report import load_report

    overrides = {}
    if api_url:
        overrides[API_URL_PROPERTY] = api_url
    if repository_slug:
        overrides[REPOSITORY_SLUG_PROPERTY] = repository_slug

    try:
        analysis = load_report(report, overrides)
        result = MergeRequestDecorator().decorate(analysis)
    except DecorationError as e:
        msg = f"Could not decorate merge request on GitLab: {e}"
        raise click.ClickException(msg) from e

    click.echo(
        f"status={result.state} coverage={result.coverage} "
        f"inline_comments={result.inline_comments} skipped={result.skipped_issues}"
    )


if __name__ == "__main__":
    main()
