"""
The `keeper` command: run the handlers without the web service.

A CI job with read-only access runs `keeper collect` and uploads the
artifact directory.  A dependent job with write access downloads it and
runs `keeper process`.
"""

import json
import sys
from pathlib import Path

import click

from repo_keeper import create_app, settings
from repo_keeper.artifacts import prune_artifacts, read_artifacts, write_artifacts
from repo_keeper.events import collect_event, should_collect
from repo_keeper.info import get_keeper_config


def _echo_json(data):
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.option("--config", "config_name", envvar="KEEPER_CONFIG", default="default",
              help="Which configuration class to use.")
@click.pass_context
def cli(ctx, config_name):
    app = create_app(config_name)
    ctx.with_resource(app.app_context())


@cli.command()
@click.option("--event-name", envvar="GITHUB_EVENT_NAME", required=True,
              help="The GitHub event name, like 'pull_request'.")
@click.option("--event-path", envvar="GITHUB_EVENT_PATH", required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="A file holding the webhook payload.")
@click.option("--output", default="event-artifacts", show_default=True,
              type=click.Path(file_okay=False, path_type=Path),
              help="Directory to write the artifacts into.")
def collect(event_name, event_path, output):
    "Record an event and the accepted versions for `keeper process`"
    payload = json.loads(event_path.read_text())
    if not should_collect(event_name, payload, settings.KEEPER_REPOSITORY):
        click.echo(f"Not collecting {event_name} event")
        return
    record = collect_event(event_name, payload)
    config = get_keeper_config(record.repository)
    write_artifacts(output, record, config)
    click.echo(f"Collected {event_name} {record.action!r} on {record.issue_id} into {output}")


@cli.command()
@click.option("--input", "input_dir", default="event-artifacts", show_default=True,
              type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="Directory written by `keeper collect`.")
@click.option("--dry-run", is_flag=True, help="Don't change anything on GitHub.")
def process(input_dir, dry_run):
    "Run the handlers for a collected event"
    from repo_keeper.tasks.github import process_event

    record, config = read_artifacts(input_dir)
    info = process_event(record, config, dry_run=dry_run)
    _echo_json(info)
    if info["errors"]:
        sys.exit(1)


@cli.command("stale-sweep")
@click.option("--repo", default=None, help="The repository to sweep, if not the configured one.")
def stale_sweep_command(repo):
    "Label inactive pull requests as stale"
    from repo_keeper.tasks.stale import stale_sweep

    result = stale_sweep(repo)
    _echo_json({"checked": result.checked, "labeled": result.labeled, "failed": result.failed})


@cli.command("prune-artifacts")
@click.option("--root", default=".", show_default=True,
              type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="Directory holding artifact directories.")
@click.option("--retention-days", type=int, default=None,
              help="Keep artifacts this many days (default: ARTIFACT_RETENTION_DAYS).")
def prune_artifacts_command(root, retention_days):
    "Delete expired event artifacts"
    if retention_days is None:
        retention_days = settings.ARTIFACT_RETENTION_DAYS
    pruned = prune_artifacts(root, retention_days)
    for path in pruned:
        click.echo(f"Deleted {path}")


if __name__ == "__main__":
    cli()
