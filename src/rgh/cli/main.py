"""
Command-line interface for rgh.

Dispatch a GitHub Actions workflow and find the run it started:
    rgh run build                     # repo and ref from the local checkout
    rgh run build.yml -r owner/name -e main -i version=1.2 --print
    rgh run deploy --commit --push --watch

Helpers:
    rgh resolve build                 # show which workflow file 'build' maps to
    rgh workflows                     # list workflows of the repository
"""

import os
import signal
from contextlib import contextmanager

import click

from ..errors import RghError
from ..gh.client import GitHubClient
from ..gh.resolver import WorkflowResolver
from ..utils.cancel import CancelToken


def make_client(config) -> GitHubClient:
    """API client for a loaded RunConfig."""
    return GitHubClient(config.get_token(), api_url=config.api_url, timeout=config.timeout)


def parse_inputs(ctx, param, values):
    """Turn repeated KEY=VALUE options into a dict."""
    inputs = {}
    for item in values:
        key, sep, value = item.partition('=')
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'")
        inputs[key] = value
    return inputs


def echo_progress(message: str) -> None:
    click.echo(message, err=True)


@contextmanager
def cancel_on_interrupt(token: CancelToken):
    """Route Ctrl-C to the cancel token; a second Ctrl-C interrupts hard."""
    def handler(signum, frame):
        if token.cancelled:
            raise KeyboardInterrupt
        token.cancel()

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


def fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    raise SystemExit(1)


def _local_repo_id() -> str:
    from ..git import find_repo_root, get_repo_id
    return get_repo_id(find_repo_root(os.getcwd()))


@click.group()
@click.version_option(package_name='rgh')
@click.option('--config', '-C', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Config YAML file (default: $RGH_CONFIG or ~/.config/rgh/config.yaml)')
@click.pass_context
def cli(ctx, config_path):
    """rgh - dispatch GitHub Actions workflows and follow the resulting run."""
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


def _load_config(ctx):
    from ..run import RunConfig
    return RunConfig.load(ctx.obj.get('config_path'))


# ============================================================================
# Dispatch
# ============================================================================

@cli.command('run')
@click.argument('workflow')
@click.option('--commit', '-c', is_flag=True, help='Commit local changes before dispatching')
@click.option('--push', '-p', is_flag=True, help='Push the commit made by --commit')
@click.option('--repo', '-r', help='Repository as owner/name (default: from git remotes)')
@click.option('--ref', '-e', help='Branch, tag or commit (default: current branch or HEAD)')
@click.option('--input', '-i', 'inputs', multiple=True, callback=parse_inputs,
              metavar='KEY=VALUE', help='Workflow input, repeatable')
@click.option('--print', 'print_url', is_flag=True, help='Print the run URL')
@click.option('--open', '-o', 'open_url', is_flag=True, help='Open the run in a browser')
@click.option('--watch', '-w', is_flag=True, help='Watch the run with gh run watch')
@click.option('--strict', is_flag=True, help='Require the workflow file name to match WORKFLOW')
@click.pass_context
def run_cmd(ctx, workflow, commit, push, repo, ref, inputs, print_url, open_url, watch, strict):
    """Dispatch WORKFLOW and identify the run it started."""
    from ..run import DispatchOrchestrator, RunOptions, build_run_spec
    from ..run.report import open_run_url, print_run_url, watch_run

    if push and not commit:
        raise click.UsageError("--push requires --commit")

    options = RunOptions(
        commit=commit,
        push=push,
        print_url=print_url,
        open_url=open_url,
        watch=watch,
    )

    try:
        config = _load_config(ctx)
        spec = build_run_spec(
            options,
            workflow,
            repo=repo,
            ref=ref,
            inputs=inputs,
            read_message=lambda: click.prompt('Commit message'),
        )

        with make_client(config) as client, cancel_on_interrupt(CancelToken()) as token:
            orch = DispatchOrchestrator(client, config, strict=strict, echo=echo_progress)
            run = orch.run(spec, cancel=token)

        if options.print_url:
            print_run_url(run)
        if options.open_url:
            open_run_url(run)
        if options.watch:
            exit_code = watch_run(spec.repo, run)
            if exit_code:
                raise SystemExit(exit_code)
    except RghError as e:
        fail(e)


# ============================================================================
# Inspection
# ============================================================================

@cli.command('resolve')
@click.argument('workflow')
@click.option('--repo', '-r', help='Repository as owner/name (default: from git remotes)')
@click.option('--strict', is_flag=True, help='Require the workflow file name to match WORKFLOW')
@click.pass_context
def resolve_cmd(ctx, workflow, repo, strict):
    """Show the workflow file WORKFLOW resolves to."""
    try:
        config = _load_config(ctx)
        repo = repo or _local_repo_id()
        with make_client(config) as client:
            resolver = WorkflowResolver(
                client, repo, strict=strict,
                on_mismatch=lambda ref, chosen: echo_progress(
                    f"Warning: '{ref}' resolved to {chosen}, which does not match by name"),
            )
            click.echo(resolver.resolve(workflow))
    except RghError as e:
        fail(e)


@cli.command('workflows')
@click.option('--repo', '-r', help='Repository as owner/name (default: from git remotes)')
@click.pass_context
def workflows_cmd(ctx, repo):
    """List the workflows defined in the repository."""
    try:
        config = _load_config(ctx)
        repo = repo or _local_repo_id()
        with make_client(config) as client:
            workflows = client.list_workflows(repo)
    except RghError as e:
        fail(e)

    if not workflows:
        click.echo(f"No workflows in {repo}", err=True)
        return
    for workflow in workflows:
        click.echo(f"{workflow.path}\t{workflow.name or ''}\t{workflow.state or ''}")


if __name__ == '__main__':
    cli()
