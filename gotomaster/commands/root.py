import asyncio

import click
from pydantic import ValidationError

from gotomaster.app import GoToMaster
from gotomaster.env import Env, ProxyConfig, load_env
from gotomaster.exceptions import ConfigurationError, PortBindError
from gotomaster.logging import LoggingConfig


LOG_LEVELS = ["trace", "debug", "info", "warn", "error", "critical", "fatal"]


def load_config(
    ports: str | None = None,
    nodes: str | None = None,
    auth: str | None = None,
    timeout: str | None = None,
    env_file: str | None = None,
    log_level: str | None = None,
) -> tuple[Env, ProxyConfig]:
    override = {
        "GO_TO_MASTER_PORTS": ports,
        "GO_TO_MASTER_NODES": nodes,
        "GO_TO_MASTER_AUTH": auth,
        "GO_TO_MASTER_PROBE_TIMEOUT": timeout,
        "GO_TO_MASTER_LOG_LEVEL": log_level,
    }

    try:
        env = load_env(
            Env,
            env_file=env_file,
            override=override,
        )

    except (ValidationError, ValueError) as err:
        raise ConfigurationError(f"Invalid configuration: {err}") from err

    return env, ProxyConfig.from_env(env)


async def serve(env: Env, config: ProxyConfig):
    LoggingConfig().update(**env.get_logging_config())

    app = GoToMaster(config)
    await app.run()


@click.command(
    help="Forward TCP traffic to the current master of a replicated redis cluster."
)
@click.option("--ports", default=None, type=str, help="Comma-separated list of listening ports.")
@click.option("--nodes", default=None, type=str, help="Comma-separated list of redis node hostnames.")
@click.option("--auth", default=None, type=str, help="Redis auth string.")
@click.option("--timeout", default=None, type=str, help="Per-attempt probe timeout, e.g. 1s or 0.5.")
@click.option("--env-file", default=None, type=str, help="Path to a .env file (default: ./.env).")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Minimum level of log lines to emit.",
)
@click.pass_context
def go_to_master(
    ctx: click.Context,
    ports: str | None,
    nodes: str | None,
    auth: str | None,
    timeout: str | None,
    env_file: str | None,
    log_level: str | None,
):
    try:
        env, config = load_config(
            ports=ports,
            nodes=nodes,
            auth=auth,
            timeout=timeout,
            env_file=env_file,
            log_level=log_level.lower() if log_level else None,
        )

    except ConfigurationError as err:
        click.echo(str(err), err=True)
        ctx.exit(1)

    try:
        asyncio.run(serve(env, config))

    except PortBindError:
        ctx.exit(1)

    except (
        KeyboardInterrupt,
        asyncio.CancelledError,
    ):
        pass


def run():
    go_to_master(prog_name="go-to-master")
