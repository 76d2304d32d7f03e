"""CLI entry point for chat-service."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from chat_service import __version__


def _echo_delta(delta: str) -> None:
    click.echo(delta, nl=False)
    sys.stdout.flush()


async def _run_turn(controller, message: str, timeout: float | None):
    turn = controller.send(message, on_delta=_echo_delta)
    if timeout:
        return await asyncio.wait_for(turn, timeout=timeout)
    return await turn


@click.command()
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True),
    help='Path to YAML config file.',
)
@click.option(
    '-s',
    '--storage-dir',
    default=None,
    type=click.Path(file_okay=False),
    help='Directory holding chat JSON files.',
)
@click.option('--chat-id', default=None, help='Continue (or create) the chat with this id.')
@click.option(
    '-u',
    '--user-id',
    default='local',
    envvar='CHAT_SERVICE_USER',
    show_default=True,
    help='Owner recorded on newly created chats.',
)
@click.option('-m', '--message', default=None, help='Send one message and exit (no prompt loop).')
@click.option('--timeout', default=None, type=float, help='Abort a turn after this many seconds.')
@click.option(
    '--debug-log',
    'debug_log_dir',
    default=None,
    type=click.Path(file_okay=False),
    help='Write chat_debug.log into this directory.',
)
@click.version_option(version=__version__)
def cli(config_path, storage_dir, chat_id, user_id, message, timeout, debug_log_dir):
    """chat-service -- streaming multi-turn chat with a local or hosted LLM."""
    from chat_service.l1_entities.errors import ChatCompletionError  # noqa: PLC0415 -- deferred: not needed for --help
    from chat_service.l3_interface_adapters.gateways.yaml_config_loader import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlConfigLoader,
    )
    from chat_service.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: provider SDKs not loaded on --help
        DependencyContainer,
    )
    from chat_service.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
        InfraConfig,
        build_app_config,
    )

    if debug_log_dir:
        from chat_service.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: only with --debug-log
            setup_file_logging,
        )

        setup_file_logging(Path(debug_log_dir))

    try:
        overrides: dict = {}
        if storage_dir:
            overrides['storage'] = {'directory': storage_dir}
        raw = YamlConfigLoader().load_raw(config_path, overrides=overrides if overrides else None)
        config = build_app_config(raw)
        infra = InfraConfig.model_validate(raw)
    except (FileNotFoundError, ValueError) as e:  # pydantic ValidationError is a ValueError
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    _preflight_llm(infra, config.chat.model)

    container = DependencyContainer(config, user_id=user_id, chat_id=chat_id, infra=infra)
    controller = container.controller

    if message is not None:
        try:
            asyncio.run(_run_turn(controller, message, timeout))
        except (ChatCompletionError, asyncio.TimeoutError) as e:
            click.echo('')
            click.echo(f'Error: {str(e) or "turn timed out"}', err=True)
            sys.exit(1)
        click.echo('')
        click.echo(f'chat: {controller.chat_id}', err=True)
        return

    click.echo("Type a message, or 'exit' to quit.", err=True)
    while True:
        try:
            line = click.prompt('you', prompt_suffix='> ', default='', show_default=False)
        except (EOFError, click.Abort):
            break
        line = line.strip()
        if not line:
            continue
        if line in ('exit', 'quit'):
            break
        try:
            asyncio.run(_run_turn(controller, line, timeout))
        except (ChatCompletionError, asyncio.TimeoutError) as e:
            click.echo('')
            click.echo(f'Error: {str(e) or "turn timed out"}', err=True)
            continue
        click.echo('')
    if controller.chat_id:
        click.echo(f'chat: {controller.chat_id}', err=True)


def _preflight_llm(infra, model: str) -> None:
    from chat_service.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: preflight only runs when starting a session
        DependencyContainer,
    )

    client = DependencyContainer.build_llm_client(infra)
    ok, err = client.check_connectivity()
    if not ok:
        click.echo(f'Warning: {infra.llm_provider} not reachable ({err}). Turns will fail.', err=True)
        return
    if client.check_models([model]):
        click.echo(f'Warning: model {model!r} is not available on {infra.llm_provider}.', err=True)
