"""CLI entry point for v6watch."""

from pathlib import Path

import click

from v6watch import __version__
from v6watch.config import ConfigStore, get_config_path
from v6watch.detector import ChangeDetector
from v6watch.errors import ConfigIncompleteError, ConfigMissingError, V6WatchError
from v6watch.ip_probe import detect_ipv6
from v6watch.logging import setup_logging
from v6watch.notifier import EmailNotifier


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to config file (default: ./config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Diagnostic log level (written to stderr).",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also append diagnostics to this file.",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None, log_level: str, log_file: Path | None) -> None:
    """v6watch - Email the operator when the host's IPv6 address changes."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = get_config_path(config)
    ctx.obj["logger"] = setup_logging(log_level, log_file)


def _report_error(error: V6WatchError) -> None:
    """Print operator-facing lines for a failed run."""
    if isinstance(error, ConfigMissingError):
        click.echo(f"已创建配置文件模板：{error.path}")
        click.echo("请填写配置文件中的SMTP信息后重新运行程序")
    elif isinstance(error, ConfigIncompleteError):
        click.echo("请在配置文件中填写完整的SMTP信息")
    click.echo(f"发生错误: {error}", err=True)


def _wait_for_operator() -> None:
    """Block until the operator presses Enter."""
    click.echo("\n按任意键退出...")
    click.get_text_stream("stdin").readline()


@main.command()
@click.option(
    "--pause/--no-pause",
    default=True,
    show_default=True,
    help="Wait for Enter before exiting. Use --no-pause when scheduled.",
)
@click.option(
    "--strict-exit",
    is_flag=True,
    default=False,
    help="Exit with status 1 when the check fails.",
)
@click.pass_context
def check(ctx: click.Context, pause: bool, strict_exit: bool) -> None:
    """Check the IPv6 address and send a notification if it changed."""
    store = ConfigStore(ctx.obj["config_path"])
    detector = ChangeDetector(store, probe=detect_ipv6, notifier=EmailNotifier())

    failed = False
    try:
        result = detector.run()
    except V6WatchError as e:
        ctx.obj["logger"].debug(f"Check failed ({e.kind.value}): {e}")
        _report_error(e)
        failed = True
    else:
        if result.changed:
            click.echo(f"IPv6地址已更改: {result.address}")
            click.echo("地址已更新并发送通知")
        else:
            click.echo("IPv6地址未发生变化")
    finally:
        if pause:
            _wait_for_operator()

    if failed and strict_exit:
        ctx.exit(1)


@main.command()
def probe() -> None:
    """Print the detected IPv6 address without notifying."""
    address = detect_ipv6()
    if address is None:
        click.echo("发生错误: 无法获取IPv6地址", err=True)
        raise SystemExit(1)
    click.echo(address)


@main.command()
def version() -> None:
    """Show version."""
    click.echo(f"v6watch version {__version__}")
