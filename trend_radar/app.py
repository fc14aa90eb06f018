"""Typer CLI entrypoint for Trend-Radar."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from threading import Event
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigLoader, RadarConfig
from .errors import ConfigurationError
from .logging_conf import configure_logging, default_log_dir, tail_log
from .notify import TelegramCommandListener
from .notify.formatter import format_market_cap
from .orchestrator import CycleResult
from .service import RadarService

app = typer.Typer(
    help="Trend-Radar 命令行工具：监控 pump.fun 热门榜并推送到 Telegram",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="日志查看命令",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppOptions:
    verbose: bool = False
    config_path: Path | None = None


@dataclass
class AppState:
    config: RadarConfig
    service: RadarService


def build_state(verbose: bool, config_path: Path | None = None) -> AppState:
    configure_logging(verbose=verbose)
    config = ConfigLoader(config_path=config_path).load()
    return AppState(config=config, service=RadarService.from_config(config))


def _get_state(ctx: typer.Context) -> AppState:
    options = ctx.obj if isinstance(ctx.obj, AppOptions) else AppOptions()
    try:
        return build_state(options.verbose, options.config_path)
    except ConfigurationError as exc:
        console.print(f"配置错误：{exc}", style="red")
        raise typer.Exit(code=1) from exc


def _render_cycle_table(result: CycleResult) -> Table:
    table = Table(title="本轮检查结果", box=box.SIMPLE_HEAD)
    table.add_column("名称", style="cyan")
    table.add_column("代号", style="magenta")
    table.add_column("市值", style="green", justify="right")
    table.add_column("地址", style="dim", overflow="fold")
    for entity in result.notified:
        table.add_row(
            entity.display_name,
            entity.symbol or "-",
            format_market_cap(entity.market_cap_usd),
            entity.id,
        )
    return table


app.add_typer(log_app, name="log", help="查看服务日志")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="开启调试日志", is_flag=True),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="YAML/JSON 配置文件（环境变量优先）。",
        exists=False,
        dir_okay=False,
    ),
) -> None:
    ctx.obj = AppOptions(verbose=verbose, config_path=config)


@app.command("run", help="启动轮询服务并监听 Telegram 命令，Ctrl+C 退出。")
def run(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    service = state.service
    listener = TelegramCommandListener(service.sink, service)
    stop_event = Event()
    console.print(
        f"Trend-Radar 已启动：间隔 {state.config.poll_interval_seconds:g} 秒，"
        f"{len(state.config.sources)} 个数据源。",
        style="green",
    )
    service.start()
    try:
        listener.serve_forever(stop_event)
    except KeyboardInterrupt:
        console.print("收到停止信号，正在退出…", style="yellow")
    finally:
        stop_event.set()
        service.stop()


@app.command("check", help="立即执行一次检查（不启动调度器）。")
def check(
    ctx: typer.Context,
    quiet: bool = typer.Option(False, "--quiet", help="只输出精简结果。", is_flag=True),
) -> None:
    state = _get_state(ctx)
    try:
        result = state.service.force_check()
    finally:
        state.service.stop()
    if quiet:
        console.print(
            f"检查完成：获取 {result.fetched}，新鲜 {result.fresh}，"
            f"推送 {result.new_count}，失败 {len(result.failed)}"
        )
        return
    summary = Table(title="检查汇总", box=box.SIMPLE_HEAD)
    summary.add_column("指标", style="cyan")
    summary.add_column("数量", style="green", justify="right")
    summary.add_row("获取", str(result.fetched))
    summary.add_row("新鲜", str(result.fresh))
    summary.add_row("推送", str(result.new_count))
    summary.add_row("失败", str(len(result.failed)))
    console.print(summary)
    if result.notified:
        console.print(_render_cycle_table(result))
    else:
        console.print("未发现新的 Trending 代币。", style="dim")


@app.command("sources", help="查看已配置的数据源（按优先级排序）。")
def sources(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    table = Table(title="数据源总览", box=box.SIMPLE_HEAD)
    table.add_column("#", justify="right")
    table.add_column("名称", style="cyan")
    table.add_column("类型", style="magenta")
    table.add_column("地址", style="green", overflow="fold")
    for index, source in enumerate(state.config.sources, start=1):
        table.add_row(str(index), source.name, source.kind.value, source.url)
    console.print(table)
    state.service.stop()


@log_app.command("show", help="查看服务日志的最近内容。")
def log_show(
    tail: int = typer.Option(100, "--tail", help="显示最近 N 行内容。"),
    source: Optional[str] = typer.Option(None, "--source", help="数据源名称（为空则展示全局日志）。"),
) -> None:
    base_dir = default_log_dir()
    path = base_dir / "sources" / f"{source}.log" if source else base_dir / "radar.log"
    lines = tail_log(path, tail)
    if not lines:
        console.print("暂无日志信息，请稍后再试。", style="dim")
        return
    header = f"{'源日志' if source else '全局日志'} · 最近 {len(lines)} 行"
    console.print(header, style="cyan")
    console.print("".join(lines))


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
