from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from paperboy.collect.intervals import plan_intervals
from paperboy.collect.pipeline import Collector
from paperboy.core.config import (
    DEFAULT_INTERVAL,
    CollectorConfig,
    load_config_file,
    load_env,
    merge_config,
)
from paperboy.core.errors import ConfigurationError, PaperboyError
from paperboy.core.models import TimeWindow
from paperboy.core.utils import format_ts, parse_timestamp
from paperboy.services.output import (
    default_outfile,
    read_output,
    render_html,
    save_packages_json,
    write_output,
)

app = typer.Typer(help="Paperboy CLI: collect the most visited stories over a time window")


def _echo(s: str) -> None:
    typer.echo(s)


def _fail(message: str, code: int) -> None:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=code)


@app.command()
def run(
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Chartbeat API key"),
    host: Optional[str] = typer.Option(None, "--host", help="Site host, e.g. example.com"),
    start: Optional[str] = typer.Option(None, "--start", help="UNIX seconds or ISO-8601"),
    end: Optional[str] = typer.Option(None, "--end", help="UNIX seconds or ISO-8601"),
    interval: Optional[int] = typer.Option(None, "--interval", help="Seconds between snapshots"),
    top_n: Optional[int] = typer.Option(None, "--top-n", min=1),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-fetch timeout (s)"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", min=1),
    outfile: Optional[Path] = typer.Option(None, "--outfile", "-o"),
    fmt: str = typer.Option("html", "--format", help="html or json"),
    config: Optional[Path] = typer.Option(None, "--config", exists=True, dir_okay=False, readable=True),
) -> None:
    """Collect snapshots, rank stories, enrich the top ones and write the output."""
    fmt = fmt.lower()
    if fmt not in ("html", "json"):
        _fail(f"Unknown format: {fmt}", 2)

    try:
        conf = merge_config(
            load_config_file(config),
            load_env(),
            {
                "api_key": api_key,
                "host": host,
                "start_time": start,
                "end_time": end,
                "interval": interval,
                "top_n": top_n,
                "timeout": timeout,
                "concurrency": concurrency,
                "outfile": str(outfile) if outfile else None,
            },
        )
        cfg = CollectorConfig.from_mapping(conf)
        collector = Collector(cfg)
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}", 2)
        return

    packages = collector.run()
    _echo(
        f"Collected {len(collector.stories)} stories from {len(collector.timestamps)} snapshots "
        f"({len(collector.failed_buckets)} failed); {len(packages)} packaged"
    )

    target = Path(cfg.outfile or default_outfile(cfg.host or "paperboy"))
    if fmt == "json":
        if target.suffix.lower() != ".json":
            target = target.with_suffix(".json")
        save_packages_json(
            packages,
            target,
            {
                "host": cfg.host,
                "start": format_ts(cfg.start_time),
                "end": format_ts(cfg.end_time),
                "failed_buckets": [format_ts(t) for t in collector.failed_buckets],
            },
        )
    else:
        write_output(render_html(packages), target)
    _echo(f"Saved: {target}")


@app.command()
def plan(
    start: str = typer.Option(..., "--start", help="UNIX seconds or ISO-8601"),
    end: str = typer.Option(..., "--end", help="UNIX seconds or ISO-8601"),
    interval: int = typer.Option(DEFAULT_INTERVAL, "--interval"),
) -> None:
    """Print the snapshot timestamps a run would query."""
    try:
        window = TimeWindow(parse_timestamp(start), parse_timestamp(end), interval)
        times = plan_intervals(window)
    except ValueError as e:
        _fail(f"Invalid timestamp: {e}", 2)
        return
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}", 2)
        return
    for t in times:
        _echo(f"{t}\t{format_ts(t)}")


@app.command()
def show(path: Path = typer.Argument(..., help="Output file written by `run`")) -> None:
    """Print a previously written output file."""
    try:
        _echo(read_output(path))
    except PaperboyError as e:
        _fail(str(e), 1)


def main() -> None:  # console_scripts entrypoint wrapper
    app()


if __name__ == "__main__":
    main()
