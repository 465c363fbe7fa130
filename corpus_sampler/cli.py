"""CLI entrypoints for corpus_sampler commands."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from .config import ConfigError, SamplerConfig, load_config
from .exporter import ExportError
from .logging import configure_logging
from .pipeline import Pipeline
from .queries import LANGUAGES, build_registry, select_queries
from .stores import DatasetError, load_dataset


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .corpus-sampler.yml or the directory holding it (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="corpus-sampler",
        description="Draw reproducible project samples and export default-branch snapshots.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        help="Run sampling queries and write their CSV files.",
    )
    _add_verbose_option(run_parser, suppress_default=True)
    _add_config_option(run_parser)
    run_parser.add_argument("--dataset", help="JSON dataset to sample from.")
    run_parser.add_argument("-o", "--output", help="Directory receiving the CSV files.")
    run_parser.add_argument(
        "--language",
        type=str.lower,
        choices=sorted(LANGUAGES),
        help="Run every query of this language (defaults to python).",
    )
    run_parser.add_argument(
        "-q",
        "--query",
        action="append",
        dest="queries",
        help="Run only the named query; may be repeated.",
    )
    run_parser.add_argument(
        "--workers",
        type=int,
        help="Threads used for snapshot extraction.",
    )
    run_parser.add_argument(
        "--epoch",
        type=int,
        help="Hide projects created after this unix timestamp.",
    )
    run_parser.add_argument("--log-file", help="Also write logs to this file.")

    list_parser = subparsers.add_parser("list", help="List registered queries.")
    _add_verbose_option(list_parser, suppress_default=True)
    _add_config_option(list_parser)
    list_parser.add_argument("--language", type=str.lower, choices=sorted(LANGUAGES))

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _apply_overrides(config: SamplerConfig, args: argparse.Namespace) -> SamplerConfig:
    overrides: dict[str, object] = {}
    if getattr(args, "dataset", None):
        overrides["dataset"] = Path(args.dataset).expanduser()
    if getattr(args, "output", None):
        overrides["output_dir"] = Path(args.output).expanduser()
    if getattr(args, "language", None):
        overrides["language"] = args.language
    if getattr(args, "queries", None):
        overrides["queries"] = list(args.queries)
    if getattr(args, "workers", None) is not None:
        overrides["workers"] = max(1, args.workers)
    if getattr(args, "epoch", None) is not None:
        overrides["epoch"] = args.epoch
    if getattr(args, "log_file", None):
        overrides["log_file"] = Path(args.log_file).expanduser()
    return replace(config, **overrides) if overrides else config


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for corpus_sampler commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        configure_logging(verbose=bool(args.verbose))
        from .service import run_service

        try:
            run_service(host=args.host, port=args.port)
        except RuntimeError as exc:
            parser.exit(1, f"{exc}\n")
        return

    try:
        config = _apply_overrides(load_config(Path(args.config)), args)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    configure_logging(verbose=bool(args.verbose), log_file=config.log_file)

    registry = build_registry(
        selection_size=config.selection_size,
        oversample=config.oversample,
        top_first_pass=config.top_first_pass,
        seeds=config.seeds,
    )

    if args.command == "list":
        language = getattr(args, "language", None)
        for query in registry.values():
            if language and query.language != language:
                continue
            print(
                f"{query.name}\t{query.filename}\t{query.first_pass().describe()} -> "
                f"{query.sampler.describe()}"
            )
        return

    if args.command == "run":
        if config.dataset is None:
            parser.exit(1, "No dataset given; pass --dataset or set 'dataset' in the config.\n")
        try:
            queries = select_queries(registry, config.queries, language=config.language)
            store = load_dataset(config.dataset, epoch=config.epoch)
        except (ValueError, DatasetError) as exc:
            parser.exit(1, f"{exc}\n")

        output_dir = config.output_dir or Path.cwd() / "output"
        pipeline = Pipeline(store, output_dir, workers=config.workers)
        try:
            reports = pipeline.run_all(queries)
        except ExportError as exc:
            parser.exit(1, f"corpus-sampler run failed: {exc}\n")
        for report in reports:
            status = " (under-filled)" if report.underfilled else ""
            print(
                f"{report.name}: {report.selected}/{report.requested} projects, "
                f"{report.rows} rows -> {_relativize(report.path)}{status}"
            )
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path | None) -> str:
    if path is None:
        return "-"
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
