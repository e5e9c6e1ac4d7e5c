import argparse
import logging
from dataclasses import asdict
from typing import List, Optional

from csvframe.adapters.csv_loader import CSVLoader
from csvframe.config.load_config import LoadConfig, ReportConfig, load_config_file
from csvframe.observability.logger import log_event, set_log_level
from csvframe.reporting.console import build_report
from csvframe.utils.exceptions import CSVFrameError


class C:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"


def cprint(text: str, color: str = C.RESET, bold: bool = False):
    prefix = (C.BOLD if bold else "") + color
    print(f"{prefix}{text}{C.RESET}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csvframe",
        description="Load a numeric CSV and print a summary of its contents",
    )

    parser.add_argument("file", nargs="?", help="CSV file to load")
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--delimiter", help="Field separator (default ',')")
    parser.add_argument("--encoding", help="Source text encoding")
    parser.add_argument("--max-features", type=int, help="Maximum number of header columns")
    parser.add_argument("--max-rows", type=int, help="Maximum number of data rows")
    parser.add_argument(
        "--detailed-stats",
        action="store_true",
        help="Compute per-feature min/max values",
    )
    parser.add_argument(
        "--strict-numbers",
        action="store_true",
        help="Fail on non-numeric cells instead of storing 0.0",
    )
    parser.add_argument(
        "--strict-columns",
        action="store_true",
        help="Fail on rows whose width differs from the header instead of padding",
    )

    parser.add_argument("--head", type=int, help="Rows shown at the head")
    parser.add_argument("--tail", type=int, help="Rows shown at the tail")
    parser.add_argument("--sample", type=int, help="Random rows shown")
    parser.add_argument("--seed", type=int, help="Seed for the random sample")

    parser.add_argument("--quiet", action="store_true", help="Only log warnings and failures")
    return parser


def resolve_configs(args: argparse.Namespace):
    if args.config:
        load_config, report_config = load_config_file(args.config)
    else:
        load_config, report_config = LoadConfig(), ReportConfig()

    load_config = load_config.with_overrides(
        path=args.file,
        delimiter=args.delimiter,
        encoding=args.encoding,
        max_features=args.max_features,
        max_rows=args.max_rows,
        detailed_statistics=True if args.detailed_stats else None,
        on_malformed_number="error" if args.strict_numbers else None,
        on_column_mismatch="error" if args.strict_columns else None,
    ).validate()

    report_config = report_config.with_overrides(
        head_rows=args.head,
        tail_rows=args.tail,
        sample_rows=args.sample,
        seed=args.seed,
    ).validate()

    return load_config, report_config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.file and not args.config:
        parser.error("a CSV file or --config is required")

    if args.quiet:
        set_log_level(logging.WARNING)

    try:
        load_config, report_config = resolve_configs(args)
        if not load_config.path:
            raise CSVFrameError("No source path given on the command line or in the config")

        log_event("CSV_CONFIG_RESOLVED", {
            "config_file": args.config,
            "load": asdict(load_config),
            "report": asdict(report_config),
        })

        frame = CSVLoader(load_config).load()
        print(build_report(frame, report_config))

    except CSVFrameError as e:
        cprint("\n[FAILED] Loading the CSV failed.", C.RED, bold=True)
        cprint(str(e), C.RED)
        raise SystemExit(1)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
