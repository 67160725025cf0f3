"""Command-line interface for LoadCheck."""

import argparse
import csv
import sys
from pathlib import Path

import uvicorn


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="LoadCheck - Shipment table validation and normalization"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=None, help="Host to bind to (default: HOST or 127.0.0.1)"
    )
    server_parser.add_argument(
        "--port", type=int, default=None, help="Port to bind to (default: PORT or 8000)"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze a CSV shipment table")
    analyze_parser.add_argument("file", type=Path, help="CSV file with a header row")
    analyze_parser.add_argument(
        "--timezone", "-t", default=None, help="Timezone assumed for dates without one"
    )
    analyze_parser.add_argument(
        "--day-first", action="store_true", help="Read 01/02/2025 as 1 February"
    )
    analyze_parser.add_argument(
        "--override",
        "-o",
        action="append",
        default=[],
        metavar="HEADER=FIELD",
        help="Force a header onto a field (repeatable)",
    )
    analyze_parser.add_argument(
        "--no-suggestions", action="store_true", help="Skip LLM header suggestions"
    )

    args = parser.parse_args(argv)

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "analyze":
        sys.exit(run_analyze(args))
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host, port, reload: bool):
    """Run the web server."""
    from .config import settings

    uvicorn.run(
        "loadcheck.api:create_app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        factory=True,
    )


def parse_overrides(pairs: list[str]) -> dict[str, str]:
    """Parse HEADER=FIELD pairs; the last '=' separates header from field."""
    overrides = {}
    for pair in pairs:
        header, sep, field = pair.rpartition("=")
        if not sep or not header or not field:
            raise ValueError(f"Invalid override '{pair}', expected HEADER=FIELD")
        overrides[header] = field.strip()
    return overrides


def read_table(path: Path) -> tuple[list[str], list[list[str]]]:
    """Read a CSV file into a header row and data rows."""
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.reader(f)
        headers = next(reader, [])
        rows = [row for row in reader if any(cell.strip() for cell in row)]
    return headers, rows


def run_analyze(args) -> int:
    """Analyze a CSV file and print the response JSON. Returns the exit code."""
    from .config import settings
    from .logging_utils import configure_logging
    from .pipeline import AnalysisOptions, AnalysisRequest, ShipmentAnalyzer, bound_request
    from .suggestions import create_suggestion_provider

    configure_logging(settings.log_level)

    try:
        overrides = parse_overrides(args.override)
        headers, rows = read_table(args.file)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    request = AnalysisRequest(
        headers=headers,
        rows=rows,
        header_overrides=overrides or None,
        options=AnalysisOptions(
            assume_timezone=args.timezone,
            day_first=True if args.day_first else None,
        ),
    )

    provider = None if args.no_suggestions else create_suggestion_provider(settings)
    analyzer = ShipmentAnalyzer(settings=settings, suggestion_provider=provider)
    response = analyzer.analyze(bound_request(request, settings))

    print(response.model_dump_json(by_alias=True, exclude_none=True, indent=2))
    return 0 if response.ok else 1


if __name__ == "__main__":
    main()
