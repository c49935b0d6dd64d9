import argparse
import json
import logging
import sys
from collections.abc import Sequence

from boxpart.check import CheckResult, check_boxes
from boxpart.config import Settings, set_settings
from boxpart.report import format_report, report_json
from boxpart.result import Err, Ok
from boxpart.serialization import load_raw_prepartition


def handle_check(files: Sequence[str], *, as_json: bool) -> int:
    """Load, check, and report on a list of prepartition .json files."""
    results: list[tuple[str, CheckResult]] = []
    any_failure = False

    for path in files:
        match load_raw_prepartition(path):
            case Err(e):
                print(f"{path}: could not load: {e}", file=sys.stderr)
                any_failure = True
            case Ok((root, boxes)):
                result = check_boxes(root, boxes)
                results.append((path, result))
                any_failure = any_failure or not result.is_well_formed

    if as_json:
        print(json.dumps([{"file": p, **report_json(r)} for p, r in results], indent=2))
    else:
        for path, result in results:
            print(format_report(result, path))

    return 1 if any_failure else 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="boxpart",
        description="Inspect box prepartitions stored as JSON.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log debug output to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser(
        "check",
        help="Check that each file holds a prepartition and whether it covers its root.",
    )
    check_parser.add_argument("files", nargs="+", metavar="FILE", help="Prepartition .json file(s).")
    check_parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        default=False,
        help="Print a JSON report instead of text.",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    match Settings.from_env():
        case Ok(settings):
            set_settings(settings)
        case Err(e):
            print(f"Error reading settings: {e}", file=sys.stderr)
            return 2

    match args.command:
        case "check":
            return handle_check(args.files, as_json=args.as_json)
        case None:
            parser.print_help()
            return 1
        case _:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            parser.print_help()
            return 1


if __name__ == "__main__":
    sys.exit(main())
