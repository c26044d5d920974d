"""CLI entry point for fuzzy-patch."""
import argparse
from dotenv import load_dotenv
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from fuzzy_patch.patching.engine import PatchEngine, PatchOutcome, PatchState
from fuzzy_patch.patching.exceptions import PatchError
from fuzzy_patch.settings import PatchSettings, load_settings
from fuzzy_patch.utils.diff_generator import generate_unified_diff, summarize_changes
from fuzzy_patch.utils.lines import LF, detect_line_ending, join_lines, split_lines
from fuzzy_patch.validation.diagnostics import ErrorLevel
from fuzzy_patch.validation.exceptions import EditValidationError

load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_VALIDATION_FAILED = 2
EXIT_PATCH_ERROR = 3
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

# Keys of an edits document that may hold the edit list
EDIT_LIST_KEYS = ("diffs", "edits")


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fuzzy-patch",
        description="Apply search/replace edits to a file, tolerating drift",
    )
    parser.add_argument("target", type=str, help="File to patch")
    parser.add_argument("edits", type=str, help="JSON file with the edit requests")
    parser.add_argument(
        "--write", action="store_true", help="Write the patched content back to the target"
    )
    parser.add_argument(
        "--output-json", action="store_true", help="Output results as JSON"
    )
    parser.add_argument(
        "--partial-success",
        action="store_true",
        default=None,
        help="Apply the edits that survive conflict resolution instead of failing",
    )
    parser.add_argument(
        "--error-level",
        type=str,
        default=None,
        choices=("simple", "detailed", "full"),
        help="Detail of failure reports (default: detailed, or FUZZY_PATCH_ERROR_LEVEL)",
    )
    parser.add_argument(
        "--no-preserve-indentation",
        action="store_true",
        help="Use replacement text verbatim even for non-exact matches",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--dry-run", action="store_true", help="Print config and exit without running"
    )
    return parser


def validate_target_path(raw_path: str) -> Path:
    """Validate and resolve the target file path.

    Raises:
        SystemExit: If path is not an existing file.
    """
    resolved = Path(raw_path).resolve()
    if not resolved.is_file():
        print(f"Error: '{raw_path}' is not a valid file.", file=sys.stderr)
        raise SystemExit(EXIT_INVALID_INPUT)
    return resolved


def load_edits(path: Path) -> tuple[list[dict[str, Any]], str]:
    """Read an edits document.

    Accepts a JSON list of edit objects, or an object holding that list
    under ``diffs`` or ``edits`` with an optional ``description``.

    Returns:
        (edit list, description)

    Raises:
        ValueError: If the file is not JSON or has neither shape.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Edits file is not valid JSON: {exc}") from exc

    description = ""
    if isinstance(data, dict):
        description = str(data.get("description") or "")
        key = next((k for k in EDIT_LIST_KEYS if k in data), None)
        if key is None:
            raise ValueError("Edits object must contain a 'diffs' or 'edits' list")
        data = data[key]

    if not isinstance(data, list):
        raise ValueError("Edits must be a JSON list of objects")
    return data, description


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def format_result_json(outcome: PatchOutcome, diff: str, target: str) -> str:
    """Serialize a patch outcome to a JSON string."""
    payload = {
        "target": target,
        "state": outcome.state.value,
        "applied": outcome.applied_indices,
        "excluded": outcome.excluded_indices,
        "warnings": outcome.warnings,
        "error": outcome.error,
        "validation": outcome.validation.model_dump(mode="json") if outcome.validation else None,
        "diff": diff,
    }
    return json.dumps(payload, indent=2, default=str)


def print_result_human(outcome: PatchOutcome, diff: str, description: str) -> None:
    """Print results in human-readable format."""
    print(f"\n{'='*60}")
    print("fuzzy-patch results")
    print(f"{'='*60}")
    if description:
        print(f"\nDescription: {description}")
    print(f"\nEdits applied: {len(outcome.applied_indices)}")
    if outcome.excluded_indices:
        print(f"Edits excluded: {', '.join(str(i) for i in outcome.excluded_indices)}")

    warnings = outcome.warnings
    if warnings:
        print(f"\nWarnings ({len(warnings)}):")
        for warning in warnings:
            print(f"  - {warning}")

    if diff:
        print(f"\n{diff}")
    else:
        print("\nNo changes.")
    print(f"{'='*60}")


def print_config_human(config: dict) -> None:
    """Print configuration in human-readable format."""
    print("\nConfiguration:")
    print(f"{'='*40}")
    for key, value in config.items():
        print(f"  {key}: {value}")
    print(f"{'='*40}")


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def _settings_from_args(args: argparse.Namespace) -> PatchSettings:
    return load_settings(
        partial_success=args.partial_success,
        error_level=args.error_level,
        preserve_indentation=False if args.no_preserve_indentation else None,
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        target = validate_target_path(args.target)
        edits_path = validate_target_path(args.edits)
    except SystemExit as exc:
        return exc.code

    try:
        settings = _settings_from_args(args)
    except ValidationError as exc:
        return _handle_error("Invalid configuration", exc, args.verbose, EXIT_INVALID_INPUT)

    config = {
        "target": str(target),
        "edits": str(edits_path),
        "write": args.write,
        "output_json": args.output_json,
        "verbose": args.verbose,
        **settings.model_dump(),
    }

    if args.dry_run:
        if args.output_json:
            print(json.dumps(config, indent=2))
        else:
            print_config_human(config)
        return EXIT_SUCCESS

    try:
        requests, description = load_edits(edits_path)
        text = target.read_text(encoding="utf-8")
        line_ending = detect_line_ending(text)
        trailing_newline = text.endswith(LF)
        lines = split_lines(text)

        engine = PatchEngine(settings=settings)
        outcome = engine.process(lines, requests, file_path=str(target))

        if outcome.state != PatchState.APPLIED or outcome.lines is None:
            if args.output_json:
                print(format_result_json(outcome, "", str(target)))
            level = ErrorLevel.from_name(settings.error_level)
            print(outcome.error_report(level, target.name), file=sys.stderr)
            return EXIT_VALIDATION_FAILED

        diff = generate_unified_diff(str(target), lines, outcome.lines)
        if args.output_json:
            print(format_result_json(outcome, diff, str(target)))
        else:
            print_result_human(outcome, diff, description)

        if args.write and diff:
            target.write_text(
                join_lines(outcome.lines, line_ending, trailing_newline),
                encoding="utf-8",
                newline="",
            )
            if args.verbose:
                counts = summarize_changes(lines, outcome.lines)
                print(
                    f"Wrote {target} (+{counts['added']} -{counts['removed']})",
                    file=sys.stderr,
                )
        return EXIT_SUCCESS

    except (ValueError, EditValidationError) as exc:
        return _handle_error("Invalid input", exc, args.verbose, EXIT_INVALID_INPUT)

    except PatchError as exc:
        return _handle_error("Patch error", exc, args.verbose, EXIT_PATCH_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)


if __name__ == "__main__":
    sys.exit(main())
