"""
RobotML Command-Line Interface.

Provides commands to check and run RobotML programs.

Usage:
    robotml check square.rml                # Type check, print diagnostics
    robotml run square.rml                  # Interpret, print robot commands
    robotml run square.rml --format json -o out.json
    robotml run square.json --strict        # Run a serialised AST
    robotml ast square.rml                  # Dump the AST as JSON
    robotml tokens square.rml               # Dump the token stream
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from robotml import __version__
from robotml.compiler import parse_source
from robotml.compiler.ast_json import dumps, load_program
from robotml.compiler.ast_nodes import Program
from robotml.compiler.diagnostics import Diagnostic, format_diagnostic
from robotml.compiler.lexer import Lexer
from robotml.compiler.type_checker import TypeChecker
from robotml.pipeline import RunPipeline, RunResult
from robotml.runtime.commands import MoveCommand, RobotCommand, SetSpeedCommand, TurnCommand
from robotml.utils.errors import RobotMLError


# =============================================================================
# ANSI Color Codes for Terminal Output
# =============================================================================


class Colors:
    """ANSI escape codes for colored terminal output."""

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    @classmethod
    def disable(cls) -> None:
        """Disable all colors (for non-TTY output)."""
        cls.RED = ""
        cls.GREEN = ""
        cls.YELLOW = ""
        cls.CYAN = ""
        cls.GRAY = ""
        cls.BOLD = ""
        cls.RESET = ""

    @classmethod
    def enabled(cls) -> bool:
        return bool(cls.RESET)


def _init_colors() -> None:
    """Initialize colors based on terminal capabilities."""
    if not sys.stdout.isatty() or os.environ.get("NO_COLOR"):
        Colors.disable()


_init_colors()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="robotml",
        description="RobotML - A domain-specific language for commanding a simulated robot",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v for info, -vv for debug)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Check command
    check_parser = subparsers.add_parser(
        "check",
        aliases=["c"],
        help="Type check a RobotML program",
    )
    check_parser.add_argument("input", type=Path, help="Input file (.rml source or .json AST)")
    check_parser.add_argument(
        "--warnings-as-errors",
        action="store_true",
        help="Exit with failure when there are warnings",
    )
    check_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Diagnostic output format (default: text)",
    )

    # Run command
    run_parser = subparsers.add_parser(
        "run",
        aliases=["r"],
        help="Interpret a RobotML program and print its robot commands",
    )
    run_parser.add_argument("input", type=Path, help="Input file (.rml source or .json AST)")
    run_parser.add_argument(
        "--no-check",
        action="store_true",
        help="Skip the type checker",
    )
    run_parser.add_argument(
        "--strict",
        action="store_true",
        help="Refuse to run a program that has type errors",
    )
    run_parser.add_argument(
        "--warnings-as-errors",
        action="store_true",
        help="With --strict, warnings also block the run",
    )
    run_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Command output format (default: text)",
    )
    run_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the command list to a file instead of stdout",
    )

    # AST command (debug)
    ast_parser = subparsers.add_parser(
        "ast",
        help="Print the parsed program as JSON",
    )
    ast_parser.add_argument("input", type=Path, help="Input RobotML file (.rml)")
    ast_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the JSON to a file instead of stdout",
    )

    # Tokens command (debug)
    tokens_parser = subparsers.add_parser(
        "tokens",
        help="Print the token stream",
    )
    tokens_parser.add_argument("input", type=Path, help="Input RobotML file (.rml)")

    return parser


# =============================================================================
# Helpers
# =============================================================================


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_program(input_path: Path) -> tuple[Program, str]:
    """Load a program from source or from a serialised AST; returns (program, source)."""
    if input_path.suffix == ".json":
        return load_program(input_path), ""
    source = input_path.read_text(encoding="utf-8")
    return parse_source(source, str(input_path)), source


def _print_diagnostics(diagnostics: list[Diagnostic], source: str, filename: str) -> None:
    for diagnostic in diagnostics:
        print(
            format_diagnostic(diagnostic, source, filename, use_color=Colors.enabled()),
            file=sys.stderr,
        )
        print(file=sys.stderr)


def _summary(error_count: int, warning_count: int) -> str:
    return f"{error_count} error(s), {warning_count} warning(s)"


def _describe_command(command: RobotCommand) -> str:
    """One-line human-readable rendering of a robot command."""
    stamp = f"{Colors.GRAY}{command.timestamp:>4}{Colors.RESET}"
    if isinstance(command, TurnCommand):
        return f"{stamp}  {Colors.CYAN}turn{Colors.RESET}      {command.angle}"
    if isinstance(command, MoveCommand):
        return (
            f"{stamp}  {Colors.CYAN}move{Colors.RESET}      "
            f"{command.distance} {command.unit} {command.direction}"
        )
    if isinstance(command, SetSpeedCommand):
        unit = f" {command.unit}" if command.unit else ""
        return f"{stamp}  {Colors.CYAN}setSpeed{Colors.RESET}  {command.value}{unit}"
    return f"{stamp}  {command}"


# =============================================================================
# Commands
# =============================================================================


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the check command."""
    input_path: Path = args.input

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    try:
        program, source = _load_program(input_path)
    except RobotMLError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} {e}", file=sys.stderr)
        return 1

    checker = TypeChecker()
    diagnostics = checker.check(program)
    outcome = RunResult(diagnostics=diagnostics, program=program)

    if args.format == "json":
        print(json.dumps([d.to_dict() for d in diagnostics], indent=2))
    else:
        _print_diagnostics(diagnostics, source, str(input_path))

    failed = outcome.error_count > 0 or (args.warnings_as_errors and outcome.warning_count > 0)
    if args.format == "text":
        if failed:
            print(
                f"{Colors.RED}[!!]{Colors.RESET} Type check failed "
                f"({_summary(outcome.error_count, outcome.warning_count)})"
            )
        else:
            print(
                f"{Colors.GREEN}[ok]{Colors.RESET} Type check passed "
                f"({_summary(outcome.error_count, outcome.warning_count)})"
            )
    return 1 if failed else 0


def cmd_run(args: argparse.Namespace) -> int:
    """Handle the run command."""
    input_path: Path = args.input

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    source = ""
    if input_path.suffix != ".json":
        source = input_path.read_text(encoding="utf-8")

    pipeline = RunPipeline(
        check_types=not args.no_check,
        strict=args.strict,
        warnings_as_errors=args.warnings_as_errors,
    )
    outcome = pipeline.run_file(input_path)

    _print_diagnostics(outcome.diagnostics, source, str(input_path))

    if outcome.error is not None:
        print(f"{Colors.RED}Error:{Colors.RESET} {outcome.error}", file=sys.stderr)
        return 1

    assert outcome.result is not None
    if args.format == "json":
        rendered = outcome.result.to_json()
    else:
        rendered = "\n".join(_describe_command(c) for c in outcome.result.commands)

    if args.output is not None:
        args.output.write_text(rendered + "\n", encoding="utf-8")
        print(
            f"{Colors.GREEN}Wrote{Colors.RESET} {len(outcome.result)} command(s) to {args.output}"
        )
    elif rendered:
        print(rendered)
    return 0


def cmd_ast(args: argparse.Namespace) -> int:
    """Handle the ast command (debug)."""
    input_path: Path = args.input

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    try:
        program = parse_source(input_path.read_text(encoding="utf-8"), str(input_path))
    except RobotMLError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    rendered = dumps(program)
    if args.output is not None:
        args.output.write_text(rendered + "\n", encoding="utf-8")
    else:
        print(rendered)
    return 0


def cmd_tokens(args: argparse.Namespace) -> int:
    """Handle the tokens command (debug)."""
    input_path: Path = args.input

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    try:
        source = input_path.read_text(encoding="utf-8")
        for token in Lexer(source, str(input_path)).tokenize():
            print(token)
        return 0
    except RobotMLError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    command_handlers = {
        "check": cmd_check,
        "c": cmd_check,
        "run": cmd_run,
        "r": cmd_run,
        "ast": cmd_ast,
        "tokens": cmd_tokens,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
