from __future__ import annotations

import argparse
import sys
from typing import Optional

from .console import StreamOutput, getch, pause
from .errors import MalformedProgramError, MindMeldRuntimeError, SourceAccessError
from .machine import DEFAULT_TAPE_LENGTH
from .runtime import ExecutionMode, RunConfig, build_machine, read_source
from .sanitizer import SanitizerMode, sanitize

PATH_PROMPT = "Enter a path to a MindMeld source file: "


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mindmeld", description="Run MindMeld two-cursor tape programs")
    parser.add_argument("script", nargs="?", help="Path to a MindMeld source file")
    parser.add_argument("-e", "--execute", dest="inline", help="Execute MindMeld code string")
    parser.add_argument(
        "--carry-forward",
        action="store_true",
        help="Pair selector-less actions with the most recent selector instead of dropping them",
    )
    parser.add_argument(
        "--direct",
        action="store_true",
        help="Interpret the sanitized character stream directly instead of tokenizing it first",
    )
    parser.add_argument(
        "--tape-size",
        type=_positive_int,
        default=DEFAULT_TAPE_LENGTH,
        help=f"Number of tape cells (default: {DEFAULT_TAPE_LENGTH})",
    )
    parser.add_argument("--show-source", action="store_true", help="Print the sanitized program before running")
    parser.add_argument("--trace", action="store_true", help="Print machine state before every instruction")
    parser.add_argument("--pause", action="store_true", help="Wait for a key press after the program finishes")
    parser.add_argument(
        "--visualize",
        nargs="?",
        const="gui",
        choices=["gui", "curses"],
        help="Step through execution visually (optional mode: gui or curses)",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        sanitizer_mode=SanitizerMode.CARRY_FORWARD if args.carry_forward else SanitizerMode.DEFAULT,
        execution_mode=ExecutionMode.DIRECT if args.direct else ExecutionMode.TOKENIZED,
        tape_length=args.tape_size,
        debug=args.trace,
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.inline and args.script:
        parser.error("cannot use script path and --execute together")
    if args.visualize and (args.trace or args.pause):
        parser.error("--visualize cannot be combined with --trace or --pause")
    config = config_from_args(args)

    try:
        if args.inline is not None:
            source = args.inline
        else:
            path = args.script
            if path is None:
                if not sys.stdin.isatty():
                    parser.error("missing script or --execute")
                path = input(PATH_PROMPT)
            source = read_source(path)

        if args.show_source:
            print(sanitize(source, config.sanitizer_mode))
        if args.visualize:
            return _visualize(source, config, args.visualize)

        machine = build_machine(
            source,
            config,
            input_source=getch,
            output_sink=StreamOutput(sys.stdout),
        )
        machine.run(debug=config.debug)
        if args.pause:
            print()
            pause()
        return 0
    except SourceAccessError as exc:
        print(f"mindmeld: {exc}", file=sys.stderr)
        return 1
    except MalformedProgramError as exc:
        print(f"mindmeld: malformed program: {exc}", file=sys.stderr)
        return 1
    except MindMeldRuntimeError as exc:
        sys.stdout.flush()
        print(f"\nmindmeld: runtime error: {exc.describe()}", file=sys.stderr)
        return 1


def _visualize(source: str, config: RunConfig, mode: str) -> int:
    machine = build_machine(source, config)
    vis_class = None
    gui_exc: Exception | None = None
    if mode == "gui":
        try:
            from .visualizer import TapeVisualizer as vis_class  # type: ignore
        except ImportError as e:  # pragma: no cover - pygame missing/unavailable
            gui_exc = e
            mode = "curses"

    if mode == "curses":
        try:
            from .visualizer_headless import TapeVisualizer as vis_class  # type: ignore
        except ImportError as headless_exc:  # pragma: no cover
            if gui_exc is not None:
                print(
                    "Visualizer unavailable. GUI error: "
                    f"{gui_exc}; Headless error: {headless_exc}",
                    file=sys.stderr,
                )
            else:
                print(f"Visualizer unavailable: {headless_exc}", file=sys.stderr)
            return 1

    if vis_class is None:
        print(f"Unknown visualizer mode: {mode}", file=sys.stderr)
        return 1
    vis_class(machine).run()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
