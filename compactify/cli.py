"""Command-line entry point: flags, configuration file, environment and dispatch."""

from __future__ import annotations

import argparse
import os
import signal
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping, TextIO

import yaml

from compactify import ui
from compactify.effect_commands import run_flip, run_grayscale, run_lossless, run_palette
from compactify.imaging import Gravity
from compactify.init_command import run_init
from compactify.operations import GlobalConfig
from compactify.transform_commands import (
    run_convert,
    run_crop,
    run_enlarge,
    run_resize,
    run_thumbnail,
)
from compactify.utils import get_config_dir

VERSION = "dev"

_ENV_PREFIX = "COMPACTIFY_"
_CONFIG_NAME = "config"
_CONFIG_EXTENSIONS = (".yaml", ".yml")
_VERSION_STYLE = "\x1b[1;38;2;0;255;0m"
_RESET = "\x1b[0m"

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class UsageError(Exception):
    """The command line was not valid."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


@dataclass(frozen=True)
class _Flag:
    name: str
    short: str | None
    kind: type
    default: Any
    help: str
    required: bool = False

    @property
    def dest(self) -> str:
        return self.name.replace("-", "_")


_WIDTH = _Flag("width", "-w", int, 0, "Desired width of the image", required=True)
_HEIGHT = _Flag("height", "-H", int, 0, "Desired height of the image", required=True)

_GLOBAL_FLAGS = (
    _Flag(
        "concurrency", "-c", int, os.cpu_count() or 1, "Number of concurrent operations"
    ),
    _Flag("input", "-i", str, "", "Input directory containing the images to process"),
    _Flag(
        "output",
        "-o",
        str,
        "",
        "Output directory for processed images "
        "(default: auto-creates a sibling directory, e.g., '<input>-resized')",
    ),
    _Flag(
        "dry-run",
        None,
        bool,
        False,
        "Perform a dry run without processing images, showing what would be done",
    ),
)

_Runner = Callable[[GlobalConfig, dict, threading.Event], object]


@dataclass(frozen=True)
class _Command:
    aliases: tuple[str, ...]
    help: str
    flags: tuple[_Flag, ...]
    run: _Runner | None


_COMMANDS: dict[str, _Command] = {
    "convert": _Command(
        ("conv",),
        "Convert images to a specified format",
        (
            _Flag(
                "format",
                "-f",
                str,
                "",
                "Desired format of the images. Available options: webp, jpeg, png",
                required=True,
            ),
        ),
        lambda g, v, c: run_convert(g, v["format"], c),
    ),
    "crop": _Command(
        ("cut",),
        "Crop an image to specified dimensions",
        (
            _WIDTH,
            _HEIGHT,
            _Flag(
                "gravity",
                "-g",
                int,
                int(Gravity.CENTRE),
                "Gravity to use when cropping: 0 Centre (default), 1 North, "
                "2 East, 3 South, 4 West, 5 Smart",
            ),
        ),
        lambda g, v, c: run_crop(g, v["width"], v["height"], v["gravity"], c),
    ),
    "enlarge": _Command(
        (),
        "Enlarge an image to specified dimensions while maintaining aspect ratio",
        (_WIDTH, _HEIGHT),
        lambda g, v, c: run_enlarge(g, v["width"], v["height"], c),
    ),
    "flip": _Command(
        ("invert", "mirror"),
        "Flip images vertically",
        (),
        lambda g, v, c: run_flip(g, c),
    ),
    "grayscale": _Command(
        ("gray", "bw"),
        "Convert images to grayscale",
        (),
        lambda g, v, c: run_grayscale(g, c),
    ),
    "init": _Command(
        ("initialize", "config"),
        "Initialize a default configuration file",
        (_Flag("force", "-f", bool, False, "Overwrite existing config.yaml file"),),
        None,
    ),
    "lossless": _Command(
        ("lc",),
        "Apply lossless compression to images",
        (),
        lambda g, v, c: run_lossless(g, c),
    ),
    "palette": _Command(
        (),
        "Enable palette on images",
        (),
        lambda g, v, c: run_palette(g, c),
    ),
    "resize": _Command(
        ("scale", "rescale"),
        "Resize an image to specified dimensions",
        (_WIDTH, _HEIGHT),
        lambda g, v, c: run_resize(g, v["width"], v["height"], c),
    ),
    "thumbnail": _Command(
        ("thumb", "preview"),
        "Create a thumbnail of an image with specified width",
        (_Flag("width", "-w", int, 0, "Desired width of the thumbnail", required=True),),
        lambda g, v, c: run_thumbnail(g, v["width"], c),
    ),
}

_BINDABLE = frozenset(
    [flag.name for flag in _GLOBAL_FLAGS]
    + [flag.name for command in _COMMANDS.values() for flag in command.flags]
)


def _add_flag(parser: argparse.ArgumentParser, flag: _Flag) -> None:
    names = [f"--{flag.name}"] + ([flag.short] if flag.short else [])
    if flag.kind is bool:
        parser.add_argument(
            *names, dest=flag.dest, action="store_true",
            default=argparse.SUPPRESS, help=flag.help,
        )
    else:
        parser.add_argument(
            *names, dest=flag.dest, type=flag.kind,
            default=argparse.SUPPRESS, help=flag.help,
        )


def build_parser() -> argparse.ArgumentParser:
    """The argument parser for every command; unset flags are left out of the result."""
    common = _ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config",
        default=argparse.SUPPRESS,
        help="config file (default is ./config.yaml or $HOME/.config/compactify/config.yaml)",
    )
    for flag in _GLOBAL_FLAGS:
        _add_flag(common, flag)

    parser = _ArgumentParser(
        prog="compactify",
        description="Compactify: A versatile image compression and manipulation tool",
        parents=[common],
    )
    parser.add_argument(
        "--version", "-v", action="store_true", default=False,
        help="version for compactify",
    )
    subparsers = parser.add_subparsers(title="commands", metavar="COMMAND")
    for name, command in _COMMANDS.items():
        sub = subparsers.add_parser(
            name, aliases=list(command.aliases), help=command.help,
            description=command.help, parents=[common],
        )
        for flag in command.flags:
            _add_flag(sub, flag)
        sub.set_defaults(command=name)
    return parser


def _config_candidates(config_file: str, home: str | None) -> Iterator[str]:
    directories = ["."]
    if home:
        directories.append(get_config_dir(home))
    for directory in directories:
        for extension in _CONFIG_EXTENSIONS:
            yield os.path.join(directory, _CONFIG_NAME + extension)


def _read_config(path: str) -> dict:
    with open(path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"configuration in '{path}' is not a mapping")
    return {str(key).lower(): value for key, value in data.items()}


def load_settings(
    config_file: str = "",
    environ: Mapping[str, str] | None = None,
    home: str | None = None,
    err: TextIO | None = None,
) -> dict:
    """Settings from the configuration file, overridden by COMPACTIFY_* variables.

    Without ``config_file`` the file is looked for in the current directory and
    then in the user's configuration directory; its absence is not an error.
    Reading problems are reported to ``err`` and the file is then ignored.
    """
    environ = os.environ if environ is None else environ
    err = err or sys.stderr

    settings: dict = {}
    if config_file:
        path: str | None = config_file
    else:
        path = next(
            (candidate for candidate in _config_candidates(config_file, home)
             if os.path.isfile(candidate)),
            None,
        )
    if path is not None:
        try:
            settings.update(_read_config(path))
        except (OSError, ValueError, yaml.YAMLError) as exc:
            print(f"{ui.error('Error reading config file')}: {exc}", file=err)

    for name in sorted(_BINDABLE):
        key = _ENV_PREFIX + name.upper().replace("-", "_").replace(".", "_")
        value = environ.get(key)
        if value:
            settings[name] = value
    return settings


def _coerce(kind: type, value: Any) -> Any:
    """Convert a setting to a flag's type, or None when it does not parse."""
    if value is None:
        return None
    text = ("true" if value else "false") if isinstance(value, bool) else str(value)
    if kind is str:
        return text
    if kind is bool:
        if text in _TRUE_WORDS:
            return True
        if text in _FALSE_WORDS:
            return False
        return None
    try:
        return int(text, 0)
    except ValueError:
        try:
            return int(text)
        except ValueError:
            return None


def _resolve(args: argparse.Namespace, flags: tuple[_Flag, ...], settings: dict) -> dict:
    """Flag values by precedence: command line, then settings, then defaults."""
    values = {}
    for flag in flags:
        if hasattr(args, flag.dest):
            values[flag.name] = getattr(args, flag.dest)
            continue
        coerced = _coerce(flag.kind, settings.get(flag.name))
        values[flag.name] = flag.default if coerced is None else coerced
    return values


def check_global_config(config: GlobalConfig, out: TextIO | None = None) -> None:
    """Require an input directory and warn about very high concurrency."""
    if not config.input_dir:
        raise UsageError('required flag "input" (-i) not set')
    if config.concurrency > (os.cpu_count() or 1) * 2:
        print(
            ui.warn(
                "WARNING: Concurrency set very high. This may cause high memory "
                "usage and slow down your system."
            ),
            file=out or sys.stdout,
        )


def format_version(version: str = VERSION) -> str:
    """The version line, with any leading 'v' of ``version`` not doubled."""
    display = version[1:] if version.startswith("v") else version
    return f"Compactify {_VERSION_STYLE}v{display}{_RESET}"


def _home() -> str | None:
    home = os.path.expanduser("~")
    return None if home == "~" else home


@contextmanager
def _cancel_on_signals() -> Iterator[threading.Event]:
    """An event that is set on interrupt or termination while the block runs."""
    cancel = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    def handler(signum, frame) -> None:
        cancel.set()

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield cancel
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old if old is not None else signal.SIG_DFL)


def _run(args: argparse.Namespace, name: str) -> None:
    command = _COMMANDS[name]
    settings = load_settings(getattr(args, "config", "") or "", os.environ, _home(), sys.stderr)

    missing = sorted(
        flag.name for flag in command.flags if flag.required and not hasattr(args, flag.dest)
    )
    if missing:
        names = ", ".join(f'"{flag}"' for flag in missing)
        raise UsageError(f"required flag(s) {names} not set")

    values = _resolve(args, _GLOBAL_FLAGS + command.flags, settings)
    if command.run is None:
        run_init(force=values["force"], out=sys.stdout)
        return

    config = GlobalConfig(
        concurrency=values["concurrency"],
        input_dir=values["input"],
        output_dir=values["output"],
        dry_run=values["dry-run"],
    )
    check_global_config(config, sys.stdout)
    with _cancel_on_signals() as cancel:
        command.run(config, values, cancel)


def main(argv: list[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0
    except UsageError as exc:
        print(ui.error(str(exc)), file=sys.stderr)
        return 1

    if args.version:
        print(format_version(VERSION))
        return 0

    name = getattr(args, "command", None)
    if name is None:
        parser.print_help()
        return 0

    try:
        _run(args, name)
    except Exception as exc:
        print(ui.error(str(exc)), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())