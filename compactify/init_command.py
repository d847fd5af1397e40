"""Creates a default configuration file in the current directory."""

from __future__ import annotations

import os
import sys
from typing import TextIO

from compactify.filesystem import FileSystem, FileSystemError
from compactify.ui import success

DEFAULT_CONFIG_PATH = "config.yaml"


class InitError(Exception):
    """The configuration file could not be created."""


class ConfigFileExistsError(InitError):
    """A configuration file is already present and overwriting was not asked for."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"a configuration file already exists at '{path}'. Use --force to overwrite it"
        )
        self.path = path


def render_config_template(concurrency: int) -> str:
    """The default configuration, with ``concurrency`` as the worker count."""
    return (
        "# Compactify configuration\n"
        "# Values here apply when the matching flag is not given on the command line.\n"
        "# Environment variables prefixed with COMPACTIFY_ (for example\n"
        "# COMPACTIFY_CONCURRENCY) take precedence over this file.\n"
        "\n"
        "# Number of images processed at the same time.\n"
        f"concurrency: {concurrency}\n"
        "\n"
        "# Default input directory containing the images to process.\n"
        "# input: ./images\n"
        "\n"
        "# Default output directory. When unset, a sibling directory such as\n"
        "# '<input>-resized' is created.\n"
        "# output: ./output\n"
        "\n"
        "# Show what would be done without writing anything to disk.\n"
        "dry-run: false\n"
    )


def run_init(
    force: bool = False,
    out: TextIO | None = None,
    config_path: str = DEFAULT_CONFIG_PATH,
) -> str:
    """Write the default configuration to ``config_path`` and return that path."""
    if os.path.exists(config_path) and not force:
        raise ConfigFileExistsError(config_path)

    content = render_config_template(os.cpu_count() or 1)
    try:
        FileSystem().write_file(config_path, content.encode("utf-8"))
    except FileSystemError as exc:
        raise InitError(f"failed to create config file: {exc}") from exc

    print(
        success("Configuration file initialized successfully: " + config_path),
        file=out or sys.stdout,
    )
    return config_path