"""
Synthesis of the command line and environment with which the language server is launched.
"""

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from arduinols.constants import (
    ARDUINO_CLI_CONFIG_FILE_NAME,
    ARDUINO_CLI_EXECUTABLE_NAME,
    CLANGD_EXECUTABLE_NAME,
    CLANGD_FLAG,
    CLI_CONFIG_FLAG,
    CLI_FLAG,
)
from arduinols.host import Worktree
from arduinols.ls_config import Os
from arduinols.settings import BinarySettings

log = logging.getLogger(__name__)


@dataclass
class CommandSpec:
    """
    Describes how to launch the language server process.
    """

    command: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    def env_items(self) -> list[tuple[str, str]]:
        """
        :return: the environment as a flat list of (name, value) pairs
        """
        return list(self.env.items())

    def to_argv(self) -> list[str]:
        return [self.command, *self.args]


def default_cli_config_path(os_: Os, environ: Mapping[str, str] | None = None) -> str | None:
    """
    Determines the default location of the arduino-cli configuration file.

    :param os_: the operating system
    :param environ: the environment to use for lookups; if None, the process environment is used, falling back
        to the user database for the home directory. An explicitly given environment is the only source.
    :return: the path, or None if the directory it depends on (home directory or LOCALAPPDATA) cannot be determined
    """
    use_process_home = environ is None
    if environ is None:
        environ = os.environ
    match os_:
        case Os.MAC | Os.LINUX:
            home = environ.get("HOME")
            if not home:
                if not use_process_home:
                    return None
                try:
                    home = str(Path.home())
                except RuntimeError:
                    return None
            subdir = ("Library", "Arduino15") if os_ == Os.MAC else (".arduino15",)
            return os.path.join(home, *subdir, ARDUINO_CLI_CONFIG_FILE_NAME)
        case Os.WINDOWS:
            local_app_data = environ.get("LOCALAPPDATA")
            if not local_app_data:
                return None
            # composed with backslashes regardless of the platform this code runs on
            return "\\".join([local_app_data.rstrip("\\/"), "Arduino15", ARDUINO_CLI_CONFIG_FILE_NAME])
        case _:
            raise ValueError(f"Unhandled operating system: {os_}")


def _has_flag(args: Sequence[str], flag: str) -> bool:
    return flag in args


class CommandSynthesizer:
    """
    Builds the launch command from the user's settings, adding defaults for the companion tools
    (arduino-cli configuration, clangd, arduino-cli) that the user did not configure explicitly.
    """

    def __init__(self, os_: Os, environ: Mapping[str, str] | None = None) -> None:
        """
        :param os_: the operating system the language server runs on
        :param environ: the environment used to determine default paths; if None, the process environment is used
        """
        self._os = os_
        self._environ = environ

    def build(self, binary_path: str, worktree: Worktree, binary_settings: BinarySettings | None = None) -> CommandSpec:
        args: list[str] = []
        env: dict[str, str] = {}
        if binary_settings is not None:
            if binary_settings.arguments is not None:
                args = list(binary_settings.arguments)
            if binary_settings.env is not None:
                env = dict(binary_settings.env)

        if not _has_flag(args, CLI_CONFIG_FLAG):
            cli_config_path = default_cli_config_path(self._os, self._environ)
            if cli_config_path is None:
                log.info(f"No default arduino-cli configuration path available; not passing {CLI_CONFIG_FLAG}")
            elif os.path.exists(cli_config_path):
                args.extend([CLI_CONFIG_FLAG, cli_config_path])

        if not _has_flag(args, CLANGD_FLAG):
            clangd_path = worktree.which(CLANGD_EXECUTABLE_NAME)
            if clangd_path:
                args.extend([CLANGD_FLAG, clangd_path])

        if not _has_flag(args, CLI_FLAG):
            cli_path = worktree.which(ARDUINO_CLI_EXECUTABLE_NAME)
            if cli_path:
                args.extend([CLI_FLAG, cli_path])

        # settings env takes precedence entirely; the shell env is only a default
        if not env and self._os.is_posix_like():
            env = dict(worktree.shell_env())

        return CommandSpec(command=binary_path, args=args, env=env)
