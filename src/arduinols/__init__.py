# ruff: noqa
from .binary_resolver import BinaryResolver
from .command import CommandSpec, CommandSynthesizer
from .extension import ArduinoExtension, create_local_extension
from .host import LanguageServerHost, LocalHost, LocalWorktree, Worktree
from .ls_exceptions import ArduinoLSException
