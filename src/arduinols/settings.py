"""
User settings for the language server, as supplied per worktree by the host's settings subsystem.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Self

from overrides import override
from ruamel.yaml.error import YAMLError

from arduinols.constants import SETTINGS_FILE_NAME
from arduinols.host import Worktree
from arduinols.util.yaml import load_yaml

log = logging.getLogger(__name__)


@dataclass
class BinarySettings:
    path: str | None = None
    """
    an explicit path to the language server executable; if set, it is used verbatim without any verification
    """
    arguments: list[str] | None = None
    env: dict[str, str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        arguments = data.get("arguments")
        env = data.get("env")
        if arguments is not None and not isinstance(arguments, list):
            raise ValueError(f"'arguments' must be a list, got {type(arguments).__name__}")
        if env is not None and not isinstance(env, dict):
            raise ValueError(f"'env' must be a mapping, got {type(env).__name__}")
        return cls(
            path=data.get("path"),
            arguments=[str(a) for a in arguments] if arguments is not None else None,
            env={str(k): str(v) for k, v in env.items()} if env is not None else None,
        )


@dataclass
class LspSettings:
    binary: BinarySettings | None = None
    settings: dict[str, Any] | None = None
    """
    free-form configuration that is passed on to the language server as its workspace configuration
    """

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        if not isinstance(data, dict):
            raise ValueError(f"language server settings must be a mapping, got {type(data).__name__}")
        binary = data.get("binary")
        settings = data.get("settings")
        if binary is not None and not isinstance(binary, dict):
            raise ValueError(f"'binary' must be a mapping, got {type(binary).__name__}")
        if settings is not None and not isinstance(settings, dict):
            raise ValueError(f"'settings' must be a mapping, got {type(settings).__name__}")
        return cls(binary=BinarySettings.from_dict(binary) if binary is not None else None, settings=settings)

    def binary_path(self) -> str | None:
        return self.binary.path if self.binary is not None else None


class SettingsProvider(ABC):
    def lsp_settings(self, server_name: str, worktree: Worktree) -> LspSettings | None:
        """
        Retrieves the settings of the given language server for the given worktree.
        Settings that are absent, unreadable or malformed are reported as None, never as an error.
        Implementations signal malformed settings by raising ValueError.

        :param server_name: the name of the language server, e.g. "arduino"
        :param worktree: the worktree for which to retrieve the settings
        :return: the settings or None
        """
        try:
            return self._load_lsp_settings(server_name, worktree)
        except (OSError, ValueError, YAMLError) as e:
            log.warning(f"Ignoring unreadable settings for {server_name} in {worktree}: {e}")
            return None

    @abstractmethod
    def _load_lsp_settings(self, server_name: str, worktree: Worktree) -> LspSettings | None:
        pass


class DictSettingsProvider(SettingsProvider):
    """
    Provides the same settings for all worktrees from an in-memory mapping of server names to settings dictionaries.
    """

    def __init__(self, settings: dict[str, dict[str, Any]] | None = None) -> None:
        self._settings = settings or {}

    @override
    def _load_lsp_settings(self, server_name: str, worktree: Worktree) -> LspSettings | None:
        data = self._settings.get(server_name)
        if data is None:
            return None
        return LspSettings.from_dict(data)


class YamlSettingsProvider(SettingsProvider):
    """
    Reads the settings from a YAML file in the worktree's root, which is expected to have the structure

        lsp:
          arduino:
            binary:
              path: ...
              arguments: [...]
              env: {...}
            settings: {...}
    """

    def __init__(self, file_name: str = SETTINGS_FILE_NAME) -> None:
        self._file_name = file_name

    def settings_file_path(self, worktree: Worktree) -> str:
        return os.path.join(worktree.root_path(), self._file_name)

    @override
    def _load_lsp_settings(self, server_name: str, worktree: Worktree) -> LspSettings | None:
        path = self.settings_file_path(worktree)
        if not os.path.isfile(path):
            return None
        document = load_yaml(path) or {}
        if not isinstance(document, dict):
            raise ValueError(f"expected a mapping at the top level of {path}")
        lsp_section = document.get("lsp") or {}
        if not isinstance(lsp_section, dict):
            raise ValueError(f"'lsp' in {path} must be a mapping")
        data = lsp_section.get(server_name)
        if data is None:
            return None
        return LspSettings.from_dict(data)
