"""
The entry points through which the host editor starts and configures the Arduino language server.
"""

import logging
from typing import Any

from sensai.util.string import ToStringMixin

from arduinols.binary_resolver import BinaryResolver
from arduinols.command import CommandSpec, CommandSynthesizer
from arduinols.constants import LANGUAGE_SERVER_NAME
from arduinols.host import LanguageServerHost, LocalHost, Worktree
from arduinols.ls_config import InstallationStatus
from arduinols.ls_exceptions import ArduinoLSException
from arduinols.paths import ArduinoLSPaths
from arduinols.release_selector import ReleaseSelector
from arduinols.settings import SettingsProvider, YamlSettingsProvider
from arduinols.version_directory import VersionDirectoryManager

log = logging.getLogger(__name__)


class ArduinoExtension(ToStringMixin):
    def __init__(self, host: LanguageServerHost, settings_provider: SettingsProvider, install_dir: str | None = None) -> None:
        """
        :param host: the host primitives
        :param settings_provider: the source of the user's language server settings
        :param install_dir: the directory in which downloaded versions are stored; if None, the
            current working directory is used
        """
        self._host = host
        self._settings_provider = settings_provider
        self._resolver = BinaryResolver(
            host,
            settings_provider,
            release_selector=ReleaseSelector(host),
            version_directory_manager=VersionDirectoryManager(host, install_dir),
        )

    def _tostring_includes(self) -> list[str]:
        return ["_resolver"]

    @property
    def resolver(self) -> BinaryResolver:
        return self._resolver

    def language_server_binary_path(self, language_server_id: str, worktree: Worktree) -> str:
        """
        Resolves the path of the language server executable. Any failure is reported to the host
        as a failed installation before being raised.
        """
        try:
            return self._resolver.resolve(language_server_id, worktree)
        except ArduinoLSException as e:
            self._host.set_installation_status(language_server_id, InstallationStatus.FAILED, str(e))
            raise

    def language_server_command(self, language_server_id: str, worktree: Worktree) -> CommandSpec:
        lsp_settings = self._settings_provider.lsp_settings(LANGUAGE_SERVER_NAME, worktree)
        binary_path = self.language_server_binary_path(language_server_id, worktree)
        os_, _ = self._host.current_platform()
        binary_settings = lsp_settings.binary if lsp_settings is not None else None
        command = CommandSynthesizer(os_).build(binary_path, worktree, binary_settings)
        log.info(f"Language server command: {command.to_argv()}")
        return command

    def language_server_workspace_configuration(self, language_server_id: str, worktree: Worktree) -> dict[str, Any]:
        """
        :return: the response to the language server's workspace/configuration request, i.e. the
            free-form settings configured by the user (or an empty mapping)
        """
        lsp_settings = self._settings_provider.lsp_settings(LANGUAGE_SERVER_NAME, worktree)
        if lsp_settings is None or lsp_settings.settings is None:
            return {}
        return lsp_settings.settings


def create_local_extension(install_dir: str | None = None) -> ArduinoExtension:
    """
    Creates an extension backed by the local system, reading settings from the worktrees' settings files.

    :param install_dir: the directory in which downloaded versions are stored; if None, the language
        servers directory within the arduinols home directory is used
    """
    if install_dir is None:
        install_dir = ArduinoLSPaths().language_servers_dir
    return ArduinoExtension(LocalHost(), YamlSettingsProvider(), install_dir=install_dir)
