"""
Resolution of the language server executable to run.
"""

import logging

from sensai.util.string import ToStringMixin

from arduinols.constants import LANGUAGE_SERVER_NAME, SYSTEM_EXECUTABLE_NAME
from arduinols.host import LanguageServerHost, Worktree
from arduinols.ls_config import InstallationStatus
from arduinols.ls_utils import FileUtils
from arduinols.release_selector import ReleaseSelector
from arduinols.settings import SettingsProvider
from arduinols.version_directory import VersionDirectoryManager

log = logging.getLogger(__name__)


class BinaryResolver(ToStringMixin):
    """
    Determines the path of the language server executable. The following sources are tried in order,
    the first one that succeeds determining the result:

      1. an explicit path configured in the user's settings (used verbatim, without verification)
      2. an executable found on the worktree's PATH
      3. the path resolved by a previous download, provided that it still refers to a file
      4. a download of the latest release for the current platform

    An instance is meant to live as long as the extension, such that the path of a downloaded
    executable is reused across invocations.
    """

    def __init__(
        self,
        host: LanguageServerHost,
        settings_provider: SettingsProvider,
        release_selector: ReleaseSelector | None = None,
        version_directory_manager: VersionDirectoryManager | None = None,
        server_name: str = LANGUAGE_SERVER_NAME,
    ) -> None:
        self._host = host
        self._settings_provider = settings_provider
        self._release_selector = release_selector or ReleaseSelector(host)
        self._version_directory_manager = version_directory_manager or VersionDirectoryManager(host)
        self._server_name = server_name
        self.cached_binary_path: str | None = None
        """
        the path of the most recently downloaded executable; it is checked for existence before being reused
        """

    def _tostring_includes(self) -> list[str]:
        return ["_server_name", "cached_binary_path"]

    def resolve(self, language_server_id: str, worktree: Worktree) -> str:
        """
        :param language_server_id: the id of the language server, used for status reporting
        :param worktree: the worktree for which the language server is to be started
        :return: the path of the executable
        :raises ArduinoLSException: if no executable is available and none could be acquired
        """
        lsp_settings = self._settings_provider.lsp_settings(self._server_name, worktree)
        if lsp_settings is not None:
            override_path = lsp_settings.binary_path()
            if override_path is not None:
                log.info(f"Using language server binary configured in settings: {override_path}")
                return override_path

        system_path = worktree.which(SYSTEM_EXECUTABLE_NAME)
        if system_path:
            log.info(f"Using language server binary found on PATH: {system_path}")
            return system_path

        if self.cached_binary_path is not None:
            if FileUtils.is_regular_file(self.cached_binary_path):
                return self.cached_binary_path
            log.info(f"Previously resolved binary {self.cached_binary_path} no longer exists")

        binary_path = self._acquire(language_server_id)
        self.cached_binary_path = binary_path
        return binary_path

    def _acquire(self, language_server_id: str) -> str:
        self._host.set_installation_status(language_server_id, InstallationStatus.CHECKING_FOR_UPDATE)
        os_, arch = self._host.current_platform()
        release, asset = self._release_selector.select(os_, arch)
        binary_path = self._version_directory_manager.ensure_installed(language_server_id, asset, release.version, os_)
        self._host.set_installation_status(language_server_id, InstallationStatus.NONE)
        log.info(f"Using language server binary {binary_path} (version {release.version})")
        return binary_path
