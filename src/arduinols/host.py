"""
Interfaces to the host editor's primitives (worktree context, platform, status reporting,
release feed, download and permission handling) together with local implementations.
"""

import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Callable

from overrides import override
from sensai.util.string import ToStringMixin

from arduinols.ls_config import Architecture, DownloadedFileType, InstallationStatus, Os
from arduinols.ls_exceptions import InstallationIOError
from arduinols.ls_utils import FileUtils, PlatformUtils
from arduinols.release_feed import GithubRelease, GithubReleaseFeed, GithubReleaseOptions

log = logging.getLogger(__name__)

StatusListener = Callable[[str, InstallationStatus, str | None], None]


class Worktree(ABC):
    """
    The project context in which the language server runs.
    """

    @abstractmethod
    def root_path(self) -> str:
        pass

    @abstractmethod
    def which(self, binary_name: str) -> str | None:
        """
        :param binary_name: the name of the executable to look up
        :return: the path of the executable found on the worktree's PATH, or None
        """

    @abstractmethod
    def shell_env(self) -> list[tuple[str, str]]:
        """
        :return: the environment variables as seen by the user's shell in the worktree
        """


class LocalWorktree(Worktree, ToStringMixin):
    SHELL_ENV_TIMEOUT = 10

    def __init__(self, root_path: str) -> None:
        self._root_path = os.path.abspath(root_path)
        self._shell_env: list[tuple[str, str]] | None = None

    def _tostring_includes(self) -> list[str]:
        return ["_root_path"]

    @override
    def root_path(self) -> str:
        return self._root_path

    @override
    def which(self, binary_name: str) -> str | None:
        search_path = dict(self.shell_env()).get("PATH")
        return shutil.which(binary_name, path=search_path)

    @override
    def shell_env(self) -> list[tuple[str, str]]:
        if self._shell_env is None:
            self._shell_env = self._load_shell_env()
        return list(self._shell_env)

    def _load_shell_env(self) -> list[tuple[str, str]]:
        if os.name == "nt":
            return list(os.environ.items())
        shell = os.environ.get("SHELL", "/bin/sh")
        try:
            result = subprocess.run(
                [shell, "-l", "-c", "env -0"],
                cwd=self._root_path,
                capture_output=True,
                check=True,
                timeout=self.SHELL_ENV_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            log.warning(f"Could not capture the environment of login shell {shell} ({e}); using the process environment instead")
            return list(os.environ.items())
        env = []
        for entry in result.stdout.decode("utf-8", errors="replace").split("\0"):
            name, sep, value = entry.partition("=")
            if sep and name:
                env.append((name, value))
        return env


class LanguageServerHost(ABC):
    """
    The host primitives used while acquiring the language server binary.
    """

    @abstractmethod
    def current_platform(self) -> tuple[Os, Architecture]:
        pass

    @abstractmethod
    def set_installation_status(self, language_server_id: str, status: InstallationStatus, message: str | None = None) -> None:
        """
        Reports the installation status of the given language server. This is a fire-and-forget notification.
        """

    @abstractmethod
    def latest_github_release(self, repo: str, options: GithubReleaseOptions) -> GithubRelease:
        pass

    @abstractmethod
    def download_file(self, url: str, target_path: str, file_type: DownloadedFileType) -> None:
        """
        Downloads the file at the given URL and unpacks it into the given target path.

        :raises DownloadError: if downloading or unpacking fails
        """

    @abstractmethod
    def make_file_executable(self, path: str) -> None:
        """
        :raises InstallationIOError: if the permissions cannot be changed
        """


class LocalHost(LanguageServerHost, ToStringMixin):
    """
    Host implementation based on the local system, the GitHub REST API and the local filesystem.
    """

    def __init__(self, release_feed: GithubReleaseFeed | None = None, status_listener: StatusListener | None = None) -> None:
        """
        :param release_feed: the feed to query; if None, the public GitHub API is used
        :param status_listener: a callback receiving installation status updates, in addition to them being logged
        """
        self._release_feed = release_feed or GithubReleaseFeed()
        self._status_listener = status_listener

    def _tostring_excludes(self) -> list[str]:
        return ["_status_listener"]

    @override
    def current_platform(self) -> tuple[Os, Architecture]:
        return PlatformUtils.get_current_platform()

    @override
    def set_installation_status(self, language_server_id: str, status: InstallationStatus, message: str | None = None) -> None:
        if status == InstallationStatus.FAILED:
            log.error(f"Installation of {language_server_id} failed: {message}")
        else:
            log.info(f"Installation status of {language_server_id}: {status.value}")
        if self._status_listener is not None:
            self._status_listener(language_server_id, status, message)

    @override
    def latest_github_release(self, repo: str, options: GithubReleaseOptions) -> GithubRelease:
        return self._release_feed.latest_release(repo, options)

    @override
    def download_file(self, url: str, target_path: str, file_type: DownloadedFileType) -> None:
        FileUtils.download_and_extract_archive(url, target_path, file_type)

    @override
    def make_file_executable(self, path: str) -> None:
        try:
            FileUtils.make_file_executable(path)
        except OSError as e:
            raise InstallationIOError(f"failed to make {path} executable", cause=e) from e
