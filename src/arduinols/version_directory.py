"""
Layout of downloaded language server versions on disk.

Each version is extracted into its own directory within the install directory. After a new
version has been installed, all other directories in the install directory are removed.
"""

import logging
import os
import shutil

from sensai.util.logging import LogTime

from arduinols.constants import EXECUTABLE_NAME
from arduinols.host import LanguageServerHost
from arduinols.ls_config import DownloadedFileType, InstallationStatus, Os
from arduinols.ls_exceptions import ArduinoLSException, DownloadError, InstallationIOError
from arduinols.ls_utils import FileUtils
from arduinols.release_feed import GithubReleaseAsset

log = logging.getLogger(__name__)


class VersionDirectoryManager:
    def __init__(self, host: LanguageServerHost, install_dir: str | None = None) -> None:
        """
        :param host: the host providing the download and permission primitives
        :param install_dir: the directory containing the version directories; if None, paths are
            relative to the current working directory
        """
        self._host = host
        self._install_dir = install_dir

    @property
    def install_dir(self) -> str | None:
        return self._install_dir

    @staticmethod
    def version_dir_name(version: str) -> str:
        return f"{EXECUTABLE_NAME}-{version}"

    @staticmethod
    def binary_name(os_: Os) -> str:
        match os_:
            case Os.MAC | Os.LINUX:
                return EXECUTABLE_NAME
            case Os.WINDOWS:
                return f"{EXECUTABLE_NAME}.exe"
            case _:
                raise ValueError(f"Unhandled operating system: {os_}")

    def _in_install_dir(self, name: str) -> str:
        if self._install_dir is None:
            return name
        return os.path.join(self._install_dir, name)

    def binary_path(self, version: str, os_: Os) -> str:
        """
        :return: the path of the executable within the directory of the given version
        """
        return self._in_install_dir(f"{self.version_dir_name(version)}/{self.binary_name(os_)}")

    def ensure_installed(self, language_server_id: str, asset: GithubReleaseAsset, version: str, os_: Os) -> str:
        """
        Makes sure the given version is extracted into its version directory, downloading the asset if needed.
        If the download fails or the extracted asset lacks the executable, the new version directory is
        removed and the previously installed versions are left untouched.

        :param language_server_id: the id of the language server, used for status reporting
        :param asset: the release asset containing the executable
        :param version: the release version
        :param os_: the operating system the executable is intended for
        :return: the path of the executable
        """
        version_dir = self.version_dir_name(version)
        version_path = self._in_install_dir(version_dir)
        binary_path = self.binary_path(version, os_)
        if FileUtils.is_regular_file(binary_path):
            return binary_path

        self._host.set_installation_status(language_server_id, InstallationStatus.DOWNLOADING)
        # leftovers of an interrupted installation of the same version
        self._discard_version_dir(version_path)
        try:
            with LogTime(f"Download of {asset.name}", logger=log):
                try:
                    self._host.download_file(asset.download_url, version_path, DownloadedFileType.GZIP_TAR)
                except OSError as e:
                    raise DownloadError("failed to download file", cause=e) from e
            if not FileUtils.is_regular_file(binary_path):
                raise InstallationIOError(f"asset {asset.name} does not contain {self.binary_name(os_)}")
        except ArduinoLSException:
            # no partially populated version directory is left behind
            self._discard_version_dir(version_path)
            raise

        # older versions are only removed once the new one contains its executable
        self.remove_stale_versions(version_dir)
        self._host.make_file_executable(binary_path)
        return binary_path

    @staticmethod
    def _discard_version_dir(version_path: str) -> None:
        if os.path.isdir(version_path):
            log.info(f"Removing incomplete version directory {version_path}")
            shutil.rmtree(version_path, ignore_errors=True)

    def remove_stale_versions(self, current_version_dir: str) -> list[str]:
        """
        Removes all directories in the install directory except the given version directory.
        Failures to remove a directory are logged and otherwise ignored.

        :param current_version_dir: the name of the directory to keep
        :return: the names of the directories that were removed
        :raises InstallationIOError: if the install directory cannot be listed or an entry's type cannot be determined
        """
        listing_dir = self._install_dir if self._install_dir is not None else "."
        removed = []
        try:
            entries = list(os.scandir(listing_dir))
        except OSError as e:
            raise InstallationIOError(f"failed to list directory {listing_dir}", cause=e) from e
        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                raise InstallationIOError(f"failed to get file type for {entry.path}", cause=e) from e
            if not is_dir or entry.name == current_version_dir:
                continue
            try:
                shutil.rmtree(entry.path)
            except OSError as e:
                log.warning(f"Failed to remove stale version directory {entry.path}: {e}")
                continue
            log.info(f"Removed stale version directory {entry.path}")
            removed.append(entry.name)
        return removed
