"""
This file contains various utility functions like I/O operations and platform detection.
"""

import gzip
import logging
import os
import platform
import shutil
import stat
import tarfile
import tempfile
import zipfile
from pathlib import Path

import requests

from arduinols.constants import NETWORK_TIMEOUT
from arduinols.ls_config import Architecture, DownloadedFileType, Os
from arduinols.ls_exceptions import DownloadError, UnsupportedPlatformError

log = logging.getLogger(__name__)


class FileUtils:
    """
    Utility functions for file operations.
    """

    @staticmethod
    def is_regular_file(path: str) -> bool:
        """
        :return: True if the path exists and refers to a regular file (following symlinks)
        """
        try:
            return stat.S_ISREG(os.stat(path).st_mode)
        except OSError:
            return False

    @staticmethod
    def download_file(url: str, target_path: str, timeout: float = NETWORK_TIMEOUT) -> None:
        """
        Downloads the file from the given URL to the given {target_path}
        """
        os.makedirs(os.path.dirname(os.path.abspath(target_path)), exist_ok=True)
        try:
            response = requests.get(url, stream=True, timeout=timeout)
            if response.status_code != 200:
                log.error(f"Error downloading file '{url}': {response.status_code} {response.reason}")
                raise DownloadError(f"unexpected HTTP status {response.status_code} for {url}")
            with open(target_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=8192):
                    f.write(chunk)
        except requests.RequestException as exc:
            log.error(f"Error downloading file '{url}': {exc}")
            raise DownloadError(f"error downloading {url}", cause=exc) from exc

    @staticmethod
    def _unpack_gztar(archive_path: str, target_path: str) -> None:
        os.makedirs(target_path, exist_ok=True)
        shutil.unpack_archive(archive_path, target_path, "gztar")

    @staticmethod
    def _unpack_zip(archive_path: str, target_path: str) -> None:
        os.makedirs(target_path, exist_ok=True)
        with zipfile.ZipFile(archive_path) as archive:
            for member in archive.infolist():
                extracted_path = archive.extract(member, target_path)
                # permission bits are only meaningful for archives created on Unix (create_system 3)
                unix_mode = (member.external_attr >> 16) & 0o777 if member.create_system == 3 else 0
                if unix_mode:
                    os.chmod(extracted_path, unix_mode)

    @staticmethod
    def _unpack_gzip(archive_path: str, target_path: str) -> None:
        with gzip.open(archive_path, "rb") as compressed, open(target_path, "wb") as decompressed:
            shutil.copyfileobj(compressed, decompressed)

    @staticmethod
    def _unpack_uncompressed(archive_path: str, target_path: str) -> None:
        shutil.copyfile(archive_path, target_path)

    @classmethod
    def download_and_extract_archive(cls, url: str, target_path: str, archive_type: DownloadedFileType) -> None:
        """
        Downloads the file at the given URL to a temporary file and unpacks it according to its type.

        :param url: the URL to download
        :param target_path: the directory to extract into (GZIP_TAR, ZIP) or the path of the resulting
            file (GZIP, UNCOMPRESSED)
        :param archive_type: the format of the downloaded file
        :raises DownloadError: if the download or the extraction fails; the temporary file is removed in any case
        """
        unpackers = {
            DownloadedFileType.GZIP_TAR: cls._unpack_gztar,
            DownloadedFileType.ZIP: cls._unpack_zip,
            DownloadedFileType.GZIP: cls._unpack_gzip,
            DownloadedFileType.UNCOMPRESSED: cls._unpack_uncompressed,
        }
        unpack = unpackers.get(archive_type)
        if unpack is None:
            raise DownloadError(f"unknown archive type '{archive_type}'")
        fd, download_path = tempfile.mkstemp(prefix="arduinols_")
        os.close(fd)
        try:
            cls.download_file(url, download_path)
            try:
                unpack(download_path, target_path)
            except (OSError, EOFError, shutil.ReadError, tarfile.TarError, zipfile.BadZipFile) as exc:
                log.error(f"Error extracting {archive_type.value} archive obtained from '{url}': {exc}")
                raise DownloadError(f"error extracting archive obtained from {url}", cause=exc) from exc
        finally:
            Path(download_path).unlink(missing_ok=True)

    @staticmethod
    def make_file_executable(path: str) -> None:
        """
        Adds the execute permission bits to the given file wherever the read bits are set.
        """
        mode = os.stat(path).st_mode
        os.chmod(path, mode | ((mode & 0o444) >> 2))


class PlatformUtils:
    """
    This class provides utilities for platform detection and identification.
    """

    _SYSTEM_MAP = {"Darwin": Os.MAC, "Linux": Os.LINUX, "Windows": Os.WINDOWS}
    _MACHINE_MAP = {
        "AMD64": Architecture.X86_64,
        "x86_64": Architecture.X86_64,
        "i386": Architecture.X86,
        "i686": Architecture.X86,
        "x86": Architecture.X86,
        "aarch64": Architecture.AARCH64,
        "arm64": Architecture.AARCH64,
        "ARM64": Architecture.AARCH64,
    }

    @classmethod
    def get_current_platform(cls) -> tuple[Os, Architecture]:
        """
        Returns the operating system and architecture of the current system
        """
        system = platform.system()
        machine = platform.machine()
        if system in cls._SYSTEM_MAP and machine in cls._MACHINE_MAP:
            return cls._SYSTEM_MAP[system], cls._MACHINE_MAP[machine]
        raise UnsupportedPlatformError(f"Unknown platform: {system=}, {machine=}")
