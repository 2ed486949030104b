"""
Platform and archive enumerations shared by the resolution components
"""

from enum import Enum


class Os(str, Enum):
    """
    Enumeration of the operating systems the language server is distributed for.
    """

    MAC = "mac"
    LINUX = "linux"
    WINDOWS = "windows"

    def __str__(self) -> str:
        return self.value

    def is_posix_like(self) -> bool:
        return self in (Os.MAC, Os.LINUX)


class Architecture(str, Enum):
    AARCH64 = "aarch64"
    X86 = "x86"
    X86_64 = "x86_64"

    def __str__(self) -> str:
        return self.value


class DownloadedFileType(str, Enum):
    """
    The format of a downloaded file, determining how it is unpacked into its target location.
    """

    GZIP_TAR = "gztar"
    ZIP = "zip"
    GZIP = "gz"
    """a single gzip-compressed file, which is decompressed to the target path"""
    UNCOMPRESSED = "binary"
    """a plain file, which is moved to the target path as is"""


class InstallationStatus(str, Enum):
    """
    Installation states reported to the host while the language server binary is being acquired.
    """

    NONE = "none"
    CHECKING_FOR_UPDATE = "checking_for_update"
    DOWNLOADING = "downloading"
    FAILED = "failed"
