"""
This module contains the exceptions raised while resolving and installing the language server.
"""


class ArduinoLSException(Exception):
    def __init__(self, message: str, cause: Exception | None = None) -> None:
        """
        Initializes the exception with the given message.

        :param message: the message describing the exception
        :param cause: the original exception that caused this exception, if any.
            For I/O failures, this is typically an OSError or a requests exception.
        """
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        """
        Returns a string representation of the exception.
        """
        s = super().__str__()
        if self.cause:
            if "\n" in s:
                s += "\n"
            else:
                s += " "
            s += f"(caused by {self.cause})"
        return s


class AssetNotFoundError(ArduinoLSException):
    """
    Raised when the latest release does not contain an asset for the current platform.

    This indicates a mismatch between the release naming convention and the asset name
    lookup tables rather than a transient condition, so it is never retried.
    """

    def __init__(self, asset_name: str) -> None:
        self.asset_name = asset_name
        super().__init__(f"no asset found matching {asset_name!r}")


class ReleaseFeedError(ArduinoLSException):
    pass


class DownloadError(ArduinoLSException):
    pass


class InstallationIOError(ArduinoLSException):
    """
    Raised for filesystem failures during installation (directory listing, file type
    inspection, permission changes).
    """


class UnsupportedPlatformError(ArduinoLSException):
    pass
