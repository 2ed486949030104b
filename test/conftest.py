import io
import logging
import os
import platform
import tarfile
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from overrides import override
from sensai.util.logging import configure

from arduinols.host import LanguageServerHost, LocalHost, Worktree
from arduinols.ls_config import Architecture, DownloadedFileType, InstallationStatus, Os
from arduinols.ls_exceptions import DownloadError
from arduinols.release_feed import GithubRelease, GithubReleaseAsset, GithubReleaseOptions

configure(level=logging.INFO)

log = logging.getLogger(__name__)

is_windows = platform.system() == "Windows"

LANGUAGE_SERVER_ID = "arduino-language-server"


class FakeWorktree(Worktree):
    def __init__(self, root_path: str, executables: dict[str, str] | None = None, env: list[tuple[str, str]] | None = None) -> None:
        self._root_path = root_path
        self.executables = executables or {}
        self.env = env if env is not None else [("PATH", "/usr/bin:/bin"), ("HOME", "/home/user")]
        self.which_calls: list[str] = []

    def __str__(self) -> str:
        return f"FakeWorktree[{self._root_path}]"

    @override
    def root_path(self) -> str:
        return self._root_path

    @override
    def which(self, binary_name: str) -> str | None:
        self.which_calls.append(binary_name)
        return self.executables.get(binary_name)

    @override
    def shell_env(self) -> list[tuple[str, str]]:
        return list(self.env)


class FakeHost(LanguageServerHost):
    """
    Host whose release feed is a fixed list of releases and whose downloads "extract" an archive by
    creating the contained executable.
    """

    def __init__(
        self,
        release: GithubRelease | None = None,
        platform_: tuple[Os, Architecture] = (Os.LINUX, Architecture.X86_64),
        archive_contents: list[str] | None = None,
    ) -> None:
        """
        :param release: the release returned by the feed
        :param platform_: the platform reported by the host
        :param archive_contents: the relative paths of the files created by a download; if None,
            the executable of the platform is created
        """
        self.release = release
        self.platform = platform_
        self.archive_contents = archive_contents
        self.statuses: list[tuple[str, InstallationStatus, str | None]] = []
        self.release_queries: list[tuple[str, GithubReleaseOptions]] = []
        self.downloads: list[tuple[str, str, DownloadedFileType]] = []
        self.download_error: Exception | None = None

    @override
    def current_platform(self) -> tuple[Os, Architecture]:
        return self.platform

    @override
    def set_installation_status(self, language_server_id: str, status: InstallationStatus, message: str | None = None) -> None:
        self.statuses.append((language_server_id, status, message))

    def status_values(self) -> list[InstallationStatus]:
        return [status for _, status, _ in self.statuses]

    @override
    def latest_github_release(self, repo: str, options: GithubReleaseOptions) -> GithubRelease:
        self.release_queries.append((repo, options))
        assert self.release is not None, "no release configured"
        return self.release

    @override
    def download_file(self, url: str, target_path: str, file_type: DownloadedFileType) -> None:
        self.downloads.append((url, target_path, file_type))
        if self.download_error is not None:
            raise DownloadError("failed to download file", cause=self.download_error)
        os.makedirs(target_path, exist_ok=True)
        if self.archive_contents is None:
            contents = ["arduino-language-server.exe" if self.platform[0] == Os.WINDOWS else "arduino-language-server"]
        else:
            contents = self.archive_contents
        for rel_path in contents:
            file_path = Path(target_path) / rel_path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text("#!/bin/sh\n")
            file_path.chmod(0o644)

    @override
    def make_file_executable(self, path: str) -> None:
        LocalHost().make_file_executable(path)


def make_release(version: str, *asset_names: str) -> GithubRelease:
    return GithubRelease(
        version=version,
        assets=[GithubReleaseAsset(name=n, download_url=f"https://example.com/{version}/{n}") for n in asset_names],
    )


@pytest.fixture
def in_tmp_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Changes the working directory to a fresh temporary directory for the duration of the test."""
    monkeypatch.chdir(tmp_path)
    yield tmp_path


@pytest.fixture
def worktree(tmp_path_factory: pytest.TempPathFactory) -> FakeWorktree:
    return FakeWorktree(str(tmp_path_factory.mktemp("project")))


def make_tar_gz(files: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def mock_download(content: bytes, status_code: int = 200) -> MagicMock:
    """
    :return: a mock of the streaming response returned by requests.get
    """
    response = MagicMock()
    response.status_code = status_code
    response.reason = "OK" if status_code == 200 else "Not Found"
    response.iter_content.return_value = [content[i : i + 8192] for i in range(0, len(content), 8192)]
    return response
