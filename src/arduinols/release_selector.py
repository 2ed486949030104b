"""
Selection of the release asset matching the current platform.
"""

import logging

from arduinols.constants import ASSET_ARCHIVE_SUFFIX, EXECUTABLE_NAME, GITHUB_REPO
from arduinols.host import LanguageServerHost
from arduinols.ls_config import Architecture, Os
from arduinols.ls_exceptions import AssetNotFoundError
from arduinols.release_feed import GithubRelease, GithubReleaseAsset, GithubReleaseOptions

log = logging.getLogger(__name__)

# labels used in the release asset names; a change of the upstream naming convention
# requires an update of these tables
OS_LABELS: dict[Os, str] = {
    Os.MAC: "macOS",
    Os.LINUX: "Linux",
    Os.WINDOWS: "Windows",
}
ARCH_LABELS: dict[Architecture, str] = {
    Architecture.AARCH64: "ARM64",
    Architecture.X86: "32bit",
    Architecture.X86_64: "64bit",
}


def asset_name(version: str, os: Os, arch: Architecture) -> str:
    """
    :return: the name of the release asset for the given version and platform,
        e.g. "arduino-language-server_0.7.6_Linux_64bit.tar.gz"
    """
    return f"{EXECUTABLE_NAME}_{version}_{OS_LABELS[os]}_{ARCH_LABELS[arch]}{ASSET_ARCHIVE_SUFFIX}"


def select_asset(release: GithubRelease, os: Os, arch: Architecture) -> GithubReleaseAsset:
    """
    :return: the first asset of the release whose name is exactly the expected asset name
    :raises AssetNotFoundError: if the release contains no such asset
    """
    expected_name = asset_name(release.version, os, arch)
    for asset in release.assets:
        if asset.name == expected_name:
            return asset
    log.error(f"Release {release.version} has no asset {expected_name}; available: {[a.name for a in release.assets]}")
    raise AssetNotFoundError(expected_name)


class ReleaseSelector:
    RELEASE_OPTIONS = GithubReleaseOptions(require_assets=True, pre_release=False)

    def __init__(self, host: LanguageServerHost, repo: str = GITHUB_REPO) -> None:
        self._host = host
        self._repo = repo

    def latest_release(self) -> GithubRelease:
        return self._host.latest_github_release(self._repo, self.RELEASE_OPTIONS)

    def select(self, os: Os, arch: Architecture) -> tuple[GithubRelease, GithubReleaseAsset]:
        """
        Queries the release feed and selects the asset to download for the given platform.

        :return: the latest release and its asset for the given platform
        """
        release = self.latest_release()
        return release, select_asset(release, os, arch)
