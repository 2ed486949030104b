"""
Access to the GitHub release feed of the language server project.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any

import requests

from arduinols.constants import GITHUB_API_BASE, GITHUB_TOKEN_ENV_VAR, NETWORK_TIMEOUT
from arduinols.ls_exceptions import ReleaseFeedError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GithubReleaseAsset:
    name: str
    download_url: str


@dataclass(frozen=True)
class GithubRelease:
    version: str
    """
    the release's tag name, used verbatim (including any "v" prefix)
    """
    assets: list[GithubReleaseAsset] = field(default_factory=list)


@dataclass(frozen=True)
class GithubReleaseOptions:
    require_assets: bool = True
    """
    whether releases without any assets are skipped
    """
    pre_release: bool = False
    """
    whether pre-releases may be returned
    """


class GithubReleaseFeed:
    """
    Queries the GitHub REST API for the releases of a repository.
    """

    PER_PAGE = 30

    def __init__(self, api_base: str = GITHUB_API_BASE, timeout: float = NETWORK_TIMEOUT) -> None:
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json", "User-Agent": "arduinols"}
        # support GITHUB_TOKEN for environments with rate limits
        github_token = os.environ.get(GITHUB_TOKEN_ENV_VAR)
        if github_token:
            headers["Authorization"] = f"token {github_token}"
        return headers

    def _fetch_releases(self, repo: str) -> list[dict[str, Any]]:
        url = f"{self._api_base}/repos/{repo}/releases"
        try:
            response = requests.get(url, headers=self._headers(), params={"per_page": self.PER_PAGE}, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            log.error(f"Failed to query releases of {repo}: {exc}")
            raise ReleaseFeedError(f"failed to fetch releases of {repo}", cause=exc) from exc
        if not isinstance(data, list):
            raise ReleaseFeedError(f"unexpected release feed response for {repo}: {type(data).__name__}")
        return data

    @staticmethod
    def _parse_release(data: dict[str, Any]) -> GithubRelease:
        assets = [GithubReleaseAsset(name=a["name"], download_url=a["browser_download_url"]) for a in data.get("assets", [])]
        return GithubRelease(version=data["tag_name"], assets=assets)

    def latest_release(self, repo: str, options: GithubReleaseOptions) -> GithubRelease:
        """
        :param repo: the repository in "owner/name" form
        :param options: filtering options
        :return: the most recent release that satisfies the options
        """
        for data in self._fetch_releases(repo):
            if data.get("draft"):
                continue
            if data.get("prerelease") and not options.pre_release:
                continue
            if options.require_assets and not data.get("assets"):
                continue
            try:
                release = self._parse_release(data)
            except KeyError as exc:
                raise ReleaseFeedError(f"malformed release entry in feed of {repo}", cause=exc) from exc
            log.info(f"Latest release of {repo} is {release.version} with {len(release.assets)} assets")
            return release
        raise ReleaseFeedError(f"no release found for {repo} matching {options}")
