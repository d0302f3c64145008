"""GitHub REST API release transport.

An alternative to the gh CLI for runners without a container runtime.
Uses httpx directly:
1. Resolve the release by tag
2. Delete any existing asset with the same name (clobber)
3. Upload the new asset to uploads.github.com

Uploads stop at the first failed request; assets already uploaded stay
on the release.
"""

import logging
import time
from pathlib import Path
from typing import Optional, Sequence
from urllib.parse import quote

import httpx

from shipkit.core.config import get_settings
from shipkit.release.ghrelease import ReleaseConfig
from shipkit.sandbox.types import StepResult

logger = logging.getLogger(__name__)

# Timeout for metadata calls; asset uploads get no read timeout
API_TIMEOUT = 30


def _auth_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }


class GitHubApiReleaseTransport:
    """Uploads release assets through the GitHub REST API."""

    def __init__(
        self,
        api_base: Optional[str] = None,
        uploads_base: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        settings = get_settings()
        self.api_base = (api_base or settings.github_api_base).rstrip("/")
        self.uploads_base = (uploads_base or settings.github_uploads_base).rstrip("/")
        self._client = client

    def _get_release(self, client: httpx.Client, headers: dict, repo: str, tag: str) -> dict:
        encoded_tag = quote(tag, safe="")
        response = client.get(
            f"{self.api_base}/repos/{repo}/releases/tags/{encoded_tag}",
            headers=headers,
        )
        response.raise_for_status()
        return response.json()

    def _delete_asset(self, client: httpx.Client, headers: dict, repo: str, asset_id: int) -> None:
        response = client.delete(
            f"{self.api_base}/repos/{repo}/releases/assets/{asset_id}", headers=headers
        )
        response.raise_for_status()

    def _upload_asset(
        self, client: httpx.Client, headers: dict, repo: str, release_id: int, path: Path
    ) -> dict:
        response = client.post(
            f"{self.uploads_base}/repos/{repo}/releases/{release_id}/assets",
            params={"name": path.name},
            headers={**headers, "Content-Type": "application/octet-stream"},
            content=path.read_bytes(),
            timeout=httpx.Timeout(API_TIMEOUT, read=None),
        )
        response.raise_for_status()
        return response.json()

    def upload(self, config: ReleaseConfig, dist: Path, files: Sequence[str]) -> StepResult:
        command = ["POST", f"repos/{config.repo}/releases/tags/{config.tag}/assets", *files]
        headers = _auth_headers(config.token.plaintext())
        start = time.monotonic()
        client = self._client or httpx.Client(timeout=API_TIMEOUT)

        uploaded: list[str] = []
        try:
            release = self._get_release(client, headers, config.repo, config.tag)
            existing = {asset["name"]: asset["id"] for asset in release.get("assets", [])}

            for name in files:
                if name in existing:
                    logger.info("Replacing existing asset %s", name)
                    self._delete_asset(client, headers, config.repo, existing[name])
                self._upload_asset(client, headers, config.repo, release["id"], Path(dist) / name)
                uploaded.append(name)

        except (httpx.HTTPError, OSError) as exc:
            logger.error("Release upload failed after %d asset(s): %s", len(uploaded), exc)
            return StepResult(
                name="github-api-release-upload",
                command=command,
                exit_code=1,
                duration_seconds=time.monotonic() - start,
                stdout="\n".join(uploaded),
                stderr=str(exc),
            )
        finally:
            if self._client is None:
                client.close()

        return StepResult(
            name="github-api-release-upload",
            command=command,
            exit_code=0,
            duration_seconds=time.monotonic() - start,
            stdout="\n".join(uploaded),
        )
