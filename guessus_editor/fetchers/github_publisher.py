"""
Publishes an edited dictionary back to the GitHub repository.

Uses the contents API: for each file the current blob sha is read, then
the new content is PUT base64-encoded with a commit message. The words
file is written in the legacy per-language format the game reads, then
the version file is bumped.
"""

import json
import base64
import requests
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config import URLS, GITHUB_REPO, GITHUB_BRANCH, GITHUB_TOKEN, VARIANTS, REQUEST_TIMEOUT
from ..dictionary import Dictionary, VersionInfo, FORMAT_LEGACY, dump_dictionary


class PublishError(Exception):
    """Raised when publishing to GitHub fails."""
    def __init__(self, message: str, status_code: Optional[int] = None, path: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.path = path


@dataclass
class PublishResult:
    """Outcome of a successful publish."""
    variant: str
    version: VersionInfo
    commits: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'variant': self.variant,
            'version': self.version.to_dict(),
            'commits': self.commits,
        }


def encode_json(data) -> str:
    """Serialize to pretty UTF-8 JSON and base64-encode it."""
    text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    return base64.b64encode(text.encode('utf-8')).decode('ascii')


class GitHubPublisher:
    """
    Writes dictionary files to a GitHub repository.

    No conflict handling: the latest sha is read right before each PUT,
    so the publish overwrites whatever is on the branch.
    """

    def __init__(self, token: str = None, repo: str = None, branch: str = None,
                 api_base: str = None, session: requests.Session = None):
        self.token = GITHUB_TOKEN if token is None else token
        self.repo = repo or GITHUB_REPO
        self.branch = branch or GITHUB_BRANCH
        self.api_base = (api_base or URLS['github_api']).rstrip('/')
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    def _headers(self) -> Dict[str, str]:
        return {
            'Authorization': f'Bearer {self.token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': '2022-11-28',
        }

    def _contents_url(self, path: str) -> str:
        return f"{self.api_base}/repos/{self.repo}/contents/{path}"

    @staticmethod
    def _error_message(resp) -> str:
        try:
            return resp.json().get('message', '') or resp.reason
        except ValueError:
            return resp.reason or ''

    def get_sha(self, path: str) -> Optional[str]:
        """
        Get the blob sha of a file on the branch.

        Returns:
            sha string, or None if the file does not exist yet
        """
        try:
            resp = self.session.get(
                self._contents_url(path),
                headers=self._headers(),
                params={'ref': self.branch},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise PublishError(f"Could not reach GitHub: {e}", path=path)

        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise PublishError(
                f"Could not read {path}: {self._error_message(resp)}",
                status_code=resp.status_code, path=path,
            )
        return resp.json().get('sha')

    def put_file(self, path: str, data, message: str) -> Dict[str, str]:
        """Create or update one JSON file. Returns commit sha and url."""
        body = {
            'message': message,
            'content': encode_json(data),
            'branch': self.branch,
        }
        sha = self.get_sha(path)
        if sha:
            body['sha'] = sha

        try:
            resp = self.session.put(
                self._contents_url(path),
                headers=self._headers(),
                json=body,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise PublishError(f"Could not reach GitHub: {e}", path=path)

        if resp.status_code not in (200, 201):
            raise PublishError(
                f"Could not write {path}: {self._error_message(resp)}",
                status_code=resp.status_code, path=path,
            )

        commit = resp.json().get('commit', {})
        print(f"   ✓ Committed {path} ({commit.get('sha', '')[:7]})")
        return {
            'path': path,
            'sha': commit.get('sha', ''),
            'url': commit.get('html_url', ''),
        }

    def publish(self, variant: str, dictionary: Dictionary, version: VersionInfo,
                message: str = None) -> PublishResult:
        """
        Publish a variant's dictionary and bump its version.

        Args:
            variant: 'adult' or 'family'
            dictionary: Dictionary to publish
            version: Currently published version (bumped before writing)
            message: Commit message (generated if not given)

        Returns:
            PublishResult with the new version and commit info

        Raises:
            PublishError: token missing, unknown variant or GitHub error
        """
        if not self.is_configured:
            raise PublishError("GitHub token is not configured (set GITHUB_TOKEN)")

        info = VARIANTS.get(variant)
        if not info:
            raise PublishError(f"Unknown variant: {variant}")

        new_version = version.bump()
        message = message or f"Update {variant} dictionary to v{new_version.version}"

        print(f"🚀 Publishing {variant} v{new_version.version} to {self.repo}@{self.branch}")

        result = PublishResult(variant=variant, version=new_version)
        result.commits.append(
            self.put_file(info['words_file'], dump_dictionary(dictionary, FORMAT_LEGACY), message)
        )
        result.commits.append(
            self.put_file(info['version_file'], new_version.to_dict(), message)
        )
        return result

    def check_access(self) -> Dict:
        """Check whether the token can see the repository."""
        status = {
            'configured': self.is_configured,
            'repo': self.repo,
            'branch': self.branch,
            'canRead': False,
            'canPush': False,
            'error': '',
        }
        if not self.is_configured:
            return status

        try:
            resp = self.session.get(
                f"{self.api_base}/repos/{self.repo}",
                headers=self._headers(),
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            status['error'] = str(e)
            return status

        if resp.status_code == 200:
            status['canRead'] = True
            status['canPush'] = bool(resp.json().get('permissions', {}).get('push'))
        else:
            status['error'] = self._error_message(resp)
        return status
