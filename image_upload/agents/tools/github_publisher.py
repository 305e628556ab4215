import logging
from typing import Optional
from urllib.parse import quote

import httpx

from image_upload.config import get_settings
from image_upload.errors import IdentityCheckFailed, UploadFailed
from image_upload.schemas import RemoteFileState

logger = logging.getLogger(__name__)


class GitHubPublisher:
    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        settings = get_settings()
        self.client = httpx.Client(
            base_url=base_url or settings.github_api_url,
            headers={"Authorization": f"Bearer {token}", "Accept": "application/vnd.github+json"},
            timeout=timeout or settings.request_timeout,
            transport=transport,
        )

    def __enter__(self) -> "GitHubPublisher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    @staticmethod
    def contents_url(owner: str, repo: str, path: str) -> str:
        return f"/repos/{owner}/{repo}/contents/{quote(path, safe='/')}"

    def get_user(self) -> dict:
        """
        仅用于确认当前 token 对应哪个账号；失败视为认证不可用，整个调用终止。
        """
        try:
            resp = self.client.get("/user")
        except httpx.HTTPError as exc:
            raise IdentityCheckFailed(str(exc), cause=exc) from exc
        if not resp.is_success:
            raise IdentityCheckFailed(
                f"{resp.status_code} {resp.reason_phrase}".strip(), status_code=resp.status_code
            )
        try:
            user = resp.json()
        except ValueError as exc:
            raise IdentityCheckFailed(
                f"unexpected /user response: {resp.text[:200]}", status_code=resp.status_code, cause=exc
            ) from exc
        if not isinstance(user, dict):
            raise IdentityCheckFailed("unexpected /user response", status_code=resp.status_code)
        return user

    def locate(self, owner: str, repo: str, path: str, ref: Optional[str] = None) -> RemoteFileState:
        """
        尽力探测：任何失败都按"不存在"返回。最坏情况是一次被 GitHub 拒绝的创建，不会误覆盖。
        """
        params = {"ref": ref} if ref else None
        try:
            resp = self.client.get(self.contents_url(owner, repo, path), params=params)
        except httpx.HTTPError as exc:
            logger.warning("Existence probe for %s failed, treating as absent: %s", path, exc)
            return RemoteFileState()
        if resp.status_code == 404:
            return RemoteFileState()
        if not resp.is_success:
            logger.warning("Existence probe for %s returned %d, treating as absent", path, resp.status_code)
            return RemoteFileState()
        try:
            data = resp.json()
        except ValueError:
            logger.warning("Existence probe for %s returned malformed JSON, treating as absent", path)
            return RemoteFileState()
        if not isinstance(data, dict):
            # 目录会返回列表
            return RemoteFileState()
        sha = data.get("sha")
        return RemoteFileState(sha=sha if isinstance(sha, str) and sha else None)

    def put_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content_b64: str,
        message: str,
        sha: Optional[str] = None,
        branch: Optional[str] = None,
    ) -> dict:
        payload = {
            "message": message,
            "content": content_b64,
        }
        if sha:
            payload["sha"] = sha
        if branch:
            payload["branch"] = branch
        try:
            resp = self.client.put(self.contents_url(owner, repo, path), json=payload)
        except httpx.HTTPError as exc:
            raise UploadFailed(str(exc), cause=exc) from exc
        if not resp.is_success:
            raise UploadFailed(resp.text, status_code=resp.status_code)
        # 2xx 但响应体无法解析时无法确认 commit，按失败处理
        try:
            data = resp.json()
        except ValueError as exc:
            raise UploadFailed(resp.text, status_code=resp.status_code, cause=exc) from exc
        if not isinstance(data, dict):
            raise UploadFailed(resp.text, status_code=resp.status_code)
        return data
