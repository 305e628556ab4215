import logging
import re
from typing import Callable, List, Optional

from image_upload.agents.tools.github_publisher import GitHubPublisher
from image_upload.agents.tools.local_file import LocalFileTool
from image_upload.auth.credentials import TokenProvider, default_providers, resolve_token
from image_upload.config import Settings, get_settings
from image_upload.errors import MissingParameter
from image_upload.schemas import SkillManifest, UploadRequest, UploadResult
from image_upload.services.encoding import Base64Encoder, TextEncoder

logger = logging.getLogger(__name__)

SKILL_NAME = "github-image-upload"
RAW_URL = "https://raw.githubusercontent.com/{owner}/{repo}/{ref}/{path}"
HTML_URL = "https://github.com/{owner}/{repo}/blob/{ref}/{path}"
_PNG_SUFFIX = re.compile(r"\.png$", re.IGNORECASE)


def normalize_path(path: str) -> str:
    """只会写入 SVG，.png 后缀统一改写为 .svg。"""
    return _PNG_SUFFIX.sub(".svg", path)


def skill_manifest(settings: Optional[Settings] = None) -> SkillManifest:
    settings = settings or get_settings()
    return SkillManifest(
        name=SKILL_NAME,
        description="Generate SVG diagram and upload to GitHub",
        parameters={
            "type": "object",
            "properties": {
                "svg": {"type": "string", "description": "SVG content to upload"},
                "owner": {
                    "type": "string",
                    "description": "GitHub repository owner",
                    "default": settings.github_owner,
                },
                "repo": {
                    "type": "string",
                    "description": "GitHub repository name",
                    "default": settings.github_repo,
                },
                "path": {
                    "type": "string",
                    "description": "File path in repository (e.g., 'images/diagram.svg')",
                },
                "message": {
                    "type": "string",
                    "description": "Commit message",
                    "default": settings.default_commit_message,
                },
            },
            "required": ["svg", "path"],
        },
    )


class UploadOrchestrator:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        providers: Optional[List[TokenProvider]] = None,
        publisher_factory: Optional[Callable[[str], GitHubPublisher]] = None,
        encoder: Optional[TextEncoder] = None,
        local_tool: Optional[LocalFileTool] = None,
    ):
        self.settings = settings or get_settings()
        self.providers = providers if providers is not None else default_providers(self.settings)
        self.publisher_factory = publisher_factory or self._default_publisher
        self.encoder = encoder or Base64Encoder()
        self.local_tool = local_tool or LocalFileTool(self.settings.local_workspace)

    def _default_publisher(self, token: str) -> GitHubPublisher:
        return GitHubPublisher(
            token,
            base_url=self.settings.github_api_url,
            timeout=self.settings.request_timeout,
        )

    def run(self, req: UploadRequest) -> UploadResult:
        """
        执行一次上传（同步）。

        流程：
        1. 校验必填参数（content / path），失败时不做任何 I/O
        2. 解析 token（环境变量 > gh CLI）
        3. GET /user 确认身份
        4. 探测目标路径是否已存在，拿到 sha（探测失败按不存在处理）
        5. 内容落临时文件 -> base64 -> PUT（带 sha 即更新），临时文件退出时删除
        6. 规整返回结果
        """
        if not req.content:
            raise MissingParameter("svg")
        if not req.path:
            raise MissingParameter("path")

        owner = req.owner or self.settings.github_owner
        repo = req.repo or self.settings.github_repo
        message = req.message or self.settings.default_commit_message
        path = normalize_path(req.path)
        if path != req.path:
            logger.warning("[%s] Only SVG is written; path %s rewritten to %s", SKILL_NAME, req.path, path)

        logger.info("[%s] Starting upload to %s/%s/%s", SKILL_NAME, owner, repo, path)
        token = resolve_token(self.providers)

        with self.publisher_factory(token) as publisher:
            user = publisher.get_user()
            logger.info("[%s] Authenticated as: %s", SKILL_NAME, user.get("login"))

            state = publisher.locate(owner, repo, path, ref=self.settings.github_branch)
            logger.info("[%s] %s %s", SKILL_NAME, "Updating" if state.exists else "Creating", path)

            with self.local_tool.staged(req.content) as staged:
                content_b64 = self.encoder.encode(staged.read_bytes())
                resp = publisher.put_file(
                    owner,
                    repo,
                    path,
                    content_b64,
                    message,
                    sha=state.sha,
                    branch=self.settings.github_branch,
                )

        logger.info("[%s] Uploaded successfully!", SKILL_NAME)
        return self._build_result(resp, owner, repo, path)

    def _build_result(self, resp: dict, owner: str, repo: str, path: str) -> UploadResult:
        content = resp.get("content") or {}
        commit = (resp.get("commit") or {}).get("sha")
        ref = commit or self.settings.github_branch or self.settings.html_url_branch
        url = content.get("download_url") or RAW_URL.format(owner=owner, repo=repo, ref=ref, path=path)
        html_url = content.get("html_url") or HTML_URL.format(
            owner=owner,
            repo=repo,
            ref=self.settings.github_branch or self.settings.html_url_branch,
            path=path,
        )
        return UploadResult(
            url=url,
            html_url=html_url,
            commit=commit,
            path=path,
            owner=owner,
            repo=repo,
        )
