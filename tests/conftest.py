import hashlib
import json
import re

import httpx
import pytest

from image_upload.agents.orchestrator import UploadOrchestrator
from image_upload.agents.tools.github_publisher import GitHubPublisher
from image_upload.agents.tools.local_file import LocalFileTool
from image_upload.config import Settings

API_URL = "https://api.github.test"
_CONTENTS = re.compile(r"^/repos/([^/]+)/([^/]+)/contents/(.+)$")


class FakeGitHub:
    """
    基于 httpx.MockTransport 的内存版 GitHub contents API，
    创建/更新的冲突规则与真实接口一致。
    """

    def __init__(self, login: str = "octocat"):
        self.login = login
        self.files: dict[tuple[str, str, str], dict] = {}
        self.requests: list[httpx.Request] = []
        self.user_status = 200
        self.user_body: bytes | None = None
        self.user_raises = False
        self.probe_status: int | None = None
        self.probe_body: bytes | None = None
        self.probe_raises = False
        self.put_status: int | None = None
        self.put_body = ""
        self.put_raises = False
        self.omit_urls = False
        self._commits = 0
        self.transport = httpx.MockTransport(self.handle)

    def seed(self, owner: str, repo: str, path: str, content: str = "<svg/>") -> str:
        sha = hashlib.sha1(f"seed:{path}:{content}".encode()).hexdigest()
        self.files[(owner, repo, path)] = {"sha": sha, "content": content}
        return sha

    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.method == "PUT"]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/user":
            if self.user_raises:
                raise httpx.ConnectError("connection refused", request=request)
            if self.user_body is not None:
                return httpx.Response(self.user_status, content=self.user_body)
            if self.user_status != 200:
                return httpx.Response(self.user_status, json={"message": "Bad credentials"})
            return httpx.Response(200, json={"login": self.login})

        match = _CONTENTS.match(request.url.path)
        if not match:
            return httpx.Response(404, json={"message": "Not Found"})
        key = match.groups()

        if request.method == "GET":
            return self._get(request, key)
        if request.method == "PUT":
            return self._put(request, key)
        return httpx.Response(405)

    def _get(self, request, key):
        if self.probe_raises:
            raise httpx.ConnectError("connection reset", request=request)
        if self.probe_status is not None:
            return httpx.Response(self.probe_status, content=self.probe_body or b"")
        existing = self.files.get(key)
        if existing is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json={"path": key[2], "sha": existing["sha"]})

    def _put(self, request, key):
        if self.put_raises:
            raise httpx.ReadTimeout("read timed out", request=request)
        if self.put_status is not None:
            return httpx.Response(self.put_status, text=self.put_body)
        body = json.loads(request.content)
        existing = self.files.get(key)
        sent_sha = body.get("sha")
        if existing and not sent_sha:
            return httpx.Response(422, json={"message": 'Invalid request.\n\n"sha" wasn\'t supplied.'})
        if not existing and sent_sha:
            return httpx.Response(422, json={"message": "sha does not match"})
        if existing and sent_sha != existing["sha"]:
            return httpx.Response(409, json={"message": f"{key[2]} does not match {sent_sha}"})

        self._commits += 1
        sha = hashlib.sha1(f"blob:{body['content']}".encode()).hexdigest()
        commit = hashlib.sha1(f"commit:{self._commits}".encode()).hexdigest()
        self.files[key] = {"sha": sha, "content": body["content"]}
        owner, repo, path = key
        content = {"name": path.rsplit("/", 1)[-1], "path": path, "sha": sha}
        if not self.omit_urls:
            content["download_url"] = f"https://raw.githubusercontent.com/{owner}/{repo}/main/{path}"
            content["html_url"] = f"https://github.com/{owner}/{repo}/blob/main/{path}"
        return httpx.Response(201 if not existing else 200, json={"content": content, "commit": {"sha": commit}})


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def workspace(tmp_path):
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def settings(workspace):
    return Settings(_env_file=None, local_workspace=str(workspace), github_api_url=API_URL)


@pytest.fixture
def make_orchestrator(settings, fake_github, workspace):
    def _make(providers=None, encoder=None):
        return UploadOrchestrator(
            settings=settings,
            providers=providers if providers is not None else [lambda: "test-token"],
            publisher_factory=lambda token: GitHubPublisher(
                token, base_url=API_URL, timeout=5.0, transport=fake_github.transport
            ),
            encoder=encoder,
            local_tool=LocalFileTool(str(workspace)),
        )

    return _make
