from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str = "ok"


class UploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("svg", "content"),
        description="SVG content to upload",
    )
    path: Optional[str] = Field(
        default=None, description="File path in repository (e.g., 'images/diagram.svg')"
    )
    owner: Optional[str] = Field(default=None, description="GitHub repository owner")
    repo: Optional[str] = Field(default=None, description="GitHub repository name")
    message: Optional[str] = Field(default=None, description="Commit message")


class RemoteFileState(BaseModel):
    """
    目标路径上已有文件的状态。sha 为空表示文件不存在（或探测失败）。
    """
    sha: Optional[str] = None

    @property
    def exists(self) -> bool:
        return bool(self.sha)


class UploadResult(BaseModel):
    success: bool = True
    url: str
    html_url: str
    commit: Optional[str] = None
    path: str
    owner: str
    repo: str


class SkillManifest(BaseModel):
    name: str
    description: str
    parameters: dict
