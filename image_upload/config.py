from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field


class Settings(BaseSettings):
    app_name: str = "github-image-upload"
    debug: bool = False

    github_api_url: str = "https://api.github.com"
    github_owner: str = Field(default="dongdada29", description="默认仓库 owner")
    github_repo: str = Field(default="clawdbot-playground", description="默认仓库名")
    github_branch: str | None = Field(
        default=None, description="写入分支；为空时使用仓库默认分支"
    )
    html_url_branch: str = "main"  # html_url 缺失时拼接兜底链接用
    default_commit_message: str = "Upload diagram via OpenClaw skill"
    request_timeout: float = 20.0

    # 凭证来源：按顺序尝试环境变量、gh CLI
    github_token_env: str = "GITHUB_TOKEN"
    github_cli: str = "gh"
    github_cli_timeout: float = 10.0

    local_workspace: str = Field(
        default="./workspace",
        validation_alias=AliasChoices("OPENCLAW_WORKSPACE_DIR", "local_workspace"),
        description="临时文件目录",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
