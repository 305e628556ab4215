import logging
import os
import subprocess
from typing import Callable, Iterable, List, Optional

from image_upload.config import Settings, get_settings
from image_upload.errors import AuthenticationUnavailable

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


def env_token_provider(var_name: str = "GITHUB_TOKEN") -> TokenProvider:
    def provide() -> Optional[str]:
        return os.environ.get(var_name)

    provide.__name__ = f"env:{var_name}"
    return provide


def gh_cli_token_provider(binary: str = "gh", timeout: float = 10.0) -> TokenProvider:
    """
    调用 `gh auth token`，取 stdout 作为 token。
    gh 未安装、非零退出或超时都视为"没有 token"，不向上抛。
    """

    def provide() -> Optional[str]:
        try:
            proc = subprocess.run(
                [binary, "auth", "token"],
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("%s auth token unavailable: %s", binary, exc)
            return None
        if proc.returncode != 0:
            logger.debug("%s auth token exited with %d", binary, proc.returncode)
            return None
        return proc.stdout

    provide.__name__ = f"cli:{binary}"
    return provide


def default_providers(settings: Settings | None = None) -> List[TokenProvider]:
    settings = settings or get_settings()
    return [
        env_token_provider(settings.github_token_env),
        gh_cli_token_provider(settings.github_cli, timeout=settings.github_cli_timeout),
    ]


def resolve_token(providers: Iterable[TokenProvider]) -> str:
    """
    按顺序轮询 provider，第一个非空 token 胜出，后面的不再调用。
    """
    for provider in providers:
        token = (provider() or "").strip()
        if token:
            logger.info("GitHub token resolved via %s", getattr(provider, "__name__", "provider"))
            return token
    raise AuthenticationUnavailable()
