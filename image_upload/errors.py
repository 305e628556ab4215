"""Error hierarchy for the image upload flow.

Each error records the ``stage`` of the invocation it aborted. Probing for an
existing file never raises, so there is no error for that stage.
"""

from __future__ import annotations


class ImageUploadError(Exception):
    """Base exception for all upload failures."""

    def __init__(self, message: str, stage: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.cause = cause
        self.__cause__ = cause


class MissingParameter(ImageUploadError):
    """A required request field was absent or empty."""

    def __init__(self, param: str) -> None:
        super().__init__(f"Missing required parameter: {param}", stage="validate")
        self.param = param


class AuthenticationUnavailable(ImageUploadError):
    """No credential provider produced a token."""

    def __init__(self) -> None:
        super().__init__(
            "GitHub token not found. Set GITHUB_TOKEN env var or run 'gh auth login'",
            stage="auth",
        )


class IdentityCheckFailed(ImageUploadError):
    """``GET /user`` did not succeed with the resolved token."""

    def __init__(
        self, detail: str, status_code: int | None = None, cause: Exception | None = None
    ) -> None:
        super().__init__(f"GitHub API error: {detail}", stage="identity", cause=cause)
        self.detail = detail
        self.status_code = status_code


class UploadFailed(ImageUploadError):
    """The contents write was rejected; ``detail`` is GitHub's error body verbatim."""

    def __init__(
        self, detail: str, status_code: int | None = None, cause: Exception | None = None
    ) -> None:
        super().__init__(f"GitHub API error: {detail}", stage="upload", cause=cause)
        self.detail = detail
        self.status_code = status_code
