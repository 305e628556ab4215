import time
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional
from uuid import uuid4

from image_upload.config import get_settings


class LocalFileTool:
    def __init__(self, workspace: Optional[str] = None):
        self.base = Path(workspace or get_settings().local_workspace).resolve()
        self.base.mkdir(parents=True, exist_ok=True)

    def resolve(self, relative_path: str) -> Path:
        target = (self.base / relative_path).resolve()
        if not target.is_relative_to(self.base):
            raise ValueError("路径越界")
        return target

    def write(self, relative_path: str, content: str) -> Path:
        target = self.resolve(relative_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    @contextmanager
    def staged(self, content: str, suffix: str = ".svg") -> Generator[Path, None, None]:
        """
        把内容落到 workspace 下的临时文件，退出时（无论成功还是异常）删除。
        """
        relative_path = f"temp-{time.time_ns()}-{uuid4().hex[:8]}{suffix}"
        target = self.resolve(relative_path)
        try:
            self.write(relative_path, content)
            yield target
        finally:
            target.unlink(missing_ok=True)
