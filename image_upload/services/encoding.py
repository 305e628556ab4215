import base64
from typing import Protocol


class TextEncoder(Protocol):
    def encode(self, data: bytes) -> str: ...


class Base64Encoder:
    """GitHub contents API 要求 content 为 base64 文本。"""

    def encode(self, data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")
