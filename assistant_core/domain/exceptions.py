"""统一业务异常模型。

所有 SessionClient 抛出的错误都继承自 BusinessError，
ConversationController 在调用边界统一捕获并转换为 system 消息。
"""

from typing import Any, Optional


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "NETWORK_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 payload、provider 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)

    @property
    def payload(self) -> Optional[Any]:
        """远端返回的结构化错误体（若有）。"""

        return self.extra.get("payload")


class TransportError(BusinessError):
    """网络层错误，例如 DNS 失败、连接被拒绝，请求没能发出。"""


class AuthError(BusinessError):
    """凭证被远端拒绝（401/403）。"""


class NotFoundError(BusinessError):
    """会话 ID 已失效或不存在（404）。"""


class RemoteError(BusinessError):
    """远端返回了结构化的失败响应。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""
