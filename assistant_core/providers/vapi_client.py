"""Vapi SessionClient 适配器。

本模块负责：

1. 把“创建会话”“发送消息”两个逻辑操作转换为 Vapi 的 HTTP 请求。
2. 调用 HTTP 接口并把网络/鉴权/远端错误映射为统一的业务异常。
3. 从响应 JSON 中取出会话 ID 与完整的回复文本。

每次调用只发一个请求：不缓存、不重试，也不保存会话状态。
"""

import logging
from typing import Any, Dict, Optional

import httpx

from assistant_core.config.settings import settings
from assistant_core.domain.exceptions import (
    AuthError,
    NotFoundError,
    RemoteError,
    TransportError,
    ValidationError,
)
from assistant_core.infrastructure.logging.logger import log_event
from assistant_core.providers.registry import VAPI_CONFIG, ProviderConfig


class VapiSessionClient:
    """Vapi 会话客户端实现。

    - name: 服务名称（供日志使用）。
    - create_session / send_message: SessionClient 协议的两个操作。
    - send_combined: 旧版单端点接口，一次请求同时携带助手 ID 与消息。
    """

    name = "vapi"

    def __init__(self, cfg=settings, provider: ProviderConfig = VAPI_CONFIG):
        # Settings 里包含 api_key、超时等配置；provider 决定 base_url 与端点路径
        self._settings = cfg
        self._provider = provider

    async def create_session(self, assistant_id: str) -> str:
        """新建远端会话，返回会话 ID。"""

        if not assistant_id:
            raise ValidationError(code="INVALID_ARGUMENT", message="assistant_id must be non-empty")
        data = await self._post(self._provider.session_path, {"assistantId": assistant_id})
        session_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(session_id, str) or not session_id:
            raise RemoteError(code="BAD_RESPONSE", message="Session response has no id", payload=data)
        return session_id

    async def send_message(self, session_id: str, text: str) -> str:
        """在已有会话中发送一轮用户输入，返回助手回复。"""

        if not session_id:
            raise ValidationError(code="INVALID_ARGUMENT", message="session_id must be non-empty")
        if not text:
            raise ValidationError(code="INVALID_ARGUMENT", message="text must be non-empty")
        data = await self._post(self._provider.message_path, {"sessionId": session_id, "input": text})
        return self._extract_reply(data)

    async def send_combined(self, assistant_id: str, text: str) -> str:
        """旧版单次调用：不需要会话 ID，直接按助手 ID 发消息。"""

        if not assistant_id:
            raise ValidationError(code="INVALID_ARGUMENT", message="assistant_id must be non-empty")
        if not text:
            raise ValidationError(code="INVALID_ARGUMENT", message="text must be non-empty")
        data = await self._post(
            self._provider.combined_path,
            {"assistant_id": assistant_id, "message": text},
        )
        return self._extract_reply(data)

    async def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        """发送一次 POST 请求并完成状态码到异常的映射。"""

        api_key = getattr(self._settings, "vapi_api_key", None)
        if not api_key:
            # 配置缺失走 ValidationError，方便上层统一处理
            raise ValidationError(code="MISSING_API_KEY", message="VAPI_API_KEY not set")
        base = (getattr(self._settings, "vapi_base_url", None) or self._provider.base_url).rstrip("/")
        url = f"{base}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=getattr(self._settings, "http_timeout", None),
                trust_env=False,
            ) as client:
                resp = await client.post(
                    url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接被拒绝等
            log_event(logging.WARNING, "Request failed", {"provider": self.name}, path=path, error=str(e))
            raise TransportError(code="NETWORK_ERROR", message=str(e) or type(e).__name__)
        if resp.status_code >= 400:
            self._raise_for_status(resp, path)
        try:
            return resp.json()
        except ValueError:
            raise RemoteError(
                code="BAD_RESPONSE",
                message="Response is not valid JSON",
                http_status=resp.status_code,
            )

    def _raise_for_status(self, resp, path: str) -> None:
        body = self._parse_error_body(resp)
        message = self._error_message(body) or getattr(resp, "text", "") or f"HTTP {resp.status_code}"
        status = resp.status_code
        log_event(
            logging.WARNING,
            "Remote call rejected",
            {"provider": self.name},
            path=path,
            http_status=status,
        )
        if status in (401, 403):
            raise AuthError(code="AUTH_ERROR", message=message, http_status=status, payload=body)
        if status == 404:
            raise NotFoundError(code="SESSION_NOT_FOUND", message=message, http_status=status, payload=body)
        raise RemoteError(code="API_ERROR", message=message, http_status=status, payload=body)

    @staticmethod
    def _parse_error_body(resp) -> Optional[Any]:
        try:
            return resp.json()
        except ValueError:
            return None

    @staticmethod
    def _error_message(body: Any) -> Optional[str]:
        """从结构化错误体中取出人类可读信息。

        Vapi 的校验错误会把 message 作为字符串数组返回，这里拼成一行。
        """

        if not isinstance(body, dict):
            return None
        message = body.get("message")
        if isinstance(message, list):
            message = "; ".join(str(m) for m in message if m)
        if isinstance(message, str) and message:
            return message
        error = body.get("error")
        if isinstance(error, dict):
            error = error.get("message")
        if isinstance(error, str) and error:
            return error
        return None

    @staticmethod
    def _extract_reply(data: Any) -> str:
        """从响应 JSON 中取出助手回复。

        兼容三种形态：
        - output 为消息列表：取最后一条 assistant 消息的 content；
        - output 为字符串；
        - 旧版接口的 response 字段。
        """

        if isinstance(data, dict):
            output = data.get("output")
            if isinstance(output, list):
                for item in reversed(output):
                    if not isinstance(item, dict) or item.get("role") != "assistant":
                        continue
                    content = item.get("content")
                    if isinstance(content, str) and content:
                        return content
            elif isinstance(output, str) and output:
                return output
            response = data.get("response")
            if isinstance(response, str) and response:
                return response
        raise RemoteError(code="BAD_RESPONSE", message="Response has no assistant reply", payload=data)
