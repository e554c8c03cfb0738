"""对话控制器。

负责一次对话生命周期内的全部状态：
- transcript: 只追加的有序消息列表；
- session_id: 第一次成功建会话后写入，之后不再变化；
- state: IDLE / BUSY，保证同一时刻最多只有一个 submit 在执行。

submit 是唯一入口：先追加用户消息，再按需创建会话、发送消息，
最后追加助手回复或一条 system 错误消息，并无条件回到 IDLE。
任何失败都不会越过控制器抛给调用方。
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from assistant_core.domain.exceptions import BusinessError
from assistant_core.domain.models import Message, Role, TranscriptSnapshot, TurnState
from assistant_core.infrastructure.logging.logger import log_event, logger
from assistant_core.providers.base import SessionClient

Listener = Callable[["ConversationController"], None]


def format_error(exc: BaseException) -> str:
    """把异常转换为可直接展示的 system 消息文本。

    优先取远端结构化错误体里的 message 字段，其次取异常自身的描述。
    """

    payload = getattr(exc, "payload", None)
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, list):
            message = "; ".join(str(m) for m in message if m)
        if isinstance(message, str) and message:
            return f"Error: {message}"
    if isinstance(exc, BusinessError) and exc.message:
        return f"Error: {exc.message}"
    return f"Error: {str(exc) or type(exc).__name__}"


class ConversationController:
    def __init__(
        self,
        client: SessionClient,
        assistant_id: str,
        *,
        combined: bool = False,
    ):
        """初始化控制器。

        Args:
            client: 远端会话客户端
            assistant_id: 助手 ID，建会话时使用
            combined: 为 True 时走单端点接口（client 需提供 send_combined），
                不再单独创建会话
        """
        self._client = client
        self._assistant_id = assistant_id
        self._combined = combined
        self._transcript: List[Message] = []
        self._session_id: Optional[str] = None
        self._state = TurnState.IDLE
        self._listeners: List[Listener] = []
        # 输入框里尚未提交的文本，由 UI 绑定
        self.draft = ""

    @property
    def assistant_id(self) -> str:
        return self._assistant_id

    @property
    def transcript(self) -> Tuple[Message, ...]:
        return tuple(self._transcript)

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state is TurnState.BUSY

    def add_listener(self, callback: Listener) -> None:
        """注册状态变化回调（每次追加消息或切换状态后调用）。"""
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def snapshot(self) -> TranscriptSnapshot:
        return TranscriptSnapshot(
            session_id=self._session_id,
            state=self._state,
            messages=tuple(self._transcript),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.snapshot().to_dict()

    async def submit(self, text: str) -> bool:
        """提交一轮用户输入。

        忙碌中或文本为空白时直接忽略并返回 False；否则完整执行一轮后返回 True。
        检查与进入 BUSY 之间没有 await，同一事件循环上的并发调用会被拒绝。
        """
        if self._state is TurnState.BUSY or not text or not text.strip():
            return False

        self._state = TurnState.BUSY
        self._append(Role.USER, text)
        self.draft = ""

        start_time = time.time()
        log_ctx: Dict[str, Any] = {
            "turn_id": f"t-{uuid4().hex}",
            "assistant_id": self._assistant_id,
            "session_id": self._session_id,
        }
        log_event(logging.INFO, "Turn started", log_ctx, input_chars=len(text))

        try:
            reply = await self._exchange(text, log_ctx)
        except Exception as exc:
            self._on_failure(exc, log_ctx)
        else:
            self._append(Role.ASSISTANT, reply)
            log_event(
                logging.INFO,
                "Turn completed",
                log_ctx,
                reply_chars=len(reply),
                elapsed_seconds=round(time.time() - start_time, 2),
            )
        finally:
            self._state = TurnState.IDLE
            self._notify()
        return True

    async def _exchange(self, text: str, log_ctx: Dict[str, Any]) -> str:
        if self._combined:
            return await self._client.send_combined(self._assistant_id, text)
        if self._session_id is None:
            session_id = await self._client.create_session(self._assistant_id)
            self._session_id = session_id
            log_ctx["session_id"] = session_id
            log_event(logging.INFO, "Created session", log_ctx)
        return await self._client.send_message(self._session_id, text)

    def _on_failure(self, exc: Exception, log_ctx: Dict[str, Any]) -> None:
        if isinstance(exc, BusinessError):
            log_event(
                logging.WARNING,
                "Turn failed",
                log_ctx,
                error_type=type(exc).__name__,
                code=exc.code,
                http_status=exc.http_status,
            )
        else:
            # 客户端实现之外的异常也只转成 system 消息，保留堆栈便于排查
            logger.exception("Turn failed with unexpected error", extra={"extra": log_ctx})
        self._append(Role.SYSTEM, format_error(exc))

    def _append(self, role: Role, content: str) -> None:
        self._transcript.append(Message(role=role, content=content))
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback(self)
            except Exception:
                logger.exception("Listener raised", extra={"extra": {"listener": repr(callback)}})
