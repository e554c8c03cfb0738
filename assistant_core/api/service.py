"""对外 API 服务模块。

提供简化的函数接口供展示层调用。
"""

from typing import Any, Dict, List, Optional

from assistant_core.config.settings import settings
from assistant_core.controller.conversation import ConversationController
from assistant_core.domain.exceptions import ValidationError
from assistant_core.providers import create_session_client


_controller: Optional[ConversationController] = None


def get_default_controller() -> ConversationController:
    """获取默认的对话控制器实例（单例）。"""
    global _controller
    if _controller is None:
        if not settings.assistant_id:
            raise ValidationError(code="MISSING_ASSISTANT_ID", message="ASSISTANT_ID not set")
        _controller = ConversationController(
            client=create_session_client(),
            assistant_id=settings.assistant_id,
            combined=bool(getattr(settings, "combined_mode", False)),
        )
    return _controller


def reset_default_controller() -> None:
    """丢弃当前单例，下次调用时开始一段新对话。"""
    global _controller
    _controller = None


async def run_chat(
    user_input: str,
    controller: Optional[ConversationController] = None,
) -> Dict[str, Any]:
    """提交一轮输入并返回提交后的对话状态。

    Args:
        user_input: 用户输入内容
        controller: 控制器（可选，不提供则使用默认单例）

    Returns:
        包含是否被接受、会话ID、忙碌标记和全部消息的字典
    """
    ctrl = controller or get_default_controller()
    accepted = await ctrl.submit(user_input)
    result = ctrl.to_dict()
    result["accepted"] = accepted
    return result


def get_transcript(controller: Optional[ConversationController] = None) -> List[Dict[str, str]]:
    """获取当前对话的全部消息。"""
    ctrl = controller or get_default_controller()
    return [m.to_dict() for m in ctrl.transcript]
