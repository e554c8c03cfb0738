"""Assistant Core 顶层包。

该包提供对话助手客户端的核心实现：
包括配置加载、领域模型、远端会话客户端 (SessionClient)、
对话控制器 (ConversationController) 以及可选的语音输入适配。
"""

from assistant_core.controller.conversation import ConversationController
from assistant_core.providers import create_session_client

__all__ = ["ConversationController", "create_session_client"]
