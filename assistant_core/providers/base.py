"""SessionClient 抽象接口。

ConversationController 不直接依赖具体厂商的 HTTP 细节，而是依赖此协议：

- 每个远端服务实现一个 SessionClient（如 VapiSessionClient）。
- 负责：创建远端会话、在会话中发送一条消息并取回完整回复。

客户端本身不保存会话状态，session_id 由调用方每次显式传入。
"""

from typing import Protocol


class SessionClient(Protocol):
    """远端会话客户端协议。

    实现者需要提供：
    - name: 服务名称，用于日志。
    - create_session(assistant_id): 新建会话，返回不透明的会话 ID。
    - send_message(session_id, text): 发送一轮用户输入，返回助手回复文本。

    失败时抛出 domain.exceptions 中的 TransportError / AuthError /
    NotFoundError / RemoteError。
    """

    name: str

    async def create_session(self, assistant_id: str) -> str:
        ...

    async def send_message(self, session_id: str, text: str) -> str:
        ...
