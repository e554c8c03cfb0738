"""对话数据模型。

本模块定义控制器与展示层之间共享的数据结构：

- Role: 消息角色（user/assistant/system）。
- Message: 一条不可变的对话消息。
- TurnState: 控制器状态，IDLE 表示空闲，BUSY 表示有请求在途。
- TranscriptSnapshot: 某一时刻的只读视图，供 UI 渲染。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class TurnState(str, Enum):
    IDLE = "idle"
    BUSY = "busy"


@dataclass(frozen=True)
class Message:
    """一条对话消息，创建后不可修改。

    - role: 消息角色。
    - content: 完整文本内容（追加前即已确定）。
    """

    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class TranscriptSnapshot:
    """对话状态快照。"""

    session_id: Optional[str]
    state: TurnState
    messages: Tuple[Message, ...]

    @property
    def pending(self) -> bool:
        return self.state is TurnState.BUSY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "pending": self.pending,
            "messages": [m.to_dict() for m in self.messages],
        }
