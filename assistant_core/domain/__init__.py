"""领域层模型与异常。

包含：
- models: Role / Message / TurnState 等对话数据结构。
- exceptions: 远端调用相关的业务异常类型定义。
"""
