"""对话控制层：维护 transcript、会话 ID 与单飞状态。"""
