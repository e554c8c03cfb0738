"""语音输入适配。

语音识别本身不在本包内：识别器只需把“最终识别结果”逐条产出为字符串，
VoiceInput 负责把非空结果交给 ConversationController.submit。
控制器忙碌时到达的结果与手动输入一样会被拒绝，不排队。
"""

import logging
from typing import AsyncIterable

from assistant_core.controller.conversation import ConversationController
from assistant_core.infrastructure.logging.logger import log_event


class VoiceInput:
    def __init__(self, controller: ConversationController):
        self._controller = controller
        self.listening = False

    def start(self) -> None:
        self.listening = True

    def stop(self) -> None:
        self.listening = False

    def toggle(self) -> bool:
        """切换监听状态，返回切换后的状态。"""
        self.listening = not self.listening
        return self.listening

    async def feed(self, transcripts: AsyncIterable[str]) -> int:
        """消费识别结果流，返回被控制器接受的条数。

        调用 stop() 后，处理完当前这一条即返回。
        """
        self.start()
        accepted = 0
        try:
            async for transcript in transcripts:
                text = (transcript or "").strip()
                if text:
                    if await self._controller.submit(text):
                        accepted += 1
                    else:
                        log_event(logging.INFO, "Voice transcript rejected", {}, input_chars=len(text))
                if not self.listening:
                    break
        finally:
            self.listening = False
        return accepted
