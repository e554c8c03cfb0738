"""Minimal console demonstration of the conversation controller."""

import asyncio

from assistant_core.api.service import get_default_controller


async def main() -> None:
    controller = get_default_controller()
    printed = 0
    while True:
        text = await asyncio.to_thread(input, "You: ")
        if text.strip() in {"/exit", "/quit"}:
            break
        await controller.submit(text)
        for message in controller.transcript[printed:]:
            if message.role.value != "user":
                print(f"{message.role.value.capitalize()}: {message.content}")
        printed = len(controller.transcript)


if __name__ == "__main__":
    asyncio.run(main())
