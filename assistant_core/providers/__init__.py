"""远端会话服务集成层。

该包下的模块负责：
- 定义 SessionClient 抽象接口 (base)。
- 维护各服务的端点配置 (registry)。
- 提供具体实现 (vapi_client)。
"""

from typing import Optional

from assistant_core.config.settings import settings
from assistant_core.providers.base import SessionClient
from assistant_core.providers.registry import get_provider_config
from assistant_core.providers.vapi_client import VapiSessionClient


def create_session_client(name: Optional[str] = None) -> SessionClient:
    """根据名称创建 SessionClient 实例，默认取配置中的 provider。"""

    provider_name = (name or getattr(settings, "default_provider", "vapi")).lower()
    # 未知名称直接抛 KeyError，避免静默连到错误的服务
    return VapiSessionClient(settings, provider=get_provider_config(provider_name))
