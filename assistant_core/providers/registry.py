"""远端服务配置。

集中维护每个服务的基础 URL 与端点路径，客户端实现只按名称取用，
后续接入其他服务或调整路径时只需改这里。"""

from dataclasses import dataclass
from typing import Mapping


@dataclass
class ProviderConfig:
    """某个远端服务的端点配置。"""

    name: str
    base_url: str
    session_path: str
    message_path: str
    # 单次调用即可完成“建会话 + 发消息”的旧版端点
    combined_path: str


VAPI_CONFIG = ProviderConfig(
    name="vapi",
    base_url="https://api.vapi.ai",
    session_path="/session",
    message_path="/chat",
    combined_path="/conversation/send-message",
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "vapi": VAPI_CONFIG,
}


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")
