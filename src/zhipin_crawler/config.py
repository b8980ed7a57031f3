"""
Config - 进程级配置

从环境变量（以及可选的 .env 文件）读取浏览器、代理和超时配置。
"""

from typing import Optional
from dataclasses import dataclass
from urllib.parse import urlsplit, unquote
import os

from dotenv import load_dotenv

from .exceptions import ConfigError


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)


# ============================================================================
# 配置函数 - 从环境变量获取
# ============================================================================

def _get_bool(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").lower() == "true"


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


def get_proxy_uri() -> Optional[str]:
    """获取代理地址

    优先使用 PROXY_URI；否则由 PROXY_PROTOCOL、PROXY_HOST、PROXY_PORT 拼接。
    """
    uri = os.getenv("PROXY_URI")
    if uri:
        return uri

    protocol = os.getenv("PROXY_PROTOCOL")
    host = os.getenv("PROXY_HOST")
    port = os.getenv("PROXY_PORT")
    if protocol and host and port:
        return f"{protocol}://{host}:{port}"
    return None


@dataclass(frozen=True)
class ProxyConfig:
    """Parsed proxy URI."""
    uri: str
    scheme: str
    host: str
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.username or self.password)

    @classmethod
    def from_uri(cls, uri: str) -> "ProxyConfig":
        parts = urlsplit(uri)
        if not parts.scheme or not parts.hostname:
            raise ConfigError(f"Invalid proxy URI: {uri!r}")
        try:
            port = parts.port
        except ValueError:
            raise ConfigError(f"Invalid proxy port in {uri!r}")

        return cls(
            uri=uri,
            scheme=parts.scheme.lower(),
            host=parts.hostname,
            port=port,
            username=unquote(parts.username) if parts.username else None,
            password=unquote(parts.password) if parts.password else None,
        )


@dataclass
class CrawlerConfig:
    """Crawler configuration.

    Timeouts are in milliseconds (Playwright units); the worker creation delay
    is in seconds.
    """
    user_agent: str = DEFAULT_USER_AGENT
    executable_path: Optional[str] = None
    proxy: Optional[ProxyConfig] = None
    headless: bool = True
    stealth: bool = False
    max_concurrency: int = 3
    worker_creation_delay: float = 2.0
    navigation_timeout: int = 30000
    render_timeout: int = 30000
    panel_timeout: int = 30000
    body_timeout: int = 30000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "CrawlerConfig":
        """Build configuration from the environment (and .env if present)."""
        load_dotenv(dotenv_path=dotenv_path)

        proxy_uri = get_proxy_uri()
        return cls(
            user_agent=os.getenv("UA") or DEFAULT_USER_AGENT,
            executable_path=os.getenv("CHROMIUM_EXECUTABLE_PATH") or None,
            proxy=ProxyConfig.from_uri(proxy_uri) if proxy_uri else None,
            headless=_get_bool("CRAWLER_HEADLESS", True),
            stealth=_get_bool("CRAWLER_STEALTH", False),
            max_concurrency=_get_int("CRAWLER_MAX_CONCURRENCY", 3),
            worker_creation_delay=_get_float("CRAWLER_WORKER_CREATION_DELAY", 2.0),
            navigation_timeout=_get_int("CRAWLER_NAVIGATION_TIMEOUT", 30000),
            render_timeout=_get_int("CRAWLER_RENDER_TIMEOUT", 30000),
            panel_timeout=_get_int("CRAWLER_PANEL_TIMEOUT", 30000),
            body_timeout=_get_int("CRAWLER_BODY_TIMEOUT", 30000),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
