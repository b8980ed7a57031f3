"""
Browser - 浏览器启动参数与代理配置

提供：
1. Chromium 启动参数（关闭沙箱、忽略证书错误、固定窗口、覆盖 User-Agent）
2. 代理处理（带认证的 HTTP 代理经本地中继转发）
3. playwright-stealth 伪装
"""

from typing import Dict, Any, Optional, List, Callable, Awaitable
from dataclasses import dataclass, field
import logging

import pproxy
from playwright_stealth import Stealth

from ..config import CrawlerConfig, ProxyConfig

logger = logging.getLogger(__name__)

WINDOW_SIZE = {"width": 1920, "height": 1080}

# 浏览器不认识 DNS 解析提示协议
RESOLVER_HINT_SCHEMES = {
    "socks5h://": "socks5://",
    "socks4a://": "socks4://",
}


class ProxyRelay:
    """
    本地匿名中继

    在 127.0.0.1 上监听一个无认证的 HTTP 代理，把请求连同凭据转发给上游代理。
    Chromium 的 --proxy-server 参数不支持认证，所以需要这一层。
    """

    def __init__(self, upstream: ProxyConfig, host: str = "127.0.0.1", port: int = 0):
        self.upstream = upstream
        self.host = host
        self.port = port
        self._server = None

    @property
    def address(self) -> str:
        return f"http://{self.host}:{self.port}"

    def _remote_uri(self) -> str:
        # pproxy 的认证写在 # 之后
        port = self.upstream.port or 80
        auth = f"{self.upstream.username or ''}:{self.upstream.password or ''}"
        return f"{self.upstream.scheme}://{self.upstream.host}:{port}#{auth}"

    async def start(self) -> str:
        """启动中继，返回本地地址"""
        server = pproxy.Server(f"http://{self.host}:{self.port}")
        remote = pproxy.Connection(self._remote_uri())
        self._server = await server.start_server({
            "rserver": [remote],
            "verbose": logger.debug,
        })
        if self.port == 0 and self._server.sockets:
            self.port = self._server.sockets[0].getsockname()[1]

        logger.info(f"Proxy relay listening on {self.address} -> {self.upstream.host}")
        return self.address

    async def close(self) -> None:
        """关闭中继"""
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info(f"Proxy relay {self.address} closed")


RelayFactory = Callable[[ProxyConfig], Awaitable[ProxyRelay]]


async def anonymize_proxy(upstream: ProxyConfig) -> ProxyRelay:
    """启动一个指向 upstream 的本地中继"""
    relay = ProxyRelay(upstream)
    await relay.start()
    return relay


def normalize_proxy_uri(uri: str) -> str:
    """socks5h/socks4a 降级为 socks5/socks4"""
    for hint, plain in RESOLVER_HINT_SCHEMES.items():
        uri = uri.replace(hint, plain)
    return uri


@dataclass
class LaunchOptions:
    """Chromium launch arguments plus per-context options."""
    args: List[str]
    user_agent: str
    headless: bool = True
    executable_path: Optional[str] = None
    ignore_https_errors: bool = True
    viewport: Dict[str, int] = field(default_factory=lambda: dict(WINDOW_SIZE))
    relay: Optional[ProxyRelay] = None

    @property
    def proxy_server(self) -> Optional[str]:
        for arg in self.args:
            if arg.startswith("--proxy-server="):
                return arg.split("=", 1)[1]
        return None

    def launch_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``chromium.launch``."""
        kwargs: Dict[str, Any] = {"headless": self.headless, "args": list(self.args)}
        if self.executable_path:
            kwargs["executable_path"] = self.executable_path
        return kwargs

    def context_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``browser.new_context``."""
        return {
            "user_agent": self.user_agent,
            "viewport": dict(self.viewport),
            "ignore_https_errors": self.ignore_https_errors,
        }

    async def close(self) -> None:
        """Release the proxy relay, if one was started."""
        if self.relay is not None:
            await self.relay.close()
            self.relay = None


def get_base_args(user_agent: str) -> List[str]:
    """获取 Chromium 基础启动参数"""
    return [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-infobars",
        "--window-position=0,0",
        f"--window-size={WINDOW_SIZE['width']},{WINDOW_SIZE['height']}",
        "--ignore-certificate-errors",
        "--ignore-certificate-errors-spki-list",
        f"--user-agent={user_agent}",
    ]


async def build_launch_options(config: CrawlerConfig, relay_factory: RelayFactory = anonymize_proxy) -> LaunchOptions:
    """
    根据进程配置生成启动参数

    Args:
        config: 爬虫配置
        relay_factory: 创建本地中继的协程函数（测试时可替换）

    Returns:
        LaunchOptions；若创建了中继，调用方负责 ``await options.close()``
    """
    options = LaunchOptions(
        args=get_base_args(config.user_agent),
        user_agent=config.user_agent,
        headless=config.headless,
        executable_path=config.executable_path,
    )

    proxy = config.proxy
    if proxy is None:
        return options

    if proxy.has_credentials:
        if proxy.scheme == "http":
            relay = await relay_factory(proxy)
            options.relay = relay
            options.args.append(f"--proxy-server={relay.address}")
        else:
            logger.warning("SOCKS/HTTPS proxy with authentication is not supported by Chromium, continuing without proxy.")
    else:
        options.args.append(f"--proxy-server={normalize_proxy_uri(proxy.uri)}")

    return options


async def apply_stealth(context) -> None:
    """对浏览器上下文应用 playwright-stealth 伪装"""
    await Stealth().apply_stealth_async(context)


async def launch_browser(playwright, options: LaunchOptions):
    """启动 Chromium"""
    logger.info(f"Launching chromium (headless={options.headless}, proxy={options.proxy_server or 'none'})")
    return await playwright.chromium.launch(**options.launch_kwargs())
