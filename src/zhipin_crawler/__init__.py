"""
zhipin_crawler - Boss 直聘职位列表爬虫

把职位列表接口的 JSON 响应与悬停展开后的页面列表按位置合并，
多页并发抓取后输出订阅源。

Usage:
    supervisor = Supervisor(CrawlerConfig.from_env())
    feed = await supervisor.build_feed({"city": "101270100", "position": "100901"})
"""

from .config import CrawlerConfig, ProxyConfig
from .orchestrator import Supervisor, WorkerPool

__version__ = "0.1.0"

__all__ = ["CrawlerConfig", "ProxyConfig", "Supervisor", "WorkerPool", "__version__"]
