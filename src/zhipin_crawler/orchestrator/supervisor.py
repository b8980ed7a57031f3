"""
Supervisor - Main controller for a crawl batch.

Coordinates the pieces: launch options, browser, worker pool, and the
per-page interceptor/extractor/correlator pipeline.
"""

from typing import Any, Callable, List, Mapping, Optional, Sequence, Union
import logging

from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from ..config import CrawlerConfig
from ..execution.browser import RelayFactory, anonymize_proxy, build_launch_options, launch_browser
from ..execution.correlator import correlate
from ..execution.extractor import DomExtractor
from ..execution.interceptor import ResponseInterceptor
from ..execution.plan import plan_pages, query_to_string
from ..models import Feed, FeedItem, PageResult, PageTarget
from .scheduler import SchedulerConfig, WorkerPool

logger = logging.getLogger(__name__)

FEED_TITLE = "Boss 直聘工作订阅"
FEED_LINK = "www.zhipin.com"
FEED_ICON = "https://www.zhipin.com/favicon.ico"
# 入口固定单并发，降低反爬风险
ENTRY_CONCURRENCY = 1


class Supervisor:
    """
    Crawl batch controller.

    Responsibilities:
    - Build launch options (proxy relay included) and launch the browser
    - Run page tasks through the worker pool
    - Release relay, browser and driver on every exit path
    """

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        playwright_factory: Callable[[], Any] = async_playwright,
        relay_factory: RelayFactory = anonymize_proxy,
    ):
        self.config = config or CrawlerConfig.from_env()
        self.playwright_factory = playwright_factory
        self.relay_factory = relay_factory

    async def crawl_page(self, page, target: PageTarget) -> List[FeedItem]:
        """Navigate one page and correlate its API capture with its DOM."""
        url = target.url
        interceptor = ResponseInterceptor(url)
        interceptor.attach(page)

        logger.info(f"Requesting {url}")
        try:
            await page.goto(url, wait_until="networkidle", timeout=self.config.navigation_timeout)
        except PlaywrightTimeoutError as e:
            logger.warning(f"Navigation to {url} did not settle: {e}")

        result = PageResult(target=url)
        extractor = DomExtractor(
            render_timeout=self.config.render_timeout,
            panel_timeout=self.config.panel_timeout,
        )
        result.doms = await extractor.extract(page)

        await interceptor.settle(timeout=self.config.body_timeout / 1000)
        result.drafts = interceptor.drain()
        return correlate(result.drafts, result.doms, page_url=url)

    async def get_jobs(
        self,
        targets: Sequence[Union[PageTarget, str]],
        max_concurrency: Optional[int] = None,
    ) -> List[FeedItem]:
        """
        并发获取多个目标页面的职位列表

        Args:
            targets: 目标页面（PageTarget 或 URL 字符串）
            max_concurrency: 最大并发页面数，默认取配置

        Returns:
            所有页面的记录，按任务完成顺序
        """
        targets = [
            t if isinstance(t, PageTarget) else PageTarget(url=t, index=i)
            for i, t in enumerate(targets)
        ]
        scheduler_config = SchedulerConfig(
            max_concurrency=max_concurrency or self.config.max_concurrency,
            worker_creation_delay=self.config.worker_creation_delay,
        )

        options = await build_launch_options(self.config, relay_factory=self.relay_factory)
        playwright = None
        browser = None
        try:
            playwright = await self.playwright_factory().start()
            browser = await launch_browser(playwright, options)
            pool = WorkerPool(
                browser,
                config=scheduler_config,
                context_options=options.context_kwargs(),
                stealth=self.config.stealth,
            )
            await pool.run(targets, self.crawl_page)
            return pool.results
        finally:
            if browser is not None:
                await browser.close()
            if playwright is not None:
                await playwright.stop()
            await options.close()

    async def build_feed(self, query: Mapping[str, Any], start_page: Optional[int] = None) -> Feed:
        """Crawl the planned pages for ``query`` and wrap them in a feed."""
        targets = plan_pages(query, start_page=start_page)
        items = await self.get_jobs(targets, max_concurrency=ENTRY_CONCURRENCY)

        return Feed(
            description=f"Boss 直聘 —— {query_to_string(query)}",
            items=items,
            title=FEED_TITLE,
            link=FEED_LINK,
            image=FEED_ICON,
            logo=FEED_ICON,
            icon=FEED_ICON,
        )
