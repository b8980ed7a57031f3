"""
Response Interceptor - 捕获职位列表接口的 JSON 响应

在页面导航前挂到 page 的 response 事件上，贯穿整个页面生命周期。
捕获到的 DraftRecord 按响应到达顺序、接口数组顺序排列。
"""

from typing import Dict, List, Optional, Set
import asyncio
import logging

from playwright.async_api import Error as PlaywrightError

from ..exceptions import PayloadDecodeError
from ..models import DraftRecord, json_to_drafts

logger = logging.getLogger(__name__)

JOB_LIST_API_PATTERN = "joblist.json?scene"
VERIFY_MARKERS = ("user/safe/verify-slider", "icon-page-error.png")


def is_verification_redirect(*urls: Optional[str]) -> bool:
    return any(marker in url for url in urls if url for marker in VERIFY_MARKERS)


class ResponseInterceptor:
    """
    Page-scoped response observer.

    Usage:
        interceptor = ResponseInterceptor(url)
        interceptor.attach(page)
        await page.goto(url)
        ...
        await interceptor.settle()
        drafts = interceptor.drain()
    """

    def __init__(self, page_url: str = ""):
        self.page_url = page_url
        self.redirects: List[str] = []
        self.verification_redirects: List[str] = []
        self.decode_errors = 0
        self._slots: Dict[int, List[DraftRecord]] = {}
        self._next_slot = 0
        self._pending: Set[asyncio.Future] = set()

    def attach(self, page) -> None:
        page.on("response", self.on_response)

    @staticmethod
    def is_job_list_response(response) -> bool:
        content_type = response.headers.get("content-type", "")
        return (
            response.ok
            and JOB_LIST_API_PATTERN in response.url
            and content_type.split(";")[0].strip().lower() == "application/json"
        )

    def on_response(self, response) -> None:
        """``response`` event handler; body reads run as tracked tasks."""
        if self.is_job_list_response(response):
            slot = self._next_slot
            self._next_slot += 1
            task = asyncio.ensure_future(self.capture(response, slot))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        elif 300 <= response.status < 400:
            self.record_redirect(response)

    def record_redirect(self, response) -> None:
        location = response.headers.get("location", "")
        if is_verification_redirect(response.url, location):
            self.verification_redirects.append(response.url)
            logger.warning(f"Redirected to verification page: {response.url}")
        else:
            self.redirects.append(response.url)
            logger.warning(f"Redirect: {response.url} -> {location or '?'}")

    async def capture(self, response, slot: int) -> None:
        try:
            body = await response.body()
        except PlaywrightError as e:
            logger.error(
                f"Error retrieving response buffer: status={response.status} url={response.url} message={e}"
            )
            return

        try:
            drafts = json_to_drafts(body, url=response.url)
        except PayloadDecodeError as e:
            self.decode_errors += 1
            logger.error(f"Skipping undecodable job list response {response.url}: {e}")
            return

        logger.debug(f"Captured {len(drafts)} jobs from {response.url}")
        self._slots[slot] = drafts

    async def settle(self, timeout: Optional[float] = None) -> None:
        """
        等待所有进行中的响应读取完成

        Args:
            timeout: 最长等待秒数；超时后仍未完成的读取被取消并丢弃
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while self._pending:
            remaining = None if deadline is None else max(deadline - loop.time(), 0)
            done, pending = await asyncio.wait(set(self._pending), timeout=remaining)
            for task in done:
                if not task.cancelled() and task.exception() is not None:
                    logger.error(f"Response capture failed on {self.page_url}: {task.exception()!r}")

            # asyncio.wait only leaves tasks pending when the timeout expired
            if pending:
                logger.warning(
                    f"{len(pending)} job list response bodies still pending on {self.page_url} "
                    f"after {timeout}s, dropping them"
                )
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
                return

    def drain(self) -> List[DraftRecord]:
        """取出已累积的 DraftRecord（按响应到达顺序）并清空"""
        drafts: List[DraftRecord] = []
        for slot in sorted(self._slots):
            drafts.extend(self._slots[slot])
        self._slots.clear()
        return drafts
