"""
DOM Extractor - 从悬停展开后的列表页中提取职位信息

流程：
1. 检测错误页 / 滑块验证页
2. 等待列表最后一项渲染完成
3. 对每个职位标题派发 mouseenter，等待 .job-detail-card 悬浮窗出现
4. 所有悬停完成后，对页面快照只解析一次（BeautifulSoup + lxml）
"""

from typing import List, Optional
import asyncio
import logging

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..models import DomRecord, JobCard

logger = logging.getLogger(__name__)

ERROR_SELECTORS = (".error-content", ".wrap-verify-slider")
JOB_LIST_SELECTOR = "ul.job-list-box li.job-card-wrapper"
JOB_TITLE_SELECTOR = "div.job-title.clearfix"
# 不仅等列表出现，而是等到最后一个列表项内部渲染完毕
LAST_ITEM_SELECTOR = f"ul.job-list-box li.job-card-wrapper:last-child {JOB_TITLE_SELECTOR}"
DETAIL_SELECTOR = ".job-detail-card"

MOUSE_ENTER_JS = """
(ele) => {
    const mouseEnterEvent = new MouseEvent('mouseenter', {
        bubbles: true,
        cancelable: true,
        view: window,
    });
    ele.dispatchEvent(mouseEnterEvent);
}
"""


def _text(node, selector: str) -> str:
    found = node.select_one(selector)
    return found.get_text(strip=True) if found else ""


def _nth_text(node, selector: str, index: int) -> str:
    found = node.select(selector)
    return found[index].get_text(strip=True) if len(found) > index else ""


def _attr(node, selector: str, attr: str) -> Optional[str]:
    found = node.select_one(selector)
    return found.get(attr) if found else None


def parse_job_card(item) -> JobCard:
    """Read the fields of one ``li.job-card-wrapper`` tag."""
    detail = item.select_one(DETAIL_SELECTOR)
    return JobCard(
        title=_text(item, ".job-name"),
        area=_text(item, ".job-area"),
        salary=_text(item, ".salary"),
        experience=_nth_text(item, ".job-info > ul > li", 0),
        education=_nth_text(item, ".job-info > ul > li", 1),
        company_name=_text(item, ".company-info .company-name a"),
        company_url=_attr(item, ".company-info .company-name a", "href"),
        industry=_nth_text(item, ".job-card-footer > ul > li", 0),
        skill=_nth_text(item, ".job-card-footer > ul > li", 1),
        desc=_text(item, ".job-card-footer .info-desc"),
        link=_attr(item, ".job-card-body > a", "href"),
        company_logo=_attr(item, ".job-card-right .company-logo img", "src"),
        detail=detail.decode_contents().strip() if detail else "",
    )


def parse_job_list(html: str, page_url: str = "") -> List[DomRecord]:
    """
    解析页面快照

    Args:
        html: 悬停完成后的整页 HTML
        page_url: 仅用于日志

    Returns:
        DomRecord 列表，按文档顺序
    """
    soup = BeautifulSoup(html, "lxml")
    records = []

    for index, item in enumerate(soup.select("ul.job-list-box > li.job-card-wrapper")):
        card = parse_job_card(item)
        if not card.detail:
            # 悬浮窗没有被激活
            logger.warning(f"{page_url} li:{index}; detail card missing")
            records.append(DomRecord.degraded(card.link, card))
        else:
            records.append(DomRecord(
                link=card.link,
                description_html=str(item) + card.detail,
                card=card,
            ))

    return records


class DomExtractor:
    """Hover-driven list extractor for a settled page."""

    def __init__(self, render_timeout: int = 30000, panel_timeout: int = 30000):
        self.render_timeout = render_timeout
        self.panel_timeout = panel_timeout

    async def is_blocked(self, page) -> bool:
        """错误页或滑块验证页"""
        for selector in ERROR_SELECTORS:
            if await page.query_selector(selector):
                logger.warning(f"{page.url} shows {selector}, skipping page")
                return True
        return False

    async def hover_item(self, item, index: int, page_url: str) -> bool:
        """触发一个列表项的悬浮窗，返回是否等到了 .job-detail-card"""
        title = await item.query_selector(JOB_TITLE_SELECTOR)
        if title is None:
            logger.warning(f"{page_url} li:{index}; no job title to hover")
            return False

        try:
            await title.evaluate(MOUSE_ENTER_JS)
            await item.wait_for_selector(DETAIL_SELECTOR, state="attached", timeout=self.panel_timeout)
        except PlaywrightTimeoutError:
            logger.warning(f"{page_url} li:{index}; detail card did not appear")
            return False
        except PlaywrightError as e:
            logger.warning(f"{page_url} li:{index}; hover failed: {e}")
            return False
        return True

    async def extract(self, page) -> List[DomRecord]:
        """Hover every item, then parse one snapshot of the page."""
        page_url = page.url
        if await self.is_blocked(page):
            return []

        try:
            await page.wait_for_selector(LAST_ITEM_SELECTOR, timeout=self.render_timeout)
        except PlaywrightTimeoutError as e:
            logger.warning(f"Timed out waiting for job list to render on {page_url}: {e}")
            return []

        items = await page.query_selector_all(JOB_LIST_SELECTOR)
        opened = await asyncio.gather(*[
            self.hover_item(item, index, page_url) for index, item in enumerate(items)
        ])
        logger.debug(f"{page_url}: {sum(opened)}/{len(items)} detail cards opened")

        html = await page.content()
        return parse_job_list(html, page_url)
