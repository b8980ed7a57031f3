"""
Correlator - 按位置合并接口数据与页面数据

DraftRecord[i] 与 DomRecord[i] 被认为是同一个职位；数量不一致时不猜测对齐方式，
整页降级为一条占位记录。
"""

from typing import List, Optional, Sequence
import logging

from ..models import (
    CorrelationOutcome,
    DomRecord,
    DraftRecord,
    FeedItem,
    FinalRecord,
    PlaceholderRecord,
)

logger = logging.getLogger(__name__)


def classify(drafts: Sequence[DraftRecord], doms: Sequence[DomRecord]) -> CorrelationOutcome:
    if drafts and doms:
        if len(drafts) == len(doms):
            return CorrelationOutcome.MATCHED
        return CorrelationOutcome.COUNT_MISMATCH
    if drafts:
        return CorrelationOutcome.NO_DOM
    if doms:
        return CorrelationOutcome.NO_JSON
    return CorrelationOutcome.NO_DATA


def correlate(
    drafts: Sequence[DraftRecord],
    doms: Sequence[DomRecord],
    page_url: Optional[str] = None,
) -> List[FeedItem]:
    """
    合并一页的两份列表

    Returns:
        数量一致时为 FinalRecord 列表（顺序不变），否则为单条 PlaceholderRecord
    """
    outcome = classify(drafts, doms)
    where = f" ({page_url})" if page_url else ""

    if outcome is CorrelationOutcome.MATCHED:
        logger.info(f"Got {len(drafts)} jobs{where}")
        return [FinalRecord.merge(draft, dom) for draft, dom in zip(drafts, doms)]

    if outcome is CorrelationOutcome.COUNT_MISMATCH:
        logger.warning(f"API returned {len(drafts)} jobs but page listed {len(doms)}{where}")
    elif outcome is CorrelationOutcome.NO_JSON:
        logger.warning(f"Job list API response was not captured{where}")
    elif outcome is CorrelationOutcome.NO_DOM:
        logger.warning(f"Job list did not render on the page{where}")
    else:
        logger.warning(f"No data obtained{where}")

    return [PlaceholderRecord()]
