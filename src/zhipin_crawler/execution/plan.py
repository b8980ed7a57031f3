"""
Page Plan - 生成待抓取的列表页 URL

每次请求固定访问 3 个页面，与并发数无关。
"""

from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import unquote
import logging

from ..models import PageTarget

logger = logging.getLogger(__name__)

BASE_URL = "https://www.zhipin.com/web/geek/job?"
PAGE_COUNT = 3
# 第二个目标页不带 page 参数，更接近真实用户的第一次访问
BARE_PAGE_INDEX = 1


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _encode(text: str) -> str:
    # 站点要求的格式：逗号保持原样，其余字符全部解码
    if text == ",":
        return text
    return unquote(text)


def query_to_string(query: Mapping[str, Any]) -> str:
    """查询参数表转字符串

    Args:
        query: 查询参数，值可以是字符串、数字或列表（列表会重复 key）

    Returns:
        ``key=value&key=value`` 形式的字符串，值为 None 的参数被丢弃
    """
    parts = []
    for key, value in query.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            if item is None:
                continue
            parts.append(f"{_encode(_stringify(key))}={_encode(_stringify(item))}")
    return "&".join(parts)


def resolve_start_page(query: Mapping[str, Any], start_page: Optional[int] = None) -> int:
    """Starting page: explicit argument, then the query's ``page``, then 1."""
    if start_page is not None:
        return max(int(start_page), 1)

    raw = query.get("page")
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if raw in (None, ""):
        return 1
    try:
        return max(int(raw), 1)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric page parameter: {raw!r}")
        return 1


def plan_pages(query: Mapping[str, Any], start_page: Optional[int] = None, base_url: str = BASE_URL) -> List[PageTarget]:
    """生成目标页面

    Returns:
        3 个 PageTarget，对应页码 [start, start+1, start+2]；
        下标 1 的 URL 不包含 page 参数
    """
    start = resolve_start_page(query, start_page)

    targets = []
    for index in range(PAGE_COUNT):
        params: Dict[str, Any] = dict(query)
        if index == BARE_PAGE_INDEX:
            params.pop("page", None)
        else:
            params["page"] = start + index
        targets.append(PageTarget(url=f"{base_url}{query_to_string(params)}", index=index))

    return targets
