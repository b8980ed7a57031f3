"""
命令行入口

    zhipin-crawler "city=101270100&degree=202&position=100901"
    zhipin-crawler --param city=101270100 --param position=100901 --page 2
    zhipin-crawler "city=101270100" --plan-only
"""

from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl
import argparse
import asyncio
import json
import logging

from .config import CrawlerConfig
from .execution.plan import plan_pages
from .logger import setup_logging
from .orchestrator import Supervisor

logger = logging.getLogger(__name__)


def parse_query(raw: Optional[str], params: Optional[List[str]] = None) -> Dict[str, Any]:
    """合并原始查询字符串与 --param 参数；重复的 key 合并为列表"""
    pairs = parse_qsl(raw.lstrip("?"), keep_blank_values=True) if raw else []
    for param in params or []:
        key, sep, value = param.partition("=")
        if not sep:
            raise ValueError(f"--param expects key=value, got {param!r}")
        pairs.append((key, value))

    query: Dict[str, Any] = {}
    for key, value in pairs:
        if key in query:
            existing = query[key]
            query[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            query[key] = value
    return query


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Boss 直聘职位订阅")
    parser.add_argument("query", nargs="?", default="", help="查询字符串，例如 city=101270100&position=100901")
    parser.add_argument("--param", action="append", default=[], metavar="KEY=VALUE", help="额外的查询参数，可重复")
    parser.add_argument("--page", type=int, help="起始页码")
    parser.add_argument("--concurrency", type=int, help="并发页面数（不指定时按入口约定单并发）")
    parser.add_argument("--plan-only", action="store_true", help="只打印待抓取的 URL")
    parser.add_argument("--output", help="把结果写入文件而不是标准输出")
    parser.add_argument("--env-file", help=".env 文件路径")
    return parser


async def run(args: argparse.Namespace, query: Dict[str, Any], config: CrawlerConfig) -> Dict[str, Any]:
    supervisor = Supervisor(config)

    if args.concurrency:
        targets = plan_pages(query, start_page=args.page)
        items = await supervisor.get_jobs(targets, max_concurrency=args.concurrency)
        return {"item": [item.to_dict() for item in items]}

    feed = await supervisor.build_feed(query, start_page=args.page)
    return feed.to_dict()


def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        query = parse_query(args.query, args.param)
    except ValueError as e:
        parser.error(str(e))

    config = CrawlerConfig.from_env(args.env_file)
    setup_logging(config.log_level)

    if args.plan_only:
        result: Any = [target.url for target in plan_pages(query, start_page=args.page)]
    else:
        result = asyncio.run(run(args, query, config))

    text = json.dumps(result, ensure_ascii=False, indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info(f"Saved result to {args.output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
