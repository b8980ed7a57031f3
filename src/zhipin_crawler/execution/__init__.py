"""
Execution Layer - Per-page crawling steps.

Components:
- browser: launch options, proxy relay, stealth
- plan: target page URLs
- interceptor: job list API capture
- extractor: hover-driven DOM extraction
- correlator: positional merge of both sources
"""

from .browser import LaunchOptions, ProxyRelay, anonymize_proxy, build_launch_options, normalize_proxy_uri
from .plan import plan_pages, query_to_string
from .interceptor import ResponseInterceptor
from .extractor import DomExtractor, parse_job_list
from .correlator import classify, correlate

__all__ = [
    "LaunchOptions",
    "ProxyRelay",
    "anonymize_proxy",
    "build_launch_options",
    "normalize_proxy_uri",
    "plan_pages",
    "query_to_string",
    "ResponseInterceptor",
    "DomExtractor",
    "parse_job_list",
    "classify",
    "correlate",
]
