"""
Data Models - Core data structures for the job crawler.

Defines:
- Page and task models
- JSON-sourced, DOM-sourced and merged job records
- The job list API payload schema
- Feed model
"""

from .job import (
    NO_DATA_TITLE,
    CorrelationOutcome,
    DomRecord,
    DraftRecord,
    Feed,
    FeedItem,
    FinalRecord,
    JobCard,
    PageResult,
    PageTarget,
    PlaceholderRecord,
    TaskState,
)
from .payload import JobListPayload, ZhipinJob, json_to_drafts, load_job_list

__all__ = [
    "NO_DATA_TITLE",
    "CorrelationOutcome",
    "DomRecord",
    "DraftRecord",
    "Feed",
    "FeedItem",
    "FinalRecord",
    "JobCard",
    "PageResult",
    "PageTarget",
    "PlaceholderRecord",
    "TaskState",
    "JobListPayload",
    "ZhipinJob",
    "json_to_drafts",
    "load_job_list",
]
