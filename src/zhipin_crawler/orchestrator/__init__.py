"""
Orchestration Layer - Coordinates crawl batches.

Components:
- supervisor: launches the browser, runs a batch, builds the feed
- scheduler: bounded-concurrency worker pool
"""

from .supervisor import Supervisor
from .scheduler import PageTask, SchedulerConfig, WorkerPool

__all__ = ["Supervisor", "PageTask", "SchedulerConfig", "WorkerPool"]
