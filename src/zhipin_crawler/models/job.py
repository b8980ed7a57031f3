"""
Job data models.
"""

from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


NO_DATA_TITLE = "未获取到数据"


class TaskState(Enum):
    """State of a page task in the worker pool."""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    ERRORED = "errored"


class CorrelationOutcome(Enum):
    """How a page's JSON and DOM lists lined up."""
    MATCHED = "matched"
    COUNT_MISMATCH = "count_mismatch"  # both captured, different lengths
    NO_JSON = "no_json"                # DOM rendered, API response never captured
    NO_DOM = "no_dom"                  # API captured, list never rendered
    NO_DATA = "no_data"                # nothing from either source


@dataclass(frozen=True)
class PageTarget:
    """One listing page to crawl."""
    url: str
    index: int = 0


@dataclass
class DraftRecord:
    """Job entry projected from the intercepted job list API response."""
    title: str
    author: str
    link: str
    pub_date: datetime
    guid: str
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "title": self.title,
            "author": self.author,
            "link": self.link,
            "pubDate": self.pub_date.isoformat() if self.pub_date else None,
            "guid": self.guid,
            "itunes_item_image": self.image_url,
        }


@dataclass
class JobCard:
    """Fields scraped from one rendered ``li.job-card-wrapper``."""
    title: str = ""
    area: str = ""
    salary: str = ""
    experience: str = ""
    education: str = ""
    company_name: str = ""
    company_url: Optional[str] = None
    industry: str = ""
    skill: str = ""
    desc: str = ""
    link: Optional[str] = None
    company_logo: Optional[str] = None
    detail: str = ""


@dataclass
class DomRecord:
    """Job entry taken from the hover-expanded page markup.

    ``description_html`` is ``None`` when the item's detail panel never
    rendered; such a record carries only its link.
    """
    link: Optional[str]
    description_html: Optional[str] = None
    card: Optional[JobCard] = None
    detail_missing: bool = False

    @classmethod
    def degraded(cls, link: Optional[str], card: Optional[JobCard] = None) -> "DomRecord":
        return cls(link=link, description_html=None, card=card, detail_missing=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        if self.detail_missing:
            return {"link": self.link}
        return {"link": self.link, "description": self.description_html}


@dataclass
class FinalRecord:
    """A DraftRecord enriched with the DomRecord at the same position."""
    title: str
    author: str
    link: str
    pub_date: datetime
    guid: str
    image_url: Optional[str] = None
    description: Optional[str] = None
    degraded: bool = False

    @classmethod
    def merge(cls, draft: DraftRecord, dom: DomRecord) -> "FinalRecord":
        return cls(
            title=draft.title,
            author=draft.author,
            link=draft.link,
            pub_date=draft.pub_date,
            guid=draft.guid,
            image_url=draft.image_url,
            description=dom.description_html,
            degraded=dom.detail_missing,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "title": self.title,
            "author": self.author,
            "link": self.link,
            "pubDate": self.pub_date.isoformat() if self.pub_date else None,
            "guid": self.guid,
            "itunes_item_image": self.image_url,
            "description": self.description,
        }
        if self.degraded:
            data["degraded"] = True
        return data


@dataclass
class PlaceholderRecord:
    """Stand-in emitted when a page's records cannot be trusted."""
    title: str = NO_DATA_TITLE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"title": self.title}


FeedItem = Union[FinalRecord, PlaceholderRecord]


@dataclass
class PageResult:
    """Per-page accumulators, owned by a single page task."""
    target: str
    drafts: List[DraftRecord] = field(default_factory=list)
    doms: List[DomRecord] = field(default_factory=list)


@dataclass
class Feed:
    """Feed object handed to the formatting layer."""
    description: str
    items: List[FeedItem]
    title: str
    link: str
    image: str
    logo: str
    icon: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "description": self.description,
            "item": [item.to_dict() for item in self.items],
            "title": self.title,
            "link": self.link,
            "image": self.image,
            "logo": self.logo,
            "icon": self.icon,
        }
