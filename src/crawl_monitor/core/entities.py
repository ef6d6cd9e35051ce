"""Core domain entities."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class SourceType(str, Enum):
    """Kind of monitored target. Only changes prompt phrasing."""

    WEBSITE = "website"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    OTHER = "other"


class CrawlStatus(str, Enum):
    """Scheduling state of a source."""

    IDLE = "idle"
    CRAWLING = "crawling"
    SUCCESS = "success"
    ERROR = "error"


def _parse_time(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp. Values without an offset are taken as UTC."""
    if not value:
        return None
    # Unquoted timestamps in hand-edited YAML arrive as datetime objects
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Source:
    """A monitored website or social account."""

    id: str
    name: str
    url: str
    type: SourceType
    interval_hours: int
    next_check: datetime
    last_checked: Optional[datetime] = None
    status: CrawlStatus = CrawlStatus.IDLE
    error_message: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Name cannot be empty")
        if not self.url:
            raise ValueError("URL cannot be empty")
        if self.interval_hours < 1:
            raise ValueError("Interval must be at least one hour")

    def is_due(self, now: datetime) -> bool:
        """Check if the source should be crawled at ``now``."""
        return self.status != CrawlStatus.CRAWLING and self.next_check <= now

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "type": self.type.value,
            "interval_hours": self.interval_hours,
            "last_checked": self.last_checked.isoformat() if self.last_checked else None,
            "next_check": self.next_check.isoformat(),
            "status": self.status.value,
            "error_message": self.error_message,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Source":
        return cls(
            id=data["id"],
            name=data["name"],
            url=data["url"],
            type=SourceType(data.get("type", SourceType.WEBSITE.value)),
            interval_hours=int(data["interval_hours"]),
            last_checked=_parse_time(data.get("last_checked")),
            next_check=_parse_time(data["next_check"]),
            status=CrawlStatus(data.get("status", CrawlStatus.IDLE.value)),
            error_message=data.get("error_message"),
        )


@dataclass
class RawResult:
    """Normalized provider output before it gets an identity."""

    title: str
    summary: str
    original_url: str


@dataclass
class CrawlResult:
    """One discovered and summarized item in the feed."""

    id: str
    source_id: str
    source_name: str
    title: str
    summary: str
    original_url: str
    timestamp: datetime
    is_read: bool = False

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.title, self.source_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_id": self.source_id,
            "source_name": self.source_name,
            "title": self.title,
            "summary": self.summary,
            "original_url": self.original_url,
            "timestamp": self.timestamp.isoformat(),
            "is_read": self.is_read,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CrawlResult":
        return cls(
            id=data["id"],
            source_id=data["source_id"],
            source_name=data.get("source_name", ""),
            title=data["title"],
            summary=data.get("summary", ""),
            original_url=data.get("original_url", ""),
            timestamp=_parse_time(data["timestamp"]),
            is_read=bool(data.get("is_read", False)),
        )


@dataclass
class Credentials:
    """Opaque API keys, one slot per provider. Any of them may be empty."""

    gemini: str = ""
    tavily: str = ""
    openrouter: str = ""

    @property
    def can_fetch(self) -> bool:
        """True when at least one provider able to retrieve content is configured."""
        return bool(self.gemini or self.tavily)

    def to_dict(self) -> dict[str, str]:
        return {
            "gemini": self.gemini,
            "tavily": self.tavily,
            "openrouter": self.openrouter,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Credentials":
        return cls(
            gemini=data.get("gemini") or "",
            tavily=data.get("tavily") or "",
            openrouter=data.get("openrouter") or "",
        )
