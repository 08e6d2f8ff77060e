"""
Entity model for jobs, comments and replies.

Entities are frozen dataclasses whose nested sequences are tuples, so
every change produces a new object and readers never see a half-applied
update. Wire payloads use the backend's camelCase keys.
"""

import itertools
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

TEMP_PREFIX = "temp-"
TEMP_REPLY_PREFIX = "temp-reply-"

_temp_counter = itertools.count(1)


def is_temporary(entity_id: str) -> bool:
    """True for ids synthesized client-side and not yet confirmed by the server."""
    return isinstance(entity_id, str) and entity_id.startswith(TEMP_PREFIX)


def next_temp_id(prefix: str = TEMP_PREFIX) -> str:
    # One counter for the whole process keeps ids unique across prefixes
    return f"{prefix}{next(_temp_counter)}"


def now_ms() -> int:
    return int(time.time() * 1000)


class JobStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in progress"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: Any) -> "JobStatus":
        if isinstance(value, JobStatus):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", " ").replace("_", " "))
        except ValueError:
            return cls.OPEN


@dataclass(frozen=True)
class UserInfo:
    """Identity of the signed-in user, used to author temporary entities."""
    id: str
    name: str = ""
    photo_url: str = ""


def _number(value: Any, cast=float, default=0):
    try:
        return cast(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _records(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _text_of(data: Dict[str, Any]) -> str:
    text = data.get("text")
    if text is None:
        text = data.get("content")
    return text or ""


@dataclass(frozen=True)
class Reply:
    id: str
    comment_id: str
    user_id: str
    text: str
    user_name: str = ""
    user_photo: str = ""
    timestamp: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reply":
        return cls(
            id=str(data.get("id", "")),
            comment_id=str(data.get("commentId", "")),
            user_id=str(data.get("userId", "")),
            text=_text_of(data),
            user_name=data.get("userName") or "",
            user_photo=data.get("userPhoto") or "",
            timestamp=_number(data.get("timestamp"), int),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "commentId": self.comment_id,
            "userId": self.user_id,
            "text": self.text,
            "userName": self.user_name,
            "userPhoto": self.user_photo,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Comment:
    id: str
    job_id: str
    user_id: str
    text: str
    user_name: str = ""
    user_photo: str = ""
    timestamp: int = 0
    replies: Tuple[Reply, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            id=str(data.get("id", "")),
            job_id=str(data.get("jobId", "")),
            user_id=str(data.get("userId", "")),
            text=_text_of(data),
            user_name=data.get("userName") or "",
            user_photo=data.get("userPhoto") or "",
            timestamp=_number(data.get("timestamp"), int),
            replies=tuple(Reply.from_dict(r) for r in _records(data.get("replies"))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "jobId": self.job_id,
            "userId": self.user_id,
            "text": self.text,
            "userName": self.user_name,
            "userPhoto": self.user_photo,
            "timestamp": self.timestamp,
            "replies": [r.to_dict() for r in self.replies],
        }


@dataclass(frozen=True)
class Job:
    id: str
    title: str
    description: str
    category: str
    budget: float
    status: JobStatus
    user_id: str
    created_at: Optional[str] = None
    comments: Tuple[Comment, ...] = field(default_factory=tuple)

    SCALAR_FIELDS = ("title", "description", "category", "budget", "status")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            description=data.get("description") or "",
            category=data.get("category") or "",
            budget=_number(data.get("budget"), float, 0.0),
            status=JobStatus.parse(data.get("status", JobStatus.OPEN)),
            user_id=str(data.get("userId", "")),
            created_at=data.get("createdAt"),
            # Servers sometimes omit comments or send junk entries
            comments=tuple(Comment.from_dict(c) for c in _records(data.get("comments"))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "budget": self.budget,
            "status": self.status.value,
            "userId": self.user_id,
            "createdAt": self.created_at,
            "comments": [c.to_dict() for c in self.comments],
        }


def make_temp_comment(job_id: str, text: str, user: UserInfo) -> Comment:
    return Comment(
        id=next_temp_id(TEMP_PREFIX),
        job_id=job_id,
        user_id=user.id,
        text=text,
        user_name=user.name,
        user_photo=user.photo_url or "",
        timestamp=now_ms(),
        replies=(),
    )


def make_temp_reply(comment_id: str, text: str, user: UserInfo) -> Reply:
    return Reply(
        id=next_temp_id(TEMP_REPLY_PREFIX),
        comment_id=comment_id,
        user_id=user.id,
        text=text,
        user_name=user.name,
        user_photo=user.photo_url or "",
        timestamp=now_ms(),
    )
