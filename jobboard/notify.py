"""User-visible notices: the success/failure outcome of every mutation."""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .logger import StructuredLogger, get_logger

SUCCESS = "success"
ERROR = "error"
INFO = "info"


@dataclass(frozen=True)
class Notice:
    level: str
    title: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.level == ERROR


class Notifier:
    """Records notices in order and forwards each one to an optional sink."""

    def __init__(
        self,
        sink: Optional[Callable[[Notice], None]] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.sink = sink
        self.logger = logger or get_logger()
        self.history: List[Notice] = []

    def notify(self, level: str, title: str, message: str) -> Notice:
        notice = Notice(level=level, title=title, message=message)
        self.history.append(notice)
        if level == ERROR:
            self.logger.warning(f"{title}: {message}")
        else:
            self.logger.info(f"{title}: {message}")
        if self.sink is not None:
            self.sink(notice)
        return notice

    def success(self, title: str, message: str) -> Notice:
        return self.notify(SUCCESS, title, message)

    def error(self, title: str, message: str) -> Notice:
        return self.notify(ERROR, title, message)

    def info(self, title: str, message: str) -> Notice:
        return self.notify(INFO, title, message)

    @property
    def last(self) -> Optional[Notice]:
        return self.history[-1] if self.history else None

    def clear(self) -> None:
        self.history.clear()
