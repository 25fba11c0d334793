"""User-facing notices queued during a checkout request."""

from abc import ABC, abstractmethod

ERROR = "error"
NOTICE = "notice"


class NoticeQueue(ABC):
    @abstractmethod
    def add(self, message: str, kind: str = ERROR) -> None: ...

    @abstractmethod
    def count(self, kind: str = ERROR) -> int: ...


class InMemoryNotices(NoticeQueue):
    """Notices for a single request, drained by the response."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def add(self, message: str, kind: str = ERROR) -> None:
        self.messages.append((kind, message))

    def count(self, kind: str = ERROR) -> int:
        return sum(1 for k, _ in self.messages if k == kind)

    def of_kind(self, kind: str = ERROR) -> list[str]:
        return [m for k, m in self.messages if k == kind]

    def drain(self) -> list[tuple[str, str]]:
        messages, self.messages = self.messages, []
        return messages
