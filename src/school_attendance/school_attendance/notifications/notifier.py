from __future__ import annotations

from typing import Any, Mapping, Protocol


class Notifier(Protocol):
    """Fire-and-forget fan-out. Delivery is best effort and never affects correctness."""

    def notify(self, topic: str, payload: Mapping[str, Any]) -> None:
        raise NotImplementedError


class NullNotifier:
    def notify(self, topic: str, payload: Mapping[str, Any]) -> None:
        return None


def student_topic(student_id: str) -> str:
    return f"student:{student_id}"
