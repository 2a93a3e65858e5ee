"""Deposit access gates."""

from dataclasses import dataclass, replace
from typing import Dict, Protocol, Tuple


class AccessGate(Protocol):
    def is_authorized(self, participant: str) -> bool:
        ...


@dataclass(frozen=True)
class OpenGate:
    def is_authorized(self, participant: str) -> bool:
        return True


@dataclass(frozen=True)
class WhitelistGate:
    """Admits everyone unless ``whitelist_only`` is set, then only ``allowed``."""

    whitelist_only: bool = False
    allowed: Tuple[str, ...] = ()

    def is_authorized(self, participant: str) -> bool:
        if not self.whitelist_only:
            return True
        return participant in self.allowed

    def with_participant(self, participant: str) -> "WhitelistGate":
        if not participant:
            raise ValueError("Participant is required.")
        return replace(self, allowed=tuple(sorted(set(self.allowed) | {participant})))

    def without_participant(self, participant: str) -> "WhitelistGate":
        return replace(
            self, allowed=tuple(item for item in self.allowed if item != participant)
        )

    def with_whitelist_only(self, enabled: bool) -> "WhitelistGate":
        return replace(self, whitelist_only=enabled)

    def to_dict(self) -> Dict[str, object]:
        return {"whitelist_only": self.whitelist_only, "allowed": list(self.allowed)}

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "WhitelistGate":
        return WhitelistGate(
            whitelist_only=bool(data.get("whitelist_only", False)),
            allowed=tuple(sorted(data.get("allowed", []))),
        )
