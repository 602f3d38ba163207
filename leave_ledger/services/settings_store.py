from __future__ import annotations

import copy
from typing import Any, Protocol, runtime_checkable

DEFAULT_PLANNING_SETTINGS: dict[str, Any] = {
    "dayStart": "08:00",
    "dayEnd": "17:00",
    "breaks": [],
}


@runtime_checkable
class SettingsStore(Protocol):
    """Interface for the organization settings store."""

    async def get_planning_settings(self) -> dict[str, Any] | None:
        """Raw planning group (dayStart, dayEnd, breaks). None if never configured."""
        ...

    async def get_leave_settings(self) -> dict[str, Any] | None:
        """Raw leave group (roundingMinutes, allowNegativeBalance, deductionOrder)."""
        ...


class InMemorySettingsStore:
    """In-memory stub implementation for development."""

    def __init__(
        self,
        planning: dict[str, Any] | None = None,
        leave: dict[str, Any] | None = None,
    ) -> None:
        self._planning = copy.deepcopy(planning if planning is not None else DEFAULT_PLANNING_SETTINGS)
        self._leave = copy.deepcopy(leave) if leave is not None else None

    def set_planning(self, planning: dict[str, Any] | None) -> None:
        self._planning = copy.deepcopy(planning)

    def set_leave(self, leave: dict[str, Any] | None) -> None:
        self._leave = copy.deepcopy(leave)

    async def get_planning_settings(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._planning)

    async def get_leave_settings(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._leave)


_settings_store: SettingsStore = InMemorySettingsStore()


def get_settings_store() -> SettingsStore:
    """Return the configured settings store."""
    return _settings_store


def set_settings_store(store: SettingsStore) -> None:
    """Override the store (for testing or production wiring)."""
    global _settings_store
    _settings_store = store
