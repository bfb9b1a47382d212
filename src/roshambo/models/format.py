"""Game format models — components and the "beats" relation between them.

A Format is immutable reference data: an ordered list of named
components, each declaring which component names it wins against and
which it loses against. Formats are loaded once from config and read by
the resolver and the validators.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Component:
    """A single playable component (e.g. Rock) and its relations."""
    name: str
    wins_against: tuple[str, ...] = ()
    loses_against: tuple[str, ...] = ()

    def beats(self, other_name: str) -> bool:
        return other_name in self.wins_against

    def beaten_by(self, other_name: str) -> bool:
        return other_name in self.loses_against

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "wins_against": list(self.wins_against),
            "loses_against": list(self.loses_against),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Component:
        return Component(
            name=data["name"],
            wins_against=tuple(data.get("wins_against", ())),
            loses_against=tuple(data.get("loses_against", ())),
        )


@dataclass(frozen=True)
class Format:
    """A named rule set governing one game instance."""
    format_id: str
    components: tuple[Component, ...]
    description: str = ""

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.components)

    def component(self, name: str) -> Optional[Component]:
        """Return the component with this name, or None."""
        for c in self.components:
            if c.name == name:
                return c
        return None

    def contains(self, component: Component) -> bool:
        """True if the component is defined here with identical relations."""
        return self.component(component.name) == component

    def to_dict(self) -> dict[str, Any]:
        return {
            "format_id": self.format_id,
            "description": self.description,
            "components": [c.to_dict() for c in self.components],
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Format:
        return Format(
            format_id=data["format_id"],
            components=tuple(Component.from_dict(c) for c in data["components"]),
            description=data.get("description", ""),
        )
