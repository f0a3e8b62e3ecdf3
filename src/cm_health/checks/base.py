from __future__ import annotations
from typing import Any, Callable, Dict, Iterator, List, Protocol, Tuple

from ..config import Settings
from ..models import CheckDefinition, Classification


class CheckRegistry:
    """Ordered collection of check definitions, grouped by section.

    Sections keep the order in which they were first registered, and checks
    keep their registration order inside a section.
    """

    def __init__(self) -> None:
        self._sections: Dict[str, List[CheckDefinition]] = {}

    def register(self, definition: CheckDefinition) -> CheckDefinition:
        checks = self._sections.setdefault(definition.section, [])
        if any(d.name == definition.name for d in checks):
            raise ValueError(f"check {definition.section!r}/{definition.name!r} is already registered")
        checks.append(definition)
        return definition

    def add(
        self,
        section: str,
        name: str,
        query: Callable[[Any], Any],
        classify: Callable[[Any], Classification],
        source: str = "",
    ) -> CheckDefinition:
        return self.register(CheckDefinition(section=section, name=name, query=query, classify=classify, source=source))

    def sections(self) -> List[str]:
        return list(self._sections)

    def grouped(self) -> List[Tuple[str, List[CheckDefinition]]]:
        return [(title, list(checks)) for title, checks in self._sections.items()]

    def __iter__(self) -> Iterator[CheckDefinition]:
        for checks in self._sections.values():
            yield from checks

    def __len__(self) -> int:
        return sum(len(c) for c in self._sections.values())


class CheckGroup(Protocol):
    """A catalogue module that contributes one section of checks."""

    def register(self, registry: CheckRegistry, settings: Settings) -> None:
        ...
