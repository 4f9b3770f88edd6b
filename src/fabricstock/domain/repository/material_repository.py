"""Abstract repository for catalog materials.

Defined in the domain layer so the domain never depends on
infrastructure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabricstock.domain.model.material import Material


class MaterialRepository(ABC):

    @abstractmethod
    def get_by_id(self, material_id: str) -> Material | None:
        """Return a material by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Material]:
        """Return every material in the catalog."""

    @abstractmethod
    def save(self, material: Material) -> None:
        """Persist a new or updated material."""
