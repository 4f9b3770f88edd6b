"""Application service: List Materials use case (query)."""

from __future__ import annotations

from fabricstock.application.dto import MaterialDTO, material_to_dto
from fabricstock.domain.repository.unit_of_work import UnitOfWork


class ListMaterialsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[MaterialDTO]:
        with self._uow:
            return [material_to_dto(m) for m in self._uow.materials.list_all()]
