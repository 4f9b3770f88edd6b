"""Application service: Audit Ledger use case (query)."""

from __future__ import annotations

import structlog

from fabricstock.application.dto import AuditFindingDTO
from fabricstock.domain.repository.unit_of_work import UnitOfWork
from fabricstock.domain.service.ledger_audit import audit_roll

logger = structlog.get_logger(__name__)


class AuditLedgerHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[AuditFindingDTO]:
        """Check every roll against its reservations; empty means consistent."""
        findings: list[AuditFindingDTO] = []
        with self._uow:
            for roll in self._uow.rolls.list_all():
                reservations = self._uow.reservations.list_by_roll(roll.id)
                for problem in audit_roll(roll, reservations):
                    findings.append(AuditFindingDTO(roll_id=roll.id, problem=problem))

        for finding in findings:
            logger.warning("Ledger inconsistency", roll_id=finding.roll_id, problem=finding.problem)
        return findings
