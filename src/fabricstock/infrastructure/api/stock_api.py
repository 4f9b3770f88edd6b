"""Boundary API: request/response mappings for the stock workflow.

Transport-agnostic: a web layer or message consumer passes the decoded
request body (and, for operator calls, the admin flag from its auth gate)
and sends back the returned mapping.  Successful calls return
``{"success": True, ...}``; failures return ``{"error": <code>,
"message": <text>}`` using the domain exception codes.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import asdict
from typing import Any

import structlog

from fabricstock.application.consume_reservation import ConsumeReservationHandler
from fabricstock.application.dto import PaymentCallback
from fabricstock.application.handle_payment_callback import HandlePaymentCallbackHandler
from fabricstock.application.list_orders import ListOrdersHandler
from fabricstock.application.release_reservation import ReleaseReservationHandler
from fabricstock.application.reserve_stock import ReserveStockHandler
from fabricstock.application.show_stock import ShowStockHandler
from fabricstock.application.transition_order import TransitionOrderHandler
from fabricstock.domain.exceptions import DomainException, IllegalTransition, ValidationError
from fabricstock.domain.model.fabric_roll import DEFAULT_LOW_STOCK_THRESHOLD
from fabricstock.domain.model.value_objects import Meters
from fabricstock.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)

Response = dict[str, Any]

FORBIDDEN = "Forbidden"


class StockApi:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        low_stock_threshold: Meters = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self._uow_factory = uow_factory
        self._low_stock_threshold = low_stock_threshold

    # --- Operator calls (admin only) ------------------------------------------

    def reserve(self, body: Mapping[str, Any], is_admin: bool) -> Response:
        if not is_admin:
            return _forbidden("reserve")

        def call() -> Response:
            reservation = ReserveStockHandler(self._uow_factory()).handle(
                order_id=_require(body, "order_id"),
                roll_id=_require(body, "roll_id"),
                meters=_require(body, "meters"),
            )
            return {"success": True, "reservation_id": reservation.id}

        return _respond(call)

    def release(self, body: Mapping[str, Any], is_admin: bool) -> Response:
        if not is_admin:
            return _forbidden("release")

        def call() -> Response:
            ReleaseReservationHandler(self._uow_factory()).handle(
                _require(body, "reservation_id")
            )
            return {"success": True}

        return _respond(call)

    def consume(self, body: Mapping[str, Any], is_admin: bool) -> Response:
        if not is_admin:
            return _forbidden("consume")

        def call() -> Response:
            ConsumeReservationHandler(self._uow_factory()).handle(
                _require(body, "reservation_id")
            )
            return {"success": True}

        return _respond(call)

    def transition(self, body: Mapping[str, Any], is_admin: bool) -> Response:
        if not is_admin:
            return _forbidden("transition")

        def call() -> Response:
            order = TransitionOrderHandler(self._uow_factory()).handle(
                order_id=_require(body, "order_id"),
                target_status=_require(body, "target_status"),
            )
            return {"success": True, "status": order.status}

        return _respond(call)

    def list_orders(self, params: Mapping[str, Any], is_admin: bool) -> Response:
        if not is_admin:
            return _forbidden("list_orders")

        def call() -> Response:
            orders = ListOrdersHandler(self._uow_factory()).handle(
                status=params.get("status") or None
            )
            return {"data": [asdict(order) for order in orders]}

        return _respond(call)

    def stock(self, is_admin: bool) -> Response:
        if not is_admin:
            return _forbidden("stock")

        def call() -> Response:
            overview = ShowStockHandler(
                self._uow_factory(), self._low_stock_threshold
            ).handle()
            return {"data": asdict(overview)}

        return _respond(call)

    # --- Gateway calls --------------------------------------------------------

    def payment_callback(self, body: Mapping[str, Any]) -> Response:
        def call() -> Response:
            succeeded = _require(body, "payment_succeeded")
            if not isinstance(succeeded, bool):
                raise ValidationError("Field 'payment_succeeded' must be a boolean")
            order = HandlePaymentCallbackHandler(self._uow_factory()).handle(
                PaymentCallback(
                    order_reference=_require(body, "order_reference"),
                    payment_succeeded=succeeded,
                    payment_id=body.get("payment_id"),
                    error_message=body.get("error_message"),
                )
            )
            return {"success": True, "status": order.status}

        return _respond(call)


def _require(body: Mapping[str, Any], key: str) -> Any:
    value = body.get(key)
    if value is None or value == "":
        raise ValidationError(f"Missing field '{key}'")
    return value


def _respond(call: Callable[[], Response]) -> Response:
    try:
        return call()
    except IllegalTransition as exc:
        return {
            "error": exc.code,
            "message": str(exc),
            "current": exc.current,
            "target": exc.target,
        }
    except DomainException as exc:
        return {"error": exc.code, "message": str(exc)}


def _forbidden(operation: str) -> Response:
    logger.warning("Non-admin call rejected", operation=operation)
    return {"error": FORBIDDEN, "message": "Admin access required"}
