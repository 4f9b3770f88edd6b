"""Application service: Payment Callback use case.

Translates a gateway outcome into order state:

- success on a ``new`` order records the payment (``new -> paid``) and
  then reserves every roll-assigned line, which moves the order on to
  ``reserved``;
- success on a ``paid`` order retries the reservation step;
- success on an order already past payment (an operator reserved it
  first) only stores the payment reference when none is on file;
- failure on a ``new`` order records the error (``new -> payment_failed``).

Gateways redeliver callbacks, so an outcome the order already reflects is
acknowledged without changes.  Anything else is an illegal transition.

The payment is committed before stock is reserved.  If the reservation
fails the order stays ``paid`` with its payment reference and the error is
raised to the caller.
"""

from __future__ import annotations

import structlog

from fabricstock.application.dto import OrderDTO, PaymentCallback, order_to_dto
from fabricstock.domain.exceptions import DomainException, IllegalTransition, OrderNotFound
from fabricstock.domain.model.order import Order, OrderStatus
from fabricstock.domain.repository.unit_of_work import UnitOfWork
from fabricstock.domain.service.reservation_manager import ReservationManager

logger = structlog.get_logger(__name__)

# Statuses an order can only reach after a successful payment.
_PAST_PAYMENT = frozenset(
    {
        OrderStatus.RESERVED,
        OrderStatus.PRODUCTION,
        OrderStatus.QC,
        OrderStatus.SHIPPED,
    }
)


class HandlePaymentCallbackHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, callback: PaymentCallback) -> OrderDTO:
        order_id = callback.order_reference
        try:
            if callback.payment_succeeded:
                order = self._record_success(callback)
            else:
                order = self._record_failure(callback)
        except DomainException as exc:
            logger.warning(
                "Payment callback rejected",
                order_id=order_id,
                payment_succeeded=callback.payment_succeeded,
                error=exc.code,
            )
            raise
        return order_to_dto(order)

    # --- Outcomes -------------------------------------------------------------

    def _record_success(self, callback: PaymentCallback) -> Order:
        with self._uow:
            order = self._get_order(callback.order_reference)
            if order.status in _PAST_PAYMENT:
                return self._acknowledge_late_success(order, callback)
            if order.status == OrderStatus.NEW:
                order.record_payment(callback.payment_id)
                self._save(order, OrderStatus.NEW)
                self._uow.commit()
                logger.info(
                    "Payment recorded", order_id=order.id, payment_id=callback.payment_id
                )
            elif order.status != OrderStatus.PAID:
                raise IllegalTransition(order.status.value, OrderStatus.PAID.value)

        with self._uow:
            order = self._get_order(callback.order_reference)
            manager = ReservationManager(
                self._uow.rolls, self._uow.reservations, self._uow.orders
            )
            reservations = manager.reserve_for_order(order)
            self._uow.commit()
            order = self._get_order(callback.order_reference)

        logger.info(
            "Stock reserved for paid order",
            order_id=order.id,
            reservations=len(reservations),
            status=order.status.value,
        )
        return order

    def _acknowledge_late_success(self, order: Order, callback: PaymentCallback) -> Order:
        # An operator may have reserved the order before the gateway answered.
        if order.payment_reference is not None or not callback.payment_id:
            logger.info("Duplicate payment callback ignored", order_id=order.id)
            return order
        order.attach_payment_reference(callback.payment_id)
        if not self._uow.orders.save_status(order, expected=order.status):
            logger.info("Payment reference not recorded, order changed", order_id=order.id)
            return self._get_order(order.id)
        self._uow.commit()
        logger.info(
            "Payment reference recorded", order_id=order.id, payment_id=callback.payment_id
        )
        return order

    def _record_failure(self, callback: PaymentCallback) -> Order:
        reason = callback.error_message or "payment_failed"
        with self._uow:
            order = self._get_order(callback.order_reference)
            if order.status == OrderStatus.PAYMENT_FAILED:
                logger.info("Duplicate payment callback ignored", order_id=order.id)
                return order
            order.record_payment_failure(reason)
            self._save(order, OrderStatus.NEW)
            self._uow.commit()

        logger.info("Payment failed", order_id=order.id, reason=reason)
        return order

    # --- Internal helpers -----------------------------------------------------

    def _get_order(self, order_id: str) -> Order:
        order = self._uow.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found")
        return order

    def _save(self, order: Order, expected: OrderStatus) -> None:
        if not self._uow.orders.save_status(order, expected=expected):
            current = self._get_order(order.id)
            raise IllegalTransition(current.status.value, order.status.value)
