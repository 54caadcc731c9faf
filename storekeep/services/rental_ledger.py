"""
Rental Ledger - unit availability, rental lifecycle and billing rules.

Owns the coupling between Unit.status and Rental.status:

  * a unit is "rented" iff it has exactly one active rental
  * a rental is created only on a unit that is "available" at read time
  * completing or removing an active rental frees its unit
  * leaving "rented" by hand completes the unit's active rental

Every multi-step operation is an ordered sequence of individually atomic
storage writes. Nothing is rolled back: a failure before the first write
raises ValidationError/PersistenceError, a failure after it raises
InconsistencyError listing the steps that did go through.
"""
import calendar
import logging
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from storekeep.core.exceptions import (
    ConflictError,
    InconsistencyError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from storekeep.models.payment import PaymentMethod
from storekeep.models.rental import RentalStatus
from storekeep.models.unit import UnitStatus
from storekeep.services.storage import Row, Storage

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def as_date(value: Any) -> Optional[date]:
    """Accept date, datetime or ISO string (as returned by REST backends)"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r}")


def compute_prorated_amount(monthly_price, start_date, end_date) -> float:
    """
    Rental charge for [start_date, end_date] at monthly_price.

    Whole calendar months (year/month difference, day ignored) are charged in
    full; the final partial month is charged by
    (end.day - start.day + 1) / days_in_end_month. When the start day is
    later than the end day that fraction goes negative and reduces the
    total; the result is floored at 0 and rounded to cents.

        >>> compute_prorated_amount(120, date(2024, 3, 1), date(2024, 3, 1))
        3.87
        >>> compute_prorated_amount(100, date(2024, 1, 1), date(2024, 4, 1))
        303.33
    """
    start = as_date(start_date)
    end = as_date(end_date)
    if start is None or end is None:
        raise ValidationError("Start and end dates are required")
    if start > end:
        raise ValidationError("End date must not be before start date")

    price = Decimal(str(monthly_price))
    if price <= 0:
        raise ValidationError("Monthly price must be positive")

    full_months = (end.year - start.year) * 12 + (end.month - start.month)
    days_in_end_month = calendar.monthrange(end.year, end.month)[1]
    remaining_days = end.day - start.day + 1

    total = full_months * price + (Decimal(remaining_days) / Decimal(days_in_end_month)) * price
    total = max(Decimal(0), total)
    return float(total.quantize(CENTS, rounding=ROUND_HALF_UP))


class RentalLedger:
    """Rental lifecycle operations over a Storage backend"""

    def __init__(self, storage: Storage, today: Callable[[], date] = date.today):
        self.storage = storage
        self._today = today

    def today(self) -> date:
        return self._today()

    # ── lookups ──────────────────────────────────────────────────────────────

    def _get(self, table: str, row_id: str, label: str) -> Row:
        if not row_id:
            raise ValidationError(f"{label} id is required")
        row = self.storage.select_one(table, {"id": row_id})
        if row is None:
            raise NotFoundError(f"{label} not found")
        return row

    def get_unit(self, unit_id: str) -> Row:
        return self._get("units", unit_id, "Unit")

    def get_rental(self, rental_id: str) -> Row:
        return self._get("rentals", rental_id, "Rental")

    def active_rentals_for_unit(self, unit_id: str) -> List[Row]:
        return self.storage.select(
            "rentals", {"unit_id": unit_id, "status": RentalStatus.ACTIVE.value}
        )

    # ── billing ──────────────────────────────────────────────────────────────

    def quote(self, unit_id: str, start_date, end_date) -> Dict[str, Any]:
        """Pro-rated amount for renting unit_id over the given dates"""
        unit = self.get_unit(unit_id)
        return {
            "unit_id": unit["id"],
            "monthly_price": unit["price_per_month"],
            "start_date": as_date(start_date),
            "end_date": as_date(end_date),
            "total_amount": compute_prorated_amount(unit["price_per_month"], start_date, end_date),
        }

    # ── lifecycle ────────────────────────────────────────────────────────────

    def create_rental(
        self,
        unit_id: str,
        customer_id: str,
        start_date,
        end_date=None,
        total_amount=None,
    ) -> Row:
        """
        Book an available unit for a customer.

        Reads the unit immediately before writing; the read and the two
        writes are not atomic, so a concurrent booking of the same unit can
        still slip through.
        """
        start = as_date(start_date)
        end = as_date(end_date)
        if start is None:
            raise ValidationError("Start date is required")
        if end is not None and end < start:
            raise ValidationError("End date must not be before start date")

        unit = self.get_unit(unit_id)
        self._get("customers", customer_id, "Customer")

        if unit["status"] != UnitStatus.AVAILABLE.value:
            raise ConflictError("This unit is no longer available")

        if total_amount is None:
            if end is None:
                raise ValidationError("Total amount is required for rentals without an end date")
            total_amount = compute_prorated_amount(unit["price_per_month"], start, end)
        if float(total_amount) < 0:
            raise ValidationError("Total amount must not be negative")

        rental = self.storage.insert("rentals", {
            "unit_id": unit_id,
            "customer_id": customer_id,
            "start_date": start,
            "end_date": end,
            "total_amount": float(total_amount),
            "status": RentalStatus.ACTIVE.value,
        })
        logger.info(f"[LEDGER] Rental {rental['id']} created on unit {unit_id}")

        try:
            self.storage.update("units", {"id": unit_id}, {"status": UnitStatus.RENTED.value})
        except PersistenceError as e:
            logger.error(f"[LEDGER] Rental {rental['id']} created but unit {unit_id} not marked rented: {e.detail}")
            raise InconsistencyError(
                f"Rental was created but the unit could not be marked as rented: {e.detail}",
                completed_steps=["insert rental"],
            )
        return rental

    def complete_rental(self, rental_id: str, unit_id: Optional[str] = None, end_date=None) -> bool:
        """
        Mark a rental completed and free its unit.

        Returns False without writing anything when the rental is already
        completed, so a repeated call cannot free a unit that has since been
        rented again.
        """
        rental = self.get_rental(rental_id)
        if rental["status"] == RentalStatus.COMPLETED.value:
            logger.info(f"[LEDGER] Rental {rental_id} already completed")
            return False

        unit_id = unit_id or rental["unit_id"]
        end = as_date(end_date) or self.today()

        self.storage.update(
            "rentals",
            {"id": rental_id},
            {"status": RentalStatus.COMPLETED.value, "end_date": end},
        )
        try:
            self.storage.update("units", {"id": unit_id}, {"status": UnitStatus.AVAILABLE.value})
        except PersistenceError as e:
            logger.error(f"[LEDGER] Rental {rental_id} completed but unit {unit_id} not freed: {e.detail}")
            raise InconsistencyError(
                f"Rental was completed but the unit could not be marked as available: {e.detail}",
                completed_steps=["complete rental"],
            )
        logger.info(f"[LEDGER] Rental {rental_id} completed, unit {unit_id} available")
        return True

    def reconcile_expired_rentals(self, active_rentals: Iterable[Row], today: Optional[date] = None) -> int:
        """Complete every active rental whose end date is strictly before today"""
        today = today or self.today()
        transitioned = 0
        for rental in active_rentals:
            if rental.get("status") != RentalStatus.ACTIVE.value:
                continue
            end = as_date(rental.get("end_date"))
            if end is None or end >= today:
                continue
            if self.complete_rental(rental["id"], rental.get("unit_id"), end_date=today):
                transitioned += 1
        if transitioned:
            logger.info(f"[LEDGER] {transitioned} expired rental(s) marked completed")
        return transitioned

    def list_rentals(self, today: Optional[date] = None) -> Tuple[List[Row], int]:
        """All rentals, with expired active ones completed first"""
        rentals = self.storage.select("rentals", order_by="start_date", descending=True)
        transitioned = self.reconcile_expired_rentals(
            [r for r in rentals if r["status"] == RentalStatus.ACTIVE.value], today
        )
        if transitioned:
            rentals = self.storage.select("rentals", order_by="start_date", descending=True)
        return rentals, transitioned

    def remove_rental(self, rental_id: str, unit_id: str, current_status: str) -> None:
        """
        Delete a rental and its payments; free the unit if it was active.

        Payments go first because they reference the rental.
        """
        completed: List[str] = []
        steps = [
            ("delete payments", lambda: self.storage.delete("payments", {"rental_id": rental_id})),
            ("delete rental", lambda: self.storage.delete("rentals", {"id": rental_id})),
        ]
        if current_status == RentalStatus.ACTIVE.value:
            steps.append((
                "free unit",
                lambda: self.storage.update("units", {"id": unit_id}, {"status": UnitStatus.AVAILABLE.value}),
            ))

        for name, step in steps:
            try:
                step()
            except PersistenceError as e:
                if not completed:
                    raise
                logger.error(f"[LEDGER] Removing rental {rental_id} stopped at '{name}': {e.detail}")
                raise InconsistencyError(
                    f"Rental removal stopped at '{name}': {e.detail}",
                    completed_steps=completed,
                )
            completed.append(name)
        logger.info(f"[LEDGER] Rental {rental_id} removed")

    def change_unit_status(self, unit_id: str, current_status: Optional[str], new_status: str) -> List[str]:
        """
        Override a unit's status by hand.

        Leaving "rented" completes the unit's active rental with today's
        date. Returns the ids of the rentals completed that way.
        """
        try:
            new_status = UnitStatus(new_status).value
        except ValueError:
            raise ValidationError(f"Invalid unit status: {new_status!r}")
        if current_status is None:
            current_status = self.get_unit(unit_id)["status"]

        self.storage.update("units", {"id": unit_id}, {"status": new_status})
        logger.info(f"[LEDGER] Unit {unit_id} status {current_status} -> {new_status}")

        if current_status != UnitStatus.RENTED.value or new_status == UnitStatus.RENTED.value:
            return []

        closed: List[str] = []
        try:
            for rental in self.active_rentals_for_unit(unit_id):
                self.storage.update(
                    "rentals",
                    {"id": rental["id"]},
                    {"status": RentalStatus.COMPLETED.value, "end_date": self.today()},
                )
                closed.append(rental["id"])
        except PersistenceError as e:
            logger.error(f"[LEDGER] Unit {unit_id} set to {new_status} but its rental was not completed: {e.detail}")
            raise InconsistencyError(
                f"Unit status changed but its active rental could not be completed: {e.detail}",
                completed_steps=["update unit"] + [f"complete rental {rid}" for rid in closed],
            )
        return closed

    def delete_unit(self, unit_id: str) -> None:
        """Delete a unit that has never been rented"""
        self.get_unit(unit_id)
        rentals = self.storage.select("rentals", {"unit_id": unit_id})
        if any(r["status"] == RentalStatus.ACTIVE.value for r in rentals):
            raise ConflictError("This unit has active rentals. Please end the rentals first.")
        if rentals:
            raise ConflictError("This unit has rentals on record and cannot be deleted.")
        self.storage.delete("units", {"id": unit_id})
        logger.info(f"[LEDGER] Unit {unit_id} deleted")

    # ── payments ─────────────────────────────────────────────────────────────

    def record_payment(
        self,
        rental_id: str,
        amount,
        method: str = PaymentMethod.CREDIT_CARD.value,
        paid_on=None,
        is_late: bool = False,
    ) -> Row:
        """Record a payment against an existing rental"""
        if amount is None or float(amount) <= 0:
            raise ValidationError("Amount must be positive")
        try:
            method = PaymentMethod(method).value
        except ValueError:
            raise ValidationError(f"Invalid payment method: {method!r}")
        self.get_rental(rental_id)

        payment = self.storage.insert("payments", {
            "rental_id": rental_id,
            "amount": float(Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)),
            "method": method,
            "date": as_date(paid_on) or self.today(),
            "is_late": bool(is_late),
        })
        logger.info(f"[LEDGER] Payment {payment['id']} of {payment['amount']} recorded for rental {rental_id}")
        return payment
