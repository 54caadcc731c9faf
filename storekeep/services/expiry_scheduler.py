"""
Rental expiry loop

Re-runs the lazy expiry check on a fixed interval so rentals past their end
date are completed without waiting for someone to open the rentals list.
Overlapping runs are not guarded against.
"""
import asyncio
import logging
from datetime import date
from typing import Callable, Optional

from storekeep.models.rental import RentalStatus
from storekeep.services.rental_ledger import RentalLedger
from storekeep.services.storage import Storage

logger = logging.getLogger(__name__)


def run_expiry_check(storage: Storage, today: Optional[date] = None) -> int:
    """Load active rentals and complete the expired ones"""
    ledger = RentalLedger(storage)
    active = storage.select("rentals", {"status": RentalStatus.ACTIVE.value})
    return ledger.reconcile_expired_rentals(active, today or date.today())


async def run_expiry_loop(storage_factory: Callable, interval_seconds: int):
    """Run run_expiry_check every interval_seconds until cancelled"""
    logger.info(f"Rental expiry loop started (every {interval_seconds}s)")
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            with storage_factory() as storage:
                completed = await asyncio.to_thread(run_expiry_check, storage)
            logger.info(f"Rental expiry check complete: {completed} rental(s) completed")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Rental expiry check failed: {e}", exc_info=True)


def start_expiry_scheduler(storage_factory: Callable, interval_seconds: int) -> asyncio.Task:
    """Start the expiry loop as a background task"""
    task = asyncio.create_task(run_expiry_loop(storage_factory, interval_seconds))
    logger.info("Rental expiry scheduler started in the background")
    return task
