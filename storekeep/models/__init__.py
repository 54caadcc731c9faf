# Import all models in dependency order so relationships resolve
from storekeep.models.building import Building
from storekeep.models.unit import Unit, UnitStatus, UnitSize
from storekeep.models.customer import Customer
from storekeep.models.rental import Rental, RentalStatus
from storekeep.models.payment import Payment, PaymentMethod

__all__ = [
    "Building",
    "Unit",
    "UnitStatus",
    "UnitSize",
    "Customer",
    "Rental",
    "RentalStatus",
    "Payment",
    "PaymentMethod",
]
