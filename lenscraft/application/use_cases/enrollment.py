from datetime import datetime, timezone

import structlog

from ...domain.entities import EnrollmentOutcome
from ...domain.errors import DomainError, NotFoundError, SeatsUnavailableError
from ..dto import SavePaymentInput
from ..ports import IUnitOfWork

logger = structlog.get_logger()


class EnrollFromCart:
    """Turn a paid cart row into a ledger entry and take one seat of the class.

    Steps, all inside one transaction:
    1. append the payment record
    2. delete the cart row, which must still be there
    3. increment the class occupancy, only while a seat is free

    If any step fails nothing is written.
    """

    def __init__(self, uow: IUnitOfWork, clock=None):
        self.uow = uow
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def execute(self, data: SavePaymentInput) -> EnrollmentOutcome:
        log = logger.bind(
            cart_item_id=data.cart_item_id,
            class_id=data.class_id,
            email=data.email,
            transaction_id=data.transaction_id,
        )
        try:
            with self.uow:
                item = self.uow.cart.get(data.cart_item_id)
                if item is None or item.class_id != data.class_id or item.email != data.email:
                    raise NotFoundError(f"cart item {data.cart_item_id} not found")
                if self.uow.classes.get(data.class_id) is None:
                    raise NotFoundError(f"class {data.class_id} not found")

                payment = self.uow.payments.add(
                    email=data.email,
                    class_id=data.class_id,
                    payment_amount=data.payment_amount,
                    transaction_id=data.transaction_id,
                    date=self.clock(),
                )
                deleted = self.uow.cart.delete(data.cart_item_id, email=data.email)
                if deleted != 1:
                    # another run consumed the row after it was loaded
                    raise NotFoundError(f"cart item {data.cart_item_id} not found")
                modified = self.uow.classes.increment_enrolled(data.class_id)
                if modified == 0:
                    raise SeatsUnavailableError(f"class {data.class_id} has no seats left")

                klass = self.uow.classes.get(data.class_id)
                self.uow.commit()
        except DomainError as e:
            log.warning("enrollment_rolled_back", reason=str(e), error=type(e).__name__)
            raise

        log.info("enrollment_completed", payment_id=payment.id, enrolled_count=klass.enrolled_count)
        return EnrollmentOutcome(
            payment=payment,
            deleted_count=deleted,
            modified_count=modified,
            enrolled_count=klass.enrolled_count,
        )
