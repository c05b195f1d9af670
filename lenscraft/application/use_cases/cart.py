import structlog

from ...domain.cart import CartSlotScope, purchase_owner, slot_key
from ...domain.entities import CartItem, Instructor
from ...domain.errors import ConflictError, NotFoundError
from ...domain.moderation import is_visible
from ..dto import AddToCartInput
from ..ports import IUnitOfWork

logger = structlog.get_logger()


class AddToCart:
    """Admission control for the cart.

    A class is admitted only if it is approved, nobody on the same purchase
    path has bought it, and no cart row already holds its slot. The last check
    is left to the unique slot column so that concurrent adds cannot both pass.
    """

    def __init__(self, uow: IUnitOfWork, scope: CartSlotScope = CartSlotScope.CLASS):
        self.uow = uow
        self.scope = CartSlotScope(scope)

    def execute(self, data: AddToCartInput) -> CartItem:
        with self.uow:
            klass = self.uow.classes.get(data.class_id)
            if klass is None or not is_visible(klass.status):
                raise NotFoundError(f"class {data.class_id} not found")

            owner = purchase_owner(data.email, self.scope)
            if self.uow.payments.exists_for_class(data.class_id, email=owner):
                raise ConflictError(f"{data.name} course is already purchased!")

            try:
                item = self.uow.cart.add(
                    class_id=data.class_id,
                    email=data.email,
                    name=data.name,
                    image=data.image,
                    price=data.price,
                    instructor=Instructor(name=data.instructor_name, email=data.instructor_email),
                    slot_key=slot_key(data.class_id, data.email, self.scope),
                )
            except ConflictError as e:
                raise ConflictError(f"{data.name} is already added!") from e
            self.uow.commit()

        logger.info("cart_item_added", cart_item_id=item.id, class_id=item.class_id, email=item.email)
        return item


class RemoveFromCart:
    def __init__(self, uow: IUnitOfWork):
        self.uow = uow

    def execute(self, item_id: int, email: str | None = None) -> int:
        """Delete a cart row; an unknown id is a no-op that reports 0.

        With ``email`` set, rows in someone else's cart count as unknown.
        """
        with self.uow:
            deleted = self.uow.cart.delete(item_id, email=email)
            self.uow.commit()
        logger.info("cart_item_removed", cart_item_id=item_id, deleted_count=deleted)
        return deleted
