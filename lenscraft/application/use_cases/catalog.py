import structlog

from ...domain.entities import CatalogClass, ClassStatus, Instructor
from ...domain.errors import InvalidTransitionError, NotFoundError
from ...domain.moderation import ensure_transition
from ..dto import SubmitClassInput
from ..ports import IUnitOfWork

logger = structlog.get_logger()


class SubmitClass:
    """An instructor proposes a class; it waits in ``pending`` for an admin."""

    def __init__(self, uow: IUnitOfWork):
        self.uow = uow

    def execute(self, data: SubmitClassInput) -> CatalogClass:
        with self.uow:
            klass = self.uow.classes.add(
                name=data.name,
                image=data.image,
                instructor=Instructor(name=data.instructor_name, email=data.instructor_email),
                seats=data.seats,
                price=data.price,
            )
            self.uow.commit()
        logger.info("class_submitted", class_id=klass.id, instructor=data.instructor_email)
        return klass


class ModerateClass:
    def __init__(self, uow: IUnitOfWork):
        self.uow = uow

    def execute(self, class_id: int, action: ClassStatus) -> CatalogClass:
        with self.uow:
            klass = self.uow.classes.get(class_id)
            if klass is None:
                raise NotFoundError(f"class {class_id} not found")
            target = ensure_transition(klass.status, ClassStatus(action))
            # compare-and-set: a concurrent moderator may have moved it already
            if self.uow.classes.set_status(class_id, expected=klass.status, status=target) == 0:
                raise InvalidTransitionError(f"class {class_id} was moderated concurrently")
            updated = self.uow.classes.get(class_id)
            self.uow.commit()
        logger.info("class_moderated", class_id=class_id, status=target.value)
        return updated
