from ...domain.entities import CatalogClass, ClassStatus, EnrolledClass, SelectedClass
from ..ports import IUnitOfWork


class ViewComposer:
    """Read-only views joining the cart and the ledger against the catalog."""

    def __init__(self, uow: IUnitOfWork):
        self.uow = uow

    def selected_classes(self, email: str) -> list[SelectedClass]:
        with self.uow:
            return self.uow.cart.selected_for(email)

    def enrolled_classes(self, email: str) -> list[EnrolledClass]:
        """Purchases of ``email``, most recent first."""
        with self.uow:
            return self.uow.payments.enrolled_for(email)

    def approved_classes(self) -> list[CatalogClass]:
        with self.uow:
            return self.uow.classes.list_by_status(ClassStatus.APPROVED)

    def popular_classes(self, limit: int) -> list[CatalogClass]:
        with self.uow:
            return self.uow.classes.list_popular(limit)

    def all_classes(self) -> list[CatalogClass]:
        with self.uow:
            return self.uow.classes.list_all()
