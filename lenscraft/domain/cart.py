from enum import Enum


class CartSlotScope(str, Enum):
    CLASS = "class"
    CLASS_EMAIL = "class_email"


def slot_key(class_id: int, email: str, scope: CartSlotScope) -> str:
    """Value of the unique cart column.

    Two cart rows with the same key cannot coexist, so the scope decides
    whether a class can sit in one cart system-wide or in one cart per user.
    """
    if scope == CartSlotScope.CLASS_EMAIL:
        return f"{class_id}:{email}"
    return str(class_id)


def purchase_owner(email: str, scope: CartSlotScope) -> str | None:
    """Email the duplicate-purchase check is narrowed to, or None for any buyer."""
    return email if scope == CartSlotScope.CLASS_EMAIL else None
