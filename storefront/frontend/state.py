"""
View state shared by the client-side flows.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .. import schemas


class Page(str, Enum):
    HOME = "home"
    CART = "cart"
    CHECKOUT = "checkout"
    RECEIPT = "receipt"
    FAVORITES = "favorites"
    ADMIN = "admin"
    ORDER_HISTORY = "order-history"


@dataclass
class Notification:
    level: str  # success, error or info
    message: str


@dataclass
class Notifier:
    """Collects transient notifications (toasts) for the UI to display."""
    notifications: List[Notification] = field(default_factory=list)

    def success(self, message: str) -> None:
        self.notifications.append(Notification("success", message))

    def error(self, message: str) -> None:
        self.notifications.append(Notification("error", message))

    def info(self, message: str) -> None:
        self.notifications.append(Notification("info", message))

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [n.message for n in self.notifications if level is None or n.level == level]


@dataclass
class ViewState:
    """Current page plus the data it needs."""
    page: Page = Page.HOME
    receipt: Optional[schemas.Order] = None
    show_auth_prompt: bool = False

    def navigate(self, page: Page) -> None:
        self.page = page

    def show_receipt(self, order: schemas.Order) -> None:
        self.receipt = order
        self.page = Page.RECEIPT
