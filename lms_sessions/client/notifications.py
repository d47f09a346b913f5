"""Transient notifications ("toasts") raised by the admin views."""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str
    variant: ToastVariant = ToastVariant.DEFAULT


class Notifier:
    """Collects toasts in arrival order."""

    def __init__(self) -> None:
        self.toasts: list[Toast] = []

    def notify(self, toast: Toast) -> None:
        if toast.variant == ToastVariant.DESTRUCTIVE:
            logger.warning("%s: %s", toast.title, toast.description)
        else:
            logger.info("%s: %s", toast.title, toast.description)
        self.toasts.append(toast)

    def success(self, title: str, description: str) -> None:
        self.notify(Toast(title, description))

    def failure(self, title: str, description: str) -> None:
        self.notify(Toast(title, description, ToastVariant.DESTRUCTIVE))

    @property
    def last(self) -> Toast | None:
        return self.toasts[-1] if self.toasts else None
