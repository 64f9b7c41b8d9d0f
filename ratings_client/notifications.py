import itertools
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass
class Toast:
    id: int
    title: str
    description: str = ""
    variant: ToastVariant = ToastVariant.DEFAULT


class Toaster:
    def __init__(self):
        self.toasts: List[Toast] = []
        self._ids = itertools.count(1)

    def toast(self, title: str, description: str = "", variant: ToastVariant = ToastVariant.DEFAULT) -> Toast:
        item = Toast(id=next(self._ids), title=title, description=description, variant=variant)
        self.toasts.append(item)
        return item

    def error(self, title: str, description: str) -> Toast:
        return self.toast(title, description, ToastVariant.DESTRUCTIVE)

    def dismiss(self, toast_id: int) -> None:
        self.toasts = [t for t in self.toasts if t.id != toast_id]

    @property
    def latest(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None
