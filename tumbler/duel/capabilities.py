"""
Side-effect hooks the engine can call: sound, confetti, toast notices.

Everything defaults to a no-op so the engine runs headless.
"""

from typing import Protocol


class DuelEffects(Protocol):
    def play_select(self) -> None: ...

    def fire_confetti(self) -> None: ...


class Notifier(Protocol):
    def __call__(self, message: str, icon: str = "") -> None: ...


class NullEffects:
    """Effects that do nothing."""

    def play_select(self) -> None:
        pass

    def fire_confetti(self) -> None:
        pass


def null_notifier(message: str, icon: str = "") -> None:
    pass


__all__ = ["DuelEffects", "Notifier", "NullEffects", "null_notifier"]
