"""Shared fixtures: in-memory documents and scripted translation clients."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Union

import pytest

from pagewright.memory import MemoryDocument, MemoryResources
from pagewright.providers import TranslationClient
from pagewright.structures import Swatch

Reply = Union[str, Exception]


class ScriptedClient(TranslationClient):
    """Replies from a per-text script; each entry is consumed in order.

    Texts without a script entry are answered with ``fallback(text)``.
    """

    name = "scripted"

    def __init__(
        self,
        script: Optional[Dict[str, Iterable[Reply]]] = None,
        *,
        fallback: Optional[Callable[[str], str]] = None,
        target_language: str = "French",
    ) -> None:
        super().__init__(target_language=target_language)
        self.script: Dict[str, List[Reply]] = {
            text: list(replies) for text, replies in (script or {}).items()
        }
        self.fallback = fallback or (lambda text: text.upper())
        self.calls: List[str] = []

    def translate(self, text: str) -> str:
        self.calls.append(text)
        queue = self.script.get(text)
        if queue:
            reply = queue.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply
        return self.fallback(text)


class FailingClient(TranslationClient):
    name = "failing"

    def __init__(self, target_language: str = "French") -> None:
        super().__init__(target_language=target_language)
        self.calls = 0

    def translate(self, text: str) -> str:
        self.calls += 1
        raise RuntimeError("service unavailable")


def no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def resources() -> MemoryResources:
    return MemoryResources(
        fonts=["Arial", "Minion Pro"],
        swatches=[Swatch("Red", "#ff0000"), Swatch("Blue", "#0000ff"), Swatch("Black", "#000000")],
        paragraph_styles=["Body", "Heading"],
        character_styles=["None", "Emphasis"],
    )


@pytest.fixture
def document(resources: MemoryResources) -> MemoryDocument:
    return MemoryDocument(resources)


@pytest.fixture
def red_arial() -> dict:
    return {"font": "Arial", "pointSize": 12, "fillColor": "Red"}


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def recording_sleep(sleeps: List[float]) -> Callable[[float], None]:
    return sleeps.append


@pytest.fixture
def full_style() -> dict:
    return {
        "fillColor": "Blue",
        "strokeColor": "Red",
        "font": "Arial",
        "pointSize": 12,
        "leading": 14,
        "tracking": 20,
        "horizontalScale": 90,
        "verticalScale": 110,
        "baselineShift": 2,
        "skew": 5,
        "underline": True,
        "strikethrough": False,
        "allCaps": False,
        "smallCaps": True,
        "superscript": False,
        "subscript": False,
        "paragraphStyleName": "Heading",
        "characterStyleName": "Emphasis",
    }


def resolved(style: dict, *without: str) -> dict:
    """``style`` as a memory character holds it, minus the given keys."""

    swatches = {"Red": Swatch("Red", "#ff0000"), "Blue": Swatch("Blue", "#0000ff")}
    values = {
        key: swatches[value] if key in ("fillColor", "strokeColor") else value
        for key, value in style.items()
    }
    for key in without:
        values.pop(key, None)
    return values
