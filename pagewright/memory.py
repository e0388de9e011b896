"""In-memory document host.

The model mirrors a page-layout document closely enough to exercise the
pipeline: stories made of paragraphs made of characters, a swatch table,
font and style tables, and a user-interaction flag. Failure injection
covers unreadable or unwritable keys, writes the host silently drops the
first time, and paragraph properties the host does not support.

This is the reference host the test suite drives the pipeline against;
the CLI only ever opens Word and PowerPoint files.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .errors import AttributeUnavailable, ResourceNotFound
from .host import Character, DocumentHost, Paragraph, ResourceTable, TextSpan
from .structures import COLOR_KEYS, NAMED_KEYS, STYLE_KEYS, Swatch

RunSpec = Tuple[str, Dict[str, Any]]
ParagraphSpec = Union[str, RunSpec, Sequence[RunSpec]]


@dataclass(frozen=True)
class MemoryStyle:
    """A font, paragraph style or character style resource."""

    name: str
    kind: str


class MemoryResources(ResourceTable):
    def __init__(
        self,
        *,
        fonts: Iterable[str] = (),
        swatches: Iterable[Swatch] = (),
        paragraph_styles: Iterable[str] = (),
        character_styles: Iterable[str] = (),
    ) -> None:
        self.fonts: Dict[str, MemoryStyle] = {
            name: MemoryStyle(name, "font") for name in fonts
        }
        self.swatches: Dict[str, Swatch] = {swatch.name: swatch for swatch in swatches}
        self.paragraph_styles: Dict[str, MemoryStyle] = {
            name: MemoryStyle(name, "paragraph") for name in paragraph_styles
        }
        self.character_styles: Dict[str, MemoryStyle] = {
            name: MemoryStyle(name, "character") for name in character_styles
        }

    @staticmethod
    def _lookup(table: Dict[str, Any], name: str, kind: str) -> Any:
        try:
            return table[name]
        except KeyError:
            raise ResourceNotFound(f"No {kind} named '{name}'.") from None

    def font(self, name: str) -> MemoryStyle:
        return self._lookup(self.fonts, name, "font")

    def color(self, name: str) -> Swatch:
        return self._lookup(self.swatches, name, "swatch")

    def colors(self) -> List[Swatch]:
        return list(self.swatches.values())

    def paragraph_style(self, name: str) -> MemoryStyle:
        return self._lookup(self.paragraph_styles, name, "paragraph style")

    def character_style(self, name: str) -> MemoryStyle:
        return self._lookup(self.character_styles, name, "character style")


class MemoryCharacter(Character):
    def __init__(
        self,
        document: "MemoryDocument",
        text: str,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.document = document
        self._text = text
        self.attributes: Dict[str, Any] = dict(attributes or {})

    @property
    def text(self) -> str:
        return self._text

    def read(self, key: str) -> Any:
        if key not in STYLE_KEYS:
            raise AttributeUnavailable(f"Unknown attribute '{key}'.")
        if key in self.document.unreadable:
            raise AttributeUnavailable(f"Attribute '{key}' cannot be read.")
        return self.attributes.get(key)

    def write(self, key: str, value: Any) -> None:
        if key not in STYLE_KEYS:
            raise AttributeUnavailable(f"Unknown attribute '{key}'.")
        if key in self.document.unwritable:
            raise AttributeUnavailable(f"Attribute '{key}' cannot be written.")

        if key in COLOR_KEYS:
            if not isinstance(value, Swatch):
                raise AttributeUnavailable(f"{key} needs a swatch, got {value!r}.")
            if self.document.resources.swatches.get(value.name) != value:
                raise AttributeUnavailable(f"Swatch '{value.name}' is no longer valid.")
        elif key in NAMED_KEYS:
            if not isinstance(value, MemoryStyle):
                raise AttributeUnavailable(f"{key} needs a named resource, got {value!r}.")
            value = value.name

        if self.document.drops_write(self, key):
            return
        self.attributes[key] = value
        self.document.writes += 1

    def __repr__(self) -> str:
        return f"MemoryCharacter({self._text!r})"


class MemoryParagraph(Paragraph):
    def __init__(
        self,
        document: "MemoryDocument",
        characters: Optional[List[MemoryCharacter]] = None,
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.document = document
        self._characters: List[MemoryCharacter] = list(characters or [])
        self.properties: Dict[str, Any] = dict(properties or {})

    @property
    def text(self) -> str:
        return "".join(character.text for character in self._characters)

    def characters(self) -> List[MemoryCharacter]:
        return list(self._characters)

    def set_property(self, name: str, value: Any) -> None:
        if name in self.document.unsupported_properties:
            raise AttributeUnavailable(f"Paragraph property '{name}' is not supported.")
        self.properties[name] = value


class MemoryStory(TextSpan):
    """A text frame's story."""

    paragraph_break = "\r"

    def __init__(
        self,
        document: "MemoryDocument",
        location: str,
        paragraphs: Optional[List[MemoryParagraph]] = None,
        owner: Any = None,
    ) -> None:
        self.document = document
        self._location = location
        self._paragraphs: List[MemoryParagraph] = list(paragraphs or [])
        self.owner = owner if owner is not None else location
        self.replacements = 0

    @property
    def location(self) -> str:
        return self._location

    @property
    def contents(self) -> str:
        return self.paragraph_break.join(paragraph.text for paragraph in self._paragraphs)

    def paragraphs(self) -> List[MemoryParagraph]:
        return list(self._paragraphs)

    def replace_contents(self, text: str) -> None:
        """New text takes the first character's and first paragraph's formatting."""

        template_attributes: Dict[str, Any] = {}
        template_properties: Dict[str, Any] = {}
        if self._paragraphs:
            first = self._paragraphs[0]
            template_properties = dict(first.properties)
            if first.characters():
                template_attributes = dict(first.characters()[0].attributes)

        rebuilt: List[MemoryParagraph] = []
        for part in text.split(self.paragraph_break):
            characters = [
                MemoryCharacter(self.document, char, template_attributes)
                for char in part
            ]
            rebuilt.append(
                MemoryParagraph(self.document, characters, template_properties)
            )
        self._paragraphs = rebuilt
        self.replacements += 1


class MemoryDocument(DocumentHost):
    def __init__(
        self,
        resources: Optional[MemoryResources] = None,
        *,
        unreadable: Iterable[str] = (),
        unwritable: Iterable[str] = (),
        fragile: Iterable[str] = (),
        unsupported_properties: Iterable[str] = (),
    ) -> None:
        self._resources = resources or MemoryResources()
        self.stories: List[MemoryStory] = []
        self.unreadable: Set[str] = set(unreadable)
        self.unwritable: Set[str] = set(unwritable)
        self.fragile: Set[str] = set(fragile)
        self.unsupported_properties: Set[str] = set(unsupported_properties)
        self.interaction_suppressed = False
        self.suppression_events: List[str] = []
        self.writes = 0
        self._dropped: Set[Tuple[int, str]] = set()

    @property
    def resources(self) -> MemoryResources:
        return self._resources

    def enable_interaction_suppression(self) -> None:
        self.interaction_suppressed = True
        self.suppression_events.append("enable")

    def disable_interaction_suppression(self) -> None:
        self.interaction_suppressed = False
        self.suppression_events.append("disable")

    def drops_write(self, character: MemoryCharacter, key: str) -> bool:
        """Silently drop the first write of a fragile key per character."""

        if key not in self.fragile:
            return False
        marker = (id(character), key)
        if marker in self._dropped:
            return False
        self._dropped.add(marker)
        return True

    def text_containers(self) -> List[MemoryStory]:
        return list(self.stories)

    def add_story(
        self,
        location: str,
        paragraphs: Sequence[ParagraphSpec],
        *,
        owner: Any = None,
        properties: Optional[Dict[str, Any]] = None,
    ) -> MemoryStory:
        """Build a story from paragraph specs.

        A spec is a plain string, a ``(text, attributes)`` run, or a list of
        runs. Color attributes may be given as swatch names.
        """

        built: List[MemoryParagraph] = []
        for spec in paragraphs:
            characters: List[MemoryCharacter] = []
            for text, attributes in self._runs(spec):
                resolved = self._resolve(attributes)
                characters.extend(
                    MemoryCharacter(self, char, resolved) for char in text
                )
            built.append(MemoryParagraph(self, characters, properties))
        story = MemoryStory(self, location, built, owner=owner)
        self.stories.append(story)
        return story

    @staticmethod
    def _runs(spec: ParagraphSpec) -> List[RunSpec]:
        if isinstance(spec, str):
            return [(spec, {})]
        if isinstance(spec, tuple) and len(spec) == 2 and isinstance(spec[0], str):
            return [spec]  # type: ignore[list-item]
        return list(spec)  # type: ignore[arg-type]

    def _resolve(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        resolved = dict(attributes)
        for key in COLOR_KEYS:
            value = resolved.get(key)
            if isinstance(value, str):
                resolved[key] = self._resources.color(value)
        return resolved

    def remove_swatch(self, name: str) -> None:
        """Delete a swatch; characters keep their now-stale reference."""

        self._resources.swatches.pop(name, None)

    def state(self) -> List[Any]:
        """A deep, comparable picture of every story's text and styles."""

        return [
            (
                story.location,
                [
                    (
                        paragraph.text,
                        copy.deepcopy(paragraph.properties),
                        [copy.deepcopy(c.attributes) for c in paragraph.characters()],
                    )
                    for paragraph in story.paragraphs()
                ],
            )
            for story in self.stories
        ]
