"""End-to-end behaviour of the span pipeline on in-memory documents."""

from unittest import mock

import pytest

from conftest import FailingClient, ScriptedClient, no_sleep, resolved
from pagewright.errors import ErrorCategory, NothingTranslatedError
from pagewright.host import SpanTarget
from pagewright.memory import MemoryDocument
from pagewright.pipeline import SpanPipeline
from pagewright.policy import ErrorPolicy
from pagewright.structures import Direction, Swatch, TranslationOutcome


def _target(story):
    return SpanTarget(span=story, owner=story.owner)


def _attributes(story):
    return [
        [character.attributes for character in paragraph.characters()]
        for paragraph in story.paragraphs()
    ]


class TestSpanPipeline:
    def setup_method(self):
        self.policy = ErrorPolicy()

    def _pipeline(self, document, client, **kwargs):
        return SpanPipeline(
            document, client, sleep=no_sleep, policy=self.policy, **kwargs
        )

    def test_single_paragraph_keeps_style_and_sets_ltr(self, document, red_arial):
        story = document.add_story("Frame 1", [("hello", red_arial)])
        client = ScriptedClient({"hello": ["bonjour"]})

        report = self._pipeline(document, client).run(_target(story))

        assert story.contents == "bonjour"
        for character in story.paragraphs()[0].characters():
            assert character.attributes["font"] == "Arial"
            assert character.attributes["pointSize"] == 12
            assert character.attributes["fillColor"] == Swatch("Red", "#ff0000")
        assert story.paragraphs()[0].properties["paragraphDirection"] is Direction.LEFT_TO_RIGHT
        assert report.outcome_count(TranslationOutcome.TRANSLATED) == 1
        assert not report.structure_mismatch

    def test_echo_then_translation_makes_two_calls(self, document):
        story = document.add_story("Frame 1", ["hello"])
        client = ScriptedClient({"hello": ["hello", "bonjour"]})

        self._pipeline(document, client).run(_target(story))

        assert len(client.calls) == 2
        assert story.contents == "bonjour"

    def test_failed_paragraph_keeps_original_text(self, document):
        story = document.add_story("Frame 1", ["a", "b"])
        client = ScriptedClient({"a": ["A"], "b": ["", ""]})

        report = self._pipeline(document, client).run(_target(story))

        assert story.contents == "A\rb"
        assert report.outcome_count(TranslationOutcome.EMPTY) == 1
        assert self.policy.count(ErrorCategory.TRANSLATION) == 1

    def test_all_failures_leave_document_untouched(self, document, red_arial):
        story = document.add_story("Frame 1", [("hello", red_arial), "world"])
        before = document.state()
        client = FailingClient()

        with pytest.raises(NothingTranslatedError):
            self._pipeline(document, client).run(_target(story))

        assert document.state() == before
        assert story.replacements == 0
        assert document.writes == 0
        assert document.suppression_events == []

    def test_paragraph_count_preserved(self, document):
        story = document.add_story("Frame 1", ["one", "", "three"])

        report = self._pipeline(document, ScriptedClient()).run(_target(story))

        assert len(story.paragraphs()) == 3
        assert story.contents == "ONE\r\rTHREE"
        assert report.original_count == report.new_count == 3

    def test_retranslating_to_identical_text_changes_nothing(self, document, red_arial):
        story = document.add_story(
            "Frame 1",
            [("hello", red_arial), ("world", {"font": "Minion Pro", "pointSize": 9})],
        )
        client = ScriptedClient(fallback=lambda text: {"hello": "bonjour"}.get(text, text.upper()))
        pipeline = self._pipeline(document, client)

        pipeline.run(_target(story))
        after_first = document.state()
        identity = ScriptedClient(fallback=lambda text: text)
        with pytest.raises(NothingTranslatedError):
            self._pipeline(document, identity).run(_target(story))

        assert document.state() == after_first

    def test_unresolvable_color_isolated_to_that_key(self, document, full_style):
        story = document.add_story("Frame 1", [("hello", full_style)])
        document.remove_swatch("Blue")

        report = self._pipeline(document, ScriptedClient()).run(_target(story))

        assert story.contents == "HELLO"
        for character in story.paragraphs()[0].characters():
            remaining = dict(character.attributes)
            remaining.pop("fillColor")
            assert remaining == resolved(full_style, "fillColor")
        assert report.reapply_failures > 0

    def test_unwritable_key_does_not_stop_others(self, resources, full_style):
        document = MemoryDocument(resources, unwritable=["font"])
        story = document.add_story("Frame 1", [("hi", full_style)])

        report = self._pipeline(document, ScriptedClient()).run(_target(story))

        assert report.reapply_failures == 4
        for character in story.paragraphs()[0].characters():
            assert character.attributes == resolved(full_style)

    def test_host_dropping_first_writes_is_corrected(self, resources, red_arial):
        document = MemoryDocument(resources, fragile=["font", "pointSize", "fillColor"])
        story = document.add_story(
            "Frame 1", [("a", {"pointSize": 8}), ("b", red_arial)]
        )

        self._pipeline(document, ScriptedClient()).run(_target(story))

        second = story.paragraphs()[1].characters()[0].attributes
        assert second["font"] == "Arial"
        assert second["pointSize"] == 12
        assert second["fillColor"].name == "Red"

    def test_suppression_released_when_reapply_raises(self, document):
        story = document.add_story("Frame 1", ["hello"])
        pipeline = self._pipeline(document, ScriptedClient())

        with mock.patch(
            "pagewright.pipeline.StyleReapplier.reapply",
            side_effect=RuntimeError("host crashed"),
        ):
            with pytest.raises(RuntimeError):
                pipeline.run(_target(story))

        assert document.suppression_events == ["enable", "disable"]
        assert not document.interaction_suppressed

    def test_suppression_wraps_writes(self, document):
        story = document.add_story("Frame 1", ["hello"])
        seen = []
        original = story.replace_contents

        def spy(text):
            seen.append(document.interaction_suppressed)
            original(text)

        story.replace_contents = spy
        self._pipeline(document, ScriptedClient()).run(_target(story))

        assert seen == [True]
        assert document.suppression_events == ["enable", "disable"]

    def test_rtl_target_skips_direction(self, document):
        story = document.add_story("Frame 1", ["hello"])
        client = ScriptedClient(target_language="Arabic", fallback=lambda t: "مرحبا")

        report = self._pipeline(document, client).run(_target(story))

        assert "paragraphDirection" not in story.paragraphs()[0].properties
        assert report.direction_failures == 0

    def test_fine_grained_restores_character_styles(self, document):
        story = document.add_story(
            "Frame 1", [[("ab", {"font": "Arial"}), ("cd", {"font": "Minion Pro"})]]
        )

        self._pipeline(document, ScriptedClient(), fine_grained=True).run(_target(story))

        fonts = [c.attributes["font"] for c in story.paragraphs()[0].characters()]
        assert fonts == ["Arial", "Arial", "Minion Pro", "Minion Pro"]
