"""Tests for style reapplication."""

from unittest import mock

from conftest import resolved
from pagewright.errors import ErrorCategory
from pagewright.memory import MemoryDocument, MemoryResources
from pagewright.policy import ErrorPolicy
from pagewright.reapply import APPLY_ORDER, StyleReapplier
from pagewright.snapshot import capture_snapshot
from pagewright.structures import ColorValue, StyleAttributeSet, Swatch


def _styles(story):
    return [
        [dict(character.attributes) for character in paragraph.characters()]
        for paragraph in story.paragraphs()
    ]


class TestApplyOrder:
    def test_font_first_colors_last(self):
        assert APPLY_ORDER[0] == "font"
        assert APPLY_ORDER[1] == "pointSize"
        assert APPLY_ORDER[-2:] == ("fillColor", "strokeColor")
        assert APPLY_ORDER.index("paragraphStyleName") < APPLY_ORDER.index(
            "characterStyleName"
        )
        assert len(APPLY_ORDER) == 18


class TestStyleReapplier:
    def setup_method(self):
        self.policy = ErrorPolicy()

    def test_restores_paragraph_styles_after_replacement(self, document):
        story = document.add_story(
            "Frame 1",
            [
                ("Title", {"font": "Minion Pro", "pointSize": 24, "fillColor": "Blue"}),
                ("Body text", {"font": "Arial", "pointSize": 10, "underline": True}),
            ],
        )
        snapshot = capture_snapshot(story)
        story.replace_contents("Titre\rCorps du texte")

        failures = StyleReapplier(document.resources, policy=self.policy).reapply(
            story, snapshot
        )

        assert failures == 0
        second = story.paragraphs()[1].characters()
        assert all(c.attributes["font"] == "Arial" for c in second)
        assert all(c.attributes["pointSize"] == 10 for c in second)
        assert all(c.attributes["underline"] is True for c in second)
        first = story.paragraphs()[0].characters()
        assert all(c.attributes["fillColor"] == Swatch("Blue", "#0000ff") for c in first)

    def test_absent_keys_are_not_written(self, document):
        story = document.add_story("Frame 1", [("ab", {"pointSize": 9})])
        reapplier = StyleReapplier(document.resources, policy=self.policy)
        character = story.paragraphs()[0].characters()[0]

        with mock.patch.object(character, "write", wraps=character.write) as write:
            reapplier.apply_style(character, StyleAttributeSet({"pointSize": 9}))

        write.assert_called_once_with("pointSize", 9)

    def test_failed_write_does_not_block_others(self, resources):
        document = MemoryDocument(resources, unwritable=["pointSize"])
        story = document.add_story("Frame 1", [("ab", {"font": "Arial", "pointSize": 9})])
        snapshot = capture_snapshot(story)
        story.replace_contents("xy")
        for character in story.paragraphs()[0].characters():
            character.attributes.clear()

        failures = StyleReapplier(document.resources, policy=self.policy).reapply(
            story, snapshot
        )

        # two characters, pointSize fails in both passes
        assert failures == 4
        assert all(
            c.attributes == {"font": "Arial"} for c in story.paragraphs()[0].characters()
        )
        assert self.policy.count(ErrorCategory.REAPPLY) == 4

    def test_color_falls_back_to_table_lookup(self, document):
        story = document.add_story("Frame 1", ["ab"])
        reapplier = StyleReapplier(document.resources, policy=self.policy)
        character = story.paragraphs()[0].characters()[0]
        stale = Swatch("Red", "#aa0000")

        reapplier.apply_style(
            character, StyleAttributeSet({"fillColor": ColorValue("Red", stale)})
        )

        assert character.attributes["fillColor"] == Swatch("Red", "#ff0000")
        assert reapplier.failures == 0

    def test_color_falls_back_to_scan(self, document):
        resources = document.resources
        story = document.add_story("Frame 1", ["ab"])
        character = story.paragraphs()[0].characters()[0]
        reapplier = StyleReapplier(resources, policy=self.policy)

        with mock.patch.object(
            MemoryResources, "color", side_effect=LookupError("no table")
        ):
            reapplier.apply_style(
                character, StyleAttributeSet({"fillColor": ColorValue("Blue")})
            )

        assert character.attributes["fillColor"] == Swatch("Blue", "#0000ff")

    def test_missing_color_fails_that_key_only(self, document):
        story = document.add_story("Frame 1", [("ab", {"fillColor": "Red", "pointSize": 8})])
        snapshot = capture_snapshot(story)
        document.remove_swatch("Red")
        story.replace_contents("xy")

        failures = StyleReapplier(document.resources, policy=self.policy).reapply(
            story, snapshot
        )

        assert failures == 4
        assert all(c.attributes["pointSize"] == 8 for c in story.paragraphs()[0].characters())

    def test_missing_color_leaves_other_keys_applied(self, document, full_style):
        story = document.add_story("Frame 1", [("ab", full_style)])
        snapshot = capture_snapshot(story)
        document.remove_swatch("Blue")
        story.replace_contents("xy")
        for character in story.paragraphs()[0].characters():
            character.attributes.clear()

        failures = StyleReapplier(document.resources, policy=self.policy).reapply(
            story, snapshot
        )

        # fillColor fails for both characters in both passes
        assert failures == 4
        for character in story.paragraphs()[0].characters():
            assert character.attributes == resolved(full_style, "fillColor")

    def test_reapplying_onto_styled_text_changes_nothing(self, document, full_style):
        story = document.add_story(
            "Frame 1",
            [("Title", full_style), ("body", {"font": "Minion Pro", "pointSize": 9})],
        )
        snapshot = capture_snapshot(story)
        story.replace_contents("Titre\rcorps")
        reapplier = StyleReapplier(document.resources, policy=self.policy)
        assert reapplier.reapply(story, snapshot) == 0
        once = document.state()

        assert reapplier.reapply(story, snapshot) == 0
        assert document.state() == once
        assert reapplier.reapply(story, capture_snapshot(story)) == 0
        assert document.state() == once
        assert story.paragraphs()[0].characters()[0].attributes == resolved(full_style)

    def test_corrective_pass_repairs_dropped_writes(self, resources):
        document = MemoryDocument(resources, fragile=["font", "pointSize", "fillColor"])
        story = document.add_story("Frame 1", [("ab", {"font": "Arial", "pointSize": 12, "fillColor": "Red"})])
        snapshot = capture_snapshot(story)
        story.replace_contents("xy")
        for character in story.paragraphs()[0].characters():
            character.attributes.clear()

        StyleReapplier(document.resources, policy=self.policy).reapply(story, snapshot)

        for character in story.paragraphs()[0].characters():
            assert character.attributes["font"] == "Arial"
            assert character.attributes["pointSize"] == 12
            assert character.attributes["fillColor"].name == "Red"

    def test_without_corrective_pass_dropped_writes_stay_lost(self, resources):
        document = MemoryDocument(resources, fragile=["pointSize"])
        story = document.add_story("Frame 1", [("a", {"pointSize": 12})])
        snapshot = capture_snapshot(story)
        story.replace_contents("x")
        story.paragraphs()[0].characters()[0].attributes.clear()

        StyleReapplier(
            document.resources, policy=self.policy, corrective_pass=False
        ).reapply(story, snapshot)

        assert "pointSize" not in story.paragraphs()[0].characters()[0].attributes

    def test_fine_grained_used_when_shape_is_kept(self, document):
        story = document.add_story(
            "Frame 1", [[("A", {"font": "Arial"}), ("b", {"font": "Minion Pro"})]]
        )
        snapshot = capture_snapshot(story, fine_grained=True)
        story.replace_contents("Xy")

        StyleReapplier(document.resources, policy=self.policy).reapply(story, snapshot)

        fonts = [c.attributes["font"] for c in story.paragraphs()[0].characters()]
        assert fonts == ["Arial", "Minion Pro"]

    def test_fine_grained_falls_back_when_length_changes(self, document):
        story = document.add_story(
            "Frame 1", [[("A", {"font": "Arial"}), ("b", {"font": "Minion Pro"})]]
        )
        snapshot = capture_snapshot(story, fine_grained=True)
        story.replace_contents("Xyz")

        StyleReapplier(document.resources, policy=self.policy).reapply(story, snapshot)

        fonts = [c.attributes["font"] for c in story.paragraphs()[0].characters()]
        assert fonts == ["Arial", "Arial", "Arial"]

    def test_extra_paragraphs_keep_host_formatting(self, document):
        story = document.add_story("Frame 1", [("a", {"pointSize": 9})])
        snapshot = capture_snapshot(story)
        story.replace_contents("x\ry")
        story.paragraphs()[1].characters()[0].attributes["pointSize"] = 30

        StyleReapplier(document.resources, policy=self.policy).reapply(story, snapshot)

        assert story.paragraphs()[0].characters()[0].attributes["pointSize"] == 9
        assert story.paragraphs()[1].characters()[0].attributes["pointSize"] == 30
        assert _styles(story)[1] == [{"pointSize": 30}]
