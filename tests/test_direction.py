"""Tests for paragraph direction normalisation."""

import pytest

from pagewright.direction import DirectionNormalizer, is_rtl_language
from pagewright.errors import ErrorCategory
from pagewright.memory import MemoryDocument
from pagewright.policy import ErrorPolicy
from pagewright.structures import Direction, Justification


@pytest.mark.parametrize(
    "language,expected",
    [
        ("Arabic", True),
        ("he", True),
        ("fa-IR", True),
        ("ur_PK", True),
        ("French", False),
        ("en-US", False),
        (None, False),
    ],
)
def test_is_rtl_language(language, expected):
    assert is_rtl_language(language) is expected


class TestDirectionNormalizer:
    def setup_method(self):
        self.policy = ErrorPolicy()

    def test_sets_paragraph_direction(self, document):
        story = document.add_story("Frame 1", ["a", "b"])

        failures = DirectionNormalizer(policy=self.policy).normalize(story.paragraphs())

        assert failures == 0
        for paragraph in story.paragraphs():
            assert paragraph.properties == {"paragraphDirection": Direction.LEFT_TO_RIGHT}

    def test_falls_back_to_direction_then_justification(self, resources):
        document = MemoryDocument(
            resources, unsupported_properties=["paragraphDirection", "direction"]
        )
        story = document.add_story("Frame 1", ["a"])

        DirectionNormalizer(policy=self.policy).normalize(story.paragraphs())

        assert story.paragraphs()[0].properties == {
            "justification": Justification.LEFT_ALIGN
        }

    def test_counts_paragraphs_where_nothing_worked(self, resources):
        document = MemoryDocument(
            resources,
            unsupported_properties=["paragraphDirection", "direction", "justification"],
        )
        story = document.add_story("Frame 1", ["a", "b"])

        failures = DirectionNormalizer(policy=self.policy).normalize(story.paragraphs())

        assert failures == 2
        assert self.policy.count(ErrorCategory.DIRECTION) == 2

    def test_rtl_target_leaves_direction_alone(self, document):
        story = document.add_story("Frame 1", ["a"])
        normalizer = DirectionNormalizer.for_language("Hebrew", policy=self.policy)

        assert normalizer.normalize(story.paragraphs()) == 0
        assert story.paragraphs()[0].properties == {}

    def test_ltr_target_is_enabled(self):
        normalizer = DirectionNormalizer.for_language("German")

        assert normalizer.enabled
        assert normalizer.mechanisms()[0] == ("paragraphDirection", Direction.LEFT_TO_RIGHT)
