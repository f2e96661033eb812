import math

import pytest

from kb_retriever.domain.similarity import (
    clamp01,
    cosine_set_similarity,
    intersect_count,
    max_normalized_overlap,
)


@pytest.mark.parametrize("value,expected", [(-0.5, 0.0), (0.3, 0.3), (1.7, 1.0)])
def test_clamp01(value, expected):
    assert clamp01(value) == expected


def test_intersect_count_is_symmetric():
    small = {"a", "b"}
    large = {"b", "c", "d", "a", "e"}
    assert intersect_count(small, large) == intersect_count(large, small) == 2


def test_intersect_count_empty():
    assert intersect_count(set(), {"a"}) == 0


def test_cosine_set_similarity():
    assert cosine_set_similarity({"a", "b"}, {"b", "c", "d", "e"}) == pytest.approx(
        1 / math.sqrt(8)
    )
    assert cosine_set_similarity(set(), {"a"}) == 0.0
    assert cosine_set_similarity({"a"}, {"b"}) == 0.0


def test_max_normalized_overlap():
    assert max_normalized_overlap({"a", "b"}, {"b", "c", "d", "e"}) == pytest.approx(0.25)
    assert max_normalized_overlap({"a"}, set()) == 0.0
