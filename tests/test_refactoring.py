"""Tests for duplicate detection and refactoring suggestions."""

from fixlens.clusterer import group_by_similarity
from fixlens.errors import ComputationFailure
from fixlens.models import CodeFragment, RefactoringSuggestion, SimilarityGroup
from fixlens.refactoring import (
    find_duplicates,
    find_similar_code,
    generate_refactoring_suggestion,
    load_fragments,
    rank_suggestions,
)


def _suggestion(impact: int, description: str) -> RefactoringSuggestion:
    return RefactoringSuggestion(
        type="extract-function",
        description=description,
        files=("a.py",),
        occurrences=impact // 10,
        impact=impact,
        estimated_effort="medium",
        pattern="",
    )


class TestLoadFragments:

    def test_accepts_fragments_mappings_and_callables(self):
        fragment = CodeFragment(content="x", file_path="a.py")
        loaded = load_fragments(lambda: [fragment, {"content": "y", "filePath": "b.py"}, 42])

        assert loaded[0] is fragment
        assert loaded[1] == CodeFragment(content="y", file_path="b.py")
        assert len(loaded) == 2

    def test_accepts_search_results_object(self):
        loaded = load_fragments({"results": [{"content": "z", "file_path": "c.py", "similarity": 0.9}]})
        assert loaded == [CodeFragment(content="z", file_path="c.py", similarity=0.9)]


class TestFindDuplicates:

    def test_excludes_target_and_keeps_order(self):
        corpus = [
            {"content": "a", "file_path": "target.py"},
            {"content": "b", "file_path": "one.py"},
            {"content": "c", "file_path": ""},
            {"content": "d", "file_path": "two.py"},
            {"content": "e", "file_path": "target.py"},
            {"content": "f", "file_path": "three.py"},
        ]
        duplicates = find_duplicates(corpus, "target.py")
        assert [d.file_path for d in duplicates] == ["one.py", "two.py", "three.py"]

    def test_returns_at_most_five(self):
        corpus = [CodeFragment(content=str(i), file_path=f"f{i}.py") for i in range(9)]
        duplicates = find_duplicates(corpus, "other.py")
        assert [d.content for d in duplicates] == ["0", "1", "2", "3", "4"]

    def test_failing_search_degrades_to_empty(self):
        errors = []

        def search():
            raise ConnectionError("search service down")

        assert find_duplicates(search, "a.py", on_error=errors.append) == []
        assert len(errors) == 1
        assert isinstance(errors[0], ComputationFailure)
        assert isinstance(errors[0].__cause__, ConnectionError)


class TestSuggestions:

    def test_suggestion_from_group(self, make_fragment):
        seed = make_fragment(content="x" * 150, file_path="a.py")
        group = SimilarityGroup(
            fragments=(seed, make_fragment(file_path="b.py"), make_fragment(file_path="a.py")),
            threshold=0.8,
        )
        suggestion = generate_refactoring_suggestion(group)

        assert suggestion.type == "extract-function"
        assert suggestion.impact == 30
        assert suggestion.occurrences == 3
        assert suggestion.files == ("a.py", "b.py")
        assert suggestion.estimated_effort == "medium"
        assert suggestion.pattern == "x" * 100

    def test_short_seed_pattern(self, make_fragment):
        group = SimilarityGroup(
            fragments=(make_fragment(content="short"), make_fragment()),
            threshold=0.8,
        )
        assert generate_refactoring_suggestion(group).pattern == "short"

    def test_rank_descending_and_stable(self):
        first = _suggestion(20, "first twenty")
        big = _suggestion(30, "thirty")
        second = _suggestion(20, "second twenty")
        small = _suggestion(10, "ten")

        ranked = rank_suggestions([first, big, second, small])
        assert [s.description for s in ranked] == ["thirty", "first twenty", "second twenty", "ten"]


class TestFindSimilarCode:

    def _corpus(self):
        return [
            {"content": "a", "file_path": "a1.py", "embedding": [1.0, 0.0]},
            {"content": "b", "file_path": "b1.py", "embedding": [0.0, 1.0]},
            {"content": "a", "file_path": "a2.py", "embedding": [1.0, 0.0]},
            {"content": "b", "file_path": "b2.py", "embedding": [0.0, 1.0]},
            {"content": "a", "file_path": "a3.py", "embedding": [1.0, 0.0]},
        ]

    def test_filters_by_min_occurrences(self):
        report = find_similar_code(self._corpus(), min_similarity=0.9, min_occurrences=3)

        assert report.total_similar_groups == 2
        assert report.duplicates_found == 1
        assert len(report.suggestions) == 1
        assert report.suggestions[0].files == ("a1.py", "a2.py", "a3.py")
        assert report.suggestions[0].impact == 30

    def test_suggestions_are_ranked(self):
        report = find_similar_code(self._corpus(), min_similarity=0.9, min_occurrences=2)
        assert [s.impact for s in report.suggestions] == [30, 20]

    def test_corpus_is_truncated(self):
        report = find_similar_code(self._corpus(), min_similarity=0.9, min_occurrences=2, max_fragments=2)
        assert report.total_similar_groups == 0

    def test_connected_strategy(self, angle_fragments):
        corpus = angle_fragments(0, 30, 60)
        seed_report = find_similar_code(corpus, min_similarity=0.8, min_occurrences=3)
        connected_report = find_similar_code(corpus, min_similarity=0.8, min_occurrences=3, strategy="connected")

        assert seed_report.duplicates_found == 0
        assert connected_report.duplicates_found == 1

    def test_search_failure_gives_empty_report(self):
        errors = []

        def search():
            raise TimeoutError("slow search")

        report = find_similar_code(search, on_error=errors.append)
        assert report.duplicates_found == 0
        assert report.total_similar_groups == 0
        assert report.suggestions == ()
        assert len(errors) == 1

    def test_bad_strategy_gives_empty_report(self):
        report = find_similar_code(self._corpus(), strategy="nope")
        assert report.total_similar_groups == 0

    def test_groups_match_direct_grouping(self):
        fragments = load_fragments(self._corpus())
        report = find_similar_code(fragments, min_similarity=0.9, min_occurrences=2)
        assert list(report.groups) == group_by_similarity(fragments, 0.9)
