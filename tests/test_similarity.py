"""Tests for pairwise fragment similarity."""

import pytest

from fixlens.errors import DimensionMismatch
from fixlens.models import CodeFragment
from fixlens.similarity import (
    check_dimensions,
    cosine_similarity,
    similarity,
    similarity_matrix,
    token_similarity,
    tokenize,
)


class TestCosineSimilarity:
    """Embedding path."""

    def test_identical_vectors_score_one(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == 1.0

    def test_orthogonal_vectors_score_zero(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_dimension_mismatch_scores_zero(self):
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) == 0.0

    def test_opposite_vectors_are_clipped_to_zero(self):
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == 0.0

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0

    def test_scale_invariant(self):
        assert cosine_similarity([1.0, 1.0], [3.0, 3.0]) == 1.0


class TestTokenSimilarity:
    """Jaccard fallback."""

    def test_tokenize_lowercases_and_splits_on_non_word(self):
        assert tokenize("def Add(a, b): return") == {"def", "add", "a", "b", "return"}

    def test_tokenize_keeps_edge_separators(self):
        # Trailing punctuation leaves an empty piece
        assert tokenize("foo()") == {"foo", ""}
        assert tokenize("});") == {""}

    def test_tokenize_empty(self):
        assert tokenize("") == frozenset()

    def test_partial_overlap(self):
        # {return, a, b} vs {return, a, c}: 2 shared of 4
        assert token_similarity("return a + b", "return a - c") == pytest.approx(0.5)

    def test_case_insensitive(self):
        assert token_similarity("RETURN Value", "return value") == 1.0

    def test_empty_texts_score_zero(self):
        assert token_similarity("", "") == 0.0
        assert token_similarity(None, "") == 0.0

    def test_punctuation_counts_as_a_token(self):
        assert token_similarity("foo()", "foo") == pytest.approx(0.5)
        assert token_similarity("   ", "+-*") == 1.0


class TestSimilarity:
    """Dispatch between the two measures."""

    def test_reflexive_with_embedding(self, make_fragment):
        a = make_fragment(embedding=(0.3, 0.4, 0.5))
        assert similarity(a, a) == 1.0

    def test_reflexive_with_content(self, make_fragment):
        a = make_fragment(content="for item in items: total += item.price")
        assert similarity(a, a) == 1.0

    def test_reflexive_with_punctuation_only_content(self):
        for content in ("});", "}", "   "):
            a = CodeFragment(content=content, file_path="a.js")
            assert similarity(a, a) == 1.0

    def test_symmetric_embedding_path(self, make_fragment):
        a = make_fragment(embedding=(0.1, 0.9, 0.3))
        b = make_fragment(embedding=(0.7, 0.2, 0.5))
        assert similarity(a, b) == similarity(b, a)

    def test_symmetric_token_path(self, make_fragment):
        a = make_fragment(content="user = db.get(user_id)")
        b = make_fragment(content="order = db.get(order_id)")
        assert similarity(a, b) == similarity(b, a)

    def test_uses_embeddings_when_both_present(self, make_fragment):
        # Same text, orthogonal vectors: embedding wins
        a = make_fragment(content="same", embedding=(1.0, 0.0))
        b = make_fragment(content="same", embedding=(0.0, 1.0))
        assert similarity(a, b) == 0.0

    def test_falls_back_to_tokens_when_one_embedding_missing(self, make_fragment):
        a = make_fragment(content="same text", embedding=(1.0, 0.0))
        b = make_fragment(content="same text")
        assert similarity(a, b) == 1.0

    def test_mismatched_embeddings_score_zero(self, make_fragment):
        a = make_fragment(content="same", embedding=(1.0, 0.0))
        b = make_fragment(content="same", embedding=(1.0, 0.0, 0.0))
        assert similarity(a, b) == 0.0

    def test_missing_content_is_treated_as_empty(self):
        a = CodeFragment(content=None, file_path="a.py")
        b = CodeFragment(content=None, file_path="b.py")
        assert a.content == ""
        assert similarity(a, b) == 0.0

    def test_result_in_unit_interval(self, make_fragment):
        fragments = [
            make_fragment(embedding=(1.0, -2.0)),
            make_fragment(embedding=(-3.0, 0.5)),
            make_fragment(content="x = y"),
            make_fragment(content="y = z"),
        ]
        for a in fragments:
            for b in fragments:
                assert 0.0 <= similarity(a, b) <= 1.0


class TestHelpers:

    def test_similarity_matrix_is_symmetric_with_unit_diagonal(self, angle_fragments):
        matrix = similarity_matrix(angle_fragments(0, 30, 90))
        assert matrix.shape == (3, 3)
        assert (matrix == matrix.T).all()
        assert list(matrix.diagonal()) == [1.0, 1.0, 1.0]
        assert matrix[0, 2] == 0.0

    def test_similarity_matrix_matches_pairwise_scores(self, make_fragment, angle_fragments):
        embedded = angle_fragments(0, 45, 120) + [make_fragment(embedding=(0.0, 0.0))]
        mixed = embedded[:2] + [make_fragment(content="a = b")]

        for fragments in (embedded, mixed):
            matrix = similarity_matrix(fragments)
            for i, a in enumerate(fragments):
                for j, b in enumerate(fragments):
                    if i != j:
                        assert matrix[i, j] == pytest.approx(similarity(a, b), abs=1e-9)

    def test_check_dimensions(self, make_fragment):
        same = [make_fragment(embedding=(1.0, 0.0)), make_fragment(embedding=(0.0, 1.0)), make_fragment()]
        assert check_dimensions(same) == 2
        assert check_dimensions([make_fragment()]) is None

        with pytest.raises(DimensionMismatch):
            check_dimensions([make_fragment(embedding=(1.0,)), make_fragment(embedding=(1.0, 0.0))])
