"""Pytest configuration and fixtures for fixlens tests."""

import math
from typing import Callable, List

import pytest

from fixlens.models import CodeFragment


ORIGINAL_F = "function f(x) {\n  return x+1;\n}"
FIXED_F = "function f(x) {\n  return x + 1;\n}"


def unit_vector(degrees: float) -> tuple:
    """2-d unit vector at ``degrees`` from the x axis."""
    rad = math.radians(degrees)
    return (math.cos(rad), math.sin(rad))


@pytest.fixture
def make_fragment() -> Callable[..., CodeFragment]:
    """Factory for fragments with sensible defaults."""
    counter = {"n": 0}

    def _make(content: str = "", file_path: str = None, embedding=None, similarity=None) -> CodeFragment:
        counter["n"] += 1
        return CodeFragment(
            content=content or f"fragment {counter['n']}",
            file_path=file_path or f"src/file_{counter['n']}.py",
            embedding=embedding,
            similarity=similarity,
        )

    return _make


@pytest.fixture
def angle_fragments(make_fragment) -> Callable[..., List[CodeFragment]]:
    """Fragments whose embeddings sit at the given angles."""

    def _make(*angles: float) -> List[CodeFragment]:
        return [make_fragment(embedding=unit_vector(a)) for a in angles]

    return _make


@pytest.fixture
def original_code() -> str:
    return ORIGINAL_F


@pytest.fixture
def fixed_code() -> str:
    return FIXED_F


@pytest.fixture
def style_issue() -> dict:
    return {"type": "style", "severity": "low", "message": "Missing spaces around +", "line": 2}
