"""Tests for fix previews."""

from datetime import datetime

from fixlens.errors import ComputationFailure
from fixlens.models import Diff, Issue, Preview
from fixlens.preview import generate_preview


class TestGeneratePreview:

    def test_end_to_end(self, original_code, fixed_code, style_issue):
        preview = generate_preview(original_code, fixed_code, style_issue, "src/f.js")

        assert isinstance(preview, Preview)
        assert preview.file_path == "src/f.js"
        assert preview.issue == Issue(type="style", severity="low", message="Missing spaces around +", line=2)
        assert len(preview.diff.removed) == 1
        assert len(preview.diff.added) == 1
        assert preview.diff.removed[0].content == "  return x+1;"
        assert preview.summary.total_changes == 0
        assert preview.risk.level == "low"
        assert preview.stats.size_change == 2
        assert datetime.fromisoformat(preview.timestamp).tzinfo is not None

    def test_optional_fields(self, original_code, fixed_code, style_issue):
        plain = generate_preview(original_code, fixed_code, style_issue)
        assert plain.confidence is None
        assert "confidence" not in plain.to_dict()
        assert "validation" not in plain.to_dict()

        rich = generate_preview(
            original_code, fixed_code, style_issue,
            confidence=0.92, validation={"syntax": "ok"},
        )
        data = rich.to_dict()
        assert data["confidence"] == 0.92
        assert data["validation"] == {"syntax": "ok"}

    def test_to_dict_shape(self, original_code, fixed_code, style_issue):
        data = generate_preview(original_code, fixed_code, style_issue, "f.js").to_dict()

        assert set(data) == {"file_path", "issue", "diff", "summary", "stats", "risk", "timestamp"}
        assert data["diff"]["lines"][1] == {"kind": "removed", "line_number": 2, "content": "  return x+1;"}
        assert data["risk"] == {"score": 0.0, "level": "low", "factors": []}
        assert data["summary"]["lines_modified"] == 3

    def test_accepts_issue_objects(self, original_code, fixed_code):
        issue = Issue(type="security", severity="critical", message="SQL injection")
        preview = generate_preview(original_code, fixed_code, issue)
        assert preview.risk.level == "medium"

    def test_missing_code_is_empty(self):
        preview = generate_preview(None, "a\nb", {"type": "style"})
        assert [line.kind for line in preview.diff.lines] == ["added", "added"]

    def test_difflib_algorithm(self):
        preview = generate_preview("a\nb", "x\na\nb", {}, algorithm="difflib")
        assert [line.kind for line in preview.diff.lines] == ["added", "unchanged", "unchanged"]

    def test_diff_failure_keeps_the_preview(self, original_code, fixed_code, style_issue):
        errors = []
        preview = generate_preview(original_code, fixed_code, style_issue, algorithm="bogus", on_error=errors.append)

        assert preview is not None
        assert preview.diff == Diff.empty()
        assert preview.risk.level == "low"
        assert len(errors) == 1

    def test_unexpected_failure_returns_none(self, monkeypatch, original_code, fixed_code, style_issue):
        def broken(original, fixed):
            raise RuntimeError("boom")

        monkeypatch.setattr("fixlens.preview.summarize_change", broken)
        errors = []

        assert generate_preview(original_code, fixed_code, style_issue, on_error=errors.append) is None
        assert isinstance(errors[0], ComputationFailure)
        assert errors[0].operation == "generate_preview"
        assert "boom" in str(errors[0])

    def test_bad_issue_returns_none(self, original_code, fixed_code):
        assert generate_preview(original_code, fixed_code, {"line": "twelve"}) is None
