"""Unit tests for replication value objects."""

import pytest

from showgear.domain.exceptions import InvalidCountError, InvalidPatternError
from showgear.domain.model.value_objects import CopyCount, IdPattern


class TestIdPattern:

    def test_render_substitutes_index(self):
        assert IdPattern("SN-{n}").render(3) == "SN-3"

    def test_render_namespaced_by_source(self):
        assert IdPattern("BATCH-{n}").render(2, source_id=42) == "BATCH-42-2"

    def test_missing_placeholder_rejected(self):
        with pytest.raises(InvalidPatternError, match="must contain the placeholder"):
            IdPattern("BATCH")

    def test_empty_pattern_rejected(self):
        with pytest.raises(InvalidPatternError):
            IdPattern("")

    def test_repeated_placeholder_rejected(self):
        with pytest.raises(InvalidPatternError, match="exactly once"):
            IdPattern("{n}-{n}")

    def test_preview_short_run(self):
        assert IdPattern("SN-{n}").preview(3) == ["SN-1", "SN-2", "SN-3"]

    def test_preview_long_run_elides_middle(self):
        assert IdPattern("SN-{n}").preview(12) == [
            "SN-1", "SN-2", "SN-3", "SN-4", "SN-5", "...", "SN-12",
        ]


class TestCopyCount:

    @pytest.mark.parametrize("value", [1, 25, 50])
    def test_within_range(self, value):
        assert CopyCount(value).value == value

    @pytest.mark.parametrize("value", [0, -1, 51])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(InvalidCountError, match="between 1 and 50"):
            CopyCount(value)

    def test_non_integer_rejected(self):
        with pytest.raises(InvalidCountError, match="must be an integer"):
            CopyCount("3")

    def test_custom_maximum(self):
        with pytest.raises(InvalidCountError, match="between 1 and 10"):
            CopyCount(11, maximum=10)
