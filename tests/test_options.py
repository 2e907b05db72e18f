"""Tests for search modes and engine options."""

import pytest

from microbench import BenchmarkOptions, SearchMode


class TestBenchmarkOptions:
    """Defaults, validation and copies."""

    def test_default_values(self) -> None:
        options = BenchmarkOptions.default()
        assert options.search_mode == SearchMode.DECLARATIVE
        assert options.isolate_repetitions is True
        assert options.warm_up is True
        assert options.repetitions == 100
        assert options.start_method is None

    @pytest.mark.parametrize("repetitions", [0, -1, -100])
    def test_non_positive_repetitions_rejected(self, repetitions: int) -> None:
        with pytest.raises(ValueError):
            BenchmarkOptions(repetitions=repetitions)

    @pytest.mark.parametrize("repetitions", [1.5, "10", True])
    def test_non_int_repetitions_rejected(self, repetitions) -> None:
        with pytest.raises(ValueError):
            BenchmarkOptions(repetitions=repetitions)

    def test_unknown_search_mode_rejected(self) -> None:
        with pytest.raises(ValueError):
            BenchmarkOptions(search_mode="random")

    def test_string_search_mode_accepted(self) -> None:
        options = BenchmarkOptions(search_mode="convention")
        assert options.search_mode == SearchMode.CONVENTION

    def test_unknown_start_method_rejected(self) -> None:
        with pytest.raises(ValueError):
            BenchmarkOptions(start_method="teleport")

    def test_options_are_immutable(self) -> None:
        options = BenchmarkOptions()
        with pytest.raises(AttributeError):
            options.repetitions = 5

    def test_replace_returns_validated_copy(self) -> None:
        options = BenchmarkOptions()
        changed = options.replace(repetitions=5, warm_up=False)
        assert changed.repetitions == 5
        assert changed.warm_up is False
        assert options.repetitions == 100

        with pytest.raises(ValueError):
            options.replace(repetitions=0)


class TestSearchMode:
    def test_values(self) -> None:
        assert [mode.value for mode in SearchMode] == [
            "declarative",
            "convention",
            "everything",
        ]
