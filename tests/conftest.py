import pytest

from microbench import BenchmarkOptions, SearchMode


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add an opt-out for tests that start worker processes."""
    try:
        parser.addoption(
            "--skip-isolated",
            action="store_true",
            default=False,
            help="Skip tests that run repetitions in worker processes",
        )
    except ValueError:
        # Option may already be registered by a nested conftest.
        pass


def pytest_configure(config: pytest.Config) -> None:
    """Register shared markers."""
    config.addinivalue_line(
        "markers", "isolated: mark test as starting worker processes"
    )
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip isolated tests when explicitly disabled."""
    if not config.getoption("--skip-isolated"):
        return

    skip_isolated = pytest.mark.skip(reason="--skip-isolated given")
    for item in items:
        if "isolated" in item.keywords:
            item.add_marker(skip_isolated)


@pytest.fixture
def in_process_options() -> BenchmarkOptions:
    """Fast in-process options: everything search, no warm-up, 3 repetitions."""
    return BenchmarkOptions(
        search_mode=SearchMode.EVERYTHING,
        isolate_repetitions=False,
        warm_up=False,
        repetitions=3,
    )


@pytest.fixture
def isolated_options() -> BenchmarkOptions:
    """Isolated options with few repetitions to keep process churn low."""
    return BenchmarkOptions(
        search_mode=SearchMode.EVERYTHING,
        isolate_repetitions=True,
        warm_up=False,
        repetitions=2,
    )
