"""Tests for package exports."""


def test_public_api_available() -> None:
    """Test that the client, query and config types are importable."""
    from aioquery import (
        ALL,
        ConfigurationError,
        Exact,
        LoopScheduler,
        Predicate,
        Query,
        QueryClient,
        QueryConfig,
        QueryState,
        parse_duration,
        require_client,
    )

    # Just verify they're importable
    assert ALL is not None
    assert ConfigurationError is not None
    assert Exact is not None
    assert LoopScheduler is not None
    assert Predicate is not None
    assert Query is not None
    assert QueryClient is not None
    assert QueryConfig is not None
    assert QueryState is not None
    assert parse_duration is not None
    assert require_client is not None


def test_all_names_resolve() -> None:
    """Test that every name in __all__ exists on the package."""
    import aioquery

    for name in aioquery.__all__:
        assert hasattr(aioquery, name), name
