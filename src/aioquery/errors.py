"""Exceptions raised by aioquery."""


class ConfigurationError(RuntimeError):
    """Structural misuse: no client, or a client/query used after close.

    Never retried. Fetch failures are not reported through this class; they
    end up in ``QueryState.error``.
    """
