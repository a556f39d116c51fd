"""Cooperative cancellation signal shared by transfers."""

from mailru_cloud.exceptions import TransferCancelledError


class CancellationToken:
    """
    One-way cancellation flag.

    Transfers poll the token at block boundaries; a single token can abort
    every transfer that was started with it.

    Example:
        ```python
        token = CancellationToken()
        token.cancel()
        token.raise_if_cancelled()  # raises TransferCancelledError
        ```
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._cancelled = True

    def raise_if_cancelled(self, transferred: int = 0) -> None:
        """
        Raise if cancellation was requested.

        Args:
            transferred: Bytes moved so far, reported on the error.

        Raises:
            TransferCancelledError: If the token is cancelled.
        """
        if self._cancelled:
            raise TransferCancelledError(transferred=transferred)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(cancelled={self._cancelled})"
