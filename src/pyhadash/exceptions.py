"""Custom exception hierarchy for pyhadash."""

from __future__ import annotations


class HaError(Exception):
    """Base exception for all pyhadash errors."""


class HaConfigError(HaError):
    """Invalid or missing configuration."""


class HaTransportError(HaError):
    """HTTP-level failure (network, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class HaApiError(HaTransportError):
    """Home Assistant answered with a non-success HTTP status."""

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class HaConnectionError(HaError):
    """Reachability or authentication check failed during connect.

    Surfaces as the ``error`` connection status. Recovery requires an
    explicit reconnect.
    """


class HaRefreshError(HaError):
    """A periodic or triggered snapshot refresh failed.

    The previous entity snapshot is kept.
    """


class RegistryFetchError(HaError):
    """One of the registry sub-queries (areas, entities, devices) failed.

    Never fatal: the resolver degrades that piece to an empty result.
    """


class SyncUnavailableError(HaError):
    """The remote settings store could not be initialized.

    Entity display and control keep working; customizations are not
    persisted for this session.
    """


class OptimisticActionError(HaError):
    """A service call failed after an optimistic local patch.

    The entity is reverted to its pre-patch value.
    """

    def __init__(self, message: str, *, entity_id: str = "") -> None:
        self.entity_id = entity_id
        super().__init__(message)


class StoredDataParseError(HaError):
    """A persisted settings record contained malformed JSON.

    Treated exactly like a missing record.
    """

    def __init__(self, message: str, *, entity_id: str = "") -> None:
        self.entity_id = entity_id
        super().__init__(message)
