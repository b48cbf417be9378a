"""Domain error taxonomy.

``ValidationError`` subclasses are raised before any mutation happens.
``RemoteCallError`` is recorded per verification job and never aborts a run.
``StalePreviewError`` marks an apply target that vanished after preview; the
applier counts it as a skip instead of failing the batch.
"""

from __future__ import annotations


class RoutekeeperError(Exception):
    """Base class for domain errors."""


class ValidationError(RoutekeeperError, ValueError):
    """Raised when a request is rejected before mutating anything."""


class DuplicateAliasError(ValidationError):
    def __init__(self, model_id: int, alias: str) -> None:
        super().__init__(f"Alias {alias!r} already exists for model {model_id}")
        self.model_id = model_id
        self.alias = alias


class NotManualAliasError(ValidationError):
    def __init__(self, model_id: int, alias: str) -> None:
        super().__init__(
            f"Alias {alias!r} of model {model_id} is not a manual alias and cannot be removed"
        )
        self.model_id = model_id
        self.alias = alias


class AliasNotFoundError(ValidationError):
    def __init__(self, model_id: int, alias: str) -> None:
        super().__init__(f"Alias {alias!r} does not exist for model {model_id}")
        self.model_id = model_id
        self.alias = alias


class InvalidTransitionError(ValidationError):
    """Raised when a verification job is moved along an edge the state machine lacks."""


class RunInProgressError(ValidationError):
    """Raised when an operation requires a finished verification run."""


class NotFoundError(RoutekeeperError, LookupError):
    """Raised when a referenced record does not exist."""


class ModelNotFoundError(NotFoundError):
    def __init__(self, model_id: int) -> None:
        super().__init__(f"Model {model_id} not found")
        self.model_id = model_id


class AssociationNotFoundError(NotFoundError):
    def __init__(self, association_id: int) -> None:
        super().__init__(f"Association {association_id} not found")
        self.association_id = association_id


class StalePreviewError(RoutekeeperError):
    """Raised by stores when an apply target no longer exists."""


class RemoteCallError(RoutekeeperError):
    """Raised by verifiers when a remote test call fails."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
