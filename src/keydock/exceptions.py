"""Exception hierarchy for keydock.

All exceptions inherit from :class:`KeydockError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`keydock.exit_codes`.
The top-level error handler in :func:`keydock.app.main` catches
``KeydockError`` and exits with the appropriate code.

Error messages may name providers, profile ids, source kinds and file
paths. They never contain a secret value.

Subclass hierarchy::

    KeydockError (exit 1)
    +-- InvalidUsageError                   (exit 2)
    +-- AuthError                           (exit 3)
    |   +-- ProfileResolutionError
    |   +-- NoCredentialFoundError
    |   +-- AmbiguousProviderGuidanceError
    +-- NotFoundError                       (exit 4)
    +-- RegistryError                       (exit 10)
    +-- ConfigError                         (exit 1)
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

from keydock.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_REGISTRY_ERROR,
)

if TYPE_CHECKING:
    from keydock.auth.base import AttemptFailure


class KeydockError(Exception):
    """Base exception for all keydock errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`keydock.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(KeydockError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(KeydockError):
    """Raised when a credential cannot be resolved or is unusable."""

    exit_code = EXIT_AUTH_FAILURE


class ProfileResolutionError(AuthError):
    """An explicitly requested profile has no retrievable credential.

    Explicit profile requests never fall back to other sources, so this
    error is final for the call.
    """

    def __init__(self, profile_id: str, message: Optional[str] = None):
        super().__init__(message or f'No credentials found for profile "{profile_id}".')
        self.profile_id = profile_id


class NoCredentialFoundError(AuthError):
    """Every strategy (profiles, environment, static config) came up empty.

    Attributes:
        provider: The provider id that was requested.
        store_path: The auth store that was consulted.
        failures: Per-candidate failures recorded while walking the
            profile chain. Each entry names a profile id and an exception
            class, never a secret.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        store_path: Optional[Path] = None,
        failures: Sequence["AttemptFailure"] = (),
    ):
        super().__init__(message)
        self.provider = provider
        self.store_path = store_path
        self.failures = list(failures)


class AmbiguousProviderGuidanceError(AuthError):
    """A sibling provider holds an OAuth login that the caller probably meant.

    Raised instead of :class:`NoCredentialFoundError` so the user is steered
    to the sibling provider. Credentials are never substituted across
    providers.
    """

    def __init__(self, message: str, *, provider: str, sibling: str):
        super().__init__(message)
        self.provider = provider
        self.sibling = sibling


class NotFoundError(KeydockError):
    """Raised when a named profile or channel does not exist."""

    exit_code = EXIT_NOT_FOUND


class RegistryError(KeydockError):
    """Raised when the plugin registry is required but has not been activated."""

    exit_code = EXIT_REGISTRY_ERROR


class ConfigError(KeydockError):
    """Raised for configuration problems (invalid JSON, bad models, immutable field changes)."""

    exit_code = EXIT_GENERIC_FAILURE
