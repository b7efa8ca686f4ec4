"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~keydock.exceptions.KeydockError` subclass.
Scripts wrapping the ``keydock`` CLI can inspect the exit code to tell a
missing credential apart from a broken config file without parsing stderr.

Example::

    $ keydock auth resolve openai
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- no credential could be resolved
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""No usable credential could be resolved for the requested provider or profile."""

EXIT_NOT_FOUND = 4
"""The requested profile or channel does not exist."""

EXIT_REGISTRY_ERROR = 10
"""The plugin registry was required but has not been activated."""
