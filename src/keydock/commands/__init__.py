"""Built-in CLI sub-commands for keydock.

* :mod:`~keydock.commands.auth` -- resolve provider credentials, classify
  auth modes and manage stored profiles.
* :mod:`~keydock.commands.channels` -- inspect the merged channel dock
  table for a registry snapshot.

Each module exports a :class:`typer.Typer` sub-application registered on
the root app in :mod:`keydock.app`.
"""
