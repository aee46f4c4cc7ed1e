"""
CLI command group registry.

Every command group is a Typer sub-app mounted on the root app through
:class:`CliRouter`, so ``splicedesk --help`` and the registry agree on what
exists.
"""

from __future__ import annotations

import typer


class CliRouter:
    """Mounts command groups on the root Typer app and remembers them."""

    def __init__(self, root_app: typer.Typer) -> None:
        self.root_app = root_app
        self._groups: dict[str, str | None] = {}

    def register(self, name: str, command_group: typer.Typer, *, help_text: str | None = None) -> None:
        """Mount ``command_group`` as ``splicedesk <name>``.

        Raises:
            ValueError: ``name`` is already taken
        """
        if name in self._groups:
            raise ValueError(f"Command group '{name}' is already registered")
        self.root_app.add_typer(command_group, name=name, help=help_text)
        self._groups[name] = help_text

    def list_registered_groups(self) -> list[str]:
        """Group names in registration order."""
        return list(self._groups)
