"""Cache-aside repository for custom emoji and emoji categories.

The public entry points live in :mod:`emojistore.repositories`; use
:func:`emojistore.repositories.factory.build_repositories` to wire them from
settings.
"""

__all__: list[str] = []
