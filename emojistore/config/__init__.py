"""Configuration package.

Note: Do not construct settings at package import time to keep test
collection free from environment requirements. Call
``emojistore.config.settings.load_settings()`` where needed.
"""

__all__: list[str] = []
