from ._timestamps import utcnow
from .category import CATEGORY_COLUMNS, EmojiCategory
from .emoji import EMOJI_COLUMNS, Emoji, shortcode_domain_key

__all__ = [
    "CATEGORY_COLUMNS",
    "EMOJI_COLUMNS",
    "Emoji",
    "EmojiCategory",
    "shortcode_domain_key",
    "utcnow",
]
