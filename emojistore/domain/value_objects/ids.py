from typing import NewType

EmojiId = NewType("EmojiId", str)
EmojiCategoryId = NewType("EmojiCategoryId", str)
