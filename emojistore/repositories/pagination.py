"""Filtered, cursor-bounded emoji listing.

Emoji are ordered by the derived key ``lower(shortcode@domain)``, which groups
by shortcode first and domain second. A listing returns only IDs; hydration is
a separate step.

With a forward cursor (``max_shortcode_domain``) the query keeps keys strictly
greater than the cursor, ascending. With a backward cursor
(``min_shortcode_domain``) it keeps keys strictly less than the cursor and runs
a descending bounded scan, then the IDs are reversed in memory. Callers always
observe ascending order.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from emojistore.db.query import SelectQuery
from emojistore.db.storage import Storage
from emojistore.domain.context import OperationContext

# Reserved ``domain`` value meaning "no domain filter".
EMOJI_ALL_DOMAINS = "all"


class EmojiListParams(BaseModel):
    """Filters and cursors for :meth:`PaginatedLister.list_ids`.

    >>> EmojiListParams(domain=EMOJI_ALL_DOMAINS, min_shortcode_domain="dog@").paging_backward
    True
    """

    domain: str = Field(default="", description='"" = local only, "all" = any domain')
    include_disabled: bool = False
    include_enabled: bool = False
    shortcode: str = Field(default="", description="Case-insensitive exact shortcode")
    max_shortcode_domain: str = Field(default="", description="Forward cursor (exclusive)")
    min_shortcode_domain: str = Field(default="", description="Backward cursor (exclusive)")
    limit: int = Field(default=0, description="Row cap; 0 or less means unlimited")

    model_config = ConfigDict(frozen=True)

    @property
    def paging_backward(self) -> bool:
        return bool(self.min_shortcode_domain)


class PaginatedLister:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._sort_key = storage.dialect.sort_key_expression("emoji.shortcode", "emoji.domain")

    def build_query(self, params: EmojiListParams) -> SelectQuery:
        """Build the ID query; the sort key is selected in a subquery and dropped outside."""
        sub = (
            SelectQuery("emojis AS emoji")
            .column("emoji.id AS emoji_ids", f"{self._sort_key} AS shortcode_domain")
        )

        if params.domain == "":
            sub.where("emoji.domain IS NULL")
        elif params.domain != EMOJI_ALL_DOMAINS:
            sub.where("emoji.domain = ?", params.domain)

        if params.include_disabled and not params.include_enabled:
            sub.where("emoji.disabled = ?", True)
        elif params.include_enabled and not params.include_disabled:
            sub.where("emoji.disabled = ?", False)

        if params.shortcode:
            sub.where("LOWER(emoji.shortcode) = LOWER(?)", params.shortcode)

        if params.max_shortcode_domain:
            sub.where(f"{self._sort_key} > LOWER(?)", params.max_shortcode_domain)

        # Both cursors: both bounds apply and the page is fetched backwards.
        order = "ASC"
        if params.min_shortcode_domain:
            sub.where(f"{self._sort_key} < LOWER(?)", params.min_shortcode_domain)
            order = "DESC"

        sub.order(f"shortcode_domain {order}")
        if params.limit > 0:
            sub.limit(params.limit)

        return (
            SelectQuery(sub, alias="subquery")
            .column("subquery.emoji_ids")
            .order(f"subquery.shortcode_domain {order}")
        )

    def list_ids(self, ctx: OperationContext, params: EmojiListParams) -> list[str]:
        ids = self._storage.select_ids(ctx, self.build_query(params))
        if params.paging_backward:
            ids.reverse()
        return ids

    def useable_ids(self, ctx: OperationContext) -> list[str]:
        """IDs of local, enabled, picker-visible emoji ordered by shortcode."""
        query = (
            SelectQuery("emojis AS emoji")
            .column("emoji.id")
            .where("emoji.visible_in_picker = ?", True)
            .where("emoji.disabled = ?", False)
            .where("emoji.domain IS NULL")
            .order("emoji.shortcode ASC")
        )
        return self._storage.select_ids(ctx, query)
