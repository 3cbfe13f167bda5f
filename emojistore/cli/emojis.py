from __future__ import annotations

import argparse
from typing import Iterable, List, Sequence

from emojistore.config.settings import load_settings
from emojistore.db.migrate import run_migrations
from emojistore.domain.entities import Emoji, EmojiCategory
from emojistore.domain.errors import NoEntriesError, NotFoundError, RepositoryError
from emojistore.logging_config import get_logger
from emojistore.repositories.factory import Repositories, build_repositories
from emojistore.repositories.pagination import EMOJI_ALL_DOMAINS, EmojiListParams


def _format_emojis(rows: Iterable[Emoji]) -> str:
    out_lines: List[str] = []
    for e in rows:
        flags = []
        if e.disabled:
            flags.append("disabled")
        if not e.visible_in_picker:
            flags.append("hidden")
        category = e.category.name if e.category is not None else "-"
        suffix = f" ({', '.join(flags)})" if flags else ""
        out_lines.append(f":{e.shortcode}: {e.domain or 'local'} [{category}] [id={e.id}]{suffix}")
    return "\n".join(out_lines)


def _format_categories(rows: Iterable[EmojiCategory]) -> str:
    return "\n".join(f"{c.name} [id={c.id}]" for c in rows)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Inspect and manage the custom emoji store")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Apply pending schema migrations")

    ls = sub.add_parser("list", help="List emoji in shortcode@domain order")
    ls.add_argument(
        "--domain",
        default="",
        help=f'Domain filter: "" for local only, "{EMOJI_ALL_DOMAINS}" for every domain',
    )
    ls.add_argument("--disabled", action="store_true", help="Only disabled emoji")
    ls.add_argument("--enabled", action="store_true", help="Only enabled emoji")
    ls.add_argument("--shortcode", default="", help="Exact shortcode, ignoring case")
    g = ls.add_mutually_exclusive_group()
    g.add_argument("--after", default="", metavar="SHORTCODE@DOMAIN", help="Page forward from cursor")
    g.add_argument("--before", default="", metavar="SHORTCODE@DOMAIN", help="Page backward from cursor")
    ls.add_argument("--limit", type=int, default=0, help="Maximum number of emoji to show")

    sub.add_parser("useable", help="List emoji shown in the local picker")
    sub.add_parser("categories", help="List emoji categories")

    rm = sub.add_parser("delete", help="Delete an emoji and its status/account links")
    rm.add_argument("emoji_id")
    return p


def _run(repos: Repositories, args: argparse.Namespace) -> int:
    if args.command == "init-db":
        applied = run_migrations(repos.storage)
        print(f"Applied migrations: {', '.join(applied)}" if applied else "Schema up to date.")
        return 0

    if args.command == "delete":
        try:
            repos.emojis.get_emoji_by_id(args.emoji_id)
        except NotFoundError:
            print(f"No emoji with id {args.emoji_id}.")
            return 1
        repos.emojis.delete_emoji_by_id(args.emoji_id)
        print(f"Deleted emoji {args.emoji_id}.")
        return 0

    try:
        if args.command == "categories":
            print(_format_categories(repos.categories.get_emoji_categories()))
            return 0
        if args.command == "useable":
            rows = repos.emojis.get_useable_emojis()
        else:
            params = EmojiListParams(
                domain=args.domain,
                include_disabled=args.disabled,
                include_enabled=args.enabled,
                shortcode=args.shortcode,
                max_shortcode_domain=args.after,
                min_shortcode_domain=args.before,
                limit=args.limit,
            )
            rows = repos.emojis.get_emojis(params)
    except NoEntriesError:
        print("Nothing found.")
        return 0
    print(_format_emojis(rows))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    get_logger()
    repos = build_repositories(load_settings())
    try:
        return _run(repos, args)
    except RepositoryError as exc:
        print(f"error: {exc}")
        return 2
    finally:
        repos.close()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
