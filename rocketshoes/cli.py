"""
Command-line front end for the cart.

Usage:
    python -m rocketshoes show [--json]
    python -m rocketshoes add 3
    python -m rocketshoes update 3 2
    python -m rocketshoes remove 3
"""
import argparse
import asyncio
import json
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

# Settings are read at import, so the .env file goes first
load_dotenv()

from rocketshoes import config  # noqa: E402
from rocketshoes.api import ShopApi  # noqa: E402
from rocketshoes.cart import CartManager, create_storage  # noqa: E402
from rocketshoes.i18n import get_text  # noqa: E402
from rocketshoes.notifications import ConsoleNotifier  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rocketshoes", description="Manage the shopping cart")
    parser.add_argument("--api-url", default=config.API_BASE_URL, help="stock/catalog API base URL")
    parser.add_argument(
        "--storage",
        choices=config.STORAGE_BACKENDS,
        default=config.CART_STORAGE,
        help="where the cart snapshot is kept",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="print the cart")
    show.add_argument("--json", action="store_true", help="print the cart summary as JSON")

    add = sub.add_parser("add", help="add one unit of a product")
    add.add_argument("product_id", type=int)

    remove = sub.add_parser("remove", help="remove a product from the cart")
    remove.add_argument("product_id", type=int)

    update = sub.add_parser("update", help="set the quantity of a product in the cart")
    update.add_argument("product_id", type=int)
    update.add_argument("amount", type=int)

    return parser


def format_cart(manager: CartManager, language: str = config.LANGUAGE) -> str:
    if not manager.cart:
        return get_text("cart.empty", language)
    return "\n".join(
        get_text(
            "cart.line",
            language,
            id=line.id,
            title=getattr(line, "title", None) or "-",
            amount=line.amount,
        )
        for line in manager.cart
    )


async def run(args: argparse.Namespace) -> int:
    try:
        storage = create_storage(args.storage)
    except ValueError as e:
        print(f"rocketshoes: {e}", file=sys.stderr)
        return 2

    async with ShopApi(base_url=args.api_url) as api:
        manager = await CartManager.load(api, storage, ConsoleNotifier())

        if args.command == "add":
            result = await manager.add_product(args.product_id)
        elif args.command == "remove":
            result = await manager.remove_product(args.product_id)
        elif args.command == "update":
            result = await manager.update_product_amount(args.product_id, args.amount)
        else:
            result = None

        if getattr(args, "json", False):
            print(json.dumps(manager.summary(), ensure_ascii=False, indent=2))
        else:
            print(format_cart(manager))

    return 0 if result is None or result.ok else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
