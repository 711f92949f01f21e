# ==============================================
# CLI: Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Drive the widgets against a live admin API from the shell.
#   --path takes the admin console path the widget would be shown on.
#
# COMMANDS:
# ---------
#   python -m admin_widgets.cli notes list   --path /app/customers/cus_01
#   python -m admin_widgets.cli notes add    --path ... "Called about order"
#   python -m admin_widgets.cli notes edit   --path ... 1700000000000 "New text"
#   python -m admin_widgets.cli notes delete --path ... 1700000000000
#
#   python -m admin_widgets.cli quicklinks list   --path /app/products/prod_01
#   python -m admin_widgets.cli quicklinks add    --path ... --kind custom --title T --link URL
#   python -m admin_widgets.cli quicklinks add    --path ... --kind product --link HANDLE
#   python -m admin_widgets.cli quicklinks remove --path ... QUICKLINK_ID
#   python -m admin_widgets.cli quicklinks products    --path ... [TERM]
#   python -m admin_widgets.cli quicklinks collections --path ... [TERM]
#
#   python -m admin_widgets.cli password show --path /app/customers/cus_01
#   python -m admin_widgets.cli password set  --path ... yes|no
#
# EXIT CODES:
#   0 success, 1 widget could not mount or a save failed
#
# ==============================================

import argparse
import sys
from typing import List, Optional

from admin_widgets.config import AppConfig, get_config
from admin_widgets.log import setup_logging
from admin_widgets.remote.entity import EntityAPI
from admin_widgets.remote.http_client import MedusaAdminClient
from admin_widgets.widgets.notes import CustomerNotesWidget
from admin_widgets.widgets.password import PasswordRestrictionWidget
from admin_widgets.widgets.quicklinks import COLLECTION, LINK_KINDS, PRODUCT, QuicklinksWidget


def print_alert(message: str) -> None:
    print(f"✗ {message}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="admin-widgets",
        description="Manage customer notes, password restriction and product quicklinks",
    )
    widgets = parser.add_subparsers(dest="widget", required=True)

    notes = widgets.add_parser("notes", help="Customer notes")
    notes_cmd = notes.add_subparsers(dest="command", required=True)
    for name in ("list", "add", "edit", "delete"):
        sub = notes_cmd.add_parser(name)
        sub.add_argument("--path", required=True, help="Admin path, e.g. /app/customers/cus_01")
        if name in ("edit", "delete"):
            sub.add_argument("note_id", type=int)
        if name in ("add", "edit"):
            sub.add_argument("text")

    links = widgets.add_parser("quicklinks", help="Product quicklinks")
    links_cmd = links.add_subparsers(dest="command", required=True)
    for name in ("list", "add", "remove", "products", "collections"):
        sub = links_cmd.add_parser(name)
        sub.add_argument("--path", required=True, help="Admin path, e.g. /app/products/prod_01")
        if name == "add":
            sub.add_argument("--kind", choices=LINK_KINDS, default="custom")
            sub.add_argument("--title", default="")
            sub.add_argument("--link", required=True)
        elif name == "remove":
            sub.add_argument("quicklink_id")
        elif name in ("products", "collections"):
            sub.add_argument("term", nargs="?", default="")

    password = widgets.add_parser("password", help="Password change restriction")
    password_cmd = password.add_subparsers(dest="command", required=True)
    for name in ("show", "set"):
        sub = password_cmd.add_parser(name)
        sub.add_argument("--path", required=True, help="Admin path, e.g. /app/customers/cus_01")
        if name == "set":
            sub.add_argument("value", choices=("yes", "no"))

    return parser


def run_notes(api: EntityAPI, config: AppConfig, args) -> int:
    widget = CustomerNotesWidget(api, notifier=print_alert, author=config.widgets.author)
    if not widget.mount(args.path):
        print(f"✗ Could not load customer for {args.path}")
        return 1

    if args.command == "add":
        ok = widget.add_note(args.text)
    elif args.command == "edit":
        ok = widget.save_edit(args.note_id, args.text)
    elif args.command == "delete":
        ok = widget.delete_note(args.note_id)
    else:
        ok = True

    print(widget.render())
    return 0 if ok else 1


def run_quicklinks(api: EntityAPI, config: AppConfig, args) -> int:
    widget = QuicklinksWidget(api, notifier=print_alert, picker_limit=config.widgets.picker_limit)
    if not widget.mount(args.path):
        print(f"✗ Could not load product for {args.path}")
        return 1

    if args.command == "products":
        for product in widget.search_products(args.term):
            print(f"{product.handle}\t{product.title}")
        return 0
    if args.command == "collections":
        for collection in widget.search_collections(args.term):
            print(f"{collection.handle}\t{collection.title}")
        return 0

    ok = True
    if args.command == "add":
        widget.select_kind(args.kind)
        if args.kind == PRODUCT:
            widget.search_products(args.link)
            widget.choose_product(args.link)
        elif args.kind == COLLECTION:
            widget.search_collections(args.link)
            widget.choose_collection(args.link)
        else:
            widget.link = args.link
        if args.title:
            widget.title = args.title
        ok = widget.add_quicklink()
        if not ok and not widget.can_add:
            print("✗ A link is required, and custom links need a title", file=sys.stderr)
    elif args.command == "remove":
        ok = widget.remove_quicklink(args.quicklink_id)

    print(widget.render())
    return 0 if ok else 1


def run_password(api: EntityAPI, args) -> int:
    widget = PasswordRestrictionWidget(api)
    if not widget.mount(args.path):
        print(f"✗ Could not load customer for {args.path}")
        return 1

    ok = True
    if args.command == "set":
        ok = widget.set_can_change_password(args.value == "yes")
        if not ok:
            print("✗ Failed to update password restriction", file=sys.stderr)

    print(widget.render())
    return 0 if ok else 1


def main(argv: Optional[List[str]] = None, api: Optional[EntityAPI] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logging(config.log_level)

    client = None
    if api is None:
        client = MedusaAdminClient.from_config(config.api)
        api = client

    try:
        if args.widget == "notes":
            return run_notes(api, config, args)
        if args.widget == "quicklinks":
            return run_quicklinks(api, config, args)
        return run_password(api, args)
    finally:
        if client is not None:
            client.close()


if __name__ == "__main__":
    sys.exit(main())
