"""Command-line interface for kirana."""

import argparse
import json
import logging
import sys

from . import __version__
from .context import AppContext
from .errors import KiranaError, RecordNotFoundError
from .logging_config import setup_logging
from .models import IN_STOCK
from .record_store import CUSTOMERS, ORDERS, PRODUCTS
from .utils import format_customer, format_money, format_order, format_product

logger = logging.getLogger(__name__)


def get_context() -> AppContext:
    """Open an AppContext on the configured data directory."""
    return AppContext().open()


def _fail(e: KiranaError) -> int:
    logger.error("Command failed", extra={"error": str(e), "error_type": type(e).__name__})
    print(f"Error: {e}", file=sys.stderr)
    return 1


def cmd_init(args: argparse.Namespace) -> int:
    """Open (creating if needed) and seed the database."""
    try:
        with get_context() as ctx:
            layout = ctx.store.describe()

        print(f"Database: {layout['name']} (version {layout['version']})")
        print(f"Location: {layout['path']}")
        for name, info in layout["partitions"].items():
            indexes = ", ".join(info["indexes"]) or "none"
            print(f"  {name}: {info['count']} record(s), key '{info['key_path']}', indexes: {indexes}")
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_dashboard(args: argparse.Namespace) -> int:
    """Show dashboard metrics."""
    try:
        with get_context() as ctx:
            summary = ctx.shop.dashboard()

        if args.json:
            print(json.dumps(summary.to_dict(), indent=2))
            return 0

        print(f"Total sales:     {format_money(summary.total_sales)}")
        print(f"Total orders:    {summary.total_orders:,}")
        print(f"Total customers: {summary.total_customers:,}")
        print(f"Total products:  {summary.total_products:,}")

        if summary.low_stock or summary.out_of_stock:
            print()
            print(f"NEEDS RESTOCK ({len(summary.low_stock) + len(summary.out_of_stock)}):")
            for product in summary.out_of_stock + summary.low_stock:
                print(f"  {format_product(product)}")
        return 0

    except KiranaError as e:
        return _fail(e)


# --- Products ---


def cmd_products_list(args: argparse.Namespace) -> int:
    """List products."""
    try:
        with get_context() as ctx:
            products = ctx.shop.list_products()

        if args.category:
            products = [p for p in products if p.category == args.category]
        if args.low:
            products = [p for p in products if p.stock_status != IN_STOCK]

        if not products:
            print("No products found.")
            return 0

        if args.json:
            print(json.dumps([p.to_dict() for p in products], indent=2))
        else:
            print(f"Products ({len(products)}):")
            print()
            for product in products:
                print(format_product(product, verbose=args.verbose))
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_products_add(args: argparse.Namespace) -> int:
    """Add a product."""
    try:
        with get_context() as ctx:
            product = ctx.shop.add_product(
                name=args.name,
                category=args.category,
                current_stock=args.stock,
                min_stock=args.min_stock,
                unit=args.unit,
                cost_price=args.cost,
                selling_price=args.price,
            )

        print(f"Added product: {product.id}")
        print(f"  Name: {product.name}")
        print(f"  Stock: {product.current_stock} {product.unit} ({product.stock_status_label})")
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_products_remove(args: argparse.Namespace) -> int:
    """Remove a product."""
    try:
        with get_context() as ctx:
            ctx.shop.delete_product(args.product_id)

        print(f"Deleted product: {args.product_id}")
        return 0

    except KiranaError as e:
        return _fail(e)


# --- Customers ---


def cmd_customers_list(args: argparse.Namespace) -> int:
    """List customers."""
    try:
        with get_context() as ctx:
            customers = ctx.shop.list_customers()

        if not customers:
            print("No customers found.")
            return 0

        if args.json:
            print(json.dumps([c.to_dict() for c in customers], indent=2))
        else:
            print(f"Customers ({len(customers)}):")
            print()
            for customer in customers:
                print(format_customer(customer, verbose=args.verbose))
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_customers_add(args: argparse.Namespace) -> int:
    """Add a customer."""
    try:
        with get_context() as ctx:
            customer = ctx.shop.add_customer(
                name=args.name,
                email=args.email,
                phone=args.phone,
                address=args.address,
            )

        print(f"Added customer: {customer.id}")
        print(f"  Name: {customer.name}")
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_customers_remove(args: argparse.Namespace) -> int:
    """Remove a customer."""
    try:
        with get_context() as ctx:
            ctx.shop.delete_customer(args.customer_id)

        print(f"Deleted customer: {args.customer_id}")
        return 0

    except KiranaError as e:
        return _fail(e)


# --- Orders ---


def cmd_orders_list(args: argparse.Namespace) -> int:
    """List orders."""
    try:
        with get_context() as ctx:
            orders = ctx.shop.list_orders()

        if args.status:
            orders = [o for o in orders if o.status == args.status]

        if not orders:
            print("No orders found.")
            return 0

        if args.json:
            print(json.dumps([o.to_dict() for o in orders], indent=2))
        else:
            print(f"Orders ({len(orders)}):")
            print()
            for order in orders:
                print(format_order(order, verbose=args.verbose))
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_orders_add(args: argparse.Namespace) -> int:
    """Create an order."""
    try:
        with get_context() as ctx:
            order = ctx.shop.add_order(
                customer_id=args.customer,
                product_id=args.product,
                quantity=args.quantity,
                unit_price=args.price,
            )

        print(f"Created order: {order.id}")
        print(f"  Customer: {order.customer_name}")
        print(f"  Total: {format_money(order.total)}")
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_orders_show(args: argparse.Namespace) -> int:
    """Show one order."""
    try:
        with get_context() as ctx:
            order = ctx.shop.get_order(args.order_id)
        if order is None:
            raise RecordNotFoundError(ORDERS, args.order_id)

        if args.json:
            print(json.dumps(order.to_dict(), indent=2))
        else:
            print(format_order(order, verbose=True))
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_orders_remove(args: argparse.Namespace) -> int:
    """Remove an order."""
    try:
        with get_context() as ctx:
            ctx.shop.delete_order(args.order_id)

        print(f"Deleted order: {args.order_id}")
        return 0

    except KiranaError as e:
        return _fail(e)


# --- Settings & assistant ---


def _parse_setting(key: str, raw: str):
    if key == "aiEnabled":
        return raw.lower() in ("1", "true", "yes", "on")
    return raw


def cmd_settings_show(args: argparse.Namespace) -> int:
    """Show settings."""
    ctx = AppContext()
    settings = ctx.settings.all()
    if args.json:
        print(json.dumps(settings, indent=2))
        return 0
    for key, value in settings.items():
        if key == "apiKey" and value:
            value = value[:4] + "..."
        print(f"{key}: {value}")
    return 0


def cmd_settings_set(args: argparse.Namespace) -> int:
    """Set one setting."""
    try:
        ctx = AppContext()
        ctx.settings.set(args.key, _parse_setting(args.key, args.value))
        print(f"Saved {args.key}")
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_settings_toggle_theme(args: argparse.Namespace) -> int:
    """Switch between dark and light theme."""
    try:
        theme = AppContext().settings.toggle_theme()
        print(f"Switched to {theme} mode")
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_ask(args: argparse.Namespace) -> int:
    """Ask the assistant a question."""
    try:
        with get_context() as ctx:
            print(ctx.ask(" ".join(args.message)))
        return 0

    except KiranaError as e:
        return _fail(e)


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the API server."""
    import uvicorn

    print("Starting kirana API server...")
    print(f"API docs: http://{args.host}:{args.port}/docs")
    print()

    # When reload is enabled, uvicorn requires the app as an import string
    app_target = "kirana.api:app" if args.reload else None
    if app_target is None:
        from .api import app
        app_target = app

    uvicorn.run(app_target, host=args.host, port=args.port, reload=args.reload)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="kirana",
        description="Manage products, orders and customers for a small shop.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("init", help="Create and seed the database if needed")

    dashboard_parser = subparsers.add_parser("dashboard", help="Show sales and stock summary")
    dashboard_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # products
    products_parser = subparsers.add_parser(PRODUCTS, help="Manage products")
    products_subparsers = products_parser.add_subparsers(dest="products_command")

    products_list_parser = products_subparsers.add_parser("list", help="List products")
    products_list_parser.add_argument("--category", "-c", help="Only this category")
    products_list_parser.add_argument(
        "--low", action="store_true", help="Only low or out-of-stock products"
    )
    products_list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    products_list_parser.add_argument("--verbose", "-v", action="store_true", help="Show details")

    products_add_parser = products_subparsers.add_parser("add", help="Add a product")
    products_add_parser.add_argument("name", help="Product name")
    products_add_parser.add_argument("--category", "-c", default="", help="Category")
    products_add_parser.add_argument("--stock", "-s", type=int, default=0, help="Current stock")
    products_add_parser.add_argument("--min-stock", "-m", type=int, default=0, help="Reorder threshold")
    products_add_parser.add_argument("--unit", "-u", default="", help="Unit, e.g. kg or L")
    products_add_parser.add_argument("--cost", type=float, default=0, help="Cost price")
    products_add_parser.add_argument("--price", "-p", type=float, default=0, help="Selling price")

    products_remove_parser = products_subparsers.add_parser("remove", help="Remove a product")
    products_remove_parser.add_argument("product_id", help="Product ID")

    # customers
    customers_parser = subparsers.add_parser(CUSTOMERS, help="Manage customers")
    customers_subparsers = customers_parser.add_subparsers(dest="customers_command")

    customers_list_parser = customers_subparsers.add_parser("list", help="List customers")
    customers_list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    customers_list_parser.add_argument("--verbose", "-v", action="store_true", help="Show details")

    customers_add_parser = customers_subparsers.add_parser("add", help="Add a customer")
    customers_add_parser.add_argument("name", help="Customer name")
    customers_add_parser.add_argument("--email", "-e", default="", help="Email address")
    customers_add_parser.add_argument("--phone", default="", help="Phone number")
    customers_add_parser.add_argument("--address", "-a", default="", help="Postal address")

    customers_remove_parser = customers_subparsers.add_parser("remove", help="Remove a customer")
    customers_remove_parser.add_argument("customer_id", help="Customer ID")

    # orders
    orders_parser = subparsers.add_parser(ORDERS, help="Manage orders")
    orders_subparsers = orders_parser.add_subparsers(dest="orders_command")

    orders_list_parser = orders_subparsers.add_parser("list", help="List orders")
    orders_list_parser.add_argument(
        "--status", choices=["pending", "completed"], help="Only orders with this status"
    )
    orders_list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    orders_list_parser.add_argument("--verbose", "-v", action="store_true", help="Show items")

    orders_add_parser = orders_subparsers.add_parser("add", help="Create an order")
    orders_add_parser.add_argument("--customer", required=True, help="Customer ID")
    orders_add_parser.add_argument("--product", required=True, help="Product ID")
    orders_add_parser.add_argument("--quantity", "-q", type=int, default=1, help="Quantity")
    orders_add_parser.add_argument(
        "--price", type=float, help="Unit price (default: product selling price)"
    )

    orders_show_parser = orders_subparsers.add_parser("show", help="Show an order")
    orders_show_parser.add_argument("order_id", help="Order ID")
    orders_show_parser.add_argument("--json", action="store_true", help="Output as JSON")

    orders_remove_parser = orders_subparsers.add_parser("remove", help="Remove an order")
    orders_remove_parser.add_argument("order_id", help="Order ID")

    # settings
    settings_parser = subparsers.add_parser("settings", help="Show or change settings")
    settings_subparsers = settings_parser.add_subparsers(dest="settings_command")

    settings_show_parser = settings_subparsers.add_parser("show", help="Show settings")
    settings_show_parser.add_argument("--json", action="store_true", help="Output as JSON")

    settings_set_parser = settings_subparsers.add_parser("set", help="Change one setting")
    settings_set_parser.add_argument("key", choices=["theme", "apiKey", "aiEnabled"])
    settings_set_parser.add_argument("value", help="New value")

    settings_subparsers.add_parser("toggle-theme", help="Switch dark/light theme")

    # ask
    ask_parser = subparsers.add_parser("ask", help="Ask the store assistant")
    ask_parser.add_argument("message", nargs="+", help="Question")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port", "-p", type=int, default=8000, help="Port to bind to (default: 8000)"
    )
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    return parser


# Subcommand groups: group name -> (dest attribute, {subcommand: handler})
GROUP_COMMANDS = {
    PRODUCTS: ("products_command", {
        "list": cmd_products_list,
        "add": cmd_products_add,
        "remove": cmd_products_remove,
    }),
    CUSTOMERS: ("customers_command", {
        "list": cmd_customers_list,
        "add": cmd_customers_add,
        "remove": cmd_customers_remove,
    }),
    ORDERS: ("orders_command", {
        "list": cmd_orders_list,
        "add": cmd_orders_add,
        "show": cmd_orders_show,
        "remove": cmd_orders_remove,
    }),
    "settings": ("settings_command", {
        "show": cmd_settings_show,
        "set": cmd_settings_set,
        "toggle-theme": cmd_settings_toggle_theme,
    }),
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "serve":
        setup_logging(json_output=True)
    else:
        setup_logging(json_output=False, level=args.log_level.upper())

    if args.command in GROUP_COMMANDS:
        dest, handlers = GROUP_COMMANDS[args.command]
        sub = getattr(args, dest, None)
        if not sub:
            parser.parse_args([args.command, "--help"])
            return 0
        return handlers[sub](args)

    commands = {
        "init": cmd_init,
        "dashboard": cmd_dashboard,
        "ask": cmd_ask,
        "serve": cmd_serve,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
