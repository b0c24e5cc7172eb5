"""Display helpers for kirana."""

from .models import Customer, Order, Product


def format_money(amount: float) -> str:
    """Format an amount like '$8,250' or '$12.50'."""
    if float(amount).is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


def format_product(product: Product, verbose: bool = False) -> str:
    """Format a product for display."""
    result = (
        f"{product.id}  {product.name} [{product.category}]  "
        f"{product.current_stock} {product.unit}  "
        f"{format_money(product.selling_price)}  ({product.stock_status_label})"
    )
    if verbose:
        result += f"\n         Min stock: {product.min_stock} {product.unit}"
        result += f"\n         Cost price: {format_money(product.cost_price)}"
        result += f"\n         Last updated: {product.last_updated}"
    return result


def format_customer(customer: Customer, verbose: bool = False) -> str:
    """Format a customer for display."""
    result = (
        f"{customer.id}  {customer.name}  {customer.email}  {customer.phone}  "
        f"orders: {customer.total_orders}  spent: {format_money(customer.total_spent)}  "
        f"last: {customer.last_order}"
    )
    if verbose:
        if customer.address:
            result += f"\n         Address: {customer.address}"
        result += f"\n         Joined: {customer.join_date}"
    return result


def format_order(order: Order, verbose: bool = False) -> str:
    """Format an order for display."""
    result = (
        f"{order.id}  {order.customer_name}  {order.date}  "
        f"{order.item_count} item(s)  {format_money(order.total)}  "
        f"({order.status.capitalize()})"
    )
    if verbose:
        result += f"\n         Time: {order.time}"
        for item in order.items:
            result += (
                f"\n           | {item.quantity} x {item.product_name} "
                f"@ {format_money(item.unit_price)} = {format_money(item.subtotal)}"
            )
    return result
