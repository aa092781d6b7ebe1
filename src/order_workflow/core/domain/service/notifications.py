from __future__ import annotations

from order_workflow.core.domain.model.notification import NotificationMessage
from order_workflow.core.domain.model.order import Order, OrderStatus, money, now_utc


def order_created_message(order: Order, to: str) -> NotificationMessage:
    items_html = "".join(
        f"<li>{it.product_name} - Quantity: {it.quantity}"
        f" - Price: ${money(it.unit_price)} - Subtotal: ${money(it.subtotal)}</li>"
        for it in order.items
    )
    body = (
        "<h2>New order received</h2>"
        f"<p><strong>Order ID:</strong> {order.id}</p>"
        f"<p><strong>User ID:</strong> {order.user_id}</p>"
        f"<p><strong>Status:</strong> {order.status.value}</p>"
        f"<p><strong>Total:</strong> ${money(order.total)}</p>"
        f"<h3>Items:</h3><ul>{items_html}</ul>"
        f"<p><strong>Date:</strong> {_stamp()} UTC</p>"
    )
    return NotificationMessage(to=to, subject=f"New order #{order.id}", body=body)


def status_changed_message(
    order: Order, previous: OrderStatus, to: str
) -> NotificationMessage:
    body = (
        "<h2>Order status change</h2>"
        f"<p><strong>Order ID:</strong> {order.id}</p>"
        f"<p><strong>User ID:</strong> {order.user_id}</p>"
        f"<p><strong>Previous status:</strong> {previous.value}</p>"
        f"<p><strong>New status:</strong> {order.status.value}</p>"
        f"<p><strong>Total:</strong> ${money(order.total)}</p>"
        f"<p><strong>Updated:</strong> {_stamp()} UTC</p>"
    )
    return NotificationMessage(
        to=to, subject=f"Order #{order.id} - status change", body=body
    )


def _stamp() -> str:
    return now_utc().strftime("%Y-%m-%d %H:%M:%S")
