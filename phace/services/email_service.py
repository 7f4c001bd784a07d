"""
Email Service
Order notifications sent through SES, rendered from Jinja2 templates

Author: Phace Web Team
Date: 2025-02-24
"""
import logging
from typing import Dict

from jinja2 import Environment, PackageLoader, select_autoescape

from phace.core.aws import get_ses_client
from phace.core.config import settings
from phace.domain.order import Order

logger = logging.getLogger(__name__)

_templates = Environment(
    loader=PackageLoader("phace", "templates/email"),
    autoescape=select_autoescape(["html"])
)


class EmailService:
    """
    Service for transactional email

    Handles:
    - Order confirmation to the customer
    - Order status updates to the customer
    - New-order notification to the shop admin
    """

    def __init__(self, sender: str = None):
        self.sender = sender or settings.SES_SENDER_EMAIL
        if not self.sender:
            raise ValueError("SES not configured. Set SES_SENDER_EMAIL")

    def _send(self, to_address: str, subject: str, template: str, **context) -> Dict:
        html = _templates.get_template(template).render(**context)
        return get_ses_client().send_email(
            Source=self.sender,
            Destination={'ToAddresses': [to_address]},
            Message={
                'Subject': {'Data': subject},
                'Body': {'Html': {'Data': html}},
            }
        )

    def send_order_confirmation(self, order: Order, customer_email: str) -> Dict:
        return self._send(
            customer_email,
            f"Order Confirmation #{order.id}",
            "order_confirmation.html",
            order=order
        )

    def send_order_status_update(self, order: Order, customer_email: str, status: str) -> Dict:
        logger.info(f"Sending status '{status}' for order {order.id} to {customer_email}")
        return self._send(
            customer_email,
            f"Order {status.capitalize()} - #{order.id}",
            "order_status_update.html",
            order=order,
            status=status
        )

    def send_admin_notification(self, order: Order) -> Dict:
        if not settings.ADMIN_EMAIL:
            raise ValueError("ADMIN_EMAIL is not configured")
        return self._send(
            settings.ADMIN_EMAIL,
            f"New Order Received - #{order.id}",
            "admin_new_order.html",
            order=order
        )
