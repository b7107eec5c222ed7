"""
Console email sender adapter.

This module provides a console-based email sender, logging confirmation
links to stdout for demo and development purposes.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Delivers confirmation emails via console logging.

    In production, this would be replaced with an SMTP adapter exposing
    the same send_confirmation_link() method.
    """

    def send_confirmation_link(self, email: str, subject: str, link: str) -> None:
        """
        Log the confirmation link at INFO level (simulates email delivery).

        Args:
            email: Recipient email address
            subject: Email subject line
            link: Signed confirmation URL
        """
        logger.info("[CONFIRMATION] Email: %s Subject: %s Link: %s", email, subject, link)
