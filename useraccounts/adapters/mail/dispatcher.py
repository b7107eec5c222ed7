"""
Fire-and-forget notification dispatcher.

Implements the NotificationDispatcher port on a thread pool: dispatch()
only queues the work, so a slow or failing mail backend never delays or
fails the request that triggered it.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import urlencode

from useraccounts.domain.ports import EmailSender, EmailVerifier, MailEvent, MailEventKind

logger = logging.getLogger(__name__)

# Confirmation routes served by useraccounts.api.endpoints.verification
REGISTRATION_CONFIRM_PATH = "/verify/email"
UPDATE_CONFIRM_PATH = "/verify/email/update"

_SUBJECTS = {
    MailEventKind.REGISTRATION: "Confirm your email address",
    MailEventKind.UPDATE: "Confirm your new email address",
}


class ThreadedMailDispatcher:
    """Builds signed confirmation links and hands them to an EmailSender off-thread."""

    def __init__(
        self,
        sender: EmailSender,
        verifier: EmailVerifier,
        base_url: str,
        max_workers: int = 2,
    ) -> None:
        self._sender = sender
        self._verifier = verifier
        self._base_url = base_url.rstrip("/")
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="mail")

    def dispatch(self, event: MailEvent) -> None:
        """Queue delivery of the event and return immediately."""
        try:
            self._executor.submit(self._deliver, event)
        except RuntimeError:
            # Executor already shut down
            logger.error(
                "Dropped %s notification for account id=%s: dispatcher is shut down",
                event.kind.value,
                event.account.id,
            )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def build_link(self, event: MailEvent) -> str:
        """
        Build the signed confirmation URL for an event.

        The token binds the confirmed email and the event kind; an update
        token also binds the pending address the link is mailed to.
        """
        account = event.account
        pending_email = account.pending_email if event.kind == MailEventKind.UPDATE else None
        signed = self._verifier.generate_signature(account.id, account.email, event.kind, pending_email)
        path = REGISTRATION_CONFIRM_PATH if event.kind == MailEventKind.REGISTRATION else UPDATE_CONFIRM_PATH
        query = urlencode({"id": account.id, "token": signed.token})
        return f"{self._base_url}{path}?{query}"

    def _deliver(self, event: MailEvent) -> None:
        account = event.account
        recipient = account.pending_email if event.kind == MailEventKind.UPDATE else account.email
        try:
            link = self.build_link(event)
            self._sender.send_confirmation_link(recipient, _SUBJECTS[event.kind], link)
        except Exception:
            logger.exception(
                "Failed to deliver %s notification for account id=%s", event.kind.value, account.id
            )
