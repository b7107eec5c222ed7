"""
Unit tests for confirmation links end to end, without a database.

Links are built by ThreadedMailDispatcher, signed by JwtEmailVerifier and
redeemed through AccountService, so every binding in the token is exercised
against the account state the service reads.
"""

from urllib.parse import parse_qs, urlsplit
from unittest.mock import Mock

import pytest

from useraccounts.adapters.mail.dispatcher import ThreadedMailDispatcher
from useraccounts.adapters.verification.jwt_signer import JwtEmailVerifier
from useraccounts.domain.account import Account
from useraccounts.domain.accounts import AccountService
from useraccounts.domain.ports import ConfirmResult, MailEvent, MailEventKind


@pytest.fixture
def jwt_verifier() -> JwtEmailVerifier:
    return JwtEmailVerifier(secret="test-secret-with-enough-length-for-hs256", issuer="useraccounts", ttl_seconds=3600)


@pytest.fixture
def dispatcher(jwt_verifier: JwtEmailVerifier):
    dispatcher = ThreadedMailDispatcher(sender=Mock(), verifier=jwt_verifier, base_url="http://testserver")
    yield dispatcher
    dispatcher.shutdown(wait=True)


@pytest.fixture
def linked_service(repo: Mock, notifier: Mock, jwt_verifier: JwtEmailVerifier) -> AccountService:
    repo.mark_verified.return_value = True
    repo.promote_pending_email.return_value = True
    return AccountService(repository=repo, notifier=notifier, verifier=jwt_verifier, bcrypt_cost=4)


def token_from(link: str) -> str:
    return parse_qs(urlsplit(link).query)["token"][0]


class TestLinkPurpose:
    """A link only works on the route it was mailed for."""

    def test_update_link_cannot_verify_registration(
        self,
        linked_service: AccountService,
        dispatcher: ThreadedMailDispatcher,
        repo: Mock,
        account: Account,
    ) -> None:
        pending = account.with_pending_email("b@x.com")
        repo.get_by_id.return_value = pending
        token = token_from(dispatcher.build_link(MailEvent(pending, MailEventKind.UPDATE)))

        result = linked_service.confirm_registration(7, token)

        assert result == ConfirmResult.INVALID
        repo.mark_verified.assert_not_called()

    def test_registration_link_cannot_promote_email(
        self,
        linked_service: AccountService,
        dispatcher: ThreadedMailDispatcher,
        repo: Mock,
        account: Account,
    ) -> None:
        token = token_from(dispatcher.build_link(MailEvent(account, MailEventKind.REGISTRATION)))
        repo.get_by_id.return_value = account.with_pending_email("evil@x.com")

        result = linked_service.confirm_email_change(7, token)

        assert result == ConfirmResult.INVALID
        repo.promote_pending_email.assert_not_called()

    def test_registration_link_verifies(
        self,
        linked_service: AccountService,
        dispatcher: ThreadedMailDispatcher,
        repo: Mock,
        account: Account,
    ) -> None:
        repo.get_by_id.return_value = account
        token = token_from(dispatcher.build_link(MailEvent(account, MailEventKind.REGISTRATION)))

        assert linked_service.confirm_registration(7, token) == ConfirmResult.CONFIRMED
        repo.mark_verified.assert_called_once_with(7)


class TestPendingEmailBinding:
    """An email-change link is bound to the address it was mailed to."""

    def test_link_promotes_the_address_it_was_mailed_to(
        self,
        linked_service: AccountService,
        dispatcher: ThreadedMailDispatcher,
        repo: Mock,
        account: Account,
    ) -> None:
        pending = account.with_pending_email("b@x.com")
        repo.get_by_id.return_value = pending
        token = token_from(dispatcher.build_link(MailEvent(pending, MailEventKind.UPDATE)))

        assert linked_service.confirm_email_change(7, token) == ConfirmResult.CONFIRMED
        repo.promote_pending_email.assert_called_once_with(7, "b@x.com")

    def test_link_for_replaced_address_rejected(
        self,
        linked_service: AccountService,
        dispatcher: ThreadedMailDispatcher,
        repo: Mock,
        account: Account,
    ) -> None:
        """Link mailed to b@x.com must not promote typo@x.con submitted afterwards."""
        first = account.with_pending_email("b@x.com")
        token = token_from(dispatcher.build_link(MailEvent(first, MailEventKind.UPDATE)))
        repo.get_by_id.return_value = account.with_pending_email("typo@x.con")

        result = linked_service.confirm_email_change(7, token)

        assert result == ConfirmResult.INVALID
        repo.promote_pending_email.assert_not_called()
