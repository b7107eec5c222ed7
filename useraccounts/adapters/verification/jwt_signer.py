"""Signed, time-bounded email confirmation tokens backed by PyJWT."""

import hashlib
import hmac
import time
from datetime import datetime, timezone
from typing import Any

import jwt

from useraccounts.domain.exceptions import VerificationFailed
from useraccounts.domain.ports import MailEventKind, SignedToken


def _email_digest(email: str) -> str:
    """Return the SHA-256 hex digest binding a token to an email address."""
    return hashlib.sha256(email.encode("utf-8")).hexdigest()


class JwtEmailVerifier:
    """
    Implements EmailVerifier protocol with HS256 JWTs.

    Claims:
    - `sub`: account id
    - `eml`: digest of the confirmed email, so the token stops validating
      once the confirmed email changes
    - `pur`: the flow the link was mailed for (registration or update)
    - `pnd`: digest of the pending email, on email-change tokens only
    """

    def __init__(self, secret: str, issuer: str, ttl_seconds: int) -> None:
        self._secret = secret
        self._issuer = issuer
        self._ttl_seconds = ttl_seconds

    def generate_signature(
        self,
        account_id: int,
        email: str,
        purpose: MailEventKind,
        pending_email: str | None = None,
    ) -> SignedToken:
        """
        Create a signed token for one confirmation flow.

        Raises:
            ValueError: If an email-change token is requested without a pending address
        """
        now = int(time.time())
        expires = now + self._ttl_seconds
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "sub": str(account_id),
            "eml": _email_digest(email),
            "pur": purpose.value,
            "iat": now,
            "exp": expires,
        }
        if purpose == MailEventKind.UPDATE:
            if pending_email is None:
                raise ValueError("an email-change token needs the pending address")
            payload["pnd"] = _email_digest(pending_email)

        token = jwt.encode(payload, self._secret, algorithm="HS256")
        return SignedToken(token=token, expires_at=datetime.fromtimestamp(expires, tz=timezone.utc))

    def validate_email_confirmation(
        self,
        token: str,
        account_id: int,
        email: str,
        purpose: MailEventKind,
        pending_email: str | None = None,
    ) -> None:
        """
        Verify signature, issuer, expiry, purpose, and the id/email bindings.

        Raises:
            VerificationFailed: On any mismatch; the cause is chained
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=["HS256"],
                issuer=self._issuer,
                options={"require": ["exp", "iat", "sub", "eml", "pur"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise VerificationFailed("confirmation link expired") from e
        except jwt.PyJWTError as e:
            raise VerificationFailed("confirmation link invalid") from e

        if claims["pur"] != purpose.value:
            raise VerificationFailed("confirmation link was issued for another purpose")

        subject_ok = hmac.compare_digest(str(claims["sub"]), str(account_id))
        email_ok = hmac.compare_digest(str(claims["eml"]), _email_digest(email))
        if not (subject_ok and email_ok):
            raise VerificationFailed("confirmation link does not match the account")

        if purpose == MailEventKind.UPDATE:
            if pending_email is None:
                raise VerificationFailed("no email change is pending")
            if not hmac.compare_digest(str(claims.get("pnd", "")), _email_digest(pending_email)):
                raise VerificationFailed("confirmation link does not match the pending email")
