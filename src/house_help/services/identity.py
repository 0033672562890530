"""Owner-key resolution for authenticated e-mail identities.

Privileged e-mails (``ADMIN_EMAILS``) all map to one shared owner key so
they work on the same ledger. Everyone else gets a ledger of their own,
keyed by their e-mail. The e-mail must come from an authenticated session,
never from request data the client controls.
"""

from __future__ import annotations

from collections.abc import Iterable

from house_help.config import Settings


class OwnerResolver:
    """Maps authenticated e-mails to owner keys."""

    def __init__(
        self,
        admin_emails: Iterable[str],
        shared_owner_key: str,
        restrict_sign_in: bool = False,
    ):
        self.admin_emails = frozenset(e.strip().lower() for e in admin_emails if e.strip())
        self.shared_owner_key = shared_owner_key
        self.restrict_sign_in = restrict_sign_in

    @classmethod
    def from_settings(cls, settings: Settings) -> OwnerResolver:
        return cls(
            admin_emails=settings.admin_emails,
            shared_owner_key=settings.shared_owner_key,
            restrict_sign_in=settings.restrict_sign_in,
        )

    def is_admin(self, email: str | None) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails

    def is_sign_in_allowed(self, email: str | None) -> bool:
        """With RESTRICT_SIGN_IN only admin e-mails may sign in."""
        if not email or not email.strip():
            return False
        return self.is_admin(email) if self.restrict_sign_in else True

    def resolve(self, email: str | None) -> str | None:
        """Return the owner key for an e-mail, or None if unauthenticated."""
        if not self.is_sign_in_allowed(email):
            return None
        if self.is_admin(email):
            return self.shared_owner_key
        return email.strip()
