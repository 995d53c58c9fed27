"""Per-user session context carrying the subscription flag."""

from dataclasses import dataclass, replace

from bizledger.config import bind_user, get_settings


@dataclass(frozen=True)
class SessionContext:
    """Who is signed in and which plan they are on.

    Passed explicitly to whatever needs it; signing out or upgrading returns
    a new context instead of changing shared state.
    """

    user_id: str | None = None
    email: str | None = None
    is_pro: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def can_create_transaction(self, existing_count: int, limit: int | None = None) -> bool:
        """Free accounts may store a limited number of transactions."""
        if self.is_pro:
            return True
        if limit is None:
            limit = get_settings().free_transaction_limit
        return existing_count < limit

    def upgrade(self) -> "SessionContext":
        return replace(self, is_pro=True)

    def bind_logging(self) -> None:
        """Attach this user to log lines emitted in the current context."""
        bind_user(self.user_id)

    def sign_out(self) -> "SessionContext":
        return SessionContext()
