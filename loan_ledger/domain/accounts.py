"""Demo accounts: seeding, registration and the plaintext login stub"""

from datetime import datetime, timezone
from typing import Any, Callable, Optional

from loan_ledger.domain.exceptions import AuthError, ValidationError
from loan_ledger.domain.models import Role, SessionInfo, User
from loan_ledger.domain.store import Collection, LedgerStore, UnitOfWork, ledger_lock

DEMO_USERS = (
    User(username="john", password="john123", name="John Doe", role=Role.BORROWER),
    User(username="jane", password="jane123", name="Jane Smith", role=Role.BORROWER),
    User(username="staff", password="vfd2024", name="Staff Officer", role=Role.STAFF),
)


class AccountService:
    """User registration and session handling over the ledger store"""

    def __init__(
        self,
        store: LedgerStore,
        now: Optional[Callable[[], datetime]] = None,
        lock: Any = None,
    ):
        self.store = store
        self.now = now or (lambda: datetime.now(timezone.utc))
        # Shared with LoanLifecycleManager
        self.lock = lock or ledger_lock

    def seed_demo_users(self) -> bool:
        """Write the demo users when no user exists yet. Returns True if seeded."""
        with self.lock, UnitOfWork(self.store) as uow:
            if uow.load(Collection.USERS):
                return False
            uow.stage(
                Collection.USERS,
                [User(u.username, u.password, u.name, u.role, u.wallet) for u in DEMO_USERS],
            )
        return True

    def register(self, username: str, password: str, name: str, role: Role = Role.BORROWER) -> User:
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")

        with self.lock, UnitOfWork(self.store) as uow:
            users = uow.load(Collection.USERS)
            if any(u.username == username for u in users):
                raise ValidationError(f"Username {username} is already taken")
            user = User(username=username, password=password, name=name or username, role=role)
            users.append(user)
            uow.stage(Collection.USERS)

        return user

    def login(self, username: str, password: str) -> User:
        """Plaintext credential check; records the session on success"""
        users = self.store.load(Collection.USERS)
        user = next((u for u in users if u.username == username and u.password == password), None)
        if user is None:
            raise AuthError("Invalid credentials")

        with self.lock, UnitOfWork(self.store) as uow:
            uow.stage(
                Collection.SESSION,
                [SessionInfo(username=user.username, role=user.role, logged_in_at=self.now())],
            )
        return user

    def logout(self) -> None:
        with self.lock, UnitOfWork(self.store) as uow:
            uow.stage(Collection.SESSION, [])

    def current_session(self) -> Optional[SessionInfo]:
        sessions = self.store.load(Collection.SESSION)
        return sessions[0] if sessions else None
