"""User accounts and issued sessions."""

from datetime import datetime, timezone

from sqlalchemy import case, delete, func, or_, select

from app.models.role import Role
from app.models.user import User, UserSession, UserStatus
from app.repositories.base import BaseRepository, contains


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserRepository(BaseRepository):
    async def get(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def find_active_by_login(self, identifier: str) -> User | None:
        """Look up an active user by username OR email."""
        result = await self.session.execute(
            select(User).where(
                or_(User.username == identifier, User.email == identifier),
                User.status == UserStatus.ACTIVE,
            )
        )
        return result.scalars().first()

    async def username_or_email_taken(self, username: str, email: str) -> bool:
        result = await self.session.execute(
            select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def email_taken_by_other(self, email: str, user_id: int) -> bool:
        result = await self.session.execute(
            select(User.id).where(User.email == email, User.id != user_id).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_users(
        self,
        search: str | None = None,
        role: Role | None = None,
        status: UserStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        query = select(User)
        if search:
            like = contains(search)
            query = query.where(
                or_(User.full_name.ilike(like), User.email.ilike(like), User.username.ilike(like))
            )
        if role:
            query = query.where(User.role == role)
        if status:
            query = query.where(User.status == status)
        return await self.page(query.order_by(User.created_at.desc()), limit, offset)

    async def create(self, **fields) -> User:
        return await self.save(User(**fields))

    async def update(self, user: User, changes: dict) -> User:
        return await self.apply_changes(user, changes)

    async def record_login(self, user: User) -> None:
        user.last_login = utcnow()
        user.failed_login_attempts = 0
        await self.session.commit()

    async def record_failed_login(self, user: User, max_attempts: int = 0) -> bool:
        """Count a bad password; the account locks once ``max_attempts`` is reached.

        Returns True when this failure locked the account.
        """
        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
        locked = max_attempts > 0 and user.failed_login_attempts >= max_attempts
        if locked:
            user.is_locked = True
            user.locked_at = utcnow()
            user.lock_reason = "Too many failed login attempts"
        await self.session.commit()
        return locked

    async def lock(self, user: User, locked_by: int, reason: str) -> User:
        return await self.apply_changes(
            user,
            {"is_locked": True, "locked_at": utcnow(), "locked_by": locked_by, "lock_reason": reason},
        )

    async def unlock(self, user: User) -> User:
        return await self.apply_changes(
            user,
            {
                "is_locked": False,
                "locked_at": None,
                "locked_by": None,
                "lock_reason": None,
                "failed_login_attempts": 0,
            },
        )

    async def deactivate(self, user: User) -> User:
        if user.status == UserStatus.INACTIVE:
            return user
        return await self.apply_changes(user, {"status": UserStatus.INACTIVE})

    async def set_password(self, user: User, password_hash: str) -> User:
        return await self.apply_changes(
            user, {"password_hash": password_hash, "reset_token": None, "reset_token_expires": None}
        )

    async def stats(self) -> dict:
        def count_where(cond):
            return func.count(case((cond, 1)))

        query = select(
            func.count(User.id).label("total_users"),
            count_where(User.status == UserStatus.ACTIVE).label("active_users"),
            count_where(User.status == UserStatus.INACTIVE).label("inactive_users"),
            count_where(User.status == UserStatus.SUSPENDED).label("suspended_users"),
            count_where(User.is_locked.is_(True)).label("locked_users"),
            count_where(User.role == Role.ADMIN).label("admin_users"),
            count_where(User.role == Role.MANAGER).label("manager_users"),
            count_where(User.role == Role.CASHIER).label("cashier_users"),
            count_where(User.role == Role.EMPLOYEE).label("employee_users"),
        )
        return await self.first_mapping(query)

    async def count_all(self) -> int:
        return await self.count(select(User.id))

    # -----------------------------------------------------------------
    # Sessions
    # -----------------------------------------------------------------

    async def add_session(self, user_id: int, token_hash: str, expires_at: datetime) -> None:
        self.session.add(UserSession(user_id=user_id, token_hash=token_hash, expires_at=expires_at))
        await self.session.commit()

    async def session_exists(self, token_hash: str) -> bool:
        result = await self.session.execute(
            select(UserSession.id).where(
                UserSession.token_hash == token_hash,
                UserSession.expires_at > utcnow(),
            ).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def delete_session(self, token_hash: str) -> int:
        result = await self.session.execute(
            delete(UserSession).where(UserSession.token_hash == token_hash)
        )
        await self.session.commit()
        return result.rowcount or 0

    async def purge_expired_sessions(self, now: datetime | None = None) -> int:
        result = await self.session.execute(
            delete(UserSession).where(UserSession.expires_at < (now or utcnow()))
        )
        await self.session.commit()
        return result.rowcount or 0
