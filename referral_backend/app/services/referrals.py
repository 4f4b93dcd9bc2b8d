# referral_backend/app/services/referrals.py
"""
Referral service - registration, login and the referral-code lifecycle.

Policy notes:
- A referral code's expiry is checked when the code is looked up by its
  owner's email, NOT when someone registers with it.
- Expiry passed to create_referral_code is stored as given; a past value is
  accepted and simply reads back as expired.
- register_with_referral writes the new user and the referral edge in one
  transaction: if the edge cannot be stored, the user is rolled back too.
"""
import uuid
from datetime import datetime
from functools import lru_cache
from typing import Callable, List

from referral_backend.app.core.auth import TokenIssuer
from referral_backend.app.core.base import as_utc, utc_now
from referral_backend.app.core.exceptions import (
    CodeExpiredError,
    ConflictError,
    EmailTakenError,
    InvalidCredentialsError,
    InvalidReferralCodeError,
    NoCodeFoundError,
    ServiceError,
    UserNotFoundError,
)
from referral_backend.app.core.logging import get_logger
from referral_backend.app.core.metrics import (
    login_attempts_total,
    referral_codes_created_total,
    users_registered_total,
)
from referral_backend.app.core.password_utils import hash_password, verify_password
from referral_backend.app.models.referral import Referral
from referral_backend.app.models.user import User
from referral_backend.app.repositories.base import ReferralStore, UserStore

logger = get_logger(__name__)


def generate_referral_code() -> str:
    """Random, high-entropy code. Collisions are left to the unique index."""
    return str(uuid.uuid4())


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    # Compared against when the email is unknown, so both failure paths cost one bcrypt check
    return hash_password(uuid.uuid4().hex)


class ReferralService:
    """Service class for user and referral operations."""

    def __init__(
        self,
        users: UserStore,
        referrals: ReferralStore,
        tokens: TokenIssuer,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.users = users
        self.referrals = referrals
        self.tokens = tokens
        self.clock = clock

    # --- transactions ---

    async def _commit(self) -> None:
        try:
            await self.users.commit()
        except ServiceError:
            await self._rollback()
            raise

    async def _rollback(self) -> None:
        await self.users.rollback()
        await self.referrals.rollback()

    async def _require_user(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _stage_user(self, email: str, password: str) -> User:
        """Check the email, hash the password and stage a new user (not committed)."""
        # Best effort: two concurrent registrations can both pass this check.
        # The unique index on users.email rejects the loser with ConflictError.
        existing = await self.users.get_by_email(email)
        if existing is not None:
            raise EmailTakenError(email)

        user = User(
            email=email,
            password_hash=hash_password(password),
            referral_code=None,
            referral_expiry=None,
        )
        try:
            return await self.users.create(user)
        except ConflictError:
            await self._rollback()
            raise ConflictError("email already registered")

    # --- operations ---

    async def register(self, email: str, password: str) -> User:
        """
        Create a new user with no referral code.

        Raises:
            EmailTakenError: Email belongs to an existing user
            ConflictError: Store uniqueness check fired (registration race)
            HashingError: bcrypt failed
            PersistenceError: Store rejected the write
        """
        user = await self._stage_user(email, password)
        try:
            await self._commit()
        except ConflictError:
            raise ConflictError("email already registered")

        users_registered_total.labels(via_referral="false").inc()
        logger.info("User registered", user_id=user.id, email=email)
        return user

    async def authenticate(self, email: str, password: str) -> str:
        """
        Check credentials and issue an access token.

        Unknown email and wrong password are indistinguishable to the caller.

        Raises:
            InvalidCredentialsError: Bad email or password
            TokenIssuanceError: Token could not be signed
        """
        user = await self.users.get_by_email(email)
        if user is None:
            verify_password(password, _dummy_password_hash())
            ok = False
        else:
            ok = verify_password(password, user.password_hash)

        if not ok:
            login_attempts_total.labels(outcome="failure").inc()
            logger.info("Login failed", email=email)
            raise InvalidCredentialsError()

        token = self.tokens.issue(user.id)
        login_attempts_total.labels(outcome="success").inc()
        logger.info("Login succeeded", user_id=user.id)
        return token

    async def create_referral_code(self, user_id: int, expiry: datetime) -> User:
        """
        Generate a fresh referral code, replacing any previous one.

        Raises:
            UserNotFoundError: No live user with this id
            PersistenceError: Store rejected the write
        """
        user = await self._require_user(user_id)
        user.referral_code = generate_referral_code()
        user.referral_expiry = as_utc(expiry)
        await self.users.update(user)
        await self._commit()

        referral_codes_created_total.inc()
        logger.info(
            "Referral code created",
            user_id=user_id,
            expiry=user.referral_expiry.isoformat(),
        )
        return user

    async def delete_referral_code(self, user_id: int) -> User:
        """
        Clear the referral code and expiry. Succeeds when there is none.

        Raises:
            UserNotFoundError: No live user with this id
            PersistenceError: Store rejected the write
        """
        user = await self._require_user(user_id)
        user.referral_code = None
        user.referral_expiry = None
        await self.users.update(user)
        await self._commit()

        logger.info("Referral code deleted", user_id=user_id)
        return user

    async def get_referral_code_owner(self, email: str) -> User:
        """
        Find the user behind an email whose referral code is usable.

        Raises:
            UserNotFoundError: Email unknown
            CodeExpiredError: Expiry is set and already passed
            NoCodeFoundError: User has no referral code
        """
        user = await self.users.get_by_email(email)
        if user is None:
            raise UserNotFoundError(email)

        expiry = as_utc(user.referral_expiry)
        if expiry is not None and expiry < self.clock():
            raise CodeExpiredError()

        if not user.referral_code:
            raise NoCodeFoundError()

        return user

    async def get_referral_code_by_email(self, email: str) -> str:
        user = await self.get_referral_code_owner(email)
        return user.referral_code

    async def register_with_referral(self, code: str, email: str, password: str) -> User:
        """
        Register a new user under the owner of ``code``.

        The code's expiry is not checked here.

        Raises:
            InvalidReferralCodeError: No live user holds this code
            PersistenceError: Referral edge could not be stored (user rolled back)
            plus everything register() raises
        """
        referrer = await self.users.get_by_referral_code(code)
        if referrer is None:
            raise InvalidReferralCodeError()
        referrer_id = referrer.id

        user = await self._stage_user(email, password)
        try:
            await self.referrals.create(Referral(referred_id=user.id, referred_by=referrer_id))
            await self._commit()
        except ServiceError:
            await self._rollback()
            logger.error("Referral registration rolled back", email=email, referrer_id=referrer_id)
            raise

        users_registered_total.labels(via_referral="true").inc()
        logger.info("User registered by referral", user_id=user.id, referrer_id=referrer_id)
        return user

    async def get_referrals(self, user_id: int) -> List[Referral]:
        """All referral edges where ``user_id`` is the referrer (may be empty)."""
        return list(await self.referrals.get_by_referrer_id(user_id))

    async def soft_delete_user(self, user_id: int) -> User:
        """Stamp deleted_at; the row stays for audit but disappears from lookups."""
        user = await self._require_user(user_id)
        await self.users.soft_delete(user)
        await self._commit()
        logger.info("User soft-deleted", user_id=user_id)
        return user
