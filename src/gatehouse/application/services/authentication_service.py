"""Authentication service for the session lifecycle.

Drives an identity through Anonymous -> Authenticated(R1) ->
Authenticated(R2) ... -> Anonymous, where each Rn is a persisted refresh
session backing exactly one refresh token.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gatehouse.application.context import SessionClaims
from gatehouse_auth import (
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    JWTService,
    PasswordHashingService,
    RefreshSessionService,
    TokenPair,
)
from gatehouse_identity import (
    Email,
    EmailAlreadyExistsError,
    User,
    UserNotFoundError,
    UserRole,
)

if TYPE_CHECKING:
    from gatehouse_identity import UserRepository

logger = logging.getLogger(__name__)


class AuthenticationService:
    """
    Application service for user authentication.

    Orchestrates gatehouse_auth infrastructure (password hashing, token
    signing, refresh sessions) with the gatehouse_identity User domain to
    provide:
    - User registration
    - Login with password
    - Refresh token rotation
    - Logout
    - Self lookup

    Token delivery (cookies) is left to the presentation layer; every
    operation here returns plain values.
    """

    def __init__(  # noqa: PLR0913
        self,
        user_repository: UserRepository,
        session_service: RefreshSessionService,
        password_service: PasswordHashingService,
        jwt_service: JWTService,
        verify_refresh_session: bool = False,
    ):
        """Initialize the service.

        Parameters
        ----------
        user_repository
            Identity store
        session_service
            Refresh session bookkeeping
        password_service
            Credential hashing and verification
        jwt_service
            Access and refresh token signer
        verify_refresh_session
            When True, refresh requires the presented session to still
            exist for the caller. Off by default: a validly signed refresh
            token is trusted even after its session was revoked.
        """
        self._user_repo = user_repository
        self._sessions = session_service
        self._password_service = password_service
        self._jwt_service = jwt_service
        self._verify_refresh_session = verify_refresh_session

    async def _issue_tokens(self, user: User) -> TokenPair:
        # The row must exist first: its id goes into the refresh token.
        session = await self._sessions.persist(user.id)
        access_token = self._jwt_service.create_access_token(
            subject=str(user.id),
            role=user.role.value,
        )
        refresh_token = self._jwt_service.create_refresh_token(
            subject=str(user.id),
            role=user.role.value,
            session_id=session.id,
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            session_id=session.id,
        )

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> tuple[User, TokenPair]:
        """Create a customer identity and sign it in.

        Raises
        ------
        InvalidEmailError
            If the email is not well formed
        WeakPasswordError
            If the password does not meet requirements
        EmailAlreadyExistsError
            If the email is already registered
        """
        email_obj = Email(email)
        self._password_service.validate_strength(password)

        if await self._user_repo.exists_by_email(email_obj):
            raise EmailAlreadyExistsError(email_obj.value)

        password_hash = self._password_service.hash(password)
        user = await self._user_repo.create(
            User.create(
                email_obj,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                role=UserRole.CUSTOMER,
            ),
        )

        tokens = await self._issue_tokens(user)

        logger.info("User registered: %s (id: %s)", user.email, user.id)
        return user, tokens

    async def login(
        self,
        email: str,
        password: str,
    ) -> tuple[User, TokenPair]:
        """Verify credentials and sign the identity in.

        Unknown email and wrong password fail the same way, with the same
        message and the same amount of hashing work.

        Raises
        ------
        InvalidCredentialsError
            If the email is unknown or the password does not match
        """
        email_obj = Email(email)
        user = await self._user_repo.find_by_email(email_obj)
        if user is None:
            self._password_service.dummy_verify(password)
            raise InvalidCredentialsError

        if not self._password_service.verify(password, user.password_hash):
            logger.debug("Password mismatch for user: %s", user.id)
            raise InvalidCredentialsError

        if self._password_service.needs_rehash(user.password_hash):
            new_hash = self._password_service.hash(password)
            await self._user_repo.update_password_hash(user.id, new_hash)
            user.change_password_hash(new_hash)
            logger.info("Rehashed password for user: %s", user.id)

        tokens = await self._issue_tokens(user)

        logger.info("User logged in: %s", user.id)
        return user, tokens

    async def refresh(self, claims: SessionClaims) -> tuple[User, TokenPair]:
        """Rotate a refresh session: revoke the presented one, issue a new pair.

        Revoking an already revoked session is not an error, so replaying
        a rotated refresh token still yields a new pair unless session
        verification is enabled.

        Raises
        ------
        UserNotFoundError
            If the identity no longer exists
        InvalidRefreshTokenError
            If session verification is enabled and the session is gone
        """
        if claims.session_id is None:
            msg = "Refresh token carries no session id"
            raise InvalidRefreshTokenError(msg)

        user = await self._user_repo.find_by_id(claims.user_id)
        if user is None:
            raise UserNotFoundError(claims.user_id)

        if self._verify_refresh_session and not await self._sessions.is_valid(
            claims.session_id,
            user.id,
        ):
            logger.warning(
                "Rejected refresh with revoked session %s for user %s",
                claims.session_id,
                user.id,
            )
            raise InvalidRefreshTokenError

        await self._sessions.revoke(claims.session_id)
        tokens = await self._issue_tokens(user)

        logger.info(
            "Tokens refreshed for user %s (session %s -> %s)",
            user.id,
            claims.session_id,
            tokens.session_id,
        )
        return user, tokens

    async def logout(
        self,
        claims: SessionClaims,
        refresh_claims: SessionClaims,
    ) -> None:
        """Revoke the refresh session presented alongside the access token.

        Revoking an already revoked session succeeds.

        Raises
        ------
        InvalidRefreshTokenError
            If the refresh token belongs to another identity than the
            access token
        """
        if refresh_claims.user_id != claims.user_id:
            logger.warning(
                "Rejected logout of user %s with a refresh token of user %s",
                claims.user_id,
                refresh_claims.user_id,
            )
            msg = "Refresh token does not belong to the authenticated user"
            raise InvalidRefreshTokenError(msg)

        if refresh_claims.session_id is not None:
            await self._sessions.revoke(refresh_claims.session_id)
        logger.info("User logged out: %s", claims.user_id)

    async def get_self(self, claims: SessionClaims) -> User:
        """Return the identity behind the claims.

        Raises
        ------
        UserNotFoundError
            If the identity no longer exists
        """
        user = await self._user_repo.find_by_id(claims.user_id)
        if user is None:
            raise UserNotFoundError(claims.user_id)
        return user
