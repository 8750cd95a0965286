"""
Storefront Backend - Auth Service
===================================

What:  Local account signup and login.
How:   Emails are encrypted with the CredentialCodec and looked up by
       ciphertext; passwords are stored as salted PBKDF2 hashes; a session
       token carrying {"userId": ...} is issued on success.
Who:   Called by the /auth route handlers.

Signup flow:
    1. username, password, email present; password == confirmPassword
    2. encrypt email -> look up existing user (409 if found)
    3. hash password, insert, flush (unique index on email backs step 2)
    4. issue token

Login flow:
    1. email and password present
    2. encrypt email -> look up user (401 if missing)
    3. compare password (401 if wrong)
    4. issue token, return the user with the email decrypted
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthenticationError, ConflictError, DatabaseError, ValidationError
from app.models.user import User
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
    SignupUserData,
    UserOut,
)
from app.services.credential_codec import CredentialCodec
from app.services.token_service import TokenIssuer

logger = logging.getLogger(__name__)

USER_EXISTS_MESSAGE = "User already exists"


class AuthService:
    def __init__(self, codec: CredentialCodec, tokens: TokenIssuer):
        self.codec = codec
        self.tokens = tokens

    async def _find_by_encrypted_email(self, db: AsyncSession, encrypted: str):
        result = await db.execute(select(User).where(User.email == encrypted).limit(1))
        return result.scalar_one_or_none()

    async def signup(self, db: AsyncSession, data: SignupRequest) -> SignupResponse:
        if not data.username or not data.password:
            raise ValidationError(message="Username and password are required")
        if data.password != data.confirm_password:
            raise ValidationError(message="Passwords do not match", field="confirmPassword")
        if not data.email:
            raise ValidationError(message="Email is required", field="email")

        encrypted_email = self.codec.encrypt(str(data.email))

        try:
            if await self._find_by_encrypted_email(db, encrypted_email) is not None:
                raise ConflictError(message=USER_EXISTS_MESSAGE)

            user = User(
                username=data.username,
                email=encrypted_email,
                password=self.codec.hash_password(data.password),
                role=data.role,
                provider=data.provider,
            )
            db.add(user)
            try:
                await db.flush()
            except IntegrityError:
                raise ConflictError(message=USER_EXISTS_MESSAGE)
        except SQLAlchemyError as e:
            logger.error("Database error during signup: %s", str(e), exc_info=True)
            raise DatabaseError(message="Error creating user")

        logger.info("User signed up: %s (role=%s, provider=%s)", user.id, user.role, user.provider)

        return SignupResponse(
            token=self.tokens.issue({"userId": user.id}),
            user_data=SignupUserData(
                username=data.username,
                email=str(data.email),
                role=data.role,
            ),
        )

    async def login(self, db: AsyncSession, data: LoginRequest) -> LoginResponse:
        if not data.email or not data.password:
            raise ValidationError(message="Email and password are required")

        encrypted_email = self.codec.encrypt(str(data.email))

        try:
            user = await self._find_by_encrypted_email(db, encrypted_email)
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(message="Error logging in")

        if user is None:
            raise AuthenticationError(message="User does not exist")
        if not self.codec.compare_password(data.password, user.password):
            logger.info("Failed login for user %s: invalid password", user.id)
            raise AuthenticationError(message="Invalid password")

        logger.info("User logged in: %s", user.id)

        return LoginResponse(
            token=self.tokens.issue({"userId": user.id}),
            user_data=UserOut(
                id=user.id,
                username=user.username,
                email=self.codec.decrypt(user.email),
                role=user.role,
                provider=user.provider,
                created_at=user.created_at,
            ),
        )
