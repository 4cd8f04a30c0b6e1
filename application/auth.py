from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from application.use_cases import Clock, UnitOfWork
from domain.errors import AuthenticationError, DuplicateError, ValidationError
from domain.order import utcnow
from domain.user import Role, User, normalize_email
from infrastructure.logging import get_logger
from infrastructure.metrics import metrics


logger = get_logger()


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password_hash: str, password: str) -> bool: ...


class TokenIssuer(Protocol):
    def issue(self, user_id: str, role: str) -> str: ...


@dataclass
class RegisterUserCommand:
    name: str
    email: str
    password: str
    role: str = Role.USER.value


class RegisterUserUseCase:
    def __init__(self, uow: UnitOfWork, hasher: PasswordHasher, clock: Clock | None = None):
        self.uow = uow
        self.hasher = hasher
        self.clock = clock or utcnow

    async def execute(self, cmd: RegisterUserCommand) -> User:
        if not cmd.name or not cmd.email or not cmd.password:
            raise ValidationError("Name, email and password are required")

        user = User.create(
            name=cmd.name,
            email=cmd.email,
            password_hash=self.hasher.hash(cmd.password),
            role=cmd.role or Role.USER.value,
            now=self.clock(),
        )

        async with self.uow:
            if await self.uow.users.get_by_email(user.email):
                raise DuplicateError("Email already in use")
            await self.uow.users.add(user)
            await self.uow.commit()

        metrics.increment("users_registered_total")
        logger.info("User registered", user_id=user.user_id, role=user.role)
        return user


@dataclass
class LoginCommand:
    email: str
    password: str


@dataclass
class LoginResult:
    token: str
    user: User


class LoginUseCase:
    def __init__(self, uow: UnitOfWork, hasher: PasswordHasher, issuer: TokenIssuer):
        self.uow = uow
        self.hasher = hasher
        self.issuer = issuer

    async def execute(self, cmd: LoginCommand) -> LoginResult:
        if not cmd.email or not cmd.password:
            raise ValidationError("Email and password are required")

        async with self.uow:
            user = await self.uow.users.get_by_email(normalize_email(cmd.email))

        if not user or not self.hasher.verify(user.password_hash, cmd.password):
            metrics.increment("logins_failed_total")
            raise AuthenticationError("Invalid credentials")

        token = self.issuer.issue(user.user_id, user.role)
        return LoginResult(token=token, user=user)
