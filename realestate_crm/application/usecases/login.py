"""
Name: Login Use Case

Responsibilities:
  - Validate that credentials are present
  - Authenticate against the Credential Store (argon2 compare + active flag)
  - Issue a signed access token for the verified user

Collaborators:
  - domain.repositories.UserRepository
  - identity.auth_users.authenticate_user
  - identity.tokens.issue_access_token
"""

from __future__ import annotations

from dataclasses import dataclass

from ...crosscutting.exceptions import InvalidCredentialsError
from ...domain.repositories import UserRepository
from ...identity.auth_users import authenticate_user
from ...identity.tokens import TokenSettings, issue_access_token
from .user_results import LoginResult, UserError, UserErrorCode


@dataclass
class LoginInput:
    email: str | None
    password: str | None


class LoginUseCase:
    """R: Exchange email + password for an access token."""

    def __init__(
        self,
        user_repository: UserRepository,
        token_settings: TokenSettings | None = None,
    ):
        self.user_repository = user_repository
        self.token_settings = token_settings

    def execute(self, input_data: LoginInput) -> LoginResult:
        email = (input_data.email or "").strip()
        password = input_data.password or ""
        if not email or not password:
            return LoginResult(
                error=UserError(
                    code=UserErrorCode.MISSING_CREDENTIALS,
                    message="Email y password son requeridos",
                )
            )

        try:
            user = authenticate_user(self.user_repository, email, password)
        except InvalidCredentialsError as exc:
            return LoginResult(
                error=UserError(
                    code=UserErrorCode.INVALID_CREDENTIALS,
                    message=exc.message,
                    reason=exc.reason,
                )
            )

        token, expires_in = issue_access_token(user, self.token_settings)
        return LoginResult(user=user, token=token, expires_in=expires_in)
