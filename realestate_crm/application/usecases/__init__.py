"""
Use cases (application layer).

Exports:
  - LoginUseCase / LoginInput
  - ListUsersUseCase / ListUsersInput
  - CreateUserUseCase / CreateUserInput
  - Result / error models
"""

from .create_user import CreateUserInput, CreateUserUseCase
from .list_users import ListUsersInput, ListUsersUseCase
from .login import LoginInput, LoginUseCase
from .user_results import (
    LoginResult,
    UserError,
    UserErrorCode,
    UserListResult,
    UserResult,
)

__all__ = [
    "LoginUseCase",
    "LoginInput",
    "ListUsersUseCase",
    "ListUsersInput",
    "CreateUserUseCase",
    "CreateUserInput",
    "LoginResult",
    "UserResult",
    "UserListResult",
    "UserError",
    "UserErrorCode",
]
