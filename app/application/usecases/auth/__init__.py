from .change_password import ChangePasswordUseCase
from .login import INVALID_CREDENTIALS_MESSAGE, LoginUseCase

__all__ = ["LoginUseCase", "ChangePasswordUseCase", "INVALID_CREDENTIALS_MESSAGE"]
