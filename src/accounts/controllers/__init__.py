from .account import AccountController
from .auth import AuthController

__all__ = ["AccountController", "AuthController"]
