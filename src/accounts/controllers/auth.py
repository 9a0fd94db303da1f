from ninja_extra import api_controller
from ninja_extra.permissions import AllowAny
from ninja_jwt.controller import TokenObtainPairController, TokenVerificationController

from common.throttling import AuthThrottle


@api_controller("/auth/token", permissions=[AllowAny], tags=["Auth"], auth=None, throttle=AuthThrottle())
class AuthController(TokenVerificationController, TokenObtainPairController):
    """JWT pair, refresh and verify endpoints. Log in with the e-mail address as `username`."""
