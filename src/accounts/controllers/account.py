from ninja_extra import api_controller, route, status

from accounts import schema
from accounts.models import EventFlowUser
from accounts.service import account as account_service
from common.throttling import UserRegistrationThrottle


@api_controller("/auth", tags=["Account"])
class AccountController:
    @route.post(
        "/register",
        response={201: schema.RegisteredUserSchema},
        url_name="register-account",
        throttle=UserRegistrationThrottle(),
    )
    def register(self, payload: schema.RegisterUserSchema) -> tuple[int, EventFlowUser]:
        """Create a new user account with name, e-mail and password.

        Log in afterwards via POST /token/pair using the e-mail address as username.
        Returns 409 if the e-mail address is already registered.
        """
        return status.HTTP_201_CREATED, account_service.register_user(payload)
