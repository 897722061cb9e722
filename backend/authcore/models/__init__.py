from authcore.models.confirmation_token import ConfirmationToken
from authcore.models.refresh_token import RefreshToken
from authcore.models.user import User

__all__ = [
    "ConfirmationToken",
    "RefreshToken",
    "User",
]
