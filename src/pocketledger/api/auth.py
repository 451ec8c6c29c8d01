"""Login-time actions: email check and IP guard."""

from typing import Optional

from pydantic import BaseModel

from pocketledger.core.errors import AppError, ErrorDetail, ValidationError
from pocketledger.core.ip_guardian import IpGuardian
from pocketledger.core.logging import get_logger, set_session_id
from pocketledger.core.validators import validate_email
from pocketledger.models.ip_security import IpWarning

logger = get_logger(__name__)

IP_CHECK_FAILED_MESSAGE = "Could not verify login location. Please try again."


class LoginCheck(BaseModel):
    """
    Result shown on the login screen.

    ``allowed`` is False only when the email is invalid or the IP check
    itself failed; an IP change is a warning, not a block.
    """

    allowed: bool
    message: Optional[str] = None
    warning: Optional[IpWarning] = None
    error: Optional[ErrorDetail] = None


async def check_login(
    guardian: IpGuardian,
    email: Optional[str],
    user_id: str,
    session_id: Optional[str] = None,
) -> LoginCheck:
    """Validate the email, then run the IP check for ``user_id``."""
    try:
        validate_email(email)
    except ValueError as exc:
        error = ValidationError(str(exc), details={"field": "email"})
        return LoginCheck(allowed=False, message=error.message, error=error.to_response())

    if session_id:
        set_session_id(session_id)

    result = await guardian.check_ip(user_id)
    if not result.success:
        logger.error("login.ip_check_failed", user_id=user_id, error=result.error)
        return LoginCheck(allowed=False, message=IP_CHECK_FAILED_MESSAGE)

    if result.ip_changed and result.warning:
        return LoginCheck(allowed=True, message=result.warning.message, warning=result.warning)

    return LoginCheck(allowed=True)


async def trust_current_ip(guardian: IpGuardian, user_id: str, ip: str) -> LoginCheck:
    """The user confirmed a flagged IP is theirs."""
    try:
        await guardian.confirm_ip(user_id, ip)
    except AppError as exc:
        logger.warning("login.confirm_ip_failed", user_id=user_id, code=exc.code)
        return LoginCheck(allowed=False, message=exc.message, error=exc.to_response())

    return LoginCheck(allowed=True, message="This IP address is now trusted")
