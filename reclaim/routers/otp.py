import logging

from fastapi import APIRouter, Depends

from ..core.errors import InternalError, ReclaimError
from ..dependencies import get_password_reset_service
from ..schemas.otp import SendOTPRequest, SendOTPResponse, VerifyOTPRequest, VerifyOTPResponse
from ..services.password_reset import PasswordResetService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/otp", tags=["otp"])


@router.post("/send", response_model=SendOTPResponse)
async def send_otp(payload: SendOTPRequest, service: PasswordResetService = Depends(get_password_reset_service)):
    """Email a password reset code. The response never reveals whether the account exists."""
    try:
        result = await service.send_otp(payload.email)
    except ReclaimError:
        raise
    except Exception:
        logger.exception("Send OTP error")
        raise InternalError()
    return SendOTPResponse(message=result.message, expiry_minutes=result.expiry_minutes)


@router.post("/verify", response_model=VerifyOTPResponse)
def verify_otp(payload: VerifyOTPRequest, service: PasswordResetService = Depends(get_password_reset_service)):
    """Check the emailed code and set the new password."""
    try:
        message = service.verify_otp(payload.email, payload.otp, payload.new_password)
    except ReclaimError:
        raise
    except Exception:
        logger.exception("Verify OTP error")
        raise InternalError()
    return VerifyOTPResponse(message=message)
