"""
Privileged backend functions.

These keep the request/response contract of the hosted functions they replace:
JSON bodies in camelCase, failures reported as {"error": "..."}.
"""

import logging
from typing import Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from ..auth import get_client_ip, get_current_user, security
from ..config import BOOKING_RATE_LIMIT, BOOKING_RATE_WINDOW_SECONDS
from ..database import get_db
from ..domain.deployment.schemas import DeploymentRequest
from ..domain.deployment.service import ClientDeploymentService
from ..domain.users.schemas import DeleteUserRequest
from ..domain.users.service import UserService
from ..email_service import send_booking_emails
from ..policies import has_role, is_admin
from ..rate_limiter import create_rate_limiter
from ..schemas import BookingNotification
from ..services.twilio_service import send_booking_sms

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["Functions"])

BodyModel = TypeVar("BodyModel", bound=BaseModel)

notification_rate_limit = create_rate_limiter(
    limit=BOOKING_RATE_LIMIT, window_seconds=BOOKING_RATE_WINDOW_SECONDS, key_prefix="notify"
)


def error_response(status_code: int, message) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def read_body(request: Request, model: type[BodyModel]) -> BodyModel:
    """Parse the JSON body once the caller is authorized; a missing body reads as {}"""
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    try:
        return model.model_validate(payload or {})
    except ValidationError as e:
        raise HTTPException(status_code=400, detail="Invalid request body") from e


@router.post("/send-booking-notification")
async def send_booking_notification(
    data: BookingNotification,
    _: None = Depends(notification_rate_limit),
):
    """Email the business owner (and the customer, when deliverable) about a booking"""
    try:
        return await send_booking_emails(data)
    except Exception as e:
        logger.error(f"❌ Error in send-booking-notification: {e}")
        return error_response(500, str(e))


@router.post("/send-sms-notification")
async def send_sms_notification(
    data: BookingNotification,
    _: None = Depends(notification_rate_limit),
):
    """Text the business owner about a booking"""
    try:
        return await send_booking_sms(data)
    except Exception as e:
        logger.error(f"❌ Error in send-sms-notification: {e}")
        return error_response(500, str(e))


@router.post("/delete-user")
async def delete_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
):
    """Admin-only: remove a user's profile, roles, permissions, sessions and identity"""
    try:
        caller = await get_current_user(credentials, db)
        if not is_admin(db, caller.user_id):
            logger.warning(f"⚠️ Non-admin {caller.user_id} attempted to delete a user")
            raise HTTPException(status_code=403, detail="Unauthorized: Admin access required")
        data = await read_body(request, DeleteUserRequest)
        return await UserService(db).delete_user(caller, data.userId)
    except HTTPException as e:
        return error_response(e.status_code, e.detail)
    except Exception as e:
        logger.error(f"❌ Error in delete-user: {e}")
        return error_response(500, str(e))


@router.post("/client-deployment")
async def client_deployment(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
):
    """Super-admin-only: manage the client project's credentials and schema"""
    try:
        caller = await get_current_user(credentials, db)
        if not has_role(db, caller.user_id, "super_admin"):
            logger.warning(f"⚠️ Non-super-admin {caller.user_id} attempted client deployment")
            raise HTTPException(status_code=403, detail="Super admin access required")
        data = await read_body(request, DeploymentRequest)
        service = ClientDeploymentService(db, caller, get_client_ip(request))
        return await service.handle(data)
    except HTTPException as e:
        return error_response(e.status_code, e.detail)
    except Exception as e:
        logger.error(f"❌ Error in client-deployment: {e}")
        return error_response(500, str(e))
