"""Chat widget router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import ChatReply, ChatRequest, CouponApplyRequest
from .service import ChatService

router = APIRouter(prefix="/chat", tags=["Chat"])


def get_chat_service(db: Session = Depends(get_db)) -> ChatService:
    return ChatService(db)


@router.get("/options", response_model=ChatReply)
async def chat_options(service: ChatService = Depends(get_chat_service)):
    return service.greeting()


@router.post("/message", response_model=ChatReply)
async def chat_message(data: ChatRequest, service: ChatService = Depends(get_chat_service)):
    return service.respond(data.message, data.option, data.coupon_code)


@router.post("/coupon", response_model=ChatReply)
async def chat_apply_coupon(data: CouponApplyRequest, service: ChatService = Depends(get_chat_service)):
    return service.apply_coupon(data.code)
