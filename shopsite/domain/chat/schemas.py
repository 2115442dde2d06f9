"""Chat widget schemas"""

from typing import Optional

from pydantic import BaseModel


class ChatRequest(BaseModel):
    message: Optional[str] = None
    option: Optional[str] = None  # a quick option the visitor clicked
    coupon_code: Optional[str] = None  # coupon applied earlier in the conversation


class CouponApplyRequest(BaseModel):
    code: str


class ChatReply(BaseModel):
    reply: str
    action: Optional[str] = None  # open_calendar, ask_coupon
    options: list[str] = []
    coupon: Optional[dict] = None
