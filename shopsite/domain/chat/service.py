"""
Scripted chat assistant for the public site.
Stateless: the client sends back any coupon it has applied with each message.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from ...config import BUSINESS_NAME, BUSINESS_PHONE, CURRENCY_SYMBOL
from ...models import Coupon, Service
from ..catalog.repository import ServiceRepository
from ..coupons.service import discounted_price, find_valid_coupon

logger = logging.getLogger(__name__)

APPLY_COUPON = "Apply Coupon"
BOOK_APPOINTMENT = "Book Appointment"
BOOKING_KEYWORDS = ("book", "appointment", "schedule")
QUICK_SERVICE_COUNT = 2


def _money(amount) -> str:
    text = f"{Decimal(amount).quantize(Decimal('0.01')):,}"
    return f"{CURRENCY_SYMBOL}{text.removesuffix('.00')}"


class ChatService:
    def __init__(self, db: Session):
        self.db = db

    def _active_services(self) -> list[Service]:
        return ServiceRepository.get_services(self.db, active_only=True)

    def quick_options(self, services: Optional[list[Service]] = None) -> list[str]:
        services = self._active_services() if services is None else services
        return [s.name for s in services[:QUICK_SERVICE_COUNT]] + [APPLY_COUPON, BOOK_APPOINTMENT]

    def greeting(self) -> dict:
        return {
            "reply": f"Hello! 👋 Welcome to {BUSINESS_NAME}. How can I help you today?",
            "options": self.quick_options(),
        }

    def apply_coupon(self, code: str) -> dict:
        coupon = find_valid_coupon(self.db, code)
        if not coupon:
            return {
                "reply": "Sorry, this coupon code is invalid or expired. Please check and try again.",
                "options": self.quick_options(),
            }
        return {
            "reply": f'🎉 Coupon "{coupon.name}" applied! You get {coupon.discount_percent}% off on all services!',
            "options": self.quick_options(),
            "coupon": {"code": coupon.code, "name": coupon.name, "discount_percent": coupon.discount_percent},
        }

    def _booking_reply(self, options: list[str]) -> dict:
        return {
            "reply": "I'd be happy to help you book an appointment! Please select a date and time:",
            "action": "open_calendar",
            "options": options,
        }

    def _service_reply(self, service: Service, coupon: Optional[Coupon], options: list[str]) -> dict:
        summary = service.description or service.name
        price = Decimal(service.price)
        if coupon and discounted_price(price, coupon.discount_percent) < price:
            pricing = (
                f"💰 Original: {_money(price)}\n"
                f"🎉 With {coupon.discount_percent}% off: {_money(discounted_price(price, coupon.discount_percent))}"
            )
        else:
            pricing = f"💰 Price: {_money(price)}"
        return {
            "reply": f"{summary}\n\n{pricing}\n\nWould you like to book an appointment?",
            "options": options,
        }

    def respond(self, message: Optional[str], option: Optional[str], coupon_code: Optional[str]) -> dict:
        services = self._active_services()
        options = self.quick_options(services)

        if option:
            if option == APPLY_COUPON:
                return {
                    "reply": "Please enter your coupon code below to get a discount on our services!",
                    "action": "ask_coupon",
                    "options": options,
                }
            if option == BOOK_APPOINTMENT:
                return self._booking_reply(options)
            service = next((s for s in services if s.name == option), None)
            if service:
                coupon = find_valid_coupon(self.db, coupon_code) if coupon_code else None
                return self._service_reply(service, coupon, options)
            return {"reply": "How can I assist you further?", "options": options}

        text = (message or "").lower()
        if any(keyword in text for keyword in BOOKING_KEYWORDS):
            return self._booking_reply(options)

        return {
            "reply": (
                "Thank you for your message! Our team will get back to you shortly. "
                f"For immediate assistance, please call us at {BUSINESS_PHONE}."
            ),
            "options": options,
        }
