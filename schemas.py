

# schemas.py
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr, Field


# -------- ORDER CREATION --------
class CheckoutRequest(BaseModel):
    user_name: str = Field(min_length=1)
    email: EmailStr
    amount: float = Field(gt=0)
    back_url: Optional[str] = None
    fail_url: Optional[str] = None
    suc_url: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


class PaymentConfigResponse(BaseModel):
    api_url: str
    app_id: str
    message: str = "Use POST method to create payment order"


# -------- WEBHOOK --------
class WebhookResult(BaseModel):
    order_id: str
    payment_order: str
    payment_status: Any = None
    is_payment_complete: bool
    status_text: str
