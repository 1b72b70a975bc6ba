"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Order / Invoice Models                                         ║
║                                                                              ║
║  One order = one invoice (INV-YYYYMMDD-NN)                                   ║
║  - Line prices are snapshotted from the product at creation                  ║
║  - Created Unpaid, stock untouched until Paid                                ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field


class PaymentStatus(str, Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "Credit Card"
    BANK_TRANSFER = "Bank Transfer"
    CASH = "Cash"
    UPI = "UPI"


# Paid is terminal: reverting would re-run the stock decrement on the next payment
VALID_PAYMENT_TRANSITIONS = {
    "Unpaid": ["Unpaid", "Paid"],
    "Paid": ["Paid"],
}


class OrderItemCreate(BaseModel):
    productId: str
    quantity: int = Field(..., gt=0)
    discount: float = Field(default=0.0, ge=0)  # Per unit


class OrderCreate(BaseModel):
    """
    Example:
    {
        "customerId": "xxx",
        "items": [{"productId": "yyy", "quantity": 2, "discount": 10}],
        "serviceFee": 50
    }
    """
    customerId: str
    items: List[OrderItemCreate] = []
    serviceFee: float = Field(default=0.0, ge=0)


class OrderStatusUpdate(BaseModel):
    status: PaymentStatus
    paymentMethod: Optional[PaymentMethod] = None
