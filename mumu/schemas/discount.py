"""Discount row schema returned by the discount rule evaluator"""
from typing import Optional, Literal
from pydantic import BaseModel, Field


StatusVariant = Literal["valid", "inactive", "seasonal", "info"]


class DiscountRow(BaseModel):
    """One evaluated discount rule for a museum / ticket category / date"""
    id: str
    name: str
    icon: str = ""
    description: Optional[str] = None
    qualifies: bool
    your_price: Optional[float] = Field(
        None,
        description="Price if this rule is used; None when it cannot be determined"
    )
    base_price: Optional[float] = None
    status_variant: StatusVariant = "inactive"
    status_label: str = "Not eligible"
    note: Optional[str] = None
    next_eligible: Optional[str] = Field(None, description="Next date (YYYY-MM-DD) the rule applies")
