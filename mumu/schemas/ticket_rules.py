"""
Ticket-rule document schemas (ticket_rules.json, keyed by museum_id)

Each museum entry lists base prices per ticket category and the discount
definitions that can lower them. Keys are accepted in camelCase (as shipped to
the web client) or snake_case; the older single-price layout
(`basePrice` + `rules` with `type: free|discount`) is migrated on load.
"""
from datetime import date
from enum import Enum
from typing import Dict, List, Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..models.eligibility import EligibilityType

CAMEL_CONFIG = {"alias_generator": to_camel, "populate_by_name": True, "extra": "ignore"}


class ValueKind(str, Enum):
    FREE = "free"
    FLAT = "flat"        # pay a fixed price
    PERCENT = "percent"  # percentage off base
    OFF = "off"          # fixed amount off base


class DiscountValue(BaseModel):
    """What a discount does to the base price, written as 'free', 'flat:3', 'percent:50' or 'off:5'"""
    kind: ValueKind
    amount: float = Field(default=0.0, ge=0)

    @classmethod
    def parse(cls, text: str) -> "DiscountValue":
        kind, _, amount = text.strip().lower().partition(":")
        if kind == ValueKind.FREE.value:
            return cls(kind=ValueKind.FREE)
        if not amount:
            raise ValueError(f"Discount value '{text}' is missing an amount")
        return cls(kind=ValueKind(kind), amount=float(amount))

    def apply(self, base_price: float) -> float:
        """Price after this discount, clamped to [0, base_price]"""
        if self.kind == ValueKind.FREE:
            price = 0.0
        elif self.kind == ValueKind.FLAT:
            price = self.amount
        elif self.kind == ValueKind.PERCENT:
            price = base_price * (1 - self.amount / 100)
        else:
            price = base_price - self.amount
        return round(min(max(price, 0.0), base_price), 2)

    def __str__(self) -> str:
        if self.kind == ValueKind.FREE:
            return "free"
        return f"{self.kind.value}:{self.amount:g}"


class WeekRule(str, Enum):
    FIRST_FULL_WEEKEND = "first_full_weekend"
    FIRST_SATURDAY = "first_saturday"
    FIRST_SUNDAY = "first_sunday"


class DateConstraint(BaseModel):
    """When a discount applies; every given field must match"""
    model_config = CAMEL_CONFIG

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    days_of_week: Optional[List[int]] = Field(
        None,
        validation_alias=AliasChoices("days_of_week", "daysOfWeek", "dayOfWeek"),
        description="0 = Sunday ... 6 = Saturday"
    )
    months: Optional[List[int]] = Field(
        None,
        validation_alias=AliasChoices("months", "monthRange"),
        description="1 = January ... 12 = December"
    )
    week_rule: Optional[WeekRule] = None
    time_window: Optional[str] = Field(None, description="Display text only, e.g. '5-8pm'")

    @field_validator("days_of_week")
    @classmethod
    def valid_days(cls, v):
        if v is not None and any(d < 0 or d > 6 for d in v):
            raise ValueError("days_of_week values must be 0-6")
        return v

    @field_validator("months")
    @classmethod
    def valid_months(cls, v):
        if v is not None and any(m < 1 or m > 12 for m in v):
            raise ValueError("months values must be 1-12")
        return v

    @property
    def is_recurring(self) -> bool:
        return bool(self.days_of_week or self.months or self.week_rule)


class RuleEligibility(BaseModel):
    """Derived eligibility predicate; every given field must hold"""
    model_config = CAMEL_CONFIG

    resident_city: Optional[str] = None
    resident_state: Optional[str] = Field(
        None, validation_alias=AliasChoices("resident_state", "residentState", "residentRegion")
    )
    resident_country: Optional[str] = None
    min_age: Optional[int] = None
    max_age: Optional[int] = None
    is_student: bool = False
    is_senior: bool = False
    has_program: Optional[EligibilityType] = None
    libraries: Optional[List[str]] = None
    schools: Optional[List[str]] = None
    companies: Optional[List[str]] = None
    cities: Optional[List[str]] = None
    member_of_museum: bool = False


class DiscountDefinition(BaseModel):
    """A single discount a museum offers"""
    model_config = CAMEL_CONFIG

    id: str
    name: Optional[str] = None
    icon: str = ""
    description: Optional[str] = None
    note: Optional[str] = Field(None, validation_alias=AliasChoices("note", "notes"))
    types: List[EligibilityType] = Field(
        default_factory=list,
        description="Eligibility types that unlock the rule; empty means everyone"
    )
    eligibility: Optional[RuleEligibility] = None
    value: DiscountValue
    date_constraint: Optional[DateConstraint] = Field(
        None, validation_alias=AliasChoices("date_constraint", "dateConstraint", "window")
    )
    categories: List[str] = Field(default_factory=list, description="Ticket categories; empty means all")
    requires_reservation: bool = False

    @model_validator(mode="before")
    @classmethod
    def migrate_rule_format(cls, data):
        """Accept `type` (str or list) for eligibility types and the older free/discount rule kind"""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        kind = data.get("type")
        if kind in ("free", "discount"):
            data.pop("type")
            if "value" not in data:
                amount = data.get("discountAmount") or data.get("discount_amount") or 0
                data["value"] = "free" if kind == "free" else f"off:{amount}"
        elif "type" in data and "types" not in data:
            data["types"] = data.pop("type")
        return data

    @field_validator("types", mode="before")
    @classmethod
    def listify_types(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("value", mode="before")
    @classmethod
    def parse_value(cls, v):
        if isinstance(v, str):
            return DiscountValue.parse(v)
        return v

    @property
    def display_name(self) -> str:
        return self.name or self.id.replace("_", " ").title()

    def applies_to_category(self, category: str) -> bool:
        return not self.categories or category in self.categories


class TicketCategory(BaseModel):
    model_config = CAMEL_CONFIG

    category_id: str = Field(..., validation_alias=AliasChoices("category_id", "categoryId", "id"))
    label: str


class TicketRuleEntry(BaseModel):
    """Admission configuration of one museum"""
    model_config = CAMEL_CONFIG

    currency: str = "USD"
    base_prices: Dict[str, float] = Field(default_factory=dict)
    ticket_categories: List[TicketCategory] = Field(default_factory=list)
    pricing_notes: str = ""
    discounts: List[DiscountDefinition] = Field(
        default_factory=list,
        validation_alias=AliasChoices("discounts", "rules")
    )

    @model_validator(mode="before")
    @classmethod
    def migrate_single_base_price(cls, data):
        """Older entries carry one basePrice, which is the adult price"""
        if isinstance(data, dict) and "basePrice" in data and not (
            data.get("basePrices") or data.get("base_prices")
        ):
            data = dict(data)
            data["base_prices"] = {"adult": data.pop("basePrice")}
        return data

    def base_price_for(self, category: str) -> Optional[float]:
        return self.base_prices.get(category)


TicketRules = Dict[str, TicketRuleEntry]
