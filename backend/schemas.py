from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, date, time
from typing import Optional, List, Literal


class CamelModel(BaseModel):
    """Wire format is camelCase; snake_case field names are accepted on input too."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _clean_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or "." not in v.split("@")[-1]:
        raise ValueError("Invalid email address")
    return v


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class SignupRequest(CamelModel):
    first_name: str
    last_name: str
    email: str
    password: str
    account_type: Literal["attendee", "organizer"]

    @field_validator("first_name", "last_name")
    @classmethod
    def must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("All fields are required")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("All fields are required")
        return v

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        return _clean_email(v)


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class AdminCreate(SignupRequest):
    account_type: Literal["attendee", "organizer"] = "organizer"

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long")
        return v


class UserUpdate(CamelModel):
    """Only names are user-editable; the split code is assigned through KYC approval."""
    first_name: Optional[str] = None
    last_name:  Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def must_not_be_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip() if v else v


class UserPatch(CamelModel):
    is_admin: bool


class UserResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    name: str
    email: str
    account_type: str
    is_admin: bool
    kyc_status: str
    kyc_type: Optional[str] = None
    paystack_split_code: Optional[str] = None
    created_at: Optional[datetime] = None


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class MessageResponse(CamelModel):
    success: bool = True
    message: str


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

class EventCreate(CamelModel):
    title: str
    description: str
    category: str
    event_date: date
    start_time: time
    end_time: time
    event_type: Literal["physical", "virtual"]
    venue: Optional[str] = None
    location: Optional[str] = None
    ticket_type: Literal["free", "paid"] = "free"
    ticket_price: Optional[float] = None
    total_tickets: int
    fee_bearer: Literal["organizer", "buyer"] = "organizer"
    image_url: Optional[str] = None
    banner_url: Optional[str] = None

    @field_validator("title", "description", "category")
    @classmethod
    def must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("All required fields must be filled")
        return v.strip()

    @field_validator("total_tickets")
    @classmethod
    def capacity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Total tickets must be at least 1")
        return v

    @model_validator(mode="after")
    def check_type_dependent_fields(self):
        if self.event_type == "physical" and not (
            (self.venue or "").strip() and (self.location or "").strip()
        ):
            raise ValueError("Physical events must have a venue and location")
        if self.ticket_type == "paid" and (self.ticket_price is None or self.ticket_price <= 0):
            raise ValueError("Paid events must have a valid ticket price")
        return self


class OrganizerPublic(CamelModel):
    id: int
    name: str
    email: str
    paystack_split_code: Optional[str] = None


class OrganizerSummary(CamelModel):
    name: str
    email: str


class EventResponse(CamelModel):
    id: int
    slug: str
    organizer_id: int
    title: str
    description: str
    category: str
    event_date: date
    start_time: time
    end_time: time
    event_type: str
    venue: Optional[str] = None
    location: Optional[str] = None
    ticket_type: str
    ticket_price: Optional[float] = None
    total_tickets: int
    tickets_sold: int
    platform_fee_percent: float
    fee_bearer: str
    image_url: Optional[str] = None
    banner_url: Optional[str] = None
    created_at: Optional[datetime] = None


class EventDetail(EventResponse):
    """Public detail view; tickets_sold here counts confirmed tickets only."""
    tickets_available: int = 0
    organizer: OrganizerPublic


class PublicEventResponse(EventResponse):
    organizer_name: str


class AdminEventResponse(EventResponse):
    organizer: OrganizerSummary


class EventCreatedSummary(CamelModel):
    id: int
    slug: str
    title: str
    event_date: date


class EventCreatedResponse(CamelModel):
    success: bool = True
    message: str
    event: EventCreatedSummary


# ---------------------------------------------------------------------------
# Tickets & payments
# ---------------------------------------------------------------------------

class PaymentInitRequest(CamelModel):
    event_id: int


class PaymentInitResponse(CamelModel):
    reference: str
    email: str
    amount: int                 # kobo
    ticket_price: float
    platform_fee: float
    fee_bearer: str
    split_code: Optional[str] = None


class PurchaseRequest(CamelModel):
    user_id: int
    event_id: int
    payment_reference: str
    amount: Optional[float] = 0
    payment_status: Optional[str] = None

    @field_validator("payment_reference")
    @classmethod
    def reference_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Missing required fields")
        return v.strip()


class TicketEventSummary(CamelModel):
    id: int
    slug: str
    title: str
    event_date: date
    start_time: time
    venue: Optional[str] = None
    location: Optional[str] = None


class TicketUserSummary(CamelModel):
    name: str
    email: str


class TicketResponse(CamelModel):
    id: int
    ticket_code: str
    payment_reference: str
    amount_paid: float
    status: str
    purchase_date: Optional[datetime] = None
    event: TicketEventSummary
    user: TicketUserSummary


class PurchaseResponse(CamelModel):
    success: bool = True
    message: str
    ticket: TicketResponse


# ---------------------------------------------------------------------------
# KYC
# ---------------------------------------------------------------------------

class KycSubmit(CamelModel):
    """Union of personal, business and bank fields; only kyc_type is required."""
    user_id: Optional[int] = None
    kyc_type: Literal["personal", "business"]

    full_name:           Optional[str]  = None
    date_of_birth:       Optional[date] = None
    phone_number:        Optional[str]  = None
    address:             Optional[str]  = None
    id_type:             Optional[str]  = None
    id_number:           Optional[str]  = None
    id_document_url:     Optional[str]  = None

    business_name:       Optional[str]  = None
    business_reg_number: Optional[str]  = None
    business_address:    Optional[str]  = None
    business_type:       Optional[str]  = None
    cac_document_url:    Optional[str]  = None

    bank_name:           Optional[str]  = None
    account_number:      Optional[str]  = None
    account_name:        Optional[str]  = None


class KycRequestResponse(CamelModel):
    id: int
    user_id: int
    kyc_type: str
    full_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    id_document_url: Optional[str] = None
    business_name: Optional[str] = None
    business_reg_number: Optional[str] = None
    business_address: Optional[str] = None
    business_type: Optional[str] = None
    cac_document_url: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class KycSubmitResponse(CamelModel):
    message: str
    kyc_request: KycRequestResponse


class KycStatusResponse(CamelModel):
    kyc_status: str
    kyc_type: Optional[str] = None
    kyc_submitted_at: Optional[datetime] = None
    kyc_approved_at: Optional[datetime] = None
    kyc_rejected_at: Optional[datetime] = None
    kyc_rejection_reason: Optional[str] = None
    kyc_request: Optional[KycRequestResponse] = None


class KycUserSummary(CamelModel):
    id: int
    name: str
    email: str
    kyc_status: str
    kyc_submitted_at: Optional[datetime] = None


class KycAdminItem(KycRequestResponse):
    user: KycUserSummary


class KycReview(CamelModel):
    user_id: int
    action: str
    split_code: Optional[str] = None
    rejection_reason: Optional[str] = None


# ---------------------------------------------------------------------------
# Admin dashboard
# ---------------------------------------------------------------------------

class DashboardStats(CamelModel):
    total_users: int
    total_organizers: int
    total_attendees: int
    total_admins: int
    total_events: int
    pending_kyc: int
    approved_kyc: int
    rejected_kyc: int


class ActivityItem(CamelModel):
    id: str
    type: str
    description: str
    timestamp: datetime


class DashboardResponse(CamelModel):
    stats: DashboardStats
    recent_activity: List[ActivityItem]
