import os
import re
import json
import time
import secrets
import logging
from contextlib import asynccontextmanager
from typing import Optional, List

from fastapi import FastAPI, HTTPException, Depends, Header, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from dotenv import load_dotenv

load_dotenv()

from database import get_db, engine, SessionLocal
import models
import schemas
import paystack
from security import (
    hash_password, verify_password, create_access_token,
    get_current_user, require_organizer, require_admin,
)

# Create tables on startup
models.Base.metadata.create_all(bind=engine)

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

_raw_origins   = os.environ.get("CORS_ORIGINS", "*")
CORS_ORIGINS   = [o.strip() for o in _raw_origins.split(",")] if _raw_origins != "*" else ["*"]
ADMIN_EMAIL    = os.environ.get("ADMIN_EMAIL", "")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "")

DEFAULT_REJECTION_REASON = "KYC verification failed"
TICKET_CODE_ATTEMPTS     = 2


def ensure_admin_account(db: Session) -> Optional[models.User]:
    """
    Create (or promote) the ADMIN_EMAIL account when no admin exists yet.
    Returns the account that was made admin, or None when nothing changed.
    """
    if not ADMIN_EMAIL or not ADMIN_PASSWORD:
        return None
    if db.query(models.User).filter(models.User.is_admin.is_(True)).count():
        return None

    email = ADMIN_EMAIL.strip().lower()
    user = db.query(models.User).filter(models.User.email == email).first()
    if user:
        user.is_admin = True
    else:
        user = models.User(
            first_name    = "Platform",
            last_name     = "Admin",
            email         = email,
            password_hash = hash_password(ADMIN_PASSWORD),
            account_type  = "organizer",
            is_admin      = True,
        )
        db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Bootstrap admin account ready: %s", user.email)
    return user


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = SessionLocal()
    try:
        ensure_admin_account(db)
    finally:
        db.close()
    yield


# ── FastAPI app ───────────────────────────────────────────────────────────────

app = FastAPI(title="Event Ticketing API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with the first readable message."""
    errors = exc.errors()
    first  = errors[0] if errors else {}
    if first.get("type") == "missing":
        message = "Missing required fields"
    else:
        message = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={"detail": message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _slugify(title: str) -> str:
    """'Lagos Tech Fest 2026!' → 'lagos-tech-fest-2026'."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "event"


def _slug_taken(db: Session, slug: str) -> bool:
    return db.query(models.Event.id).filter(models.Event.slug == slug).first() is not None


def _unique_slug(db: Session, title: str) -> str:
    """Title slug, then a millisecond suffix, then a random suffix if both are taken."""
    base = _slugify(title)
    if not _slug_taken(db, base):
        return base
    slug = f"{base}-{int(time.time() * 1000)}"
    if _slug_taken(db, slug):
        slug = f"{slug}-{secrets.token_hex(3)}"
    return slug


def _get_event_or_404(db: Session, event_id: int) -> models.Event:
    event = db.get(models.Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _get_user_or_404(db: Session, user_id: int) -> models.User:
    user = db.get(models.User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _confirmed_count(db: Session, event_id: int) -> int:
    return (
        db.query(func.count(models.Ticket.id))
        .filter(models.Ticket.event_id == event_id, models.Ticket.status == "confirmed")
        .scalar()
    ) or 0


def _admin_count(db: Session) -> int:
    return db.query(func.count(models.User.id)).filter(models.User.is_admin.is_(True)).scalar() or 0


def _reference_taken(db: Session, reference: str) -> bool:
    return db.query(models.Ticket.id).filter(models.Ticket.payment_reference == reference).first() is not None


def _today():
    return models.utcnow().date()


# ---------------------------------------------------------------------------
# Public routes
# ---------------------------------------------------------------------------

@app.get("/api/health")
def health_check():
    return {"status": "ok"}


# ── Accounts ──────────────────────────────────────────────────────────────────

@app.post("/api/auth/signup", response_model=schemas.UserResponse, status_code=201)
def signup(payload: schemas.SignupRequest, db: Session = Depends(get_db)):
    if db.query(models.User).filter(models.User.email == payload.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = models.User(
        first_name    = payload.first_name,
        last_name     = payload.last_name,
        email         = payload.email,
        password_hash = hash_password(payload.password),
        account_type  = payload.account_type,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("New %s registered: %s", user.account_type, user.email)
    return user


def _authenticate(db: Session, credentials: schemas.LoginRequest) -> models.User:
    user = db.query(models.User).filter(models.User.email == credentials.email).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info("Failed login for %s", credentials.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return user


@app.post("/api/auth/login", response_model=schemas.TokenResponse)
def login(credentials: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = _authenticate(db, credentials)
    return schemas.TokenResponse(access_token=create_access_token(user), user=user)


@app.post("/api/auth/admin-login", response_model=schemas.TokenResponse)
def admin_login(credentials: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = _authenticate(db, credentials)
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")
    return schemas.TokenResponse(access_token=create_access_token(user), user=user)


@app.get("/api/auth/me", response_model=schemas.UserResponse)
def me(user: models.User = Depends(get_current_user)):
    return user


@app.put("/api/user/update", response_model=schemas.UserResponse)
def update_profile(
    update_: schemas.UserUpdate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if update_.first_name is not None:
        user.first_name = update_.first_name
    if update_.last_name is not None:
        user.last_name = update_.last_name
    db.commit()
    db.refresh(user)
    return user


# ── Events ────────────────────────────────────────────────────────────────────

@app.post("/api/events/create", response_model=schemas.EventCreatedResponse, status_code=201)
def create_event(
    payload: schemas.EventCreate,
    organizer: models.User = Depends(require_organizer),
    db: Session = Depends(get_db),
):
    physical = payload.event_type == "physical"
    paid     = payload.ticket_type == "paid"

    event = models.Event(
        slug                 = _unique_slug(db, payload.title),
        organizer_id         = organizer.id,
        title                = payload.title,
        description          = payload.description,
        category             = payload.category,
        event_date           = payload.event_date,
        start_time           = payload.start_time,
        end_time             = payload.end_time,
        event_type           = payload.event_type,
        venue                = payload.venue.strip() if physical else None,
        location             = payload.location.strip() if physical else None,
        ticket_type          = payload.ticket_type,
        ticket_price         = payload.ticket_price if paid else None,
        total_tickets        = payload.total_tickets,
        tickets_sold         = 0,
        platform_fee_percent = paystack.PLATFORM_FEE_PERCENT,
        fee_bearer           = payload.fee_bearer,
        image_url            = payload.image_url,
        banner_url           = payload.banner_url,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Event %s (%s) created by organizer %s", event.id, event.slug, organizer.id)
    return schemas.EventCreatedResponse(message="Event created successfully", event=event)


@app.get("/api/events", response_model=List[schemas.EventResponse])
def list_organizer_events(
    organizer_id: int = Query(..., alias="organizerId"),
    db: Session = Depends(get_db),
):
    return (
        db.query(models.Event)
        .filter(models.Event.organizer_id == organizer_id)
        .order_by(models.Event.created_at.desc())
        .all()
    )


@app.get("/api/events/public", response_model=List[schemas.PublicEventResponse])
def list_public_events(
    filter_: str = Query("all", alias="filter"),
    category: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(models.Event)
    if filter_ == "upcoming":
        query = query.filter(models.Event.event_date >= _today())
    elif filter_ == "past":
        query = query.filter(models.Event.event_date < _today())
    elif filter_ != "all":
        raise HTTPException(status_code=400, detail="Filter must be one of all, upcoming, past")
    if category and category != "all":
        query = query.filter(models.Event.category == category)
    return query.order_by(models.Event.event_date.asc()).all()


@app.get("/api/events/{slug_or_id}", response_model=schemas.EventDetail)
def get_event(slug_or_id: str, db: Session = Depends(get_db)):
    """Slug is the public key; numeric ids still resolve for older links."""
    event = db.query(models.Event).filter(models.Event.slug == slug_or_id).first()
    if not event and slug_or_id.isdigit():
        event = db.get(models.Event, int(slug_or_id))
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    detail = schemas.EventDetail.model_validate(event)
    detail.tickets_sold      = _confirmed_count(db, event.id)
    detail.tickets_available = event.total_tickets - detail.tickets_sold
    return detail


# ── Payments & tickets ────────────────────────────────────────────────────────

@app.post("/api/payments/initialize", response_model=schemas.PaymentInitResponse)
def initialize_payment(
    payload: schemas.PaymentInitRequest,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Server-side amount for the checkout popup, including the buyer-borne fee."""
    event = _get_event_or_404(db, payload.event_id)
    if event.ticket_type != "paid":
        raise HTTPException(status_code=400, detail="Free events do not require payment")
    if event.tickets_sold >= event.total_tickets:
        raise HTTPException(status_code=400, detail="Event is sold out")

    charge = paystack.compute_charge(event.ticket_price, event.platform_fee_percent, event.fee_bearer)
    return schemas.PaymentInitResponse(
        reference    = paystack.generate_payment_reference(),
        email        = user.email,
        amount       = charge["amount_kobo"],
        ticket_price = charge["ticket_price"],
        platform_fee = charge["platform_fee"],
        fee_bearer   = event.fee_bearer,
        split_code   = event.organizer.paystack_split_code,
    )


@app.post("/api/tickets/purchase", response_model=schemas.PurchaseResponse, status_code=201)
def purchase_ticket(
    payload: schemas.PurchaseRequest,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if payload.user_id != user.id:
        raise HTTPException(status_code=403, detail="Cannot purchase tickets for another user")

    event = _get_event_or_404(db, payload.event_id)
    event_id = event.id
    user_id = user.id

    amount_paid = event.ticket_price if event.ticket_type == "paid" else 0.0
    if payload.amount is not None and abs(payload.amount - amount_paid) > 0.005:
        logger.warning(
            "Client amount %s differs from price %s on event %s; recording the price",
            payload.amount, amount_paid, event_id,
        )

    for attempt in range(TICKET_CODE_ATTEMPTS):
        # Claim a seat in one statement; zero rows means the event is full
        claimed = db.execute(
            update(models.Event)
            .where(
                models.Event.id == event_id,
                models.Event.tickets_sold < models.Event.total_tickets,
            )
            .values(tickets_sold=models.Event.tickets_sold + 1)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount == 0:
            db.rollback()
            logger.info("Sold-out purchase attempt on event %s by user %s", event_id, user_id)
            raise HTTPException(status_code=400, detail="Event is sold out")

        db_ticket = models.Ticket(
            event_id          = event_id,
            user_id           = user_id,
            ticket_code       = paystack.generate_ticket_code(),
            payment_reference = payload.payment_reference,
            amount_paid       = amount_paid,
            status            = "confirmed" if payload.payment_status == "success" else "pending",
        )
        db.add(db_ticket)
        try:
            db.commit()
            break
        except IntegrityError:
            # Rollback also returns the claimed seat
            db.rollback()
            if _reference_taken(db, payload.payment_reference):
                raise HTTPException(status_code=400, detail="Payment reference already used")
            logger.warning("Ticket code collision on event %s (attempt %d)", event_id, attempt + 1)
    else:
        raise HTTPException(status_code=500, detail="Could not issue a ticket, please retry")
    db.refresh(db_ticket)

    logger.info(
        "Ticket %s issued for event %s (status %s)",
        db_ticket.ticket_code, event_id, db_ticket.status,
    )
    return schemas.PurchaseResponse(
        message="Ticket purchased successfully",
        ticket=schemas.TicketResponse.model_validate(db_ticket),
    )


@app.get("/api/tickets", response_model=List[schemas.TicketResponse])
def my_tickets(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(models.Ticket)
        .filter(models.Ticket.user_id == user.id)
        .order_by(models.Ticket.purchase_date.desc())
        .all()
    )


async def read_raw_body(request: Request) -> bytes:
    return await request.body()


@app.post("/webhooks/paystack")
def paystack_webhook(
    raw_body: bytes = Depends(read_raw_body),
    x_paystack_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    # Signature is computed over the raw bytes, before any parsing
    if not paystack.verify_signature(raw_body, x_paystack_signature):
        logger.warning("Rejected Paystack webhook with invalid signature")
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        payload = json.loads(raw_body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    if payload.get("event") == "charge.success":
        reference = (payload.get("data") or {}).get("reference")
        ticket = None
        if reference:
            ticket = (
                db.query(models.Ticket)
                .filter(
                    models.Ticket.payment_reference == reference,
                    models.Ticket.status == "pending",
                )
                .first()
            )
        if ticket:
            ticket.status = "confirmed"
            db.commit()
            logger.info("Ticket %s confirmed by Paystack reference %s", ticket.ticket_code, reference)
        else:
            logger.info("No pending ticket for Paystack reference %s", reference)

    return {"received": True}


# ── KYC ───────────────────────────────────────────────────────────────────────

@app.post("/api/kyc/submit", response_model=schemas.KycSubmitResponse)
def submit_kyc(
    payload: schemas.KycSubmit,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if payload.user_id is not None and payload.user_id != user.id:
        raise HTTPException(status_code=403, detail="Cannot submit KYC for another user")
    if user.kyc_status == "approved":
        raise HTTPException(status_code=400, detail="KYC already approved")

    fields = payload.model_dump(exclude={"user_id"})
    kyc = db.query(models.KycRequest).filter(models.KycRequest.user_id == user.id).first()
    if kyc:
        for key, value in fields.items():
            setattr(kyc, key, value)
        message = "KYC updated and resubmitted for review"
    else:
        kyc = models.KycRequest(user_id=user.id, **fields)
        db.add(kyc)
        message = "KYC submitted successfully"

    user.kyc_status           = "pending"
    user.kyc_type             = payload.kyc_type
    user.kyc_submitted_at     = models.utcnow()
    user.kyc_rejection_reason = None
    db.commit()
    db.refresh(kyc)

    logger.info("KYC (%s) submitted by user %s", payload.kyc_type, user.id)
    return schemas.KycSubmitResponse(message=message, kyc_request=kyc)


@app.get("/api/kyc/status", response_model=schemas.KycStatusResponse)
def kyc_status(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    kyc = db.query(models.KycRequest).filter(models.KycRequest.user_id == user.id).first()
    return schemas.KycStatusResponse(
        kyc_status           = user.kyc_status or "not_submitted",
        kyc_type             = user.kyc_type,
        kyc_submitted_at     = user.kyc_submitted_at,
        kyc_approved_at      = user.kyc_approved_at,
        kyc_rejected_at      = user.kyc_rejected_at,
        kyc_rejection_reason = user.kyc_rejection_reason,
        kyc_request          = kyc,
    )


# ---------------------------------------------------------------------------
# Admin routes  (require an admin session token)
# ---------------------------------------------------------------------------

@app.get("/api/admin/kyc", response_model=List[schemas.KycAdminItem])
def list_kyc_requests(
    status: Optional[str] = None,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(models.KycRequest).join(models.User, models.KycRequest.user_id == models.User.id)
    if status:
        query = query.filter(models.User.kyc_status == status)
    return query.order_by(models.KycRequest.created_at.desc()).all()


@app.post("/api/admin/kyc", response_model=schemas.MessageResponse)
def review_kyc(
    review: schemas.KycReview,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Approve (assigning the Paystack split code) or reject a pending KYC submission."""
    if review.action not in ("approve", "reject"):
        raise HTTPException(status_code=400, detail="Invalid action")

    split_code = (review.split_code or "").strip()
    if review.action == "approve" and not split_code:
        raise HTTPException(status_code=400, detail="Split code is required for approval")

    user = _get_user_or_404(db, review.user_id)
    if user.kyc_status != "pending":
        raise HTTPException(
            status_code=400,
            detail=f"KYC is {user.kyc_status}; only pending submissions can be reviewed",
        )

    if review.action == "approve":
        user.kyc_status          = "approved"
        user.paystack_split_code = split_code
        user.kyc_approved_at     = models.utcnow()
        message = "KYC approved and split code assigned"
    else:
        user.kyc_status           = "rejected"
        user.kyc_rejection_reason = (review.rejection_reason or "").strip() or DEFAULT_REJECTION_REASON
        user.kyc_rejected_at      = models.utcnow()
        message = "KYC rejected"
    db.commit()

    logger.info("Admin %s set KYC of user %s to %s", admin.id, user.id, user.kyc_status)
    return schemas.MessageResponse(message=message)


@app.get("/api/admin/dashboard", response_model=schemas.DashboardResponse)
def admin_dashboard(admin: models.User = Depends(require_admin), db: Session = Depends(get_db)):
    def count_users(*criteria) -> int:
        return db.query(func.count(models.User.id)).filter(*criteria).scalar() or 0

    stats = schemas.DashboardStats(
        total_users      = count_users(),
        total_organizers = count_users(models.User.account_type == "organizer"),
        total_attendees  = count_users(models.User.account_type == "attendee"),
        total_admins     = count_users(models.User.is_admin.is_(True)),
        total_events     = db.query(func.count(models.Event.id)).scalar() or 0,
        pending_kyc      = count_users(models.User.kyc_status == "pending"),
        approved_kyc     = count_users(models.User.kyc_status == "approved"),
        rejected_kyc     = count_users(models.User.kyc_status == "rejected"),
    )

    recent_users = db.query(models.User).order_by(models.User.created_at.desc()).limit(5).all()
    recent_kyc   = db.query(models.KycRequest).order_by(models.KycRequest.created_at.desc()).limit(5).all()

    activity = [
        schemas.ActivityItem(
            id          = f"user-{u.id}",
            type        = "user",
            description = f"New {u.account_type} registered: {u.name}",
            timestamp   = u.created_at,
        )
        for u in recent_users
    ] + [
        schemas.ActivityItem(
            id          = f"kyc-{k.id}",
            type        = "kyc",
            description = f"KYC {k.kyc_type} request from {k.user.name}",
            timestamp   = k.created_at,
        )
        for k in recent_kyc
    ]
    activity.sort(key=lambda item: item.timestamp, reverse=True)

    return schemas.DashboardResponse(stats=stats, recent_activity=activity[:10])


# ── Admins ────────────────────────────────────────────────────────────────────

@app.get("/api/admin/admins", response_model=List[schemas.UserResponse])
def list_admins(admin: models.User = Depends(require_admin), db: Session = Depends(get_db)):
    return (
        db.query(models.User)
        .filter(models.User.is_admin.is_(True))
        .order_by(models.User.created_at.desc())
        .all()
    )


@app.post("/api/admin/admins", response_model=schemas.UserResponse, status_code=201)
def create_admin(
    payload: schemas.AdminCreate,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if db.query(models.User).filter(models.User.email == payload.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    new_admin = models.User(
        first_name    = payload.first_name,
        last_name     = payload.last_name,
        email         = payload.email,
        password_hash = hash_password(payload.password),
        account_type  = payload.account_type,
        is_admin      = True,
    )
    db.add(new_admin)
    db.commit()
    db.refresh(new_admin)
    logger.info("Admin %s created admin account %s", admin.id, new_admin.email)
    return new_admin


def _revoke_admin(db: Session, target: models.User, acting_admin: models.User) -> None:
    # Count-then-update; two concurrent revocations can still race past this
    if _admin_count(db) <= 1:
        raise HTTPException(status_code=400, detail="Cannot revoke the last admin account")
    target.is_admin = False
    db.commit()
    logger.info("Admin %s revoked admin privileges of user %s", acting_admin.id, target.id)


@app.delete("/api/admin/admins/{user_id}", response_model=schemas.MessageResponse)
def revoke_admin(
    user_id: int,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    target = _get_user_or_404(db, user_id)
    if not target.is_admin:
        raise HTTPException(status_code=400, detail="User is not an admin")
    _revoke_admin(db, target, admin)
    return schemas.MessageResponse(message="Admin privileges revoked successfully")


# ── Users ─────────────────────────────────────────────────────────────────────

@app.get("/api/admin/users", response_model=List[schemas.UserResponse])
def list_users(
    filter_: Optional[str] = Query(None, alias="filter"),
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(models.User)
    if filter_ in ("organizer", "attendee"):
        query = query.filter(models.User.account_type == filter_)
    elif filter_ == "admin":
        query = query.filter(models.User.is_admin.is_(True))
    return query.order_by(models.User.created_at.desc()).all()


@app.patch("/api/admin/users/{user_id}", response_model=schemas.UserResponse)
def patch_user(
    user_id: int,
    patch: schemas.UserPatch,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    target = _get_user_or_404(db, user_id)
    if target.is_admin and not patch.is_admin:
        _revoke_admin(db, target, admin)
    elif patch.is_admin and not target.is_admin:
        target.is_admin = True
        db.commit()
        logger.info("Admin %s granted admin privileges to user %s", admin.id, target.id)
    db.refresh(target)
    return target


@app.delete("/api/admin/users/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    target = _get_user_or_404(db, user_id)
    if db.query(models.Event.id).filter(models.Event.organizer_id == target.id).first():
        raise HTTPException(status_code=400, detail="Cannot delete user with existing events")
    if target.is_admin and _admin_count(db) <= 1:
        raise HTTPException(status_code=400, detail="Cannot delete the last admin account")

    # Seats held by the user's tickets go back to their events
    held = (
        db.query(models.Ticket.event_id, func.count(models.Ticket.id))
        .filter(models.Ticket.user_id == target.id)
        .group_by(models.Ticket.event_id)
        .all()
    )
    for event_id, count in held:
        db.execute(
            update(models.Event)
            .where(models.Event.id == event_id)
            .values(tickets_sold=models.Event.tickets_sold - count)
            .execution_options(synchronize_session=False)
        )

    db.query(models.KycRequest).filter(models.KycRequest.user_id == target.id).delete(
        synchronize_session=False
    )
    db.query(models.Ticket).filter(models.Ticket.user_id == target.id).delete(
        synchronize_session=False
    )
    db.delete(target)
    db.commit()
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return Response(status_code=204)


# ── Events (admin) ────────────────────────────────────────────────────────────

@app.get("/api/admin/events", response_model=List[schemas.AdminEventResponse])
def admin_list_events(
    filter_: str = Query("all", alias="filter"),
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(models.Event)
    if filter_ == "upcoming":
        query = query.filter(models.Event.event_date >= _today())
    elif filter_ == "past":
        query = query.filter(models.Event.event_date < _today())
    return query.order_by(models.Event.event_date.desc()).all()


@app.delete("/api/admin/events/{event_id}", status_code=204)
def delete_event(
    event_id: int,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete an event together with its tickets."""
    event = _get_event_or_404(db, event_id)
    db.query(models.Ticket).filter(models.Ticket.event_id == event.id).delete(
        synchronize_session=False
    )
    db.delete(event)
    db.commit()
    logger.info("Admin %s deleted event %s", admin.id, event_id)
    return Response(status_code=204)
