"""FastAPI web application for the order ledger."""

import logging
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .config import settings
from .coordinator import VerificationCoordinator
from .dashboard import compute_stats, filter_orders, orders_for_creator
from .errors import (
    AlreadyVerifiedError,
    DecryptionRequestError,
    DuplicateOrderError,
    InvalidCiphertextError,
    LedgerUnavailableError,
    OrderError,
    OrderNotFoundError,
    ProofVerificationError,
)
from .events import LedgerEvent, TradeOrderCreated
from .ledger import OrderLedger
from .order import TradeOrder
from .sample_data import create_ledger, create_sample_ledger, place_order
from .schemas import (
    ErrorResponse,
    EventResponse,
    OrderCreateRequest,
    OrderListResponse,
    OrderResponse,
    StatsResponse,
    StatusResponse,
    VerificationResponse,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    DuplicateOrderError: 409,
    InvalidCiphertextError: 422,
    OrderNotFoundError: 404,
    AlreadyVerifiedError: 409,
    ProofVerificationError: 422,
    DecryptionRequestError: 502,
    LedgerUnavailableError: 503,
}

ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in {400, *ERROR_STATUS_CODES.values()}}

# Global ledger instance; the ledger itself is thread-safe.
# Lock for replacing global state (reset endpoint)
_state_lock = threading.Lock()
ledger: OrderLedger
coordinator: VerificationCoordinator


def _build_state():
    if settings.SEED_SAMPLE_DATA:
        return create_sample_ledger()
    return create_ledger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the ledger on startup."""
    global ledger, coordinator
    ledger, coordinator = _build_state()
    logger.info("Ledger %s ready with %d orders", ledger.address, len(ledger))
    yield
    logger.info("Shutting down ledger %s", ledger.address)


# Initialize app
app = FastAPI(title="Confidential Order Ledger", lifespan=lifespan)

# Setup templates and static files
BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=BASE_DIR / "templates")
app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")


@app.exception_handler(OrderError)
async def order_error_handler(request: Request, exc: OrderError):
    status_code = ERROR_STATUS_CODES.get(type(exc), 400)
    body = ErrorResponse(detail=str(exc), step=exc.step, order_id=exc.order_id)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    body = ErrorResponse(detail=str(exc), step="validation")
    return JSONResponse(status_code=400, content=body.model_dump())


def _order_to_response(order: TradeOrder) -> OrderResponse:
    return OrderResponse(
        order_id=order.order_id,
        name=order.name,
        asset_type=order.asset_type,
        encrypted_amount=order.encrypted_amount,
        encrypted_price=order.encrypted_price,
        public_price=order.public_price,
        public_value2=order.public_value2,
        creator=order.creator,
        created_at=order.created_at,
        status=order.status.value,
        is_verified=order.is_verified,
        decrypted_amount=order.decrypted_amount,
        decrypted_price=order.decrypted_price,
        verified_at=order.verified_at,
    )


def _event_to_response(event: LedgerEvent) -> EventResponse:
    if isinstance(event, TradeOrderCreated):
        return EventResponse(
            type="TradeOrderCreated",
            order_id=event.order_id,
            timestamp=event.timestamp,
            creator=event.creator,
        )
    return EventResponse(
        type="DecryptionVerified",
        order_id=event.order_id,
        timestamp=event.timestamp,
        amount=event.amount,
        price=event.price,
    )


def _dashboard_context(request: Request, search: str = "", verified_only: bool = False, **extra) -> dict:
    orders = ledger.list_orders()
    context = {
        "request": request,
        "orders": filter_orders(orders, search=search, verified_only=verified_only),
        "stats": compute_stats(orders),
        "history": orders_for_creator(orders, settings.DEFAULT_CREATOR)[:5],
        "events": ledger.events.recent(10),
        "search": search,
        "verified_only": verified_only,
        "creator": settings.DEFAULT_CREATOR,
    }
    context.update(extra)
    return context


# ── HTML dashboard ────────────────────────────────────────────────────────────


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Render the dashboard."""
    return templates.TemplateResponse(request, "index.html", _dashboard_context(request))


@app.get("/orders", response_class=HTMLResponse)
async def get_orders_partial(request: Request, search: str = "", verified_only: bool = False):
    """Return just the order list partial (for HTMX updates)."""
    return templates.TemplateResponse(
        request,
        "partials/orders.html",
        _dashboard_context(request, search=search, verified_only=verified_only),
    )


@app.post("/order", response_class=HTMLResponse)
async def submit_order(
    request: Request,
    name: str = Form(...),
    amount: int = Form(...),
    price: int = Form(...),
):
    """Create an order from the dashboard form."""
    order = None
    error = None

    try:
        order = place_order(ledger, name, amount, price, settings.DEFAULT_CREATOR)
    except OrderError as e:
        error = f"Creation failed [{e.step}]: {e}"
    except ValueError as e:
        error = f"Creation failed: {e}"

    return templates.TemplateResponse(
        request,
        "partials/action_result.html",
        _dashboard_context(request, order=order, error=error, message="Order created" if order else None),
    )


@app.post("/order/{order_id}/verify", response_class=HTMLResponse)
async def verify_order_form(request: Request, order_id: str):
    """Verify an order from the dashboard."""
    error = None
    message = None

    try:
        result = coordinator.request_verification(order_id)
        if result.already_verified:
            message = f"Amount already verified: {result.amount}"
        else:
            message = f"Amount verified: {result.amount}"
    except OrderError as e:
        error = f"Decryption failed [{e.step}]: {e}"

    return templates.TemplateResponse(
        request,
        "partials/action_result.html",
        _dashboard_context(request, order=None, error=error, message=message),
    )


@app.post("/reset", response_class=HTMLResponse)
async def reset_ledger(request: Request):
    """Reset the ledger to its initial state (thread-safe)."""
    global ledger, coordinator

    with _state_lock:
        ledger, coordinator = _build_state()

    return templates.TemplateResponse(request, "partials/orders.html", _dashboard_context(request))


# ── JSON API ─────────────────────────────────────────────────────────────────


@app.get("/api/orders", response_model=OrderListResponse)
async def list_orders(
    search: str = "",
    verified_only: bool = False,
    creator: Optional[str] = None,
    min_price: Optional[int] = None,
    max_price: Optional[int] = None,
):
    """List orders in creation order, or by price when a price range is given."""
    if min_price is not None or max_price is not None:
        orders = ledger.orders_in_price_range(min_price, max_price)
    else:
        orders = ledger.list_orders()
    orders = filter_orders(orders, search=search, verified_only=verified_only)
    if creator:
        orders = orders_for_creator(orders, creator)
    return OrderListResponse(
        order_ids=[o.order_id for o in orders],
        orders=[_order_to_response(o) for o in orders],
    )


@app.get("/api/orders/{order_id}", response_model=OrderResponse, responses=ERROR_RESPONSES)
async def get_order(order_id: str):
    return _order_to_response(ledger.get_order(order_id))


@app.post("/api/orders", response_model=OrderResponse, status_code=201, responses=ERROR_RESPONSES)
async def create_order(body: OrderCreateRequest):
    """Encrypt the amount on the caller's behalf and create the order."""
    order = place_order(
        ledger,
        body.name,
        body.amount,
        body.price,
        body.creator or settings.DEFAULT_CREATOR,
        order_id=body.order_id,
        asset_type=body.asset_type or settings.DEFAULT_ASSET_TYPE,
        encrypt_price=body.encrypt_price,
    )
    return _order_to_response(order)


@app.post("/api/orders/{order_id}/verify", response_model=VerificationResponse, responses=ERROR_RESPONSES)
async def verify_order(order_id: str):
    result = coordinator.request_verification(order_id)
    return VerificationResponse(
        order_id=result.order_id,
        amount=result.amount,
        price=result.price,
        already_verified=result.already_verified,
    )


@app.get("/api/stats", response_model=StatsResponse)
async def get_stats():
    stats = compute_stats(ledger.list_orders())
    return StatsResponse(
        total_orders=stats.total_orders,
        verified_orders=stats.verified_orders,
        total_volume=stats.total_volume,
        avg_price=stats.avg_price,
    )


@app.get("/api/events", response_model=List[EventResponse])
async def get_events(limit: int = 20):
    """Most recent ledger notifications, newest first."""
    return [_event_to_response(e) for e in ledger.events.recent(limit)]


@app.get("/api/status", response_model=StatusResponse)
async def get_status():
    """Availability probe."""
    return StatusResponse(available=ledger.is_available(), ledger_address=ledger.address, orders=len(ledger))


def run():
    """Run the web server."""
    import uvicorn

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
