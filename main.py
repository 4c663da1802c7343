import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from database import engine, Base, SessionLocal
from services.errors import BillingError

# --- IMPORT ROUTERS (APIs) ---
from routers import attendance, cron, fees, salaries, vouchers

# --- IMPORT MODELS (registers tables on Base) ---
from models.masters import ClassMaster
from models.students import Student
from models.teachers import Teacher
from models.attendance import StudentAttendance
from models.fee_models import StudentFee, TeacherSalary, FeeVoucher, VoucherCounter

# Configure Logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)


def init_db():
    """Create tables and the voucher serial counter"""
    from services.vouchers import ensure_counter

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_counter(db)
        db.commit()
    finally:
        db.close()
    logger.info("Database ready (%s)", engine.url.render_as_string(hide_password=True))


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="School Billing", lifespan=lifespan)

# ==========================================
# CORS MIDDLEWARE
# ==========================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ==========================================
# ERROR ENVELOPE: {"success": false, "error": "..."}
# ==========================================
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc.detail)})


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return JSONResponse(status_code=400, content={"success": False, "error": "; ".join(messages)})


# --- REGISTER ROUTERS ---
app.include_router(fees.router)
app.include_router(salaries.router)
app.include_router(vouchers.router)
app.include_router(cron.router)
app.include_router(attendance.router)


@app.get("/health")
def health_check():
    return {"status": "ok", "success": True}
