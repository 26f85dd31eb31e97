import os
import logging
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from auth import get_current_admin, hash_password, issue_token, verify_password
from database import ensure_indexes, get_db, get_store
from errors import (
    ApiError,
    Conflict,
    InvalidCredentials,
    InvalidInput,
    RegistrationClosed,
    ServerError,
)
from notifications import get_notifier
from schemas import AdminAccount, AdminCredentials, Inquiry, InquiryCreate, InquiryStatusUpdate

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_store()
    if store is not None:
        try:
            ensure_indexes(store)
        except PyMongoError as e:
            logger.error("Could not ensure indexes: %s", e)
    if registration_mode() == "open":
        logger.warning("Admin registration is open to anyone; set ADMIN_REGISTRATION=bootstrap to restrict it")
    yield


app = FastAPI(title="Marketing Site API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"success": False, "message": "Invalid request body"})


# ------------------------------
# Utility
# ------------------------------

def registration_mode() -> str:
    return os.getenv("ADMIN_REGISTRATION", "open").strip().lower()


@contextmanager
def store_errors(action: str, message: Optional[str] = None):
    """Log unexpected failures and surface them as a generic ServerError."""
    try:
        yield
    except ApiError:
        raise
    except Exception:
        logger.exception("%s failed", action)
        raise ServerError(message)


def parse_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def serialize_inquiry(doc):
    return {
        "id": str(doc.get("_id")),
        "name": doc.get("name"),
        "email": doc.get("email"),
        "phone": doc.get("phone"),
        "service": doc.get("service"),
        "message": doc.get("message"),
        "submittedAt": doc.get("submittedAt"),
        "status": doc.get("status"),
    }


def serialize_client(doc):
    data = {k: v for k, v in doc.items() if k != "_id"}
    data["id"] = str(doc.get("_id"))
    return data


# ------------------------------
# Contact form
# ------------------------------

@app.post("/api/contact", status_code=201)
def submit_inquiry(payload: InquiryCreate, db=Depends(get_db), notifier=Depends(get_notifier)):
    if is_blank(payload.name) or is_blank(payload.email) or is_blank(payload.message):
        raise InvalidInput("Name, email and message are required")

    inquiry = Inquiry(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        service=payload.service,
        message=payload.message,
        submittedAt=datetime.now(timezone.utc),
    ).model_dump()
    with store_errors("Contact form", "Server error. Please try again."):
        db["contact"].insert_one(inquiry)
    logger.info("New inquiry %s from %s", inquiry["_id"], inquiry["email"])

    if notifier is not None:
        try:
            notifier.notify_inquiry(inquiry)
        except Exception:
            logger.warning("Email notification failed", exc_info=True)

    return {"success": True, "message": "Thank you! We will contact you soon."}


# ------------------------------
# Inquiries (admin only)
# ------------------------------

@app.get("/api/contacts")
def list_inquiries(admin=Depends(get_current_admin), db=Depends(get_db)):
    with store_errors("List inquiries"):
        docs = list(db["contact"].find().sort("submittedAt", DESCENDING))
    return {"success": True, "data": [serialize_inquiry(d) for d in docs]}


@app.put("/api/contact/{inquiry_id}")
def update_inquiry_status(
    inquiry_id: str,
    payload: Optional[InquiryStatusUpdate] = None,
    admin=Depends(get_current_admin),
    db=Depends(get_db),
):
    oid = parse_object_id(inquiry_id)
    if oid is None:
        return {"success": True, "data": None}
    status = payload.status if payload else None
    with store_errors("Update inquiry"):
        if status is None:
            doc = db["contact"].find_one({"_id": oid})
        else:
            doc = db["contact"].find_one_and_update(
                {"_id": oid},
                {"$set": {"status": status}},
                return_document=ReturnDocument.AFTER,
            )
    return {"success": True, "data": serialize_inquiry(doc) if doc else None}


@app.delete("/api/contact/{inquiry_id}")
def delete_inquiry(inquiry_id: str, admin=Depends(get_current_admin), db=Depends(get_db)):
    oid = parse_object_id(inquiry_id)
    if oid is not None:
        with store_errors("Delete inquiry"):
            db["contact"].delete_one({"_id": oid})
    return {"success": True, "message": "Contact deleted"}


# ------------------------------
# Portfolio clients
# ------------------------------

@app.get("/api/clients")
def list_clients(db=Depends(get_db)):
    with store_errors("List clients"):
        docs = list(db["client"].find().sort("createdAt", DESCENDING))
    return {"success": True, "data": [serialize_client(d) for d in docs]}


@app.post("/api/clients", status_code=201)
def create_client(
    payload: Optional[Dict[str, Any]] = Body(None),
    admin=Depends(get_current_admin),
    db=Depends(get_db),
):
    doc = {k: v for k, v in (payload or {}).items() if k not in ("_id", "id", "createdAt")}
    doc["createdAt"] = datetime.now(timezone.utc)
    with store_errors("Create client"):
        db["client"].insert_one(doc)
    return {"success": True, "data": serialize_client(doc)}


# ------------------------------
# Admin auth
# ------------------------------

@app.post("/api/admin/register", status_code=201)
def register_admin(payload: Optional[AdminCredentials] = None, db=Depends(get_db)):
    if payload is None or is_blank(payload.username) or not payload.password:
        raise InvalidInput("Username and password are required")

    with store_errors("Admin registration"):
        if registration_mode() == "bootstrap" and db["admin"].count_documents({}) > 0:
            raise RegistrationClosed()
        if db["admin"].find_one({"username": payload.username}):
            raise Conflict()
        account = AdminAccount(username=payload.username, passwordHash=hash_password(payload.password))
        try:
            db["admin"].insert_one(account.model_dump())
        except DuplicateKeyError:
            raise Conflict()
    logger.info("Admin %s registered", payload.username)
    return {"success": True, "message": "Admin created successfully"}


@app.post("/api/admin/login")
def login_admin(payload: Optional[AdminCredentials] = None, db=Depends(get_db)):
    if payload is None or is_blank(payload.username) or not payload.password:
        raise InvalidInput("Username and password are required")

    with store_errors("Admin login"):
        admin = db["admin"].find_one({"username": payload.username})
        if not admin or not verify_password(payload.password, admin.get("passwordHash")):
            logger.info("Failed login for %s", payload.username)
            raise InvalidCredentials()
        token = issue_token(admin["_id"])
    return {"success": True, "token": token, "message": "Login successful"}


# ------------------------------
# Health
# ------------------------------

@app.get("/api/health")
def health(store=Depends(get_store)):
    database = "unavailable"
    if store is not None:
        try:
            store.list_collection_names()
            database = "connected"
        except PyMongoError as e:
            logger.warning("Database health check failed: %s", e)
    return {"success": True, "database": database}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    port = int(os.getenv("PORT", 5000))
    uvicorn.run(app, host="0.0.0.0", port=port)
