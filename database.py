"""
MongoDB connection for the marketing site backend.

Collections:
- contact -> Inquiry
- client  -> PortfolioEntry
- admin   -> AdminAccount
"""
import os
import logging

from dotenv import load_dotenv
from fastapi import Depends
from pymongo import MongoClient, ASCENDING
from pymongo.errors import PyMongoError

from errors import ServerError

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "smma")

db = None

if DATABASE_URL:
    try:
        client = MongoClient(DATABASE_URL, serverSelectionTimeoutMS=5000)
        db = client[DATABASE_NAME]
    except PyMongoError as e:
        logger.error("MongoDB connection error: %s", e)


def get_store():
    """Return the configured database handle, or None. Overridden in tests."""
    return db


def get_db(store=Depends(get_store)):
    if store is None:
        raise ServerError()
    return store


def ensure_indexes(store):
    store["admin"].create_index([("username", ASCENDING)], unique=True)
