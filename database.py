import logging
import os
from urllib.parse import quote_plus

from dotenv import load_dotenv
from fastapi import Depends, Request
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.server_api import ServerApi

load_dotenv()

logger = logging.getLogger(__name__)

TESTING = os.getenv("TESTING") == "1"
DB_NAME = os.getenv("DB_NAME", "AdminPNLCalendar")
SLOTS_COLLECTION = "slots"


def build_mongo_uri() -> str:
    """
    Builds the MongoDB connection string from the environment.

    DATABASE_URL wins if set, otherwise the URI is assembled from
    DB_PREFIX, DB_USER, DB_PASSWORD, DB_HOST and DB_PARAMS.

    Returns:
        str: The connection string.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    prefix = os.getenv("DB_PREFIX", "mongodb://")
    host = os.getenv("DB_HOST", "localhost:27017")
    params = os.getenv("DB_PARAMS", "")
    user = os.getenv("DB_USER")
    password = os.getenv("DB_PASSWORD")

    if user:
        credentials = f"{quote_plus(user)}:{quote_plus(password or '')}"
        # DB_HOST traegt das "@" selbst, wie in dbconnection.properties
        if not host.startswith("@"):
            host = "@" + host
        return f"{prefix}{credentials}{host}{params}"
    return f"{prefix}{host.lstrip('@')}{params}"


def create_client() -> MongoClient:
    if TESTING:
        import mongomock
        return mongomock.MongoClient()
    return MongoClient(build_mongo_uri(), server_api=ServerApi("1"))


def connect_db() -> MongoClient:
    """
    Creates the client and forces a round trip so a bad URI or an
    unreachable server fails at startup instead of on the first request.
    """
    client = create_client()
    try:
        client.server_info()
    except Exception:
        logger.exception("MongoDB connection error")
        client.close()
        raise
    logger.info("Connected to MongoDB")
    return client


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_slots_collection(db: Database = Depends(get_db)) -> Collection:
    return db[SLOTS_COLLECTION]
