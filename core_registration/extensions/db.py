"""Process-wide MongoDB connection handle shared by every request.

Expose:
 - client_promise: a ClientPromise for the single MongoClient of this process
 - get_db(name=None): coroutine returning a Database handle

The connection string is read when this module is imported and its absence is
fatal right away. The connection itself is only attempted the first time a
caller asks for it, on a background thread, so importing the app on a cold
serverless start does no network work.
"""
import asyncio
import logging
import os
import re
import sys
import threading
from concurrent.futures import Future
from typing import Callable, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

MONGODB_URI = os.getenv("MONGODB_URI")

if not MONGODB_URI:
    raise RuntimeError("Please add your MongoDB URI to the MONGODB_URI environment variable")

MONGODB_DB = os.getenv("MONGODB_DB", "core_registration")
APP_ENV = os.getenv("APP_ENV", "production").lower()
SERVER_SELECTION_TIMEOUT_MS = int(os.getenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "5000"))

# Process-wide slot holding the development client promise.
DEV_CLIENT_SLOT = "_core_registration_client_promise"


def safe_uri(uri: str) -> str:
    """Redact the password in a MongoDB URI for logs."""
    return re.sub(r"(mongodb(?:\+srv)?://[^:/@]+):[^@]+@", r"\1:***@", uri)


class ClientPromise:
    """A single connection attempt that any number of callers can wait on.

    The first caller starts the attempt; everyone after that, concurrent or
    not, gets the same future. A failed attempt stays failed.

    Works from async code (``client = await promise``) on any event loop and
    from sync code (``promise.result()``).
    """

    def __init__(self, uri: str, client_factory: Callable[..., MongoClient] = MongoClient,
                 server_selection_timeout_ms: int = SERVER_SELECTION_TIMEOUT_MS):
        self._uri = uri
        self._client_factory = client_factory
        self._timeout_ms = server_selection_timeout_ms
        self._future: Optional[Future] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        future = self._future
        if future is None:
            return "uninitialized"
        if not future.done():
            return "connecting"
        return "failed" if future.exception() is not None else "ready"

    def start(self) -> Future:
        """Start the connection attempt if nobody has yet; return its future."""
        with self._lock:
            if self._future is None:
                self._future = Future()
                self._future.set_running_or_notify_cancel()
                threading.Thread(target=self._connect, name="mongo-connect", daemon=True).start()
            return self._future

    def _connect(self) -> None:
        future = self._future
        logger.info("Connecting to MongoDB at %s", safe_uri(self._uri))
        try:
            client = self._client_factory(self._uri, serverSelectionTimeoutMS=self._timeout_ms)
            # MongoClient connects lazily; ping so failures surface here.
            client.admin.command("ping")
        except PyMongoError as exc:
            logger.exception("MongoDB connection failed")
            future.set_exception(ConnectionError(f"Failed to connect to MongoDB: {exc}"))
        except Exception as exc:
            logger.exception("MongoDB connection failed")
            future.set_exception(exc)
        else:
            logger.info("Connected to MongoDB")
            future.set_result(client)

    def result(self, timeout: Optional[float] = None) -> MongoClient:
        return self.start().result(timeout)

    def __await__(self):
        return asyncio.wrap_future(self.start()).__await__()


if APP_ENV == "development":
    # Cached on `sys` rather than in this module, so neither importlib.reload
    # nor a fresh import after dropping the sys.modules entry starts a second
    # connection.
    if getattr(sys, DEV_CLIENT_SLOT, None) is None:
        setattr(sys, DEV_CLIENT_SLOT, ClientPromise(MONGODB_URI))
    client_promise = getattr(sys, DEV_CLIENT_SLOT)
else:
    client_promise = ClientPromise(MONGODB_URI)


async def get_db(db_name: Optional[str] = None):
    """Return a database handle once the shared client is connected."""
    client = await client_promise
    return client[db_name or MONGODB_DB]
