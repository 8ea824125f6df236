"""Cliente MongoDB (pymongo) compartido por el proceso.

Se inicializa una sola vez en el startup; los routers reciben la `Database`
vía dependencias y la pasan a los servicios.
"""
from __future__ import annotations

import logging
from typing import Optional

import certifi
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from app.core.config import settings

_log = logging.getLogger("maple.mongo")

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def _build_client() -> MongoClient:
    uri = settings.mongo_uri
    # Ajustes conservadores: pool pequeño (serverless) y CA de certifi
    kwargs = dict(
        serverSelectionTimeoutMS=5000,
        socketTimeoutMS=45000,
        maxPoolSize=10,
        retryReads=True,
        tz_aware=True,
    )
    if uri.startswith("mongodb+srv://"):
        # SRV ya implica TLS; proveemos CA bundle para robustez
        kwargs["tlsCAFile"] = certifi.where()
    elif "tls=true" in uri.lower() or "ssl=true" in uri.lower():
        kwargs["tlsCAFile"] = certifi.where()
        kwargs["tlsAllowInvalidCertificates"] = settings.mongo_tls_insecure
        kwargs["tlsAllowInvalidHostnames"] = settings.mongo_tls_allow_invalid_hostnames
    return MongoClient(uri, **kwargs)


def init_mongo() -> None:
    """
    Inicializa el cliente y valida conexión (ping).
    Llamar una sola vez en el startup de FastAPI.
    """
    global _client, _db
    try:
        _client = _build_client()
        _client.admin.command("ping")
        _db = _client[settings.mongo_db]
        _log.info("Conectado a MongoDB (db=%s)", settings.mongo_db)
    except ServerSelectionTimeoutError as e:
        # No tumbar la app: deja _db en None y loggea
        _log.warning("MongoDB no accesible (timeout): %s", e)
        _client = None
        _db = None
    except PyMongoError as e:
        _log.warning("Error de conexión a MongoDB: %s", e)
        _client = None
        _db = None


def get_db() -> Database:
    """
    Devuelve la referencia a la base de datos.
    Úsalo en dependencias/scripts, no dentro de los servicios.
    """
    if _db is None:
        raise RuntimeError("Mongo no inicializado. Intenta más tarde.")
    return _db


def db_ready() -> bool:
    return _db is not None


def close_mongo() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None
