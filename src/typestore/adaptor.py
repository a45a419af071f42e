from __future__ import annotations

import logging
import os
from typing import Any

from google.cloud import firestore

from typestore.settings import StoreSettings


LOGGER = logging.getLogger(__name__)

EMULATOR_HOST_ENV = "FIRESTORE_EMULATOR_HOST"


def _prepare_environment(settings: StoreSettings) -> None:
    if settings.firestore_emulator_host:
        # The client library reads the emulator address from the environment only.
        os.environ[EMULATOR_HOST_ENV] = settings.firestore_emulator_host
        LOGGER.info("Firestore emulator: %s", settings.firestore_emulator_host)


def _client_kwargs(settings: StoreSettings) -> dict[str, Any]:
    return {
        "project": settings.firestore_project_id or None,
        "database": settings.firestore_database,
    }


def create_firestore_client(settings: StoreSettings) -> firestore.Client:
    _prepare_environment(settings)
    return firestore.Client(**_client_kwargs(settings))


def create_async_firestore_client(settings: StoreSettings) -> firestore.AsyncClient:
    _prepare_environment(settings)
    return firestore.AsyncClient(**_client_kwargs(settings))
