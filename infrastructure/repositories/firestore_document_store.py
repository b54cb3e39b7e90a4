import logging
import threading
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions

from infrastructure.repositories.document_store import DocumentStoreError

log = logging.getLogger(__name__)


class FirestoreDocumentStore:
    """
    Keyed document reads against Cloud Firestore.

    Credentials: an explicit service-account JSON path if given,
    otherwise Application Default Credentials.
    """

    def __init__(self, credentials_path: Optional[str] = None, client: Any = None, timeout: float = 10.0):
        self._credentials_path = credentials_path
        self._client = client
        self._timeout = timeout
        self._init_lock = threading.Lock()

    def _db(self):
        if self._client is not None:
            return self._client
        with self._init_lock:
            if self._client is None:
                try:
                    app = firebase_admin.get_app()
                except ValueError:
                    cred = (
                        credentials.Certificate(self._credentials_path)
                        if self._credentials_path
                        else credentials.ApplicationDefault()
                    )
                    app = firebase_admin.initialize_app(cred)
                self._client = firestore.client(app)
                log.info("Firestore client initialized")
        return self._client

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            snap = self._db().collection(collection).document(doc_id).get(timeout=self._timeout)
        except (google_exceptions.GoogleAPIError, google_auth_exceptions.GoogleAuthError, ValueError) as e:
            log.error(f"Firestore read {collection}/{doc_id} failed: {e}")
            raise DocumentStoreError(f"Firestore read failed: {e}") from e

        if not snap.exists:
            return None
        return snap.to_dict() or {}
