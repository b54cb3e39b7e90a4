from typing import Any, Dict, Optional, Protocol


class DocumentStoreError(Exception):
    """Transport or backend failure while talking to the document store."""


class DocumentStore(Protocol):
    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Returns the document's fields, or None when the document does not exist."""
        ...
