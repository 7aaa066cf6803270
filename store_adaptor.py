# store_adaptor.py
import os
import sys
from typing import Any, Dict, List, Sequence, Tuple

from dotenv import load_dotenv
import firebase_admin
from firebase_admin import credentials, firestore

from consolidate.store import SERVER_TIMESTAMP

# ---------------- Env ----------------
load_dotenv()

FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
FIREBASE_CREDENTIALS = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "firebase-service-account-key.json")
FIREBASE_APP_NAME = os.getenv("FIREBASE_APP_NAME", "hr-consolidation")


def _to_firestore(value: Any) -> Any:
    """Swap the engine's SERVER_TIMESTAMP placeholder for Firestore's."""
    if value is SERVER_TIMESTAMP:
        return firestore.SERVER_TIMESTAMP
    if isinstance(value, dict):
        return {k: _to_firestore(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_firestore(v) for v in value]
    return value


class FirestoreStore:
    """DocumentStore backed by a firebase-admin Firestore client."""

    def __init__(self, client):
        self._db = client

    @classmethod
    def from_env(cls, credentials_path: str | None = None, project_id: str | None = None):
        path = credentials_path or FIREBASE_CREDENTIALS
        project = project_id or FIREBASE_PROJECT_ID
        if not path or not os.path.exists(path):
            print(f"❌ Missing service account key: {path!r} "
                  "(set GOOGLE_APPLICATION_CREDENTIALS or pass --credentials)")
            sys.exit(1)

        try:
            app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            options = {"projectId": project} if project else None
            app = firebase_admin.initialize_app(credentials.Certificate(path), options,
                                                name=FIREBASE_APP_NAME)
        return cls(firestore.client(app))

    def read_all(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        return [(doc.id, doc.to_dict() or {}) for doc in self._db.collection(collection).stream()]

    def upsert(self, collection: str, doc_id: str, body: Dict[str, Any]) -> None:
        self._db.collection(collection).document(doc_id).set(_to_firestore(body))

    def commit_batch(self, collection: str, docs: Sequence[Tuple[str, Dict[str, Any]]]) -> None:
        batch = self._db.batch()
        ref = self._db.collection(collection)
        for doc_id, body in docs:
            batch.set(ref.document(doc_id), _to_firestore(body))
        batch.commit()


# ---------------- CLI ----------------
if __name__ == "__main__":
    import json

    if len(sys.argv) < 2:
        print("Usage: python store_adaptor.py <collection>")
        sys.exit(1)

    store = FirestoreStore.from_env()
    rows = store.read_all(sys.argv[1])
    print(json.dumps([{"id": i, "data": d} for i, d in rows], indent=2, default=str))
