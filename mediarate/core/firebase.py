from functools import lru_cache

from firebase_admin import App, credentials, initialize_app, firestore
from .config import settings

@lru_cache
def get_firebase_app() -> App:
    cred = credentials.Certificate(str(settings.FIREBASE_CREDS_PATH_ABSOLUTE))
    return initialize_app(cred)

@lru_cache
def get_db():
    return firestore.client(get_firebase_app())
