"""Services package"""

from .firebase_service import (
    RemoteStore,
    FirebaseRemoteStore,
    FirestoreRemoteStore,
    connect_remote_store,
)

__all__ = ['RemoteStore', 'FirebaseRemoteStore', 'FirestoreRemoteStore', 'connect_remote_store']
