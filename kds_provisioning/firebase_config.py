import logging
from dataclasses import dataclass
from pathlib import Path

import firebase_admin
from firebase_admin import auth, credentials, firestore

logger = logging.getLogger(__name__)

APP_NAME = "kds-provisioning"


@dataclass
class FirebaseClients:
    """Firebase app plus the auth and Firestore clients bound to it."""

    app: object
    auth: object
    db: object

    def close(self):
        if self.app is not None:
            firebase_admin.delete_app(self.app)
            self.app = None


def connect(service_account, app_name=APP_NAME):
    """Initialise a named Firebase app from a service-account key file.

    The app is scoped to one run; call ``close()`` when done.
    """
    cred = credentials.Certificate(str(Path(service_account)))
    app = firebase_admin.initialize_app(cred, name=app_name)
    logger.debug("Initialised Firebase app %r for project %s", app_name, app.project_id)
    return FirebaseClients(app=app, auth=auth.Client(app), db=firestore.client(app))
