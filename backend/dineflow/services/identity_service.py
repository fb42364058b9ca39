"""Federated sign-in: verification of Firebase ID tokens."""

import logging
from dataclasses import dataclass
from typing import Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials as fb_credentials

from dineflow.core.config import settings
from dineflow.core.exceptions import IdentityProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FederatedIdentity:
    uid: str
    email: str
    name: Optional[str] = None


class FirebaseIdentityProvider:
    """Verifies ID tokens issued by the Firebase popup sign-in flow."""

    def __init__(self, credentials_path: Optional[str] = None, project_id: Optional[str] = None):
        self.credentials_path = credentials_path
        self.project_id = project_id
        self._app = None

    def _get_app(self):
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app()
        except ValueError:
            options = {"projectId": self.project_id} if self.project_id else None
            if self.credentials_path:
                cred = fb_credentials.Certificate(self.credentials_path)
                self._app = firebase_admin.initialize_app(cred, options)
            else:
                self._app = firebase_admin.initialize_app(options=options)
            logger.info("Firebase Admin SDK initialized")
        return self._app

    def verify(self, id_token: str) -> FederatedIdentity:
        """Verify an ID token and return the identity it asserts."""
        try:
            claims = firebase_auth.verify_id_token(id_token, app=self._get_app())
        except (
            firebase_auth.InvalidIdTokenError,
            firebase_auth.ExpiredIdTokenError,
            firebase_auth.RevokedIdTokenError,
            firebase_auth.CertificateFetchError,
            ValueError,
        ) as e:
            logger.warning(f"Federated token rejected: {e}")
            raise IdentityProviderError("Sign-in could not be verified")

        email = claims.get("email")
        if not email:
            raise IdentityProviderError("Identity provider did not return an email address")
        return FederatedIdentity(uid=claims["uid"], email=email.lower(), name=claims.get("name"))


_provider = FirebaseIdentityProvider(
    credentials_path=settings.firebase_credentials_path,
    project_id=settings.firebase_project_id,
)


def get_identity_provider() -> FirebaseIdentityProvider:
    return _provider
