"""
Google Sign-In ID token verification.
"""

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from smartcv.core.config import settings


class GoogleIdentityVerifier:
    """Verifies Google ID tokens issued for our OAuth client."""

    def __init__(self, client_id: str = settings.GOOGLE_CLIENT_ID):
        self.client_id = client_id
        self._request = google_requests.Request()

    def verify(self, token: str) -> dict:
        """
        Verify the token signature, audience and expiry.

        Returns:
            The token claims (``email``, ``sub``, ...)

        Raises:
            ValueError: missing, malformed or rejected token
        """
        if not self.client_id:
            # Without an audience google-auth accepts tokens minted for any client
            raise ValueError("GOOGLE_CLIENT_ID is not configured")
        if not token:
            raise ValueError("Google ID token is required")
        return id_token.verify_oauth2_token(token, self._request, self.client_id)
