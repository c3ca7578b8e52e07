import os
import logging
from functools import wraps
from flask import request
import jwt
from jwt import PyJWKClient
from utils.response import error_response

logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    Verifies Clerk session tokens.

    Identity lives with Clerk; the service only ever sees the resolved user
    id, exposed to resources as ``request.user['sub']``.
    """

    def __init__(self):
        self.clerk_jwks_url = f"https://{os.getenv('CLERK_FRONTEND_API')}/.well-known/jwks.json"
        self.jwt_audience = os.getenv('CLERK_JWT_AUDIENCE')
        self._jwks_client = None

    @property
    def jwks_client(self) -> PyJWKClient:
        if self._jwks_client is None:
            self._jwks_client = PyJWKClient(self.clerk_jwks_url)
        return self._jwks_client

    def decode_token(self, token: str) -> dict:
        signing_key = self.jwks_client.get_signing_key_from_jwt(token).key

        return jwt.decode(
            token,
            key=signing_key,
            algorithms=["RS256"],
            audience=self.jwt_audience,
            options={"verify_exp": True},
            leeway=60  # Allow 60 seconds of clock skew
        )

    def clerk_required(self, f):
        @wraps(f)
        def decorated(*args, **kwargs):
            auth_header = request.headers.get("Authorization", "")

            if not auth_header.startswith("Bearer "):
                logger.warning("Missing or malformed Authorization header")
                return error_response("Unauthorized - No Bearer token", 401)

            token = auth_header.split("Bearer ")[1]

            try:
                payload = self.decode_token(token)
                if not payload.get("sub"):
                    logger.warning("JWT has no subject")
                    return error_response("Invalid token", 401)

                request.user = payload
                logger.debug("JWT validated for user: %s", payload.get("sub"))

            except jwt.ExpiredSignatureError:
                logger.warning("JWT token expired")
                return error_response("Token expired", 401)
            except jwt.InvalidTokenError as e:
                logger.warning("Invalid JWT token: %s", str(e))
                return error_response("Invalid token", 401)
            except Exception as e:
                logger.error("JWT validation error: %s", str(e))
                return error_response("Authentication failed", 500)

            return f(*args, **kwargs)

        return decorated


# Global instance
auth_middleware = AuthMiddleware()
clerk_required = auth_middleware.clerk_required
