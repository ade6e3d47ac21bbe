import hashlib
import logging
import time
from supabase import Client
from shelfbook.core.errors import AuthorizationError, UpstreamError, ValidationError
from shelfbook.modules.auth.schemas import LoginRequest, SignupRequest, TokenResponse, SignupResponse
from shelfbook.modules.profiles.schemas import ProfileCreate
from shelfbook.modules.profiles.service import ProfileService, validate_username
from fastapi import HTTPException
from typing import Dict, Any

logger = logging.getLogger(__name__)

# Short-lived cache for get_current_user so a page load's burst of requests costs one auth call
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def signup(self, signup_data: SignupRequest) -> SignupResponse:
        """Register with Supabase Auth, then provision the profile for the new user id"""
        username = validate_username(signup_data.username)
        profiles = ProfileService(self.supabase)
        profiles.ensure_username_available(username)

        try:
            auth_response = self.supabase.auth.sign_up({
                "email": signup_data.email,
                "password": signup_data.password,
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ValidationError("User already exists")
            raise UpstreamError(f"Registration failed: {error_message}")

        if not auth_response.user:
            raise UpstreamError("Failed to create user account")

        user_id = auth_response.user.id
        profile = profiles.create_profile(
            ProfileCreate(username=username, display_name=username, user_id=user_id),
            session_user_id=None,
        )

        session = auth_response.session
        if not session:
            return SignupResponse(
                user_id=user_id,
                email=auth_response.user.email or signup_data.email,
                profile=profile.model_dump(mode="json"),
                confirmation_required=True,
                message="Account created! Please check your email to confirm your account, then log in.",
            )
        return SignupResponse(
            user_id=user_id,
            email=auth_response.user.email or signup_data.email,
            profile=profile.model_dump(mode="json"),
            access_token=session.access_token,
            message="Account created",
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise AuthorizationError("Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise AuthorizationError("Invalid email or password")
            raise UpstreamError(f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve the identity behind an access token. Cached for a short TTL."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise AuthorizationError("Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            logger.info(f"Token rejected by Supabase Auth: {e}")
            raise AuthorizationError("Invalid or expired token")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Tokens are stateless JWTs; they stay valid until they expire
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Supabase sign_out failed: {e}")
            return False
