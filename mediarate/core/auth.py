import logging
from typing import Awaitable, Callable, List, Optional

from fastapi import Header, HTTPException
from firebase_admin import auth
from pydantic import BaseModel

from .exceptions import AuthError
from .firebase import get_firebase_app

logger = logging.getLogger(__name__)

class UserInfo(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def greeting_name(self) -> str:
        if self.display_name:
            return self.display_name
        if self.email:
            return self.email.split('@')[0]
        return self.id

class AuthState(BaseModel):
    user: Optional[UserInfo] = None
    is_loading: bool = True

AuthListener = Callable[[AuthState], Awaitable[None]]
TokenVerifier = Callable[[str], UserInfo]
TokenRevoker = Callable[[str], None]

def verify_token(id_token: str) -> UserInfo:
    """Verify a Firebase ID token and return the user it belongs to"""
    try:
        claims = auth.verify_id_token(id_token, app=get_firebase_app(), check_revoked=True)
    except Exception as e:
        logger.warning(f"Rejected ID token: {str(e)}")
        raise AuthError("Invalid or expired ID token") from e

    return UserInfo(
        id=claims['uid'],
        email=claims.get('email'),
        display_name=claims.get('name')
    )

def revoke_tokens(uid: str) -> None:
    auth.revoke_refresh_tokens(uid, app=get_firebase_app())

class AuthSession:
    """Auth state for one client, with change subscriptions.

    Every change (including the initial loading -> resolved transition) is
    pushed to all listeners in subscription order.
    """

    def __init__(self, verifier: TokenVerifier = verify_token, revoker: TokenRevoker = revoke_tokens):
        self.verifier = verifier
        self.revoker = revoker
        self.state = AuthState()
        self.listeners: List[AuthListener] = []

    @property
    def user(self) -> Optional[UserInfo]:
        return self.state.user

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self.listeners.append(listener)

        def unsubscribe():
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    async def _set_state(self, user: Optional[UserInfo], is_loading: bool):
        self.state = AuthState(user=user, is_loading=is_loading)
        for listener in list(self.listeners):
            await listener(self.state)

    async def sign_in(self, id_token: str) -> UserInfo:
        await self._set_state(self.state.user, True)
        try:
            user = self.verifier(id_token)
        except AuthError:
            await self._set_state(None, False)
            raise
        logger.info(f"User {user.id} signed in")
        await self._set_state(user, False)
        return user

    async def logout(self):
        user = self.state.user
        if user is not None:
            try:
                self.revoker(user.id)
            except Exception as e:
                # the local session ends regardless
                logger.error(f"Failed to revoke tokens for {user.id}: {str(e)}")
            logger.info(f"User {user.id} logged out")
        await self._set_state(None, False)

async def get_current_user(authorization: Optional[str] = Header(None)) -> UserInfo:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    try:
        return verify_token(authorization.split(" ", 1)[1].strip())
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
