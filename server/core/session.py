# server/core/session.py

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt


ALGORITHM = "HS256"
SESSION_LIFETIME = timedelta(days=7)


@dataclass(frozen=True)
class SessionIdentity:
    user_id: int
    email: str


class SessionCodec:
    """
    Issues and verifies signed, time-limited session tokens.
    Tokens are stateless: nothing is stored server side and nothing can be revoked.
    """

    def __init__(self, secret: str, algorithm: str = ALGORITHM, lifetime: timedelta = SESSION_LIFETIME):
        if not secret:
            raise ValueError("A signing secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime

    def issue(self, user_id: int, email: str, issued_at: datetime | None = None) -> str:
        issued_at = issued_at or datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str | None) -> SessionIdentity | None:
        if not token:
            return None
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            return None

        subject = payload.get("sub")
        email = payload.get("email")
        if subject is None or email is None:
            return None
        try:
            user_id = int(subject)
        except (TypeError, ValueError):
            return None
        return SessionIdentity(user_id=user_id, email=email)
