from pydantic import BaseModel


class AuthToken(BaseModel):
    """A bearer token together with its absolute expiry (unix seconds).

    Owned exclusively by TokenProvider and never handed beyond the
    orchestration boundary.
    """

    value: str
    expires_at: float

    def is_valid(self, now: float, skew: float) -> bool:
        """True while the token is still usable, treating it as expired `skew` seconds early."""
        return now < self.expires_at - skew
