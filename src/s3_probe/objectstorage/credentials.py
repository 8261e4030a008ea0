"""Static credentials for signing object storage requests."""

from dataclasses import dataclass, field
from typing import Optional, Protocol

from s3_probe.core.exceptions import ConfigError


@dataclass(frozen=True)
class Credentials:
    """Access key pair plus optional session token."""

    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: Optional[str] = field(default=None, repr=False)


class CredentialProvider(Protocol):
    """Protocol for anything that can supply signing credentials."""

    def get(self) -> Credentials:
        """Return the credentials to sign the next request with."""
        ...


class StaticCredentialProvider(CredentialProvider):
    """Holds credentials loaded once at startup.

    Validation is deferred to ``get`` so a provider can be built from a
    partially filled configuration and fail only when it is first used.
    """

    def __init__(
        self,
        access_key_id: Optional[str],
        secret_access_key: Optional[str],
        session_token: Optional[str] = None,
    ):
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._session_token = session_token or None

    def get(self) -> Credentials:
        missing = [
            name
            for name, value in (
                ("access_key_id", self._access_key_id),
                ("secret_access_key", self._secret_access_key),
            )
            if not value or not value.strip()
        ]
        if missing:
            raise ConfigError(f"Missing credentials: {', '.join(missing)}")

        assert self._access_key_id is not None
        assert self._secret_access_key is not None

        return Credentials(
            access_key_id=self._access_key_id,
            secret_access_key=self._secret_access_key,
            session_token=self._session_token,
        )

    def __repr__(self) -> str:
        return f"StaticCredentialProvider(access_key_id='{self._access_key_id}')"
