"""Domain entity representing a community member."""

from dataclasses import dataclass

AUTH_PROVIDER_BLUESKY = "bluesky"


def is_federated_identity(provider: str | None, social_id: str | None) -> bool:
    """Return ``True`` when the user's name lives in an external DID document."""

    return provider == AUTH_PROVIDER_BLUESKY and bool(
        social_id and social_id.startswith("did:")
    )


@dataclass
class User:
    """Core attributes describing a platform user."""

    id: int
    tenant_id: str
    slug: str
    first_name: str | None
    last_name: str | None
    provider: str | None = None
    social_id: str | None = None

    @property
    def display_name(self) -> str:
        """Return the full name, or an empty string when none is stored."""

        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def is_federated(self) -> bool:
        return is_federated_identity(self.provider, self.social_id)
