from .identity import (
    IdentityProvider,
    InMemoryIdentityProvider,
    JsonIdentityProvider,
    Owner,
    validate_credentials,
)

__all__ = [
    "IdentityProvider",
    "InMemoryIdentityProvider",
    "JsonIdentityProvider",
    "Owner",
    "validate_credentials",
]
