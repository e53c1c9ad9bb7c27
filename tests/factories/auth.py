"""Factories for authentication request payloads."""

from uuid import uuid4

from polyfactory.factories.pydantic_factory import ModelFactory

from chronicle.modules.users.schemas import RegisterRequest


DEFAULT_PASSWORD = "Secret123"


class RegisterRequestFactory(ModelFactory[RegisterRequest]):
    """Factory for generating registration payloads."""

    __model__ = RegisterRequest

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"user-{uuid4().hex[:8]}@example.com"

    @classmethod
    def password(cls) -> str:
        """A password that satisfies the complexity rules."""
        return DEFAULT_PASSWORD

    @classmethod
    def first_name(cls) -> str:
        """Generate a given name."""
        return cls.__faker__.first_name()

    @classmethod
    def last_name(cls) -> str:
        """Generate a family name."""
        return cls.__faker__.last_name()

    @classmethod
    def tenant_name(cls) -> str:
        """Generate a company name."""
        return cls.__faker__.company()
