"""
Custom exceptions for the publishing module.

These exceptions separate the failure modes of a publish round trip:
transport problems, unreadable response bodies and rejected credentials.
Callers of RestApiPublisher only ever see them folded into result models.
"""


class PublisherError(Exception):
    """Base exception for the publishing module."""
    pass


class TransportError(PublisherError):
    """Raised when a request fails at the HTTP level or returns a non-success status."""
    pass


class DecodeError(PublisherError):
    """Raised when a response body is missing or does not match the expected shape."""
    pass


class AuthenticationError(PublisherError):
    """Raised when the token endpoint rejects the credentials."""
    pass
