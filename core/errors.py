#!/usr/bin/env python3
"""
Service-layer exceptions shared by the ranking engine and its adapters.
"""


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class InvalidInputError(ServiceException):
    """Raised when request parameters are malformed or out of range."""
    pass


class NotFoundError(ServiceException):
    """Raised when a required job or scoring config does not exist."""
    pass


class ConflictError(ServiceException):
    """Raised when a recalculation is already in progress and was not forced."""
    pass


class InternalError(ServiceException):
    """Raised when scoring or persistence fails unexpectedly."""
    pass
