# services/errors.py
"""
Storage failure translation shared by the service layer.

Expected conditions (bad input, duplicate receipt, missing record) are
returned as values by the services. Only storage outages surface as
exceptions, as TransientStorageError.
"""
import functools
import logging

from sqlalchemy.exc import InterfaceError, OperationalError

logger = logging.getLogger(__name__)


class TransientStorageError(Exception):
     """The database could not be reached or failed to answer a query."""


def translate_storage_errors(func):
     """
     Re-raise connection-level SQLAlchemy failures as TransientStorageError.

     Integrity violations are left alone; callers that care about them
     (duplicate receipt numbers) catch IntegrityError themselves.
     """

     @functools.wraps(func)
     def wrapper(*args, **kwargs):
          try:
               return func(*args, **kwargs)
          except (OperationalError, InterfaceError) as exc:
               logger.error("Storage failure in %s: %s", func.__name__, exc)
               raise TransientStorageError(str(exc)) from exc

     return wrapper
