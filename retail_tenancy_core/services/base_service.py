"""
Base service implementation with common functionality for all services.

Services own (or borrow) a SQLAlchemy session and translate unexpected
failures into ``ServiceError``.
"""

import logging
from contextlib import contextmanager
from typing import NoReturn, Optional

from sqlalchemy.orm import Session

from ..db.db_config import get_db_manager
from ..exceptions import ErrorCode, RepositoryError, ServiceError
from ..utils.logger import get_logger


class SessionManagedService:
    """
    Service that owns and manages its own database session.

    A session passed in (tests, request-scoped wiring) is borrowed: the
    service never commits, rolls back or closes it outside ``transaction``.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize service with its own session.

        Args:
            session: Optional existing session (for testing or coordination)
            logger: Optional logger instance
        """
        if session is not None:
            self.session = session
            self._owns_session = False
        else:
            self.session = self._create_session()
            self._owns_session = True

        self.logger = logger or get_logger()

    def _create_session(self) -> Session:
        """Create a new session from the global database manager."""
        return get_db_manager().session_factory()

    def _handle_service_exception(
        self, operation: str, exception: Exception, entity_id: Optional[int] = None
    ) -> NoReturn:
        """
        Handle and log service exceptions consistently.

        Raises:
            ServiceError: Always; NOT_FOUND repository errors keep their code
        """
        if isinstance(exception, RepositoryError) and exception.error_code == ErrorCode.NOT_FOUND:
            self.logger.warning(
                f"Entity not found in {operation}",
                extra={
                    "operation": operation,
                    "entity_id": entity_id,
                    "error_type": type(exception).__name__,
                    "error_details": str(exception),
                },
            )
            raise ServiceError(
                str(exception),
                error_code=ErrorCode.NOT_FOUND,
                operation=operation,
                entity_id=entity_id,
                cause=exception,
            )

        error_msg = f"Error in {operation}: {str(exception)}"
        self.logger.error(
            error_msg,
            extra={
                "operation": operation,
                "entity_id": entity_id,
                "error_type": type(exception).__name__,
                "error_details": str(exception),
            },
        )
        raise ServiceError(
            error_msg,
            error_code=ErrorCode.INTERNAL_ERROR,
            operation=operation,
            entity_id=entity_id,
            cause=exception,
        )

    @contextmanager
    def transaction(self):
        """
        Context manager for transactional operations.

        Usage:
            with service.transaction():
                service.create_tenant(...)
                service.update_tenant(...)
                # Commits on success, rolls back on exception
        """
        try:
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def commit(self):
        """Manually commit the current transaction."""
        if self._owns_session:
            self.session.commit()

    def rollback(self):
        """Manually rollback the current transaction."""
        if self._owns_session:
            self.session.rollback()

    def close(self):
        """Close the session if we own it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.rollback()
        else:
            self.commit()
        self.close()
