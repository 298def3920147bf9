# backend/app/repositories/base_repository.py
"""
Base Repository Pattern for the HubContent platform

Provides the foundation for all repository classes with:
- Common CRUD operations
- Type safety with generics
- Transaction support (managed by services)
- Conditional updates used as state-machine guards

Repositories never commit. Services own the unit of work and decide when
a transaction ends.
"""

from contextlib import contextmanager
import logging
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Generic data access over one ORM model.

    Subclasses add the model-specific queries; every SQLAlchemy failure
    other than an integrity violation surfaces as RepositoryException.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model.

        Args:
            db: SQLAlchemy session (managed by service layer)
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @contextmanager
    def savepoint(self) -> Iterator[Session]:
        """
        Run a block inside a SAVEPOINT.

        A failure inside the block (typically a unique violation lost to a
        concurrent writer) rolls back only the block and leaves the outer
        transaction usable.
        """
        nested = self.db.begin_nested()
        try:
            yield self.db
            nested.commit()
        except Exception:
            # A failed flush leaves the savepoint inactive but not yet
            # rolled back; it still has to be released here.
            nested.rollback()
            raise

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        """
        Retrieve an entity by its primary key.

        Implements eager loading for relationships when requested.
        """
        try:
            query = self.db.query(self.model).filter(self.model.id == id)

            if load_relationships:
                query = self._apply_eager_loading(query)

            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def get_fresh(self, id: str) -> Optional[T]:
        """Re-read a row, overwriting any stale copy held in the session."""
        try:
            return (
                self.db.query(self.model)
                .populate_existing()
                .filter(self.model.id == id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error re-reading {self.model.__name__} {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by service layer.
        Integrity errors propagate untouched so callers can resolve races.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}")

    def flush(self) -> None:
        """Flush pending ORM changes."""
        self.db.flush()

    def update_where(self, id: str, expected: Dict[str, Any], **values: Any) -> bool:
        """
        Conditionally update one row.

        Applies ``values`` to the row ``id`` only while every column in
        ``expected`` still holds the given value. Returns True when the row
        was updated; False means another writer got there first (or the row
        does not exist) and the caller should re-read.
        """
        try:
            self.db.flush()
            stmt = update(self.model).where(self.model.id == id)
            for column, value in expected.items():
                stmt = stmt.where(getattr(self.model, column) == value)
            stmt = stmt.values(**values).execution_options(synchronize_session=False)
            result = self.db.execute(stmt)
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error conditionally updating {self.model.__name__} {id}: {str(e)}")
            raise RepositoryException(f"Failed to update {self.model.__name__}: {str(e)}")

    def exists(self, **kwargs: Any) -> bool:
        """Check if an entity exists with given criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first() is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking existence: {str(e)}")
            raise RepositoryException(f"Failed to check existence: {str(e)}")

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        """Find a single entity by given criteria, or None."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding one by criteria: {str(e)}")
            raise RepositoryException(f"Failed to find record: {str(e)}")

    # Protected helper methods for use by subclasses

    def _apply_eager_loading(self, query: Query) -> Query:
        """
        Apply eager loading to relationships.

        Override in subclasses to specify which relationships to load.
        """
        return query

    def _execute_query(self, query: Query) -> List[T]:
        """Execute query with error handling."""
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Query execution error: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}")

    def _execute_scalar(self, query: Query) -> Any:
        """Execute scalar query with error handling."""
        try:
            return query.scalar()
        except SQLAlchemyError as e:
            self.logger.error(f"Scalar query error: {str(e)}")
            raise RepositoryException(f"Scalar query failed: {str(e)}")
