"""Repositories for accounts and cats. Storage only: callers authorize before mutating."""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from geocats.core.errors import RepositoryConflictError, RepositoryError
from geocats.models import Cat, User
from geocats.schemas.auth import Role
from geocats.schemas.geo import Point, Region
from geocats.services.geo import filter_records, region_bounds, validate_region

logger = logging.getLogger(__name__)

USER_FIELDS = frozenset({"user_name", "email", "password_hash"})
CAT_FIELDS = frozenset({"cat_name", "weight", "filename", "birthdate", "location", "owner_id"})


@contextmanager
def _storage_errors(db: Session, operation: str) -> Iterator[None]:
    """Roll back and translate SQLAlchemy failures into RepositoryError."""
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        logger.warning("Constraint violation during %s", operation, extra={"operation": operation})
        raise RepositoryConflictError(f"{operation} conflicts with an existing record", e) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Storage failure during %s", operation)
        raise RepositoryError(f"Storage failure during {operation}", e) from e


class UserRepository:
    """CRUD over the users table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(
        self,
        user_name: str,
        email: str,
        password_hash: str,
        role: Role = Role.USER,
    ) -> User:
        user = User(
            user_name=user_name,
            email=email,
            password_hash=password_hash,
            role=Role(role).value,
        )
        with _storage_errors(self.db, "user create"):
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        return user

    def get_by_id(self, user_id: uuid.UUID) -> User | None:
        with _storage_errors(self.db, "user lookup"):
            return self.db.get(User, user_id)

    def list_all(self) -> list[User]:
        with _storage_errors(self.db, "user list"):
            return self.db.query(User).order_by(User.user_name).all()

    def find_by_credential_identity(self, identity: str) -> User | None:
        """Login lookup by user name or email."""
        with _storage_errors(self.db, "user credential lookup"):
            return (
                self.db.query(User)
                .filter(or_(User.user_name == identity, User.email == identity))
                .first()
            )

    def update_by_id(self, user_id: uuid.UUID, changes: dict[str, Any]) -> User | None:
        """Apply changes (user_name, email, password_hash). Role is not updatable here."""
        unknown = set(changes) - USER_FIELDS
        if unknown:
            raise ValueError(f"Unsupported user fields: {sorted(unknown)}")
        with _storage_errors(self.db, "user update"):
            user = self.db.get(User, user_id)
            if user is None:
                return None
            for field, value in changes.items():
                setattr(user, field, value)
            self.db.commit()
            self.db.refresh(user)
            return user

    def delete_by_id(self, user_id: uuid.UUID) -> User | None:
        """Delete the account and, through the ORM cascade, every cat it owns."""
        with _storage_errors(self.db, "user delete"):
            user = self.db.get(User, user_id)
            if user is None:
                return None
            self.db.delete(user)
            self.db.commit()
            return user


class CatRepository:
    """CRUD and region queries over the cats table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(
        self,
        owner_id: uuid.UUID,
        cat_name: str,
        weight: float,
        filename: str,
        birthdate: datetime,
        location: Point | None = None,
    ) -> Cat:
        lon, lat = location if location is not None else (0.0, 0.0)
        cat = Cat(
            owner_id=owner_id,
            cat_name=cat_name,
            weight=weight,
            filename=filename,
            birthdate=birthdate,
            longitude=lon,
            latitude=lat,
        )
        with _storage_errors(self.db, "cat create"):
            self.db.add(cat)
            self.db.commit()
            self.db.refresh(cat)
        return cat

    def get_by_id(self, cat_id: uuid.UUID) -> Cat | None:
        with _storage_errors(self.db, "cat lookup"):
            return self.db.get(Cat, cat_id)

    def list_all(self) -> list[Cat]:
        with _storage_errors(self.db, "cat list"):
            return self.db.query(Cat).order_by(Cat.created_at, Cat.id).all()

    def list_by_owner(self, owner_id: uuid.UUID) -> list[Cat]:
        with _storage_errors(self.db, "cat list by owner"):
            return (
                self.db.query(Cat)
                .filter(Cat.owner_id == owner_id)
                .order_by(Cat.created_at, Cat.id)
                .all()
            )

    def find_within(self, region: Region) -> list[Cat]:
        """
        Cats inside region: bounding-box pre-filter in SQL, exact containment in Python.

        Raises InvalidRegionError before any query runs if the region is malformed.
        """
        region = validate_region(region)
        min_lon, min_lat, max_lon, max_lat = region_bounds(region)
        with _storage_errors(self.db, "cat region query"):
            candidates = (
                self.db.query(Cat)
                .filter(
                    Cat.longitude >= min_lon,
                    Cat.longitude <= max_lon,
                    Cat.latitude >= min_lat,
                    Cat.latitude <= max_lat,
                )
                .order_by(Cat.created_at, Cat.id)
                .all()
            )
        return list(filter_records(region, candidates))

    def update_by_id(self, cat_id: uuid.UUID, changes: dict[str, Any]) -> Cat | None:
        """Apply changes; 'location' is a (lon, lat) pair, 'owner_id' reassigns the owner."""
        unknown = set(changes) - CAT_FIELDS
        if unknown:
            raise ValueError(f"Unsupported cat fields: {sorted(unknown)}")
        with _storage_errors(self.db, "cat update"):
            cat = self.db.get(Cat, cat_id)
            if cat is None:
                return None
            for field, value in changes.items():
                if field == "location":
                    cat.longitude, cat.latitude = value
                else:
                    setattr(cat, field, value)
            self.db.commit()
            self.db.refresh(cat)
            return cat

    def delete_by_id(self, cat_id: uuid.UUID) -> Cat | None:
        with _storage_errors(self.db, "cat delete"):
            cat = self.db.get(Cat, cat_id)
            if cat is None:
                return None
            self.db.delete(cat)
            self.db.commit()
            return cat
