"""User aggregate for identity concerns only."""

from datetime import datetime
from typing import Union

from gatehouse_auth.time import utc_now
from gatehouse_identity.domain.user.value_objects import Email, UserRole


class User:
    """
    User aggregate root.

    The id is assigned by the identity store on first persist and never
    changes afterwards. The password hash travels with the aggregate but is
    never part of any outward representation.
    """

    def __init__(
        self,
        email: Union[str, Email],
        password_hash: str,
        first_name: str,
        last_name: str,
        role: Union[str, UserRole] = UserRole.CUSTOMER,
        tenant_id: int | None = None,
        id: int | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self._email = email if isinstance(email, Email) else Email(email)
        self._id = id
        self._password_hash = password_hash
        self._first_name = first_name
        self._last_name = last_name
        self._role = role if isinstance(role, UserRole) else UserRole(role)
        self._tenant_id = tenant_id
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or utc_now()

    @property
    def id(self) -> int | None:
        return self._id

    @property
    def email(self) -> str:
        return self._email.value

    @property
    def password_hash(self) -> str:
        return self._password_hash

    @property
    def first_name(self) -> str:
        return self._first_name

    @property
    def last_name(self) -> str:
        return self._last_name

    @property
    def role(self) -> UserRole:
        return self._role

    @property
    def tenant_id(self) -> int | None:
        return self._tenant_id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def change_password_hash(self, password_hash: str) -> None:
        self._password_hash = password_hash
        self._updated_at = utc_now()

    @classmethod
    def create(
        cls,
        email: Union[str, Email],
        password_hash: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.CUSTOMER,
        tenant_id: int | None = None,
    ) -> "User":
        return cls(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
            tenant_id=tenant_id,
        )

    @classmethod
    def reconstitute(
        cls,
        id: int,
        email: Union[str, Email],
        password_hash: str,
        first_name: str,
        last_name: str,
        role: Union[str, UserRole],
        tenant_id: int | None,
        created_at: datetime,
        updated_at: datetime,
    ) -> "User":
        return cls(
            id=id,
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
            tenant_id=tenant_id,
            created_at=created_at,
            updated_at=updated_at,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        if self._id is None or other._id is None:
            return self is other
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id) if self._id is not None else id(self)

    def __repr__(self) -> str:
        return f"User(id={self._id}, email={self._email.value})"
