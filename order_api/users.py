"""Identity store: users, their password hashes and role memberships."""
import logging
import string
from dataclasses import dataclass, field
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email
from fastapi import Depends, Request
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .database import get_db
from .models import Role, User

log = logging.getLogger(__name__)

ADMIN = "ADMIN"
USER = "USER"

ALLOWED_USER_NAME_CHARACTERS = frozenset(string.ascii_letters + string.digits + "-._@+")
MIN_PASSWORD_LENGTH = 8
CONCURRENCY_FAILURE = "Optimistic concurrency failure, object has been modified."

SEED_ACCOUNTS = (
    ("admin", "administrator@admin.pl", "!Administrator123", ADMIN),
    ("user", "user@test.com", "!User123", USER),
)


def make_password_context(rounds: int = 12) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def normalize(value: str) -> str:
    return value.strip().upper()


def is_valid_email(email: str) -> bool:
    if not email:
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_password(password: str) -> List[str]:
    errors = []
    password = password or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters.")
    if all(ch in string.ascii_letters + string.digits for ch in password):
        errors.append("Passwords must have at least one non alphanumeric character.")
    if not any(ch in string.digits for ch in password):
        errors.append("Passwords must have at least one digit ('0'-'9').")
    if not any(ch in string.ascii_lowercase for ch in password):
        errors.append("Passwords must have at least one lowercase ('a'-'z').")
    if not any(ch in string.ascii_uppercase for ch in password):
        errors.append("Passwords must have at least one uppercase ('A'-'Z').")
    return errors


@dataclass
class StoreResult:
    errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors


class UserStore:
    def __init__(self, db: Session, pwd_context: CryptContext):
        self.db = db
        self.pwd_context = pwd_context

    def find_by_name(self, user_name: Optional[str]) -> Optional[User]:
        if not user_name:
            return None
        return (
            self.db.query(User)
            .filter(User.normalized_user_name == normalize(user_name))
            .first()
        )

    def find_by_email(self, email: Optional[str]) -> Optional[User]:
        if not email:
            return None
        return self.db.query(User).filter(User.normalized_email == normalize(email)).first()

    def find_by_id(self, user_id: Optional[str]) -> Optional[User]:
        try:
            key = int(user_id)
        except (TypeError, ValueError):
            return None
        return self.db.query(User).filter(User.id == key).first()

    def check_password(self, user: Optional[User], password: str) -> bool:
        if user is None or not password:
            return False
        return self.pwd_context.verify(password, user.password_hash)

    def validate_user(self, user: User) -> List[str]:
        errors = []
        user_name = user.user_name or ""
        if not user_name or any(ch not in ALLOWED_USER_NAME_CHARACTERS for ch in user_name):
            errors.append(f"Username '{user_name}' is invalid, can only contain letters or digits.")
        elif self.find_by_name(user_name) is not None:
            errors.append(f"Username '{user_name}' is already taken.")

        email = user.email or ""
        if not is_valid_email(email):
            errors.append(f"Email '{email}' is invalid.")
        elif self.find_by_email(email) is not None:
            errors.append(f"Email '{email}' is already taken.")
        return errors

    def create(self, user: User, password: str) -> StoreResult:
        errors = validate_password(password) + self.validate_user(user)
        if errors:
            return StoreResult(errors)

        user.normalized_user_name = normalize(user.user_name)
        user.normalized_email = normalize(user.email)
        user.password_hash = self.pwd_context.hash(password)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # lost a race with another registration using the same name or email
            self.db.rollback()
            log.warning("Concurrent registration for %s", user.user_name)
            errors = self.validate_user(user)
            return StoreResult(errors or [f"Username '{user.user_name}' is already taken."])
        log.info("Created user %s (id %s)", user.user_name, user.id)
        return StoreResult()

    def ensure_role(self, role_name: str) -> Role:
        role = self.db.query(Role).filter(Role.normalized_name == normalize(role_name)).first()
        if role is None:
            role = Role(name=role_name, normalized_name=normalize(role_name))
            self.db.add(role)
            self.db.commit()
            log.info("Created role %s", role_name)
        return role

    def add_to_role(self, user: User, role_name: str) -> StoreResult:
        role = self.db.query(Role).filter(Role.normalized_name == normalize(role_name)).first()
        if role is None:
            return StoreResult([f"Role {role_name} does not exist."])
        if user.has_role(role_name):
            return StoreResult([f"User already in role '{role_name}'."])
        user.roles.append(role)
        self.db.commit()
        return StoreResult()

    def is_in_role(self, user: User, role_name: str) -> bool:
        return user.has_role(role_name)

    def delete(self, user: User) -> StoreResult:
        user_name = user.user_name
        self.db.delete(user)
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            return StoreResult([CONCURRENCY_FAILURE])
        log.info("Deleted user %s", user_name)
        return StoreResult()


def seed_identity(users: UserStore, with_accounts: bool = True):
    """Create the ADMIN/USER roles and, unless told otherwise, the two default accounts."""
    for role_name in (ADMIN, USER):
        users.ensure_role(role_name)
    if not with_accounts:
        return

    for user_name, email, password, role_name in SEED_ACCOUNTS:
        if users.find_by_email(email) is not None:
            continue
        user = User(user_name=user_name, email=email)
        result = users.create(user, password)
        if not result.succeeded:
            log.error("Could not seed account %s: %s", user_name, result.errors)
            continue
        users.add_to_role(user, role_name)
        log.info("Seeded %s account %s", role_name, user_name)


def get_user_store(request: Request, db: Session = Depends(get_db)) -> UserStore:
    return UserStore(db, request.app.state.password_context)
