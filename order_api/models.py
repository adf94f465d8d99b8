import enum

from sqlalchemy import Column, Integer, String, Enum, ForeignKey, Table
from sqlalchemy.orm import relationship
from .database import Base

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Stock(str, enum.Enum):
    Low = "Low"
    Medium = "Medium"
    High = "High"


class Role(Base):
    __tablename__ = "roles"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    normalized_name = Column(String, unique=True, index=True, nullable=False)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    user_name = Column(String, nullable=False)
    normalized_user_name = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, nullable=False)
    normalized_email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    concurrency_stamp = Column(Integer, nullable=False)
    roles = relationship("Role", secondary=user_roles, lazy="selectin")

    __mapper_args__ = {"version_id_col": concurrency_stamp}

    def has_role(self, role_name: str) -> bool:
        wanted = role_name.upper()
        return any(role.normalized_name == wanted for role in self.roles)


class Customer(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    version = Column(Integer, nullable=False)
    # dependents are left alone on delete, the database decides what happens to them
    orders = relationship("Order", back_populates="customer", passive_deletes="all")

    __mapper_args__ = {"version_id_col": version}


class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    version = Column(Integer, nullable=False)
    customer = relationship("Customer", back_populates="orders")
    order_items = relationship("OrderItem", back_populates="order", passive_deletes="all")

    __mapper_args__ = {"version_id_col": version}


class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    stock = Column(Enum(Stock), nullable=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    version = Column(Integer, nullable=False)
    order = relationship("Order", back_populates="order_items")

    __mapper_args__ = {"version_id_col": version}
