import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..authorization import RoleAuthorizer, get_role_authorizer
from ..crud import check_path_id, find, get_or_404, save_changes
from ..database import get_db
from ..exceptions import Forbidden, NotFound
from ..models import Customer
from ..schemas import CustomerIn, CustomerOut
from ..tokens import TokenVerifier, get_token_verifier, require_bearer

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customers", tags=["Customers"], dependencies=[Depends(require_bearer)])


@router.get("/all", response_model=List[CustomerOut], summary="List all customers")
def list_customers(db: Session = Depends(get_db)):
    return [CustomerOut.model_validate(customer) for customer in db.query(Customer).all()]


@router.get("/{customer_id}", response_model=CustomerOut, summary="Get a customer")
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return CustomerOut.model_validate(get_or_404(db, Customer, customer_id))


@router.post("/add", response_model=CustomerOut, summary="Add a new customer")
def add_customer(customer_in: CustomerIn, db: Session = Depends(get_db)):
    customer = Customer(name=customer_in.name, description=customer_in.description)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return CustomerOut.model_validate(customer)


@router.put("/{customer_id}", response_model=CustomerOut, summary="Replace a customer's fields")
def update_customer(customer_id: int, customer_in: CustomerIn, db: Session = Depends(get_db)):
    check_path_id(customer_id, customer_in.id)
    customer = get_or_404(db, Customer, customer_id)
    customer.name = customer_in.name
    customer.description = customer_in.description
    save_changes(db, Customer, customer_id)
    return CustomerOut.model_validate(customer)


@router.delete("/{customer_id}", summary="Delete a customer (admins only)")
def delete_customer(customer_id: int, token: str = Depends(require_bearer), db: Session = Depends(get_db), verifier: TokenVerifier = Depends(get_token_verifier), authorizer: RoleAuthorizer = Depends(get_role_authorizer)):
    # the caller's role is checked before the customer is looked up
    current_user_id = verifier.get_user_id(token)
    if not authorizer.is_admin(current_user_id):
        log.info("User %s is not allowed to delete customer %s", current_user_id, customer_id)
        raise Forbidden()
    customer = find(db, Customer, customer_id)
    if customer is None:
        raise NotFound()
    db.delete(customer)
    db.commit()
    return "Customer has been removed from database"
