import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..authorization import RoleAuthorizer, get_role_authorizer
from ..crud import check_path_id, get_or_404, require_reference, save_changes
from ..database import get_db
from ..exceptions import Forbidden
from ..models import Customer, Order
from ..schemas import OrderIn, OrderOut
from ..tokens import TokenVerifier, get_token_verifier, require_bearer

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"], dependencies=[Depends(require_bearer)])


@router.get("/all", response_model=List[OrderOut], summary="List all orders")
def list_orders(db: Session = Depends(get_db)):
    return [OrderOut.model_validate(order) for order in db.query(Order).all()]


@router.get("/{order_id}", response_model=OrderOut, summary="Get an order")
def get_order(order_id: int, db: Session = Depends(get_db)):
    return OrderOut.model_validate(get_or_404(db, Order, order_id))


@router.post("/create", response_model=OrderOut, summary="Create an order for an existing customer")
def create_order(order_in: OrderIn, db: Session = Depends(get_db)):
    require_reference(db, Customer, order_in.customer_id, "CustomerId")
    order = Order(name=order_in.name, description=order_in.description, customer_id=order_in.customer_id)
    db.add(order)
    db.commit()
    db.refresh(order)
    return OrderOut.model_validate(order)


@router.put("/{order_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response, summary="Replace an order's fields")
def update_order(order_id: int, order_in: OrderIn, db: Session = Depends(get_db)):
    check_path_id(order_id, order_in.id)
    order = get_or_404(db, Order, order_id)
    require_reference(db, Customer, order_in.customer_id, "CustomerId")
    order.name = order_in.name
    order.description = order_in.description
    order.customer_id = order_in.customer_id
    save_changes(db, Order, order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{order_id}", response_model=OrderOut, summary="Delete an order (admins only)")
def delete_order(order_id: int, token: str = Depends(require_bearer), db: Session = Depends(get_db), verifier: TokenVerifier = Depends(get_token_verifier), authorizer: RoleAuthorizer = Depends(get_role_authorizer)):
    order = get_or_404(db, Order, order_id)
    current_user_id = verifier.get_user_id(token)
    if not authorizer.is_admin(current_user_id):
        log.info("User %s is not allowed to delete order %s", current_user_id, order_id)
        raise Forbidden()
    deleted = OrderOut.model_validate(order)
    db.delete(order)
    db.commit()
    return deleted
