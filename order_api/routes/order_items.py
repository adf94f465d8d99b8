import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..authorization import RoleAuthorizer, get_role_authorizer
from ..crud import check_path_id, get_or_404, require_reference, save_changes
from ..database import get_db
from ..exceptions import Forbidden
from ..models import Order, OrderItem
from ..schemas import OrderItemIn, OrderItemOut
from ..tokens import TokenVerifier, get_token_verifier, require_bearer

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orderitems", tags=["Order items"], dependencies=[Depends(require_bearer)])


@router.get("/all", response_model=List[OrderItemOut], summary="List all order items")
def list_order_items(db: Session = Depends(get_db)):
    return [OrderItemOut.model_validate(item) for item in db.query(OrderItem).all()]


@router.get("/{item_id}", response_model=OrderItemOut, summary="Get an order item")
def get_order_item(item_id: int, db: Session = Depends(get_db)):
    return OrderItemOut.model_validate(get_or_404(db, OrderItem, item_id))


@router.post("/create", response_model=OrderItemOut, summary="Add an item to an existing order")
def create_order_item(item_in: OrderItemIn, db: Session = Depends(get_db)):
    require_reference(db, Order, item_in.order_id, "OrderId")
    item = OrderItem(name=item_in.name, description=item_in.description, stock=item_in.stock, order_id=item_in.order_id)
    db.add(item)
    db.commit()
    db.refresh(item)
    return OrderItemOut.model_validate(item)


@router.put("/{item_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response, summary="Replace an order item's fields")
def update_order_item(item_id: int, item_in: OrderItemIn, db: Session = Depends(get_db)):
    check_path_id(item_id, item_in.id)
    item = get_or_404(db, OrderItem, item_id)
    require_reference(db, Order, item_in.order_id, "OrderId")
    item.name = item_in.name
    item.description = item_in.description
    item.stock = item_in.stock
    item.order_id = item_in.order_id
    save_changes(db, OrderItem, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{item_id}", response_model=OrderItemOut, summary="Delete an order item (admins only)")
def delete_order_item(item_id: int, token: str = Depends(require_bearer), db: Session = Depends(get_db), verifier: TokenVerifier = Depends(get_token_verifier), authorizer: RoleAuthorizer = Depends(get_role_authorizer)):
    item = get_or_404(db, OrderItem, item_id)
    current_user_id = verifier.get_user_id(token)
    if not authorizer.is_admin(current_user_id):
        log.info("User %s is not allowed to delete order item %s", current_user_id, item_id)
        raise Forbidden()
    deleted = OrderItemOut.model_validate(item)
    db.delete(item)
    db.commit()
    return deleted
