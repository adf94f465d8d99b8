import logging

from fastapi import APIRouter, Depends, Response

from ..authorization import RoleAuthorizer, get_role_authorizer
from ..exceptions import Forbidden, NotFound, StoreErrors, Unauthenticated
from ..models import User
from ..schemas import LoginRequest, RegisterRequest, TokenResponse
from ..tokens import TokenIssuer, TokenVerifier, get_token_issuer, get_token_verifier, require_bearer
from ..users import USER, UserStore, get_user_store

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/authentication", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse, summary="Exchange credentials for a bearer token")
def login(credentials: LoginRequest, users: UserStore = Depends(get_user_store), issuer: TokenIssuer = Depends(get_token_issuer)):
    if not credentials.login_name or not credentials.password:
        raise Unauthenticated()
    user = users.find_by_name(credentials.login_name)
    if not users.check_password(user, credentials.password):
        log.info("Failed login for %s", credentials.login_name)
        raise Unauthenticated()
    return TokenResponse(token=issuer.issue(user))


@router.post("/register", summary="Register a new user")
def register(registration: RegisterRequest, users: UserStore = Depends(get_user_store)):
    user = User(user_name=registration.username, email=registration.email)
    result = users.create(user, registration.password)
    if not result.succeeded:
        log.info("Registration of %s refused: %s", registration.username, result.errors)
        raise StoreErrors(result.errors)
    result = users.add_to_role(user, USER)
    if not result.succeeded:
        log.error("Could not give %s the %s role: %s", registration.username, USER, result.errors)
        users.delete(user)
        raise StoreErrors(result.errors)
    return Response(status_code=200)


@router.delete("/users/{user_id}", summary="Delete a user (admins only, never yourself)")
def delete_user(
    user_id: str,
    token: str = Depends(require_bearer),
    users: UserStore = Depends(get_user_store),
    verifier: TokenVerifier = Depends(get_token_verifier),
    authorizer: RoleAuthorizer = Depends(get_role_authorizer),
):
    user = users.find_by_id(user_id)
    if user is None:
        raise NotFound()

    current_user_id = verifier.get_user_id(token)
    if current_user_id == str(user.id):
        log.info("User %s tried to delete their own account", current_user_id)
        raise Forbidden()
    if not authorizer.is_admin(current_user_id):
        log.info("User %s is not allowed to delete user %s", current_user_id, user_id)
        raise Forbidden()

    result = users.delete(user)
    if not result.succeeded:
        raise StoreErrors(result.errors)
    return "User was deleted successfully"
