from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from fastapi.responses import HTMLResponse

from .config import get_settings
from .db import Database
from .errors import UserServiceError, AUTHORIZATION_FAILED
from .logger import get_logger
from .models import User, UserCreate, UserEdit, UserLogin, UserLogout, SessionToken
from .services import UserService
from .store import UserStore

router = APIRouter()

logger = get_logger("Gateway")


def _reject(error: UserServiceError) -> HTTPException:
    logger.warning(f"{error.status_code}: {error.reason}")
    return HTTPException(status_code=error.status_code, detail=error.reason)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    # "Bearer <token>" or the bare token
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() == "bearer":
        return token.strip() or None
    return authorization.strip()


@router.get("/", response_class=HTMLResponse)
async def root():
    """
    Service status

    Returns:
    - 200: a one-line HTML status page
    """
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Usher Server</title>
    </head>
    <body>
        <p>Usher is running.</p>
    </body>
    </html>
    """


# Dependencies

async def get_store(request: Request):
    """
    The record store for this request

    The memory backend (or a store handed to the app factory) lives on
    ``app.state``; otherwise a SQLite connection is opened per request.
    """
    store: Optional[UserStore] = getattr(request.app.state, "store", None)
    if store is not None:
        yield store
        return

    db = Database()
    await db.connect()
    try:
        yield db
    finally:
        await db.disconnect()


def get_user_service(
        request: Request,
        store: UserStore = Depends(get_store)
) -> UserService:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    return UserService(store, token_attempts=settings.token_attempts)


@router.get("/users", response_model=list[User])
async def list_users(service: UserService = Depends(get_user_service)):
    """
    List every user

    HTTP:
    GET /users

    Returns:
    - 200: list of User objects
    """
    return [User.from_record(record) for record in await service.get_users()]


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(user_data: UserCreate, service: UserService = Depends(get_user_service)):
    """
    Create an account

    HTTP:
    POST /users
    Content-Type: application/json
    Body: {
        "name": "Test User",
        "username": "testUsername",
        "password": "testPassword"
    }

    Returns:
    - 201: the created User (OFFLINE)
    - 409: the username is taken
    - 422: body failed validation
    """
    try:
        return User.from_record(await service.create_user(user_data))
    except UserServiceError as e:
        raise _reject(e)


@router.post("/login", response_model=SessionToken, status_code=status.HTTP_202_ACCEPTED)
async def login(credentials: UserLogin, service: UserService = Depends(get_user_service)):
    """
    Log in

    HTTP:
    POST /login
    Body: {"username": "...", "password": "..."}

    Returns:
    - 202: {"id": ..., "token": "..."}
    - 401: invalid username or password
    """
    try:
        record = await service.log_in_user(credentials)
    except UserServiceError as e:
        raise _reject(e)
    return SessionToken(id=record.id, token=record.token)


@router.put("/logout", response_model=bool)
async def logout(session: UserLogout, service: UserService = Depends(get_user_service)):
    """
    Log out

    HTTP:
    PUT /logout
    Body: {"token": "..."}

    Returns:
    - 200: true, also for tokens with no live session
    """
    return await service.log_out_user(session.token)


@router.get("/users/{user_id}", response_model=User)
async def get_user(
        user_id: int,
        authorization: Optional[str] = Header(default=None),
        service: UserService = Depends(get_user_service)
):
    """
    Fetch one user; requires a live session token

    HTTP:
    GET /users/{user_id}
    Authorization: Bearer <token>

    Returns:
    - 200: the User
    - 401: missing, stale or unknown token
    - 404: no such user
    """
    token = _bearer_token(authorization)
    if not await service.authenticate_user(token):
        logger.warning(f"401: {AUTHORIZATION_FAILED} for user {user_id}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=AUTHORIZATION_FAILED)

    try:
        return User.from_record(await service.get_user_by_id(user_id))
    except UserServiceError as e:
        raise _reject(e)


@router.put("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(user_id: int, edit: UserEdit, service: UserService = Depends(get_user_service)):
    """
    Edit username and/or birthday

    HTTP:
    PUT /users/{user_id}
    Body: {"username": "...", "birthday": "01.01.2000"}   (both optional)

    Returns:
    - 204: no body
    - 404: no such user
    - 409: the new username is taken
    """
    try:
        await service.update(user_id, edit)
    except UserServiceError as e:
        raise _reject(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
