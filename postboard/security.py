import datetime
import logging
from typing import Annotated, Callable, Literal

from fastapi import HTTPException, status, Depends
from fastapi.security import OAuth2PasswordBearer

from passlib.context import CryptContext
from jose import jwt, ExpiredSignatureError, JWTError

from postboard.config import config
from postboard.domain import model
from postboard.service_layer import unit_of_work

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/token")

pwd_context = CryptContext(schemes=["bcrypt"])

def create_credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

def access_token_expire_minutes() -> int:
    return config.ACCESS_TOKEN_EXPIRE_MINUTES

def create_access_token(user_id: str) -> str:
    expire = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(
        minutes=access_token_expire_minutes()
    )
    jwt_data = {"sub": user_id, "exp": expire, "type": "access"}
    return jwt.encode(jwt_data, config.SECRET_KEY, algorithm=ALGORITHM)

def get_subject_for_token_type(
    token: str, type: Literal["access"]
) -> str:
    try:
        payload = jwt.decode(token, key=config.SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise create_credentials_exception("Token has expired") from e
    except JWTError as e:
        raise create_credentials_exception("Invalid token") from e

    subject = payload.get("sub")
    if subject is None:
        raise create_credentials_exception("Token is missing 'sub' field")

    token_type = payload.get("type")
    if token_type is None or token_type != type:
        raise create_credentials_exception(
            f"Token has incorrect type, expected '{type}'"
        )

    return subject

def get_password_hash(password: str) -> str:
    # bcrypt has a 72-byte limit; truncate to prevent errors
    password_bytes = password.encode('utf-8')[:72]
    return pwd_context.hash(password_bytes)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    # bcrypt has a 72-byte limit; truncate to match hashing behavior
    password_bytes = plain_password.encode('utf-8')[:72]
    return pwd_context.verify(password_bytes, hashed_password)

def authenticate_user(
    email: str,
    password: str,
    uow: unit_of_work.AbstractUnitOfWork,
    verify: Callable[[str, str], bool] = verify_password,
) -> model.UserAggregate:
    with uow:
        user = uow.users.get_by_email(email)

    if not user or not user.password_hash:
        logger.info("Login rejected for unknown email %s", email)
        raise create_credentials_exception("Invalid email or password")

    if not verify(password, user.password_hash):
        raise create_credentials_exception("Invalid email or password")

    return user

#Identity only: the token is trusted, the user record is looked up by the core when needed
async def get_current_user_id(token: Annotated[str, Depends(oauth2_scheme)]) -> str:
    return get_subject_for_token_type(token, "access")
