import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user_obj
from app.core.security import hash_password, verify_password, create_access_token
from app.db.models.user import User
from app.schemas.auth import SignupRequest, LoginRequest, TokenResponse, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


# ✅ USER SIGNUP
@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=UserOut)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    email = payload.email.lower()
    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"User signed up: user_id={user.id}")
    return user


async def _read_credentials(request: Request) -> LoginRequest:
    """
    Accept both the OAuth2 password form (Swagger sends "username") and a JSON body.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON body")
    else:
        form = await request.form()
        data = {
            "email": form.get("username") or form.get("email"),
            "password": form.get("password"),
        }

    if not isinstance(data, dict) or not data.get("email") or not data.get("password"):
        raise HTTPException(status_code=400, detail="Missing required fields: email and password")

    try:
        return LoginRequest(**data)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid email format")


# ✅ OAUTH2 / JSON LOGIN
@router.post("/login", response_model=TokenResponse)
async def login(request: Request, db: Session = Depends(get_db)):
    credentials = await _read_credentials(request)

    user = db.query(User).filter(User.email == credentials.email.lower()).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info("Failed login attempt")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token({"sub": user.email})
    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user_obj)):
    return user
