from datetime import datetime, timedelta, timezone
from typing import Optional, Dict
import logging
import uuid

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from ..deps import get_registry, get_settings
from ..registry import SessionRegistry
from ..settings import Settings
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import AuthUser, AuthSession

# Always mounted: shared-password gate, identity and logout
router = APIRouter(prefix="/auth", tags=["auth"])
# Mounted in the full feature set only: accounts
account_router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

GUEST_ROLE = "guest"
USER_ROLE = "user"
ADMIN_ROLE = "admin"


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"
	role: str = USER_ROLE


class User(BaseModel):
	username: str
	role: str = USER_ROLE

	@property
	def is_guest(self) -> bool:
		return self.role == GUEST_ROLE


class PasswordRequest(BaseModel):
	password: str


_users: Dict[str, str] = {}


def _bcrypt_safe(password: str) -> str:
	# Truncate password to 72 bytes for bcrypt compatibility
	password_bytes = password.encode('utf-8')
	if len(password_bytes) > 72:
		password_bytes = password_bytes[:72]
	return password_bytes.decode('utf-8', errors='ignore')


def hash_password(password: str) -> str:
	return pwd_context.hash(_bcrypt_safe(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(_bcrypt_safe(plain_password), hashed_password)


def _ensure_seed_user(app_settings: Settings) -> None:
	username = app_settings.seed_username
	password = app_settings.seed_password_plain
	if username and password and username not in _users:
		_users[username] = hash_password(password)


def authenticate_user(db: Session, username: str, password: str, app_settings: Settings) -> Optional[User]:
	# Try DB-backed users first
	user_row = db.query(AuthUser).filter(AuthUser.username == username).first()
	if user_row and verify_password(password, user_row.password_hash):
		return User(username=username, role=user_row.role or USER_ROLE)
	# Fallback to seed in-memory user for dev convenience
	_ensure_seed_user(app_settings)
	hashed = _users.get(username)
	if hashed and verify_password(password, hashed):
		return User(username=username)
	return None


def _resolve_expiry(expires_delta: Optional[timedelta], app_settings: Settings) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = app_settings.access_token_expire_minutes
		if isinstance(minutes, int) and minutes > 0:
			delta = timedelta(minutes=minutes)
		else:
			delta = timedelta(days=30)
	now = datetime.now(timezone.utc)
	try:
		return now + delta
	except OverflowError:
		# Cap at far future but within datetime bounds
		return datetime.max.replace(tzinfo=timezone.utc)


def create_access_token(data: dict, app_settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	expire = _resolve_expiry(expires_delta, app_settings)
	to_encode.update({"exp": expire})
	encoded_jwt = jwt.encode(to_encode, app_settings.jwt_secret_key, algorithm=app_settings.jwt_algorithm)
	return encoded_jwt


def _issue_token(db: Session, user: User, app_settings: Settings) -> Token:
	# Create a new session id (jti) and persist server-side
	session_id = uuid.uuid4().hex
	access_token = create_access_token({"sub": user.username, "jti": session_id, "role": user.role}, app_settings)
	try:
		db.merge(AuthSession(session_id=session_id, username=user.username))
		db.commit()
	except Exception:
		db.rollback()
		logger.exception("Could not persist auth session for %s", user.username)
		raise HTTPException(status_code=500, detail="Could not start a session")
	return Token(access_token=access_token, role=user.role)


@router.post("/password", response_model=Token)
async def password_gate(req: PasswordRequest, db: Session = Depends(get_db), app_settings: Settings = Depends(get_settings)):
	if (req.password or "").strip().lower() != app_settings.access_password.lower():
		raise HTTPException(status_code=401, detail="Incorrect password")
	guest = User(username=f"guest-{uuid.uuid4().hex[:12]}", role=GUEST_ROLE)
	return _issue_token(db, guest, app_settings)


@account_router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db), app_settings: Settings = Depends(get_settings)):
	user = authenticate_user(db, form_data.username, form_data.password, app_settings)
	if not user:
		raise HTTPException(status_code=401, detail="Incorrect username or password")
	return _issue_token(db, user, app_settings)


def get_current_user(
	token: str = Depends(oauth2_scheme),
	db: Session = Depends(get_db),
	app_settings: Settings = Depends(get_settings),
) -> User:
	credentials_exception = HTTPException(status_code=401, detail="Could not validate credentials")
	try:
		payload = jwt.decode(token, app_settings.jwt_secret_key, algorithms=[app_settings.jwt_algorithm])
		username: str | None = payload.get("sub")
		jti: str | None = payload.get("jti")
		role: str = payload.get("role") or USER_ROLE
		if username is None or jti is None:
			raise credentials_exception
	except JWTError:
		raise credentials_exception
	# The session row must still exist; logout deletes it
	try:
		row = db.get(AuthSession, jti)
		if not row or row.username != username:
			raise credentials_exception
		row.last_activity_at = datetime.utcnow()
		db.add(row)
		db.commit()
	except HTTPException:
		raise
	except Exception:
		# On DB errors, fail closed
		raise credentials_exception
	return User(username=username, role=role)


def require_admin(user: User = Depends(get_current_user)) -> User:
	if user.role != ADMIN_ROLE:
		raise HTTPException(status_code=403, detail="admin access required")
	return user


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
	return user


@router.post("/logout")
async def logout(
	token: str = Depends(oauth2_scheme),
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
	registry: SessionRegistry = Depends(get_registry),
):
	jti = jwt.get_unverified_claims(token).get("jti")
	try:
		db.query(AuthSession).filter(AuthSession.session_id == jti).delete()
		db.commit()
	except Exception:
		db.rollback()
		logger.warning("Could not delete auth session for %s", user.username, exc_info=True)
	registry.dispose(user.username)
	return {"ok": True}


class RegisterRequest(BaseModel):
	username: str
	password: str
	display_name: str
	team: str
	admin_code: Optional[str] = None


@account_router.post("/register", status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db), app_settings: Settings = Depends(get_settings)):
	username = (req.username or "").strip()
	password = req.password or ""
	display_name = (req.display_name or "").strip()
	team = (req.team or "").strip()
	if not username or not password:
		raise HTTPException(status_code=400, detail="username and password are required")
	if not display_name or not team:
		raise HTTPException(status_code=400, detail="display_name and team are required")
	if len(username) < 3 or len(username) > 128:
		raise HTTPException(status_code=400, detail="username must be 3-128 characters")
	if username.startswith("guest-"):
		raise HTTPException(status_code=400, detail="username is reserved")
	# Check exists
	existing = db.query(AuthUser).filter(AuthUser.username == username).first()
	if existing:
		raise HTTPException(status_code=409, detail="username already exists")
	role = USER_ROLE
	if req.admin_code and app_settings.admin_code and req.admin_code == app_settings.admin_code:
		role = ADMIN_ROLE
	row = AuthUser(
		username=username,
		password_hash=hash_password(password),
		display_name=display_name,
		team=team,
		role=role,
	)
	db.add(row)
	db.commit()
	logger.info("Registered %s in team %s as %s", username, team, role)
	return {"ok": True, "role": role}
