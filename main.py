import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Any, Dict, Tuple

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from pymongo import ASCENDING, DESCENDING
from bson import ObjectId
from bson.errors import InvalidId

from database import db, ensure_indexes
from schemas import (
    User as UserSchema,
    Store as StoreSchema,
    Rating as RatingSchema,
    UserRole,
    UserForm,
    StoreForm,
    LoginForm,
    ChangePasswordRequest,
    RatingForm,
    UserOut,
    StoreWithRating,
    RatingWithUser,
    StoreStatistics,
    TokenResponse,
    MessageResponse,
)

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_indexes(db)
    yield


# App and CORS
app = FastAPI(title="Store Ratings Platform API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Auth setup
SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 24 * 60))

BOOTSTRAP_ADMIN_EMAIL = os.getenv("BOOTSTRAP_ADMIN_EMAIL", "admin@storeratings.com")
BOOTSTRAP_ADMIN_PASSWORD = os.getenv("BOOTSTRAP_ADMIN_PASSWORD", "Admin@123")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login")

# Helpers

def to_obj_id(id_str: str) -> ObjectId:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail="Invalid id")


def sanitize(doc: Dict) -> Dict:
    if not doc:
        return doc
    d = {**doc}
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


async def get_current_user(token: str = Depends(oauth2_scheme)):
    credentials_exception = HTTPException(status_code=401, detail="Could not validate credentials")
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception
    if not ObjectId.is_valid(user_id):
        raise credentials_exception
    user = db["user"].find_one({"_id": ObjectId(user_id)})
    if not user:
        raise credentials_exception
    return sanitize(user)


def require_role(*roles: UserRole):
    allowed = {role.value for role in roles}

    async def role_dep(current_user=Depends(get_current_user)):
        if current_user.get("role") not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return current_user
    return role_dep


def rating_summary(store_id: str) -> Tuple[float, int]:
    agg = list(db["rating"].aggregate([
        {"$match": {"store_id": store_id}},
        {"$group": {"_id": "$store_id", "avg": {"$avg": "$value"}, "count": {"$sum": 1}}},
    ]))
    if not agg:
        return 0.0, 0
    return round(agg[0]["avg"], 2), agg[0]["count"]


def owned_store(owner_id: str) -> Optional[Dict]:
    # an owner is shown the first store assigned to them
    return db["store"].find_one(
        {"owner_id": owner_id},
        sort=[("created_at", ASCENDING), ("_id", ASCENDING)],
    )


def store_view(doc: Dict, viewer_id: Optional[str] = None) -> StoreWithRating:
    s = sanitize(doc)
    average, total = rating_summary(s["id"])
    user_rating = None
    if viewer_id is not None:
        r = db["rating"].find_one({"store_id": s["id"], "user_id": viewer_id})
        user_rating = r["value"] if r else None
    return StoreWithRating(
        id=s["id"],
        name=s["name"],
        email=s["email"],
        address=s["address"],
        owner_id=s["owner_id"],
        average_rating=average,
        total_ratings=total,
        user_rating=user_rating,
    )


def user_view(doc: Dict) -> UserOut:
    u = sanitize(doc)
    store_rating = None
    if u.get("role") == UserRole.OWNER.value:
        store = owned_store(u["id"])
        if store:
            store_rating, _ = rating_summary(str(store["_id"]))
    return UserOut(
        id=u["id"],
        name=u["name"],
        email=u["email"],
        address=u["address"],
        role=u["role"],
        store_rating=store_rating,
    )


def rating_view(doc: Dict, user: Optional[Dict] = None) -> RatingWithUser:
    r = sanitize(doc)
    return RatingWithUser(
        id=r["id"],
        store_id=r["store_id"],
        user_id=r["user_id"],
        user_name=user.get("name") if user else None,
        user_email=user.get("email") if user else None,
        rating=r["value"],
        created_at=r["created_at"],
    )


def insert_user(payload: UserForm, role: UserRole) -> Dict:
    user_doc = UserSchema(
        name=payload.name,
        email=payload.email,
        address=payload.address,
        password_hash=hash_password(payload.password),
        role=role,
    ).model_dump()
    res = db["user"].insert_one(user_doc)
    user_doc["_id"] = res.inserted_id
    logger.info("Created %s account %s", role.value, payload.email)
    return user_doc

# Auth Routes
@app.post("/api/register", response_model=TokenResponse)
def register(payload: UserForm):
    if db["user"].find_one({"email": payload.email}):
        raise HTTPException(status_code=409, detail="Email already registered")
    # self-registration always yields a normal user
    user_doc = insert_user(payload, UserRole.USER)
    token = create_access_token({"sub": str(user_doc["_id"])})
    return TokenResponse(access_token=token, user=user_view(user_doc))

@app.post("/api/login", response_model=TokenResponse)
def login(payload: LoginForm):
    user = db["user"].find_one({"email": payload.email})
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        logger.warning("Failed login for %s", payload.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    token = create_access_token({"sub": str(user["_id"])})
    return TokenResponse(access_token=token, user=user_view(user))

@app.get("/api/user", response_model=UserOut)
def me(current_user=Depends(get_current_user)):
    return user_view(current_user)

@app.post("/api/change-password", response_model=MessageResponse)
def change_password(payload: ChangePasswordRequest, current_user=Depends(get_current_user)):
    user = db["user"].find_one({"_id": to_obj_id(current_user["id"])})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not verify_password(payload.current_password, user.get("password_hash", "")):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    new_hash = hash_password(payload.new_password)
    db["user"].update_one({"_id": user["_id"]}, {"$set": {"password_hash": new_hash, "updated_at": datetime.now(timezone.utc)}})
    return MessageResponse(message="Password updated")

# Admin Routes
@app.get("/api/admin/statistics", response_model=StoreStatistics)
def admin_statistics(admin=Depends(require_role(UserRole.ADMIN))):
    return StoreStatistics(
        total_users=db["user"].count_documents({}),
        total_stores=db["store"].count_documents({}),
        total_ratings=db["rating"].count_documents({}),
    )

@app.get("/api/admin/users", response_model=List[UserOut])
def admin_list_users(admin=Depends(require_role(UserRole.ADMIN))):
    return [user_view(u) for u in db["user"].find({}).sort([("name", ASCENDING)])]

@app.post("/api/admin/users", response_model=UserOut)
def admin_create_user(payload: UserForm, admin=Depends(require_role(UserRole.ADMIN))):
    if db["user"].find_one({"email": payload.email}):
        raise HTTPException(status_code=409, detail="Email already exists")
    return user_view(insert_user(payload, payload.role))

@app.get("/api/admin/stores", response_model=List[StoreWithRating])
def admin_list_stores(admin=Depends(require_role(UserRole.ADMIN))):
    return [store_view(s) for s in db["store"].find({}).sort([("name", ASCENDING)])]

@app.post("/api/admin/stores", response_model=StoreWithRating)
def admin_create_store(payload: StoreForm, admin=Depends(require_role(UserRole.ADMIN))):
    owner = db["user"].find_one({"_id": to_obj_id(payload.owner_id)})
    if not owner or owner.get("role") != UserRole.OWNER.value:
        raise HTTPException(status_code=400, detail="ownerId must be a valid Store Owner")
    if db["store"].find_one({"email": payload.email}):
        raise HTTPException(status_code=409, detail="Store email already exists")
    store_doc = StoreSchema(owner_id=payload.owner_id, name=payload.name, email=payload.email, address=payload.address).model_dump()
    res = db["store"].insert_one(store_doc)
    store_doc["_id"] = res.inserted_id
    logger.info("Created store %s for owner %s", payload.name, payload.owner_id)
    return store_view(store_doc)

# Stores and Ratings for Users
@app.get("/api/stores", response_model=List[StoreWithRating])
@app.get("/api/user/stores", response_model=List[StoreWithRating])
def list_stores(current_user=Depends(get_current_user)):
    return [store_view(s, viewer_id=current_user["id"]) for s in db["store"].find({}).sort([("name", ASCENDING)])]

@app.post("/api/ratings", response_model=RatingWithUser)
def rate_store(payload: RatingForm, current_user=Depends(require_role(UserRole.USER))):
    # ensure store exists
    st = db["store"].find_one({"_id": to_obj_id(payload.store_id)})
    if not st:
        raise HTTPException(status_code=404, detail="Store not found")
    query = {"store_id": payload.store_id, "user_id": current_user["id"]}
    existing = db["rating"].find_one(query)
    if existing:
        db["rating"].update_one({"_id": existing["_id"]}, {"$set": {"value": payload.rating, "updated_at": datetime.now(timezone.utc)}})
    else:
        doc = RatingSchema(user_id=current_user["id"], store_id=payload.store_id, value=payload.rating).model_dump()
        db["rating"].insert_one(doc)
    logger.info("User %s rated store %s with %d", current_user["id"], payload.store_id, payload.rating)
    return rating_view(db["rating"].find_one(query), current_user)

# Owner routes
@app.get("/api/owner/store", response_model=StoreWithRating)
def owner_store(current_owner=Depends(require_role(UserRole.OWNER))):
    store = owned_store(current_owner["id"])
    if not store:
        raise HTTPException(status_code=404, detail="No store is assigned to this owner")
    return store_view(store)

@app.get("/api/owner/ratings", response_model=List[RatingWithUser])
def owner_ratings(current_owner=Depends(require_role(UserRole.OWNER))):
    store = owned_store(current_owner["id"])
    if not store:
        return []
    ratings = list(db["rating"].find({"store_id": str(store["_id"])}).sort([("created_at", DESCENDING)]))
    user_ids = [to_obj_id(r["user_id"]) for r in ratings]
    user_map = {str(u["_id"]): u for u in db["user"].find({"_id": {"$in": user_ids}})} if ratings else {}
    return [rating_view(r, user_map.get(r["user_id"])) for r in ratings]

# Bootstrap route for demo
@app.post("/api/init/bootstrap", response_model=MessageResponse)
def bootstrap_admin():
    """Create a default admin if none exists."""
    if db["user"].count_documents({"role": UserRole.ADMIN.value}) > 0:
        raise HTTPException(status_code=400, detail="Admin already exists")
    insert_user(
        UserForm(
            name="Default Administrator User Name",
            email=BOOTSTRAP_ADMIN_EMAIL,
            address="Admin Address",
            password=BOOTSTRAP_ADMIN_PASSWORD,
            role=UserRole.ADMIN,
        ),
        UserRole.ADMIN,
    )
    return MessageResponse(message=f"Admin created: {BOOTSTRAP_ADMIN_EMAIL}")

# Utility endpoints
@app.get("/")
def root():
    return {"message": "Store Ratings Platform API running"}
