import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.auth import fastapi_users, auth_backend
from core.config import settings
from db.database import create_db_and_tables
from routers.cocktails import router as cocktails_router
from routers.favorites import router as favorites_router
from routers.ingredients import router as ingredients_router
from schemas.users import UserRead, UserCreate, UserUpdate

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    yield


app = FastAPI(
    title="Cocktail Catalog API",
    description="API for browsing cocktail recipes, their shared ingredients and user favorites",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Authentication routes (fastapi-users)
app.include_router(fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"],)
app.include_router(fastapi_users.get_register_router(UserRead, UserCreate), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_reset_password_router(), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_verify_router(UserRead), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_users_router(UserRead, UserUpdate), prefix="/users", tags=["users"])

# Cocktail catalog routes
app.include_router(cocktails_router, prefix="/cocktail-recipes", tags=["cocktails"])
app.include_router(ingredients_router, prefix="/ingredients", tags=["ingredients"])
app.include_router(favorites_router, prefix="/favorites", tags=["favorites"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
