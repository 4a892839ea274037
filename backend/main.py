from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from core.config import settings
from core.logging_config import configure_logging
from db.database import create_db_and_tables, engine
from db.migrations import add_user_id_columns_if_missing
from routers.works import router as works_router
from routers.distributions import router as distributions_router
from routers.events import router as events_router
from routers.dashboard import router as dashboard_router
from routers.ledger import router as ledger_router
from core.auth import fastapi_users, auth_backend
from schemas.users import UserRead, UserCreate, UserUpdate

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    await add_user_id_columns_if_missing(engine)
    yield


app = FastAPI(
    title="Doukeeper API",
    description="Stock and distribution tracking for self-published works",
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

# Ledger routes
app.include_router(works_router, prefix="/works", tags=["works"])
app.include_router(distributions_router, prefix="/distributions", tags=["distributions"])
app.include_router(events_router, prefix="/events", tags=["events"])
app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
app.include_router(ledger_router, prefix="/ledger", tags=["ledger"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
