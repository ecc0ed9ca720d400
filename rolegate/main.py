from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from rolegate.domains.permissions.routes import router as permissions_router
from rolegate.shared.permissions.dependencies import install_permissions
from rolegate.shared.permissions.loader import PermissionConfigLoader


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: refuse to serve with an invalid permission document
    install_permissions(app, PermissionConfigLoader())
    yield


app = FastAPI(
    title="Rolegate API",
    description="Role-priority permission engine",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(permissions_router, prefix="/api/v1")


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}
