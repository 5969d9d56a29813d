import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.bus_system import router as bus_system_router
from db import database
from services.bus_system import BusSystem, close_bus_system, get_bus_system

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database.create_tables()
    await get_bus_system().startup()
    yield
    await close_bus_system()


app = FastAPI(title="Bus Headway Simulator", lifespan=lifespan)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bus_system_router)


@app.get("/")
def read_root():
    return {"message": "Welcome to the Bus Headway Simulator API"}


@app.get("/health")
def health(system: BusSystem = Depends(get_bus_system)):
    return {
        "status": "ok",
        "database": database.is_database_available(),
        "simulation_running": system.scheduler.is_running,
    }


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
