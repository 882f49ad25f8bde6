from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from parking_pos.config import settings
from parking_pos.database import init_db
from parking_pos.tickets import router as tickets_router
from parking_pos.fees import router as fees_router
from parking_pos.ledger import router as ledger_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger("parking_pos")

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("%s started (%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
    yield

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Parking lot point-of-sale API",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(
    tickets_router.router,
    prefix=f"{settings.API_V1_STR}/parking",
    tags=["Parking Tickets"]
)

app.include_router(
    fees_router.router,
    prefix=f"{settings.API_V1_STR}/fees",
    tags=["Fees"]
)

app.include_router(
    fees_router.rate_router,
    prefix=f"{settings.API_V1_STR}/rate",
    tags=["Fees"]
)

app.include_router(
    ledger_router.router,
    prefix=f"{settings.API_V1_STR}/ledger",
    tags=["Shift Ledger"]
)

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Parking POS API",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
