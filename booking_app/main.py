from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from booking_app.core.config import settings
from booking_app.core.exceptions import PersistenceError
from booking_app.api import pages, bookings
from booking_app.core.logger import setup_logging, logger
from contextlib import asynccontextmanager
from datetime import datetime

setup_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} (bookings file: {settings.BOOKINGS_FILE})")
    yield
    logger.info("🛑 Shutting down")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan
)

# A booking that was not written must never be reported as accepted
@app.exception_handler(PersistenceError)
async def persistence_exception_handler(request: Request, exc: PersistenceError):
    logger.error(f"❌ Storage failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"message": "Storage unavailable", "detail": "The change could not be saved. Please try again."}
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"🔥 UNHANDLED ERROR: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal Server Error", "detail": "An unexpected error occurred."}
    )

app.include_router(pages.router, tags=["Pages"])
app.include_router(bookings.router, prefix="/api", tags=["Bookings"])

@app.get("/health")
async def health_check():
    return {"status": "ok", "environment": settings.ENVIRONMENT, "timestamp": datetime.now().isoformat()}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("booking_app.main:app", host=settings.HOST, port=settings.PORT, reload=True)
