# exam_portal/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from exam_portal.config import settings
from exam_portal.database.database import init_db

# Import routers
from exam_portal.routers.auth_router import router as auth_router
from exam_portal.routers.exam_router import router as exam_router
from exam_portal.routers.analytics_router import router as analytics_router

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title=settings.app_name)

# CORS middleware configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(exam_router)
app.include_router(analytics_router)

@app.get("/")
async def root():
    return {"message": f"{settings.app_name} is running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
