# backend/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from config import settings
from database import init_db
from utils.error_handlers import setup_error_handlers

load_dotenv()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Routers
from routes.manufacturer_portal import router as manufacturer_portal_router
from routes.manufacturing import router as manufacturing_router
from routes.manufacturer import router as manufacturer_router
from routes.logs import router as logs_router

# Initialization
init_db()

app = FastAPI(title="Fulfillment Workflow API", version="1.0.0")

# CORS: local frontend plus the deployed one from FRONTEND_URL
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_error_handlers(app)

# Router registration
app.include_router(manufacturer_portal_router)
app.include_router(manufacturing_router)
app.include_router(manufacturer_router)
app.include_router(logs_router)

@app.get("/")
def read_root():
    return {"message": "Fulfillment Workflow API is running"}
