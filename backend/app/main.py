from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api.routes import api_router
from .config import get_settings
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Loads .env and freezes the settings for the life of the process
    settings = get_settings()
    missing = [
        name for name, value in (
            ("META_VERIFY_TOKEN", settings.verify_token),
            ("META_TOKEN", settings.meta_token),
            ("META_PHONE_NUMBER_ID", settings.phone_number_id),
            ("SUPABASE_URL", settings.supabase_url),
            ("SUPABASE_SERVICE_ROLE", settings.supabase_service_role),
            ("GEMINI_API_KEY", settings.gemini_api_key),
            ("OWNER_WHATSAPP", settings.owner_whatsapp),
        )
        if not value
    ]
    if missing:
        logger.warning(f"Missing configuration: {', '.join(missing)}; dependent calls will fail")
    yield


app = FastAPI(title="WhatsApp Triage Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    return {"status": "ok"}
