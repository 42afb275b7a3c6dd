from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from portal.config import settings
from portal.database import init_db
from portal.routers import auth, portal_data, trustpilot, whatsapp
from portal.supabase_config import supabase_config
from portal.trustpilot_config import trustpilot_config
from portal.twilio_config import twilio_config
import logging

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="bee-doo Kundenportal API",
    description="Projektstatus, Dokumente, Monitoring, Empfehlungen, Bewertungen und WhatsApp-Benachrichtigungen",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(portal_data.router)
app.include_router(whatsapp.router)
app.include_router(trustpilot.router)


@app.on_event("startup")
async def startup_event():
    logger.info("Starting up bee-doo Portal API")
    supabase_config.log_settings()
    twilio_config.log_settings()
    trustpilot_config.log_settings()
    init_db()
    logger.info("Database initialized")


@app.get("/")
async def root():
    return {
        "message": "bee-doo Kundenportal API",
        "version": "1.0.0",
        "endpoints": {
            "login": "POST /auth/login",
            "callback": "GET /auth/callback?code=...",
            "snapshot": "GET /api/portal/snapshot",
            "documents": "GET /api/portal/documents",
            "monitoring": "GET /api/portal/monitoring",
            "whatsapp_send": "POST /api/whatsapp/send",
            "whatsapp_reminders": "GET /api/whatsapp/send (x-cron-secret)",
            "reviews": "GET /api/trustpilot?minStars=4&limit=6&sync=1"
        }
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
