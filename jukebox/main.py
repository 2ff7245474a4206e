# jukebox/main.py
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jukebox.config.settings import LOG_LEVEL, ConfigurationError

# === Import Routers ===
from jukebox.api.auth_api import router as auth_router
from jukebox.api.spotify_auth_api import router as spotify_router
from jukebox.api.tracks_api import router as tracks_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Jukebox Backend",
    description=(
        "Backend for: "
        "• Anonymous device login "
        "• Spotify OAuth tokens "
        "• Playlist → Firestore ingestion"
    ),
    version="1.0.0"
)

# === CORS Middleware ===
origins = [
    "http://localhost:4200",
    "*"
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"{request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# === Anonymous login / accounts ===
app.include_router(auth_router, prefix="/auth", tags=["User Auth"])

# === Spotify tokens ===
app.include_router(spotify_router, prefix="/spotify", tags=["Spotify OAuth"])

# === Tracks ingestion ===
app.include_router(tracks_router, prefix="/tracks", tags=["Tracks"])

@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Jukebox backend running with Spotify + Firestore"
    }
