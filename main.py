import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from core.database import engine
from core.error_handlers import register_error_handlers
from utils.reset_db import create_tables

from routers.users import router as users_router
from routers.videos import router as videos_router
from routers.comments import router as comments_router
from routers.tweets import router as tweets_router
from routers.likes import router as likes_router
from routers.subscriptions import router as subscriptions_router
from routers.playlists import router as playlists_router
from routers.health import router as health_router

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(
    title="TubeShare Backend",
    version="0.1.0",
    description="Backend видеохостинга: видео, комментарии, твиты, лайки, подписки и плейлисты",
    debug=settings.DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger("uvicorn.error")


@app.middleware("http")
async def log_request_time(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} completed in {process_time:.2f} ms"
    )
    return response

register_error_handlers(app)

app.include_router(users_router)
app.include_router(videos_router)
app.include_router(comments_router)
app.include_router(tweets_router)
app.include_router(likes_router)
app.include_router(subscriptions_router)
app.include_router(playlists_router)
app.include_router(health_router)


@app.on_event("startup")
async def on_startup():
    await create_tables(engine)


@app.get("/")
async def root():
    return {"message": "TubeShare Backend"}


@app.on_event("shutdown")
async def shutdown():
    # Закрываем все соединения пула
    await engine.dispose()
