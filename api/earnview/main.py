import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from earnview import __version__
from earnview.config import settings
from earnview.db.database import init_db, close_db, engine
from earnview.routes import auth, users, ads, withdrawals, admin

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger('earnview')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources."""
    await init_db()
    logger.info(
        f'EarnView API started (daily limit {settings.daily_ad_limit} ads, '
        f'{settings.ad_user_earning} per ad)'
    )
    yield
    await close_db()
    logger.info('EarnView API stopped')


app = FastAPI(
    title='EarnView API',
    description='Rewards ledger: ad credits, referrals and withdrawals',
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    """Log the detail, tell the caller nothing."""
    logger.error(f'{request.method} {request.url.path} failed: {exc}', exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={'detail': {'reason': 'internal_error', 'message': 'Internal server error'}},
    )


# Routes
app.include_router(auth.router, prefix='/api/auth', tags=['auth'])
app.include_router(users.router, prefix='/api/user', tags=['user'])
app.include_router(ads.router, prefix='/api/ads', tags=['ads'])
app.include_router(withdrawals.router, prefix='/api/withdraw', tags=['withdrawals'])
app.include_router(admin.router, prefix='/api/admin', tags=['admin'])


@app.get('/api/health')
async def health_check():
    """Health check endpoint."""
    return {
        'status': 'ok',
        'timestamp': datetime.utcnow().isoformat(),
        'database': engine.dialect.name,
    }
