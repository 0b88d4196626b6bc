import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
import uvicorn

from evaltrack.api.v1.router import api_router
from evaltrack.core.config import settings
from evaltrack.core.errors import EvalTrackError, StorageUnavailable
from evaltrack.core.logging_config import configure_logging


configure_logging()
logger = logging.getLogger(__name__)


app = FastAPI(
    title='Assessment Attempts & Rewards API',
    version='0.1.0',
    openapi_url='/api/v1/openapi.json',
    docs_url='/api/v1/docs',
    redoc_url='/api/v1/redoc',
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.exception_handler(EvalTrackError)
async def handle_domain_error(_: Request, exc: EvalTrackError) -> JSONResponse:
    headers = {'WWW-Authenticate': 'Bearer'} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={'detail': exc.detail, 'code': exc.code},
        headers=headers,
    )


@app.exception_handler(OperationalError)
async def handle_storage_error(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error('Storage failure on %s %s: %s', request.method, request.url.path, exc)
    error = StorageUnavailable()
    return JSONResponse(status_code=error.status_code, content={'detail': error.detail, 'code': error.code})


app.include_router(api_router, prefix='/api/v1')


@app.get('/')
def root() -> dict[str, str]:
    return {'service': 'evaltrack-api', 'status': 'running'}


def run() -> None:
    uvicorn.run('evaltrack.main:app', host='0.0.0.0', port=8000, log_level=settings.LOG_LEVEL.lower())


if __name__ == '__main__':
    run()
