import logging
import os
from typing import Any, List, Optional

from dotenv import load_dotenv
from fastapi import Body, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from standup.db_connection import DBConnection
from standup.errors import INTERNAL_ERROR_MESSAGE, ReplyServiceError, UnauthorizedError
from standup.request_service import RequestService
from standup.request_store import RequestStore
from standup.schemas import FlatReply, QuestionRecord, RequestDetail, RequestReplies

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)s | %(name)s\n%(message)s\n",
)
logger = logging.getLogger("standup_api")

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
# Set by the identity provider in front of this service; trusted as-is.
PROFILE_HEADER = os.getenv("PROFILE_HEADER", "X-Profile-Id")

app = FastAPI(title="Standup replies API")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_REQUEST_SERVICE: Optional[RequestService] = None


def get_request_service() -> RequestService:
    global _REQUEST_SERVICE
    if _REQUEST_SERVICE is None:
        session_factory = DBConnection().build_db_session_factory()
        _REQUEST_SERVICE = RequestService(RequestStore(session_factory))
    return _REQUEST_SERVICE


def get_profile_id(request: Request) -> str:
    profile_id = request.headers.get(PROFILE_HEADER)
    if not profile_id:
        raise UnauthorizedError("Missing caller identity")
    return profile_id


@app.exception_handler(ReplyServiceError)
async def reply_service_error_handler(request: Request, exc: ReplyServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/requests/{request_id}", response_model=List[FlatReply])
async def post_request_replies(
    request_id: str,
    body: Any = Body(default=None),
    profile_id: str = Depends(get_profile_id),
    service: RequestService = Depends(get_request_service),
):
    # a non-object body counts as missing replies; profile_id in the body is ignored
    replies = body.get("replies") if isinstance(body, dict) else None
    return await service.post_request_replies(request_id, profile_id, replies)


@app.get("/requests/{request_id}", response_model=RequestDetail)
async def get_request(request_id: str, service: RequestService = Depends(get_request_service)):
    return await service.get_request_detail(request_id)


@app.get("/requests/{request_id}/questions", response_model=List[QuestionRecord])
async def get_request_questions(request_id: str, service: RequestService = Depends(get_request_service)):
    return await service.get_request_questions(request_id)


@app.get(
    "/requests/{request_id}/replies",
    response_model=RequestReplies,
    response_model_exclude_unset=True,
)
async def get_request_replies(request_id: str, service: RequestService = Depends(get_request_service)):
    return await service.get_request_replies(request_id)


def main() -> None:
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    main()
