# standup/request_service.py
import asyncio
import logging
from typing import List

from standup.errors import NotFoundError, StoreFailureError
from standup.reply_aggregator import aggregate_replies, merge_reply_statuses
from standup.reply_validator import ReplyValidator
from standup.schemas import QuestionRecord, RequestDetail, RequestReplies

logger = logging.getLogger("standup_api")

REQUEST_NOT_FOUND = "Could not find request with that id"


class RequestService:
    """
    Read and write paths for a request. Store calls are blocking SQLAlchemy
    work, so each one runs in a worker thread and dependent calls are awaited
    one after the other.
    """

    def __init__(self, store):
        self.store = store
        self.validator = ReplyValidator(store)

    async def get_request_detail(self, request_id) -> RequestDetail:
        request = await asyncio.to_thread(self.store.get_request_detailed, request_id)
        if request is None:
            raise NotFoundError(REQUEST_NOT_FOUND)

        statuses = await asyncio.to_thread(
            self.store.get_member_replied_status, request_id, request.topic_id
        )
        return merge_reply_statuses(request, statuses)

    async def get_request_questions(self, request_id) -> List[QuestionRecord]:
        return await asyncio.to_thread(self.store.get_request_questions, request_id)

    async def get_request_replies(self, request_id) -> RequestReplies:
        replies = await asyncio.to_thread(self.store.get_request_replies, request_id)
        who_has_replied = await asyncio.to_thread(self.store.get_who_has_replied, request_id)

        return RequestReplies(request_replies=aggregate_replies(replies, who_has_replied))

    async def post_request_replies(self, request_id, profile_id: str, replies):
        accepted = await asyncio.to_thread(self.validator.validate, request_id, replies)

        request_info = await asyncio.to_thread(
            self.store.add_request_replies, accepted.request.id, profile_id, accepted.replies
        )
        if request_info is None:
            raise StoreFailureError()

        logger.info(
            "stored %d replies for request %s from %s",
            len(accepted.replies), accepted.request.id, profile_id,
        )
        return request_info
