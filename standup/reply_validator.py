# standup/reply_validator.py
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, List

from standup.errors import BadInputError, NotFoundError
from standup.schemas import ReplyEntry, RequestRecord

logger = logging.getLogger("standup_api")

REQUEST_NOT_FOUND = "Could not find a request with that id"
MISSING_REPLIES = "Must include replies"
REPLIES_NOT_A_LIST = "Replies must be a list"
MISSING_QUESTION_ID = "Every reply must include a question id"
INVALID_QUESTION_ID = "Every reply question id must be an integer"
MISSING_CONTENT = "Every reply must include a content value"


@dataclass
class AcceptedReplies:
    request: RequestRecord
    replies: List[ReplyEntry] = field(default_factory=list)


class ReplyValidator:
    """
    Gate run before a reply batch is written.

    Checks run in order and the first failure wins:
      1. the request exists                      -> NotFoundError
      2. a replies field was sent                -> BadInputError
      3. every entry has question_id and content -> BadInputError

    Duplicate question ids and questions from another request are NOT
    rejected here; the store owns those constraints.
    """

    def __init__(self, store):
        self.store = store

    def validate(self, request_id, replies) -> AcceptedReplies:
        request = self.store.get_request_detailed(request_id)
        if request is None:
            logger.info("reply batch rejected: request %s not found", request_id)
            raise NotFoundError(REQUEST_NOT_FOUND, payload_key="error")

        if replies is None:
            raise BadInputError(MISSING_REPLIES)
        if not isinstance(replies, (list, tuple)):
            raise BadInputError(REPLIES_NOT_A_LIST)

        accepted = []
        for index, entry in enumerate(replies):
            accepted.append(self._check_entry(index, entry))

        return AcceptedReplies(request=request, replies=accepted)

    def _check_entry(self, index: int, entry: Any) -> ReplyEntry:
        if not isinstance(entry, Mapping):
            entry = {}

        question_id = entry.get("question_id")
        if not question_id:
            logger.info("reply batch rejected: entry %d has no question_id", index)
            raise BadInputError(MISSING_QUESTION_ID)

        content = entry.get("content")
        if not content:
            logger.info("reply batch rejected: entry %d has no content", index)
            raise BadInputError(MISSING_CONTENT)

        # bool is an int subclass, "true" is not a question id
        if isinstance(question_id, bool):
            raise BadInputError(INVALID_QUESTION_ID)
        # int() would truncate 1.9 to 1
        if isinstance(question_id, float) and not question_id.is_integer():
            raise BadInputError(INVALID_QUESTION_ID)
        try:
            question_id = int(question_id)
        except (TypeError, ValueError):
            raise BadInputError(INVALID_QUESTION_ID)

        if not isinstance(content, str):
            content = str(content)

        return ReplyEntry(question_id=question_id, content=content)
