# standup/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReplyEntry(BaseModel):
    question_id: int
    content: str


class ContextResponse(BaseModel):
    context_question: str
    context_response: str


class TopicQuestion(BaseModel):
    content: str
    response_type: str


class RequestRecord(BaseModel):
    id: int
    topic_id: int
    posted_at: datetime
    context_responses: List[ContextResponse] = Field(default_factory=list)
    topic_questions: List[TopicQuestion] = Field(default_factory=list)


class QuestionRecord(BaseModel):
    id: int
    content: str
    response_type: str


class MemberReply(BaseModel):
    id: int
    posted_at: Optional[datetime] = None
    iteration_id: Optional[int] = None
    question_id: int
    question: Optional[str] = None
    content: str


IDENTITY_FIELDS = {"profile_id", "name", "avatarUrl"}


class FlatReply(MemberReply):
    """
    A reply as surfaced by the store, carrying the member's display fields.
    """
    model_config = ConfigDict(extra="ignore")

    profile_id: str
    name: Optional[str] = None
    avatarUrl: Optional[str] = None

    def strip_identity(self) -> MemberReply:
        data = self.model_dump(exclude=IDENTITY_FIELDS, exclude_unset=True)
        return MemberReply(**data)


class MemberReplyGroup(BaseModel):
    """
    All replies of one member for a request.

    name/avatarUrl are left unset for a member without replies, so they are
    dropped when serialized with exclude_unset.
    """
    profile_id: str
    name: Optional[str] = None
    avatarUrl: Optional[str] = None
    replies: List[MemberReply] = Field(default_factory=list)


class MemberReplyStatus(BaseModel):
    id: str
    name: Optional[str] = None
    avatarUrl: Optional[str] = None
    has_replied: bool = False


class RequestDetail(RequestRecord):
    reply_statuses: List[MemberReplyStatus] = Field(default_factory=list)


class RequestReplies(BaseModel):
    request_replies: List[MemberReplyGroup] = Field(default_factory=list)
