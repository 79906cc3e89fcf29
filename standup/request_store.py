# standup/request_store.py
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from standup.entities import (
    ContextResponse,
    IterationQuestion,
    Profile,
    Question,
    Reply,
    TopicIteration,
    TopicMember,
)
from standup.schemas import (
    FlatReply,
    MemberReplyStatus,
    QuestionRecord,
    ReplyEntry,
    RequestRecord,
)

logger = logging.getLogger("standup_api")


def _coerce_id(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class RequestStore:
    """
    SQLAlchemy access for requests (topic iterations), their questions and
    member replies. Every call opens and closes its own session.
    """

    def __init__(self, session_factory: sessionmaker):
        self.SessionFactory = session_factory

    # -----------------------
    # Reads
    # -----------------------

    def get_request_detailed(self, request_id) -> Optional[RequestRecord]:
        iteration_id = _coerce_id(request_id)
        if iteration_id is None:
            return None

        session: Session = self.SessionFactory()
        try:
            iteration = session.get(TopicIteration, iteration_id)
            if iteration is None:
                return None

            context_rows = session.execute(
                select(Question.content, ContextResponse.content)
                .select_from(ContextResponse)
                .join(Question, Question.id == ContextResponse.question_id)
                .where(ContextResponse.iteration_id == iteration_id)
                .order_by(ContextResponse.id.asc())
            ).all()

            topic_questions = self._iteration_questions(session, iteration_id)

            return RequestRecord(
                id=iteration.id,
                topic_id=iteration.topic_id,
                posted_at=iteration.posted_at,
                context_responses=[
                    {"context_question": q, "context_response": c}
                    for (q, c) in context_rows
                ],
                topic_questions=[
                    {"content": q.content, "response_type": q.response_type}
                    for q in topic_questions
                ],
            )
        finally:
            session.close()

    def get_request_questions(self, request_id) -> List[QuestionRecord]:
        iteration_id = _coerce_id(request_id)
        if iteration_id is None:
            return []

        session: Session = self.SessionFactory()
        try:
            return [
                QuestionRecord(id=q.id, content=q.content, response_type=q.response_type)
                for q in self._iteration_questions(session, iteration_id)
            ]
        finally:
            session.close()

    def get_request_replies(self, request_id) -> List[FlatReply]:
        iteration_id = _coerce_id(request_id)
        if iteration_id is None:
            return []

        session: Session = self.SessionFactory()
        try:
            return self._flat_replies(session, Reply.iteration_id == iteration_id)
        finally:
            session.close()

    def get_who_has_replied(self, request_id) -> List[str]:
        """
        Distinct members with at least one reply, ordered by their first reply.
        """
        iteration_id = _coerce_id(request_id)
        if iteration_id is None:
            return []

        session: Session = self.SessionFactory()
        try:
            first_reply = func.min(Reply.id)
            rows = session.execute(
                select(Reply.profile_id, first_reply)
                .where(Reply.iteration_id == iteration_id)
                .group_by(Reply.profile_id)
                .order_by(first_reply.asc())
            ).all()
            return [profile_id for (profile_id, _) in rows]
        finally:
            session.close()

    def get_member_replied_status(self, request_id, topic_id) -> List[MemberReplyStatus]:
        iteration_id = _coerce_id(request_id)
        if iteration_id is None:
            return []

        session: Session = self.SessionFactory()
        try:
            members = session.execute(
                select(Profile.id, Profile.name, Profile.avatar_url)
                .join(TopicMember, TopicMember.member_id == Profile.id)
                .where(TopicMember.topic_id == topic_id)
                .order_by(TopicMember.id.asc())
            ).all()

            replied = set(
                session.execute(
                    select(Reply.profile_id)
                    .where(Reply.iteration_id == iteration_id)
                    .distinct()
                ).scalars()
            )

            return [
                MemberReplyStatus(
                    id=member_id,
                    name=name,
                    avatarUrl=avatar_url,
                    has_replied=member_id in replied,
                )
                for (member_id, name, avatar_url) in members
            ]
        finally:
            session.close()

    # -----------------------
    # Writes
    # -----------------------

    def add_request_replies(self, request_id, profile_id: str, replies: Iterable[ReplyEntry]) -> Optional[List[FlatReply]]:
        """
        Write a whole reply batch in one transaction.

        A member answering the same question twice updates the existing reply.
        Returns the written replies, or None when the write failed.
        """
        iteration_id = _coerce_id(request_id)
        if iteration_id is None:
            return None

        session: Session = self.SessionFactory()
        try:
            now = datetime.now(timezone.utc)
            written_ids = []
            for entry in replies:
                existing = session.execute(
                    select(Reply).where(
                        Reply.iteration_id == iteration_id,
                        Reply.question_id == entry.question_id,
                        Reply.profile_id == profile_id,
                    )
                ).scalar_one_or_none()

                if existing is None:
                    existing = Reply(
                        iteration_id=iteration_id,
                        question_id=entry.question_id,
                        profile_id=profile_id,
                        content=entry.content,
                        posted_at=now,
                    )
                    session.add(existing)
                else:
                    existing.content = entry.content
                    existing.posted_at = now

                session.flush()
                if existing.id not in written_ids:
                    written_ids.append(existing.id)

            # read back inside the transaction so a failed read leaves nothing stored
            written = self._flat_replies(session, Reply.id.in_(written_ids)) if written_ids else []
            session.commit()
            return written

        except SQLAlchemyError as e:
            session.rollback()
            logger.exception(f"add_request_replies(): DB error for request {request_id} -> {e}")
            return None
        finally:
            session.close()

    # -----------------------
    # Helpers
    # -----------------------

    def _iteration_questions(self, session: Session, iteration_id: int) -> List[Question]:
        return list(
            session.execute(
                select(Question)
                .join(IterationQuestion, IterationQuestion.question_id == Question.id)
                .where(IterationQuestion.iteration_id == iteration_id)
                .order_by(Question.id.asc())
            ).scalars()
        )

    def _flat_replies(self, session: Session, criterion) -> List[FlatReply]:
        rows = session.execute(
            select(Reply, Question.content, Profile.name, Profile.avatar_url)
            .select_from(Reply)
            .outerjoin(Question, Question.id == Reply.question_id)
            .outerjoin(Profile, Profile.id == Reply.profile_id)
            .where(criterion)
            .order_by(Reply.id.asc())
        ).all()

        return [
            FlatReply(
                id=reply.id,
                posted_at=reply.posted_at,
                iteration_id=reply.iteration_id,
                question_id=reply.question_id,
                question=question,
                profile_id=reply.profile_id,
                content=reply.content,
                name=name,
                avatarUrl=avatar_url,
            )
            for (reply, question, name, avatar_url) in rows
        ]
