from datetime import datetime, timezone

from standup.entities import (
    ContextResponse,
    IterationQuestion,
    Profile,
    Question,
    Reply,
    Topic,
    TopicIteration,
    TopicMember,
)

ALICE = "00ulthapbErVUwVJy4x6"
BOB = "00ultwew80Onb2vOT4x6"
CAROL = "00ultx74kMUmEW8054x6"

POSTED_AT = datetime(2020, 9, 28, 0, 37, 22, tzinfo=timezone.utc)


def seed(session) -> None:
    session.add_all([
        Profile(id=ALICE, name="Test001 User", email="alice@example.com", avatar_url="https://example.com/alice.jpg"),
        Profile(id=BOB, name="Test002 User", email="bob@example.com", avatar_url="https://example.com/bob.jpg"),
        Profile(id=CAROL, name="Test003 User", email="carol@example.com", avatar_url=None),
    ])
    session.flush()

    session.add(Topic(id=1, title="Daily standup", leader_id=ALICE))
    session.flush()
    session.add_all([
        TopicMember(id=1, topic_id=1, member_id=ALICE),
        TopicMember(id=2, topic_id=1, member_id=BOB),
        TopicMember(id=3, topic_id=1, member_id=CAROL),
    ])

    session.add_all([
        Question(id=1, content="What did you accomplish yesterday?", response_type="String"),
        Question(id=2, content="What are you working on today?", response_type="String"),
        Question(id=3, content="Are there any monsters in your path?", response_type="String"),
        Question(id=4, content="What is the sprint goal?", response_type="String", question_type="context"),
    ])
    session.add_all([
        TopicIteration(id=1, topic_id=1, posted_at=POSTED_AT),
        TopicIteration(id=2, topic_id=1, posted_at=POSTED_AT),
    ])
    session.flush()

    session.add_all([
        IterationQuestion(iteration_id=1, question_id=1),
        IterationQuestion(iteration_id=1, question_id=2),
        IterationQuestion(iteration_id=1, question_id=3),
        IterationQuestion(iteration_id=2, question_id=1),
        ContextResponse(iteration_id=1, question_id=4, content="Ship the release"),
    ])

    # Bob replies first, so he leads the aggregated view of request 1
    session.add_all([
        Reply(id=1, posted_at=POSTED_AT, iteration_id=1, question_id=1, profile_id=BOB, content="Fixed the build"),
        Reply(id=2, posted_at=POSTED_AT, iteration_id=1, question_id=1, profile_id=ALICE, content="Ate a sandwich"),
        Reply(id=3, posted_at=POSTED_AT, iteration_id=1, question_id=2, profile_id=ALICE, content="Making a sandwich"),
        Reply(id=4, posted_at=POSTED_AT, iteration_id=1, question_id=2, profile_id=BOB, content="Reviewing PRs"),
    ])
    session.commit()
