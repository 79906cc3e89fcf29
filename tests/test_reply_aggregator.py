from datetime import datetime, timezone

from standup.reply_aggregator import aggregate_replies, merge_reply_statuses
from standup.schemas import FlatReply, MemberReplyStatus, RequestRecord

POSTED_AT = datetime(2020, 9, 28, 0, 37, 22, tzinfo=timezone.utc)


def _reply(reply_id, profile_id, name, question_id, content, avatar=None):
    return FlatReply(
        id=reply_id,
        posted_at=POSTED_AT,
        iteration_id=1,
        question_id=question_id,
        question=f"Question {question_id}",
        profile_id=profile_id,
        content=content,
        name=name,
        avatarUrl=avatar,
    )


def test_empty_inputs_give_empty_list() -> None:
    assert aggregate_replies([], []) == []


def test_groups_follow_who_has_replied_order() -> None:
    flat = [
        {"id": 1, "profile_id": "A", "name": "Alice", "question_id": 1, "content": "x"},
        {"id": 2, "profile_id": "B", "name": "Bob", "question_id": 1, "content": "y"},
    ]

    groups = aggregate_replies(flat, ["B", "A"])

    assert [g.profile_id for g in groups] == ["B", "A"]
    assert groups[0].name == "Bob"
    assert [r.id for r in groups[0].replies] == [2]
    assert groups[1].name == "Alice"
    assert [r.id for r in groups[1].replies] == [1]


def test_member_replies_keep_input_order() -> None:
    flat = [
        _reply(5, "A", "Alice", 3, "third"),
        _reply(2, "B", "Bob", 1, "other"),
        _reply(9, "A", "Alice", 1, "first"),
        _reply(1, "A", "Alice", 2, "second"),
    ]

    groups = aggregate_replies(flat, ["A"])

    assert [r.id for r in groups[0].replies] == [5, 9, 1]


def test_identity_comes_from_first_reply_only() -> None:
    flat = [
        _reply(1, "A", "Alice", 1, "x", avatar="https://example.com/a.jpg"),
        _reply(2, "A", "Alice Renamed", 2, "y", avatar="https://example.com/other.jpg"),
    ]

    group = aggregate_replies(flat, ["A"])[0]

    assert group.name == "Alice"
    assert group.avatarUrl == "https://example.com/a.jpg"


def test_first_reply_without_name_leaves_name_null() -> None:
    flat = [
        _reply(1, "A", None, 1, "x"),
        _reply(2, "A", "Alice", 2, "y"),
    ]

    group = aggregate_replies(flat, ["A"])[0]

    assert group.name is None
    assert group.model_dump(exclude_unset=True)["name"] is None


def test_identity_fields_are_stripped_from_replies() -> None:
    flat = [_reply(1, "A", "Alice", 1, "x", avatar="https://example.com/a.jpg")]

    group = aggregate_replies(flat, ["A"])[0]
    payload = group.model_dump(mode="json", exclude_unset=True)

    assert payload["profile_id"] == "A"
    assert payload["name"] == "Alice"
    assert payload["avatarUrl"] == "https://example.com/a.jpg"
    assert payload["replies"] == [
        {
            "id": 1,
            "posted_at": "2020-09-28T00:37:22Z",
            "iteration_id": 1,
            "question_id": 1,
            "question": "Question 1",
            "content": "x",
        }
    ]


def test_member_without_replies_gets_empty_group() -> None:
    flat = [_reply(1, "A", "Alice", 1, "x")]

    groups = aggregate_replies(flat, ["A", "ghost"])
    ghost = groups[1]

    assert ghost.profile_id == "ghost"
    assert ghost.replies == []
    assert ghost.name is None
    assert ghost.avatarUrl is None
    assert ghost.model_dump(exclude_unset=True) == {"profile_id": "ghost", "replies": []}


def test_replies_of_members_not_listed_are_dropped() -> None:
    flat = [_reply(1, "A", "Alice", 1, "x"), _reply(2, "Z", "Zed", 1, "y")]

    groups = aggregate_replies(flat, ["A"])

    assert len(groups) == 1
    assert [r.id for r in groups[0].replies] == [1]


def test_merge_reply_statuses_keeps_request_fields() -> None:
    request = RequestRecord(
        id=3,
        topic_id=1,
        posted_at=POSTED_AT,
        topic_questions=[{"content": "What did you do?", "response_type": "String"}],
    )
    statuses = [
        MemberReplyStatus(id="A", name="Alice", avatarUrl=None, has_replied=True),
        {"id": "B", "name": "Bob", "avatarUrl": None, "has_replied": False},
    ]

    detail = merge_reply_statuses(request, statuses)

    assert detail.id == 3
    assert detail.topic_id == 1
    assert detail.topic_questions[0].content == "What did you do?"
    assert [(s.id, s.has_replied) for s in detail.reply_statuses] == [("A", True), ("B", False)]
