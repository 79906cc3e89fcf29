# standup/reply_aggregator.py
from collections.abc import Mapping
from typing import Iterable, List

from standup.schemas import (
    FlatReply,
    MemberReplyGroup,
    MemberReplyStatus,
    RequestDetail,
    RequestRecord,
)


def _as_flat_reply(reply) -> FlatReply:
    if isinstance(reply, FlatReply):
        return reply
    if isinstance(reply, Mapping):
        return FlatReply.model_validate(dict(reply))
    return FlatReply.model_validate(reply, from_attributes=True)


def aggregate_replies(flat_replies: Iterable, who_has_replied: Iterable[str]) -> List[MemberReplyGroup]:
    """
    Regroup the flat replies of a request per member.

    - One group per id in who_has_replied, in that order.
    - Replies keep their relative order from flat_replies.
    - The group's name/avatarUrl come from the member's first reply; later
      replies' display fields are ignored.
    - profile_id/name/avatarUrl are removed from each reply.
    - A member with no replies gets an empty list and no name/avatarUrl.
    """
    replies = [_as_flat_reply(r) for r in flat_replies]

    groups: List[MemberReplyGroup] = []
    for profile_id in who_has_replied:
        found = [r for r in replies if r.profile_id == profile_id]

        if found:
            first = found[0]
            group = MemberReplyGroup(
                profile_id=profile_id,
                name=first.name,
                avatarUrl=first.avatarUrl,
                replies=[r.strip_identity() for r in found],
            )
        else:
            group = MemberReplyGroup(profile_id=profile_id, replies=[])

        groups.append(group)

    return groups


def merge_reply_statuses(request: RequestRecord, statuses: Iterable[MemberReplyStatus]) -> RequestDetail:
    return RequestDetail(
        **request.model_dump(),
        reply_statuses=[
            s if isinstance(s, MemberReplyStatus) else MemberReplyStatus.model_validate(s)
            for s in statuses
        ],
    )
