"""Conversions from stored records into what the API returns.

Ids are turned into usernames and competition names, and the owner/author of
every item is redacted for viewers who are not the owner unless the owner has
linked the item. Domain errors are rendered here too, so that services never
have to resolve identities for their messages.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, Type

from sqlmodel import Session

from .errors import (
    AlreadyFriendsError,
    AlreadyLinkedError,
    AlreadyMemberError,
    AlreadyOwnerError,
    AppError,
    CommentAuthorMismatchError,
    CompetitionEndedError,
    CompetitionOwnerMismatchError,
    DataOwnerMismatchError,
    FriendNotFoundError,
    FriendRequestAlreadyExistsError,
    FriendRequestNotFoundError,
    NotLinkedError,
    NotMemberError,
    PostAuthorMismatchError,
    SelfFriendError,
)
from .models import Comment, Competition, DataPoint, FriendRequest, Link, LinkKind, Post, User
from .services import auth, commenting, competing, linking, posting, tracking

LinkedPairs = Set[Tuple[int, int]]


def is_visible(viewer_id: Optional[int], owner_id: int, item_id: int, linked: LinkedPairs) -> bool:
    """The owner of an item is shown to the owner themselves, or to anyone once linked."""
    return viewer_id == owner_id or (owner_id, item_id) in linked


def _usernames(db: Session, ids: List[int]) -> Dict[int, str]:
    return dict(zip(ids, auth.ids_to_usernames(db, ids)))


def _timestamps(record: Any) -> Dict[str, Any]:
    return {"created_at": record.created_at, "updated_at": record.updated_at}


def user(item: User) -> Dict[str, Any]:
    return {"id": item.id, "username": item.username, **_timestamps(item)}


def posts(db: Session, viewer_id: Optional[int], items: Iterable[Post]) -> List[Dict[str, Any]]:
    items = list(items)
    linked = linking.linked_pairs(db, LinkKind.POST)
    names = _usernames(db, [post.author_id for post in items])
    shaped = []
    for post in items:
        body = {
            "id": post.id,
            "author": names[post.author_id],
            "content": post.content,
            "options": post.options,
            **_timestamps(post),
        }
        if not is_visible(viewer_id, post.author_id, post.id, linked):
            body = posting.redact_author(body)
        shaped.append(body)
    return shaped


def post(db: Session, viewer_id: Optional[int], item: Post) -> Dict[str, Any]:
    return posts(db, viewer_id, [item])[0]


def comments(db: Session, viewer_id: Optional[int], items: Iterable[Comment]) -> List[Dict[str, Any]]:
    items = list(items)
    linked = linking.linked_pairs(db, LinkKind.COMMENT)
    names = _usernames(db, [comment.author_id for comment in items])
    shaped = []
    for comment in items:
        body = {
            "id": comment.id,
            "author": names[comment.author_id],
            "post": comment.post_id,
            "content": comment.content,
            **_timestamps(comment),
        }
        if not is_visible(viewer_id, comment.author_id, comment.id, linked):
            body = commenting.redact_author(body)
        shaped.append(body)
    return shaped


def comment(db: Session, viewer_id: Optional[int], item: Comment) -> Dict[str, Any]:
    return comments(db, viewer_id, [item])[0]


def data_points(db: Session, viewer_id: Optional[int], items: Iterable[DataPoint]) -> List[Dict[str, Any]]:
    items = list(items)
    linked = linking.linked_pairs(db, LinkKind.DATA)
    names = _usernames(db, [data.user_id for data in items])
    shaped = []
    for data in items:
        body = {
            "id": data.id,
            "user": names[data.user_id],
            "date": data.date,
            "score": data.score,
            **_timestamps(data),
        }
        if not is_visible(viewer_id, data.user_id, data.id, linked):
            body = tracking.redact_user(body)
        shaped.append(body)
    return shaped


def data_point(db: Session, viewer_id: Optional[int], item: DataPoint) -> Dict[str, Any]:
    return data_points(db, viewer_id, [item])[0]


def competitions(db: Session, viewer_id: Optional[int], items: Iterable[Competition]) -> List[Dict[str, Any]]:
    items = list(items)
    linked = linking.linked_pairs(db, LinkKind.COMPETITION)
    names = _usernames(db, [competition.owner_id for competition in items])
    shaped = []
    for competition in items:
        body = {
            "id": competition.id,
            "name": competition.name,
            "owner": names[competition.owner_id],
            "end_date": competition.end_date,
            "data": competing.get_data_ids(db, competition.id),
            **_timestamps(competition),
        }
        if not is_visible(viewer_id, competition.owner_id, competition.id, linked):
            body = competing.redact_owner(body)
        shaped.append(body)
    return shaped


def competition(db: Session, viewer_id: Optional[int], item: Competition) -> Dict[str, Any]:
    return competitions(db, viewer_id, [item])[0]


def leaderboard(db: Session, viewer_id: Optional[int], ranked: List[DataPoint]) -> List[Dict[str, Any]]:
    return [
        {"rank": rank, **body}
        for rank, body in enumerate(data_points(db, viewer_id, ranked), start=1)
    ]


def members(db: Session, viewer_id: Optional[int], competition_id: int, member_ids: List[int]) -> List[str]:
    """Usernames of the members who linked their membership, plus the viewer."""
    linked = linking.linked_pairs(db, LinkKind.COMPETITION)
    visible = [
        member_id for member_id in member_ids
        if is_visible(viewer_id, member_id, competition_id, linked)
    ]
    return auth.ids_to_usernames(db, visible)


def friend_requests(db: Session, requests: Iterable[FriendRequest]) -> List[Dict[str, Any]]:
    requests = list(requests)
    names = _usernames(db, [r.from_id for r in requests] + [r.to_id for r in requests])
    return [
        {
            "id": request.id,
            "from": names[request.from_id],
            "to": names[request.to_id],
            "status": request.status,
            **_timestamps(request),
        }
        for request in requests
    ]


def links(db: Session, items: Iterable[Link]) -> List[Dict[str, Any]]:
    items = list(items)
    names = _usernames(db, [link.user_id for link in items])
    return [
        {
            "id": link.id,
            "user": names[link.user_id],
            "kind": link.kind.value,
            "item": link.item_id,
            **_timestamps(link),
        }
        for link in items
    ]


def link(db: Session, item: Link) -> Dict[str, Any]:
    return links(db, [item])[0]


# Error rendering

ErrorFormatter = Callable[[Session, Any], str]
_error_formatters: Dict[Type[AppError], ErrorFormatter] = {}


def register_error(error_class: Type[AppError]):
    """Register how an error's ids are rendered for callers."""
    def decorator(formatter: ErrorFormatter) -> ErrorFormatter:
        _error_formatters[error_class] = formatter
        return formatter
    return decorator


def describe_error(db: Session, error: AppError) -> str:
    for error_class in type(error).__mro__:
        formatter = _error_formatters.get(error_class)
        if formatter is not None:
            return formatter(db, error)
    return str(error)


def _username(db: Session, user_id: int) -> str:
    return auth.ids_to_usernames(db, [user_id])[0]


def _competition_name(db: Session, competition_id: int) -> str:
    return competing.ids_to_names(db, [competition_id])[0]


@register_error(PostAuthorMismatchError)
def _post_author_mismatch(db: Session, e: PostAuthorMismatchError) -> str:
    return e.format_with(_username(db, e.author), e.post_id)


@register_error(CommentAuthorMismatchError)
def _comment_author_mismatch(db: Session, e: CommentAuthorMismatchError) -> str:
    return e.format_with(_username(db, e.author), e.comment_id)


@register_error(DataOwnerMismatchError)
def _data_owner_mismatch(db: Session, e: DataOwnerMismatchError) -> str:
    return e.format_with(e.data_id, _username(db, e.user))


@register_error(SelfFriendError)
def _self_friend(db: Session, e: SelfFriendError) -> str:
    return e.format_with(_username(db, e.user))


@register_error(FriendRequestAlreadyExistsError)
@register_error(FriendRequestNotFoundError)
def _friend_request(db: Session, e: Any) -> str:
    return e.format_with(_username(db, e.from_id), _username(db, e.to_id))


@register_error(AlreadyFriendsError)
@register_error(FriendNotFoundError)
def _friendship(db: Session, e: Any) -> str:
    return e.format_with(_username(db, e.user1), _username(db, e.user2))


@register_error(AlreadyMemberError)
@register_error(NotMemberError)
@register_error(CompetitionOwnerMismatchError)
@register_error(AlreadyOwnerError)
def _user_competition(db: Session, e: Any) -> str:
    return e.format_with(_username(db, e.user), _competition_name(db, e.competition))


@register_error(CompetitionEndedError)
def _competition_ended(db: Session, e: CompetitionEndedError) -> str:
    return e.format_with(_competition_name(db, e.competition))


@register_error(AlreadyLinkedError)
@register_error(NotLinkedError)
def _link(db: Session, e: Any) -> str:
    return e.format_with(_username(db, e.user), e.kind, e.item)
