import pytest

from core.config import settings
from core.errors import InvalidArgument, NotFound
from core.kinds import EntityKind, TargetKind
from factories import make_comment, make_playlist, make_tweet, make_user, make_video
from models.playlist import PlaylistVideo
from services import toggle_engine, view_composer
from services.view_composer import PageRequest, ViewFilter


async def test_video_view_counts_and_flags(db_session, alice, bob):
    carol = await make_user(db_session, "carol")
    video = await make_video(db_session, alice)
    await make_comment(db_session, bob, video)
    await make_comment(db_session, carol, video)
    for user in (bob, carol):
        await toggle_engine.toggle(db_session, user.id, video.id, TargetKind.VIDEO)
    await toggle_engine.toggle(db_session, bob.id, alice.id, TargetKind.CHANNEL)

    view = await view_composer.compose_view(db_session, video.id, EntityKind.VIDEO, bob.id)

    assert view.counts == {"like": 2, "comments": 2, "subscription": 1}
    assert view.viewer_flags == {"like": True, "subscription": True}
    assert view.is_owner is False
    assert view.owner.username == "alice"

    await toggle_engine.toggle(db_session, bob.id, video.id, TargetKind.VIDEO)
    view = await view_composer.compose_view(db_session, video.id, EntityKind.VIDEO, bob.id)
    assert view.counts["like"] == 1
    assert view.viewer_flags["like"] is False


async def test_is_owner_only_for_owner(db_session, alice, bob):
    tweet = await make_tweet(db_session, alice)

    as_owner = await view_composer.compose_view(db_session, tweet.id, EntityKind.TWEET, alice.id)
    as_other = await view_composer.compose_view(db_session, tweet.id, EntityKind.TWEET, bob.id)
    anonymous = await view_composer.compose_view(db_session, tweet.id, EntityKind.TWEET)

    assert as_owner.is_owner is True
    assert as_other.is_owner is False
    assert anonymous.is_owner is False
    assert anonymous.viewer_flags == {"like": False}


async def test_missing_entity_is_not_found(db_session):
    with pytest.raises(NotFound):
        await view_composer.compose_view(db_session, 42, EntityKind.COMMENT)


async def test_unpublished_video_visible_only_to_owner(db_session, alice, bob):
    draft = await make_video(db_session, alice, "draft", is_published=False)
    await make_video(db_session, alice, "public")

    with pytest.raises(NotFound):
        await view_composer.compose_view(db_session, draft.id, EntityKind.VIDEO, bob.id)
    assert (await view_composer.compose_view(db_session, draft.id, EntityKind.VIDEO, alice.id)).id == draft.id

    page = PageRequest(sort_by="title", sort_type="asc")
    for_bob = await view_composer.compose_view_list(db_session, EntityKind.VIDEO, ViewFilter(), page, bob.id)
    for_alice = await view_composer.compose_view_list(
        db_session, EntityKind.VIDEO, ViewFilter(owner_id=alice.id), page, alice.id
    )
    assert [video.title for video in for_bob] == ["public"]
    assert [video.title for video in for_alice] == ["draft", "public"]


async def test_paging_walks_through_all_rows(db_session, alice):
    for number in range(25):
        await make_video(db_session, alice, f"video-{number:02d}")

    def page(number):
        return PageRequest(page=number, page_size=10, sort_by="title", sort_type="asc")

    second = await view_composer.compose_view_list(db_session, EntityKind.VIDEO, ViewFilter(), page(2))
    third = await view_composer.compose_view_list(db_session, EntityKind.VIDEO, ViewFilter(), page(3))
    fourth = await view_composer.compose_view_list(db_session, EntityKind.VIDEO, ViewFilter(), page(4))

    assert [video.title for video in second] == [f"video-{n:02d}" for n in range(10, 20)]
    assert [video.title for video in third] == [f"video-{n:02d}" for n in range(20, 25)]
    assert fourth == []
    assert await view_composer.count_matching(db_session, EntityKind.VIDEO, ViewFilter()) == 25


async def test_descending_sort_accepts_minus_one(db_session, alice):
    for title in ("a", "b", "c"):
        await make_video(db_session, alice, title)

    rows = await view_composer.compose_view_list(
        db_session, EntityKind.VIDEO, ViewFilter(), PageRequest(sort_by="title", sort_type="-1")
    )
    assert [video.title for video in rows] == ["c", "b", "a"]


@pytest.mark.parametrize(
    "page",
    [
        PageRequest(page=0),
        PageRequest(page_size=0),
        PageRequest(page_size=settings.MAX_PAGE_SIZE + 1),
        PageRequest(sort_by="video_file"),
        PageRequest(sort_type="sideways"),
    ],
)
async def test_invalid_page_parameters(db_session, page):
    with pytest.raises(InvalidArgument):
        await view_composer.compose_view_list(db_session, EntityKind.VIDEO, ViewFilter(), page)


async def test_search_matches_title_and_description(db_session, alice):
    await make_video(db_session, alice, "Cooking pasta")
    await make_video(db_session, alice, "Gardening")

    rows = await view_composer.compose_view_list(
        db_session, EntityKind.VIDEO, ViewFilter(query="pasta"), PageRequest()
    )
    assert [video.title for video in rows] == ["Cooking pasta"]


async def test_empty_id_set_gives_empty_page(db_session):
    rows = await view_composer.compose_view_list(db_session, EntityKind.VIDEO, ViewFilter(ids=[]), PageRequest())
    assert rows == []


async def test_comment_list_for_video(db_session, alice, bob):
    video = await make_video(db_session, alice)
    other = await make_video(db_session, alice, "other")
    comment = await make_comment(db_session, bob, video)
    await make_comment(db_session, bob, other)
    await toggle_engine.toggle(db_session, alice.id, comment.id, TargetKind.COMMENT)

    rows = await view_composer.compose_view_list(
        db_session, EntityKind.COMMENT, ViewFilter(video_id=video.id), PageRequest(), alice.id
    )

    assert len(rows) == 1
    assert rows[0].counts == {"like": 1}
    assert rows[0].viewer_flags == {"like": True}
    assert rows[0].owner.username == "bob"


async def test_playlist_view_embeds_visible_videos(db_session, alice, bob):
    playlist = await make_playlist(db_session, alice)
    public = await make_video(db_session, alice, "public")
    draft = await make_video(db_session, alice, "draft", is_published=False)
    for video in (public, draft):
        db_session.add(PlaylistVideo(playlist_id=playlist.id, video_id=video.id))
    await db_session.commit()

    for_owner = await view_composer.compose_view(db_session, playlist.id, EntityKind.PLAYLIST, alice.id)
    for_bob = await view_composer.compose_view(db_session, playlist.id, EntityKind.PLAYLIST, bob.id)

    assert for_owner.counts == {"videos": 2}
    assert {video.title for video in for_owner.videos} == {"public", "draft"}
    assert for_bob.counts == {"videos": 1}
    assert [video.title for video in for_bob.videos] == ["public"]


async def test_channel_view(db_session, alice, bob):
    carol = await make_user(db_session, "carol")
    await make_video(db_session, alice)
    await make_video(db_session, alice, "draft", is_published=False)
    await toggle_engine.toggle(db_session, bob.id, alice.id, TargetKind.CHANNEL)
    await toggle_engine.toggle(db_session, carol.id, alice.id, TargetKind.CHANNEL)
    await toggle_engine.toggle(db_session, alice.id, carol.id, TargetKind.CHANNEL)

    view = await view_composer.compose_view(db_session, alice.id, EntityKind.CHANNEL, bob.id)

    assert view.counts == {"subscription": 2, "subscribed_to": 1, "videos": 1}
    assert view.viewer_flags == {"subscription": True}
    assert view.is_owner is False
    own = await view_composer.compose_view(db_session, alice.id, EntityKind.CHANNEL, alice.id)
    assert own.is_owner is True
    assert own.counts["videos"] == 2


async def test_comments_under_draft_video_are_hidden(db_session, alice, bob):
    draft = await make_video(db_session, alice, "draft", is_published=False)
    comment = await make_comment(db_session, alice, draft)

    with pytest.raises(NotFound):
        await view_composer.compose_view(db_session, comment.id, EntityKind.COMMENT, bob.id)
    with pytest.raises(NotFound):
        await view_composer.compose_view(db_session, comment.id, EntityKind.COMMENT)
    own = await view_composer.compose_view(db_session, comment.id, EntityKind.COMMENT, alice.id)
    assert own.id == comment.id


async def test_comment_lists_skip_draft_videos(db_session, alice, bob):
    public = await make_video(db_session, alice, "public")
    draft = await make_video(db_session, alice, "draft", is_published=False)
    await make_comment(db_session, alice, public, "visible")
    await make_comment(db_session, alice, draft, "hidden")

    for_bob = await view_composer.compose_view_list(
        db_session, EntityKind.COMMENT, ViewFilter(owner_id=alice.id), PageRequest(), bob.id
    )
    by_video = await view_composer.compose_view_list(
        db_session, EntityKind.COMMENT, ViewFilter(video_id=draft.id), PageRequest(), bob.id
    )
    for_alice = await view_composer.compose_view_list(
        db_session, EntityKind.COMMENT, ViewFilter(owner_id=alice.id), PageRequest(), alice.id
    )

    assert [row.content for row in for_bob] == ["visible"]
    assert by_video == []
    assert {row.content for row in for_alice} == {"visible", "hidden"}


async def test_ids_order_is_kept_when_asked(db_session, alice):
    first = await make_video(db_session, alice, "a")
    second = await make_video(db_session, alice, "b")
    third = await make_video(db_session, alice, "c")
    wanted = [second.id, third.id, first.id]

    rows = await view_composer.compose_view_list(
        db_session, EntityKind.VIDEO, ViewFilter(ids=wanted, keep_ids_order=True), PageRequest(page_size=2)
    )
    rest = await view_composer.compose_view_list(
        db_session, EntityKind.VIDEO, ViewFilter(ids=wanted, keep_ids_order=True), PageRequest(page=2, page_size=2)
    )

    assert [row.id for row in rows + rest] == wanted
