from core.kinds import TargetKind
from factories import make_comment, make_user, make_video
from models.like import Like
from models.subscription import Subscription
from services import relationship_store


async def test_insert_and_find_like(db_session, alice, bob):
    video = await make_video(db_session, alice)

    fact = await relationship_store.insert_fact(db_session, bob.id, video.id, TargetKind.VIDEO)

    assert isinstance(fact, Like)
    assert fact.target_kind == "video"
    found = await relationship_store.find_fact(db_session, bob.id, video.id, TargetKind.VIDEO)
    assert found is not None and found.id == fact.id


async def test_same_target_id_with_other_kind_is_a_different_fact(db_session, alice, bob):
    video = await make_video(db_session, alice)
    await relationship_store.insert_fact(db_session, bob.id, video.id, TargetKind.VIDEO)

    assert await relationship_store.find_fact(db_session, bob.id, video.id, TargetKind.COMMENT) is None


async def test_duplicate_insert_collapses_into_existing_fact(db_session, alice, bob):
    video = await make_video(db_session, alice)
    # rollback внутри insert_fact экспайрит объекты сессии
    video_id, bob_id = video.id, bob.id
    first = await relationship_store.insert_fact(db_session, bob_id, video_id, TargetKind.VIDEO)
    first_id = first.id

    second = await relationship_store.insert_fact(db_session, bob_id, video_id, TargetKind.VIDEO)

    assert second.id == first_id
    counts = await relationship_store.count_by_target(db_session, TargetKind.VIDEO, [video_id])
    assert counts == {video_id: 1}


async def test_channel_facts_live_in_subscriptions(db_session, alice, bob):
    fact = await relationship_store.insert_fact(db_session, bob.id, alice.id, TargetKind.CHANNEL)

    assert isinstance(fact, Subscription)
    assert fact.subscriber_id == bob.id
    assert fact.channel_id == alice.id


async def test_delete_fact_reports_whether_row_existed(db_session, alice, bob):
    video = await make_video(db_session, alice)
    await relationship_store.insert_fact(db_session, bob.id, video.id, TargetKind.VIDEO)

    assert await relationship_store.delete_fact(db_session, bob.id, video.id, TargetKind.VIDEO) is True
    assert await relationship_store.delete_fact(db_session, bob.id, video.id, TargetKind.VIDEO) is False


async def test_counts_and_viewer_marks(db_session, alice, bob):
    carol = await make_user(db_session, "carol")
    liked = await make_video(db_session, alice, "liked")
    ignored = await make_video(db_session, alice, "ignored")
    for user in (bob, carol):
        await relationship_store.insert_fact(db_session, user.id, liked.id, TargetKind.VIDEO)

    counts = await relationship_store.count_by_target(db_session, TargetKind.VIDEO, [liked.id, ignored.id])
    marked = await relationship_store.actor_targets(db_session, bob.id, TargetKind.VIDEO, [liked.id, ignored.id])

    assert counts == {liked.id: 2, ignored.id: 0}
    assert marked == {liked.id}
    assert await relationship_store.count_by_target(db_session, TargetKind.VIDEO, []) == {}


async def test_actor_and_target_listings(db_session, alice, bob):
    carol = await make_user(db_session, "carol")
    await relationship_store.insert_fact(db_session, bob.id, alice.id, TargetKind.CHANNEL)
    await relationship_store.insert_fact(db_session, bob.id, carol.id, TargetKind.CHANNEL)
    await relationship_store.insert_fact(db_session, carol.id, alice.id, TargetKind.CHANNEL)

    assert set(await relationship_store.target_ids_for_actor(db_session, bob.id, TargetKind.CHANNEL)) == {
        alice.id,
        carol.id,
    }
    assert set(await relationship_store.actor_ids_for_target(db_session, alice.id, TargetKind.CHANNEL)) == {
        bob.id,
        carol.id,
    }
    following = await relationship_store.count_by_actor(db_session, TargetKind.CHANNEL, [bob.id, alice.id])
    assert following == {bob.id: 2, alice.id: 0}


async def test_purge_targets_only_touches_given_kind(db_session, alice, bob):
    video = await make_video(db_session, alice)
    comment = await make_comment(db_session, alice, video)
    await relationship_store.insert_fact(db_session, bob.id, video.id, TargetKind.VIDEO)
    await relationship_store.insert_fact(db_session, bob.id, comment.id, TargetKind.COMMENT)

    await relationship_store.purge_targets(db_session, TargetKind.COMMENT, [comment.id])
    await db_session.commit()

    assert await relationship_store.find_fact(db_session, bob.id, comment.id, TargetKind.COMMENT) is None
    assert await relationship_store.find_fact(db_session, bob.id, video.id, TargetKind.VIDEO) is not None
