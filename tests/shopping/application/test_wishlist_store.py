"""Application tests for the WishlistStore: identity gating, optimistic writes, sync."""

import asyncio
from datetime import UTC, datetime

from shopping.session.identity import Identity
from shopping.sync.errors import FetchFailure, SyncFailure
from shopping.wishlist.events import WishlistChangeReverted, WishlistItemAdded
from shopping.wishlist.records import WishlistRecord
from shopping.wishlist.wishlist import WishlistStatus

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _sign_in(identity_source, identity):
    return asyncio.run(identity_source.sign_in(identity))


class TestIdentityGating:
    def test_add_without_identity_is_skipped(self, wishlist_store, remote, sweatshirt):
        outcome = asyncio.run(wishlist_store.add_to_wishlist(sweatshirt))
        assert outcome.skipped
        assert wishlist_store.state.items == ()
        assert remote.calls == []

    def test_remove_without_identity_is_skipped(self, wishlist_store, remote):
        outcome = asyncio.run(wishlist_store.remove_from_wishlist("1"))
        assert outcome.skipped
        assert remote.calls == []

    def test_initial_state(self, wishlist_store):
        state = wishlist_store.state
        assert state.status == WishlistStatus.UNAUTHENTICATED.value
        assert state.is_loading is False
        assert state.user_id is None


class TestSessionLifecycle:
    def test_sign_in_loads_remote_items(self, wishlist_store, identity_source, identity, remote, jeans):
        remote.seed("user-001", jeans, T0)
        outcomes = _sign_in(identity_source, identity)
        assert outcomes[0].ok
        state = wishlist_store.state
        assert state.status == WishlistStatus.SYNCED.value
        assert state.is_loading is False
        assert state.product_ids == ["2"]
        assert state.items[0].added_at == T0

    def test_sign_in_publishes_loading_then_synced(self, wishlist_store, identity_source, identity):
        statuses = []
        wishlist_store.subscribe(lambda state, events: statuses.append(state.status))
        _sign_in(identity_source, identity)
        assert statuses == [WishlistStatus.LOADING.value, WishlistStatus.SYNCED.value]

    def test_sign_in_subscribes_to_change_feed(self, wishlist_store, identity_source, identity, remote):
        _sign_in(identity_source, identity)
        assert [s.user_id for s in remote.subscriptions] == ["user-001"]

    def test_sign_out_clears(self, wishlist_store, identity_source, identity, remote, jeans):
        remote.seed("user-001", jeans, T0)
        _sign_in(identity_source, identity)
        asyncio.run(identity_source.sign_out())
        state = wishlist_store.state
        assert state.items == ()
        assert state.status == WishlistStatus.UNAUTHENTICATED.value
        assert state.user_id is None
        assert remote.subscriptions == []

    def test_switching_users_reloads(self, wishlist_store, identity_source, identity, remote, jeans, tote):
        remote.seed("user-001", jeans, T0)
        remote.seed("user-002", tote, T0)
        _sign_in(identity_source, identity)
        _sign_in(identity_source, Identity(user_id="user-002", email="bo@example.com", name="Bo"))
        assert wishlist_store.state.product_ids == ["3"]
        assert [s.user_id for s in remote.subscriptions] == ["user-002"]

    def test_fetch_failure_fails_empty(self, wishlist_store, identity_source, identity, remote, jeans):
        remote.seed("user-001", jeans, T0)
        remote.configure(should_succeed=False, failure_reason="permission denied")
        outcomes = _sign_in(identity_source, identity)
        assert outcomes[0].failed
        assert isinstance(outcomes[0].error, FetchFailure)
        state = wishlist_store.state
        assert state.items == ()
        assert state.is_loading is False
        assert state.status == WishlistStatus.ERROR.value
        assert state.last_error == "permission denied"

    def test_retry_after_fetch_failure(self, wishlist_store, identity_source, identity, remote, jeans):
        remote.seed("user-001", jeans, T0)
        remote.configure(should_succeed=False)
        _sign_in(identity_source, identity)
        remote.configure(should_succeed=True)
        outcome = asyncio.run(wishlist_store.retry())
        assert outcome.ok
        assert wishlist_store.state.status == WishlistStatus.SYNCED.value
        assert wishlist_store.state.product_ids == ["2"]

    def test_failed_fetch_after_feed_sync_keeps_items(self, wishlist_store, identity_source, identity, remote, jeans):
        item_b = WishlistRecord.build("user-001", jeans, T0)

        async def scenario():
            remote.pause()
            task = asyncio.create_task(identity_source.sign_in(identity))
            await asyncio.sleep(0)
            remote.emit_snapshot("user-001", [item_b])
            remote.configure(should_succeed=False, failure_reason="fetch timed out")
            remote.resume()
            return await task

        outcomes = asyncio.run(scenario())
        assert outcomes[0].failed
        state = wishlist_store.state
        assert state.product_ids == ["2"]
        assert state.status == WishlistStatus.SYNCED.value
        assert state.last_error == "fetch timed out"

    def test_retry_without_identity_is_skipped(self, wishlist_store):
        assert asyncio.run(wishlist_store.retry()).skipped


class TestOptimisticWrites:
    def test_add_to_wishlist(self, wishlist_store, identity_source, identity, remote, sweatshirt):
        _sign_in(identity_source, identity)
        outcome = asyncio.run(wishlist_store.add_to_wishlist(sweatshirt))
        assert outcome.ok
        assert wishlist_store.is_in_wishlist("1")
        assert "user-001_1" in remote.documents

    def test_add_is_visible_before_remote_confirms(self, wishlist_store, identity_source, identity, remote, sweatshirt):
        _sign_in(identity_source, identity)

        async def scenario():
            remote.pause()
            task = asyncio.create_task(wishlist_store.add_to_wishlist(sweatshirt))
            await asyncio.sleep(0)
            in_flight = wishlist_store.is_in_wishlist("1")
            remote.resume()
            return in_flight, await task

        in_flight, outcome = asyncio.run(scenario())
        assert in_flight is True
        assert outcome.ok

    def test_failed_add_rolls_back_exactly(self, wishlist_store, identity_source, identity, remote, jeans, sweatshirt):
        remote.seed("user-001", jeans, T0)
        _sign_in(identity_source, identity)
        before = wishlist_store.state.items

        remote.configure(should_succeed=False, operations={"put_wishlist_item"})
        outcome = asyncio.run(wishlist_store.add_to_wishlist(sweatshirt))

        assert outcome.failed
        assert isinstance(outcome.error, SyncFailure)
        assert wishlist_store.state.items == before
        assert wishlist_store.state.status == WishlistStatus.ERROR.value

    def test_failed_remove_rolls_back_exactly(self, wishlist_store, identity_source, identity, remote, sweatshirt, jeans, tote):
        for product in (sweatshirt, jeans, tote):
            remote.seed("user-001", product, T0)
        _sign_in(identity_source, identity)
        before = wishlist_store.state.items

        remote.configure(should_succeed=False, operations={"delete_wishlist_item"})
        outcome = asyncio.run(wishlist_store.remove_from_wishlist("2"))

        assert outcome.failed
        assert wishlist_store.state.items == before
        assert wishlist_store.state.product_ids == ["1", "2", "3"]

    def test_failed_add_publishes_revert(self, wishlist_store, identity_source, identity, remote, sweatshirt):
        _sign_in(identity_source, identity)
        received = []
        wishlist_store.subscribe(lambda state, events: received.extend(type(e) for e in events))
        remote.configure(should_succeed=False, operations={"put_wishlist_item"})
        asyncio.run(wishlist_store.add_to_wishlist(sweatshirt))
        assert WishlistItemAdded in received
        assert WishlistChangeReverted in received

    def test_remove_from_wishlist(self, wishlist_store, identity_source, identity, remote, jeans):
        remote.seed("user-001", jeans, T0)
        _sign_in(identity_source, identity)
        outcome = asyncio.run(wishlist_store.remove_from_wishlist("2"))
        assert outcome.ok
        assert not wishlist_store.is_in_wishlist("2")
        assert remote.documents == {}

    def test_add_existing_product_is_skipped(self, wishlist_store, identity_source, identity, remote, jeans):
        remote.seed("user-001", jeans, T0)
        _sign_in(identity_source, identity)
        calls_before = len(remote.calls)
        outcome = asyncio.run(wishlist_store.add_to_wishlist(jeans))
        assert outcome.skipped
        assert len(remote.calls) == calls_before

    def test_remove_absent_product_is_skipped(self, wishlist_store, identity_source, identity):
        _sign_in(identity_source, identity)
        assert asyncio.run(wishlist_store.remove_from_wishlist("2")).skipped

    def test_out_of_order_completion_keeps_unrelated_items(
        self, wishlist_store, identity_source, identity, remote, sweatshirt, jeans
    ):
        remote.seed("user-001", jeans, T0)
        _sign_in(identity_source, identity)
        remote.auto_push = False

        async def scenario():
            remote.pause()
            slow_add = asyncio.create_task(wishlist_store.add_to_wishlist(sweatshirt))
            await asyncio.sleep(0)
            remote.resume()
            fast_remove = await wishlist_store.remove_from_wishlist("2")
            return await slow_add, fast_remove

        added, removed = asyncio.run(scenario())
        assert added.ok and removed.ok
        assert wishlist_store.state.product_ids == ["1"]


class TestChangeFeed:
    def test_snapshot_replaces_wholesale(self, wishlist_store, identity_source, identity, remote, sweatshirt, jeans):
        _sign_in(identity_source, identity)
        item_b = WishlistRecord.build("user-001", jeans, T0)

        async def scenario():
            remote.pause()
            task = asyncio.create_task(wishlist_store.add_to_wishlist(sweatshirt))
            await asyncio.sleep(0)
            assert wishlist_store.is_in_wishlist("1")
            remote.emit_snapshot("user-001", [item_b])
            after_snapshot = wishlist_store.state.product_ids
            remote.resume()
            await task
            return after_snapshot

        assert asyncio.run(scenario()) == ["2"]

    def test_snapshot_accepts_plain_documents(self, wishlist_store, identity_source, identity, remote, jeans):
        _sign_in(identity_source, identity)
        document = WishlistRecord.build("user-001", jeans, T0).model_dump()
        remote.emit_snapshot("user-001", [document])
        assert wishlist_store.state.product_ids == ["2"]

    def test_writes_from_other_devices_arrive_through_feed(self, wishlist_store, identity_source, identity, remote, tote):
        _sign_in(identity_source, identity)
        remote.seed("user-001", tote, T0)
        remote.emit_snapshot("user-001")
        assert wishlist_store.is_in_wishlist("3")

    def test_snapshots_for_previous_session_are_ignored(self, wishlist_store, identity_source, identity, remote, jeans):
        _sign_in(identity_source, identity)
        handler = remote.subscriptions[0].handler
        asyncio.run(identity_source.sign_out())
        handler([WishlistRecord.build("user-001", jeans, T0)])
        assert wishlist_store.state.items == ()

    def test_failure_after_sign_out_does_not_touch_state(self, wishlist_store, identity_source, identity, remote, sweatshirt):
        _sign_in(identity_source, identity)
        remote.configure(should_succeed=False, operations={"put_wishlist_item"})

        async def scenario():
            remote.pause()
            task = asyncio.create_task(wishlist_store.add_to_wishlist(sweatshirt))
            await asyncio.sleep(0)
            await identity_source.sign_out()
            remote.resume()
            return await task

        outcome = asyncio.run(scenario())
        assert outcome.failed
        state = wishlist_store.state
        assert state.status == WishlistStatus.UNAUTHENTICATED.value
        assert state.items == ()
        assert state.last_error is None

    def test_closed_store_ignores_results(self, wishlist_store, identity_source, identity, remote, jeans):
        _sign_in(identity_source, identity)
        handler = remote.subscriptions[0].handler
        wishlist_store.close()
        handler([WishlistRecord.build("user-001", jeans, T0)])
        assert wishlist_store.state.items == ()
