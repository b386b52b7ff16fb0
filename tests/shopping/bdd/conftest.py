"""Shared BDD fixtures and step definitions for the Shopping domain."""

import asyncio
from datetime import UTC, datetime

import pytest
from pytest_bdd import given, parsers, then

from shopping.session.identity import Identity

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _product_ids(raw):
    return [p.strip() for p in raw.split(",") if p.strip()]


@pytest.fixture()
def outcome():
    return None


# ---------------------------------------------------------------------------
# Given steps — Cart
# ---------------------------------------------------------------------------
@given("an empty cart")
def empty_cart(cart_store):
    assert cart_store.state.items == ()


@given(parsers.cfparse('the cart holds {qty:d} of product "{product_id}" in size "{size}" and color "{color}"'))
def cart_holds(cart_store, catalogue, qty, product_id, size, color):
    cart_store.add_item(catalogue.get(product_id), size, color, qty)


# ---------------------------------------------------------------------------
# Given steps — Wishlist
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the remote wishlist of "{user_id}" holds product "{product_id}"'))
def remote_holds(remote, catalogue, user_id, product_id):
    remote.seed(user_id, catalogue.get(product_id), T0)


@given(parsers.cfparse('the remote store rejects "{operation}"'))
def remote_rejects(remote, operation):
    remote.configure(should_succeed=False, failure_reason="Remote store unavailable", operations={operation})


@given(parsers.cfparse('"{user_id}" is signed in'))
def signed_in(wishlist_store, identity_source, user_id):
    asyncio.run(identity_source.sign_in(Identity(user_id=user_id)))
    assert wishlist_store.user_id == user_id


@given(parsers.cfparse('product "{product_id}" is in the wishlist'))
def product_in_wishlist(wishlist_store, catalogue, product_id):
    assert asyncio.run(wishlist_store.add_to_wishlist(catalogue.get(product_id))).ok


# ---------------------------------------------------------------------------
# Then steps — Wishlist
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the wishlist status is "{status}"'))
def wishlist_status_is(wishlist_store, status):
    assert wishlist_store.state.status == status


@then(parsers.cfparse('the wishlist holds products "{product_ids}"'))
def wishlist_holds(wishlist_store, product_ids):
    assert wishlist_store.state.product_ids == _product_ids(product_ids)


@then("the wishlist is empty")
def wishlist_is_empty(wishlist_store):
    assert wishlist_store.state.items == ()


@then("the wishlist sync fails")
def wishlist_sync_fails(outcome):
    assert outcome is not None and outcome.failed


@then("the wishlist change is skipped")
def wishlist_change_skipped(outcome):
    assert outcome.skipped
