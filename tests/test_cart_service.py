"""Tests for CartService: add/update/remove, loading and sign-in migration."""

import pytest
import redis
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from conftest import make_product
from directsource.domain.cart import CartSession, Identity
from directsource.domain.errors import (
    CartReadFailed,
    CartWriteFailed,
    OutOfStock,
    ProductNotFound,
    StockExceeded,
)


def stored_remote(cart_service, user_id="u1"):
    return {row.product_id: row.quantity for row in cart_service.repo.get_cart_items(user_id)}


def stored_local(local_store, guest_id="guest-1"):
    return {line.product_id: line.quantity for line in local_store.read(guest_id)}


@pytest.fixture(params=["guest", "user"])
def any_session(request, guest_session, user_session):
    return guest_session if request.param == "guest" else user_session


class TestAddProduct:
    def test_guest_add_creates_line_in_local_store(self, cart_service, local_store, guest_session):
        product = make_product("p1", stock=10)

        line = cart_service.add_product(guest_session, product)

        assert line.quantity == 1
        assert stored_local(local_store) == {"p1": 1}
        assert guest_session.quantity_of("p1") == 1

    def test_user_add_then_repeat_sums_quantity(self, cart_service, user_session):
        product = make_product("p1", stock=10)

        cart_service.add_product(user_session, product, 2)
        cart_service.add_product(user_session, product, 3)

        assert stored_remote(cart_service) == {"p1": 5}
        assert user_session.quantity_of("p1") == 5

    def test_out_of_stock_rejected(self, cart_service, any_session):
        product = make_product("p1", stock=0)

        with pytest.raises(OutOfStock):
            cart_service.add_product(any_session, product)

        assert any_session.is_empty

    def test_stock_exceeded_keeps_stored_quantity(self, cart_service, any_session, local_store):
        product = make_product("y", stock=2)

        cart_service.add_product(any_session, product, 1)
        cart_service.add_product(any_session, product, 1)

        with pytest.raises(StockExceeded) as exc:
            cart_service.add_product(any_session, product, 1)

        assert exc.value.max_allowed == 2
        assert any_session.quantity_of("y") == 2
        if any_session.identity.is_authenticated:
            assert stored_remote(cart_service) == {"y": 2}
        else:
            assert stored_local(local_store) == {"y": 2}

    def test_large_delta_not_partially_applied(self, cart_service, user_session):
        product = make_product("p1", stock=4)
        cart_service.add_product(user_session, product, 3)

        with pytest.raises(StockExceeded):
            cart_service.add_product(user_session, product, 2)

        assert stored_remote(cart_service) == {"p1": 3}

    def test_quantity_never_exceeds_stock(self, cart_service, any_session):
        product = make_product("p1", stock=5)

        for delta in (2, 2, 2, 1, 1, 3):
            try:
                cart_service.add_product(any_session, product, delta)
            except StockExceeded:
                pass
            assert any_session.quantity_of("p1") <= product.stock

        assert any_session.quantity_of("p1") == 5

    def test_non_positive_quantity_rejected(self, cart_service, guest_session):
        with pytest.raises(ValueError):
            cart_service.add_product(guest_session, make_product("p1"), 0)

    def test_remote_write_failure_leaves_view_untouched(self, cart_service, user_session, monkeypatch):
        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("db down"))

        monkeypatch.setattr(cart_service.repo, "commit", broken_commit)

        with pytest.raises(CartWriteFailed):
            cart_service.add_product(user_session, make_product("p1"))

        assert user_session.is_empty

    def test_local_store_failure_reported(self, cart_service, guest_session, fake_redis):
        fake_redis.fail = True

        with pytest.raises(CartReadFailed):
            cart_service.add_product(guest_session, make_product("p1"))

        assert guest_session.is_empty


class TestUpdateQuantity:
    def test_overwrites_quantity(self, cart_service, catalog, any_session):
        product = catalog.add(make_product("p1", stock=10))
        cart_service.add_product(any_session, product, 1)

        line = cart_service.update_quantity(any_session, "p1", 7)

        assert line.quantity == 7
        assert any_session.quantity_of("p1") == 7

    def test_below_one_removes_line(self, cart_service, catalog, any_session):
        product = catalog.add(make_product("p1", stock=10))
        cart_service.add_product(any_session, product, 3)

        assert cart_service.update_quantity(any_session, "p1", 0) is None

        cart_service.load(any_session)
        assert any_session.get("p1") is None

    def test_above_stock_rejected(self, cart_service, catalog, user_session):
        product = catalog.add(make_product("p1", stock=4))
        cart_service.add_product(user_session, product, 2)

        with pytest.raises(StockExceeded) as exc:
            cart_service.update_quantity(user_session, "p1", 5)

        assert exc.value.max_allowed == 4
        assert stored_remote(cart_service) == {"p1": 2}

    def test_uses_current_catalog_stock(self, cart_service, catalog, guest_session):
        catalog.add(make_product("p1", stock=10))
        cart_service.add_product(guest_session, catalog.products["p1"], 2)
        catalog.add(make_product("p1", stock=3))

        with pytest.raises(StockExceeded):
            cart_service.update_quantity(guest_session, "p1", 4)

    def test_absent_line_is_noop(self, cart_service, catalog, user_session):
        catalog.add(make_product("p1"))

        assert cart_service.update_quantity(user_session, "p1", 2) is None
        assert stored_remote(cart_service) == {}

    def test_unknown_product(self, cart_service, guest_session):
        with pytest.raises(ProductNotFound):
            cart_service.update_quantity(guest_session, "missing", 2)


class TestRemoveProduct:
    def test_remove_existing(self, cart_service, any_session):
        cart_service.add_product(any_session, make_product("p1"))
        cart_service.add_product(any_session, make_product("p2"))

        cart_service.remove_product(any_session, "p1")

        assert [line.product_id for line in any_session.lines] == ["p2"]
        cart_service.load(any_session)
        assert [line.product_id for line in any_session.lines] == ["p2"]

    def test_remove_absent_is_noop(self, cart_service, catalog, any_session):
        catalog.add(make_product("p1"))
        cart_service.add_product(any_session, catalog.products["p1"], 2)
        before = any_session.to_out()

        cart_service.remove_product(any_session, "not-there")
        cart_service.remove_product(any_session, "not-there")

        assert any_session.to_out() == before
        cart_service.load(any_session)
        assert any_session.quantity_of("p1") == 2


class TestLoad:
    def test_corrupt_guest_entry_is_empty_and_cleared(self, cart_service, local_store, fake_redis, guest_session):
        fake_redis.data[local_store.key("guest-1")] = "{not json"

        assert cart_service.load(guest_session) == []
        assert local_store.key("guest-1") not in fake_redis.data

    def test_user_cart_hydrated_from_catalog(self, cart_service, catalog, user_session):
        catalog.add(make_product("p1", price="12.50", stock=10, name="Lamp"))
        cart_service.add_product(user_session, catalog.products["p1"], 2)

        fresh = CartSession(Identity.authenticated("u1"))
        lines = cart_service.load(fresh)

        assert len(lines) == 1
        assert lines[0].name == "Lamp"
        assert str(fresh.subtotal) == "25.00"

    def test_stale_products_dropped(self, cart_service, catalog, user_session):
        catalog.add(make_product("p1"))
        catalog.add(make_product("p2"))
        cart_service.add_product(user_session, catalog.products["p1"])
        cart_service.add_product(user_session, catalog.products["p2"])
        del catalog.products["p2"]

        lines = cart_service.load(user_session)

        assert [line.product_id for line in lines] == ["p1"]

    def test_catalog_unavailable(self, cart_service, catalog, user_session):
        catalog.add(make_product("p1"))
        cart_service.add_product(user_session, catalog.products["p1"])
        catalog.unavailable = True

        with pytest.raises(CartReadFailed):
            cart_service.load(user_session)


class TestMigrateOnSignIn:
    def test_disjoint_lines_keep_quantities(self, cart_service, catalog, local_store, guest_session):
        catalog.add(make_product("a", stock=10))
        catalog.add(make_product("b", stock=10))
        cart_service.add_product(guest_session, catalog.products["a"], 2)
        cart_service.add_product(guest_session, catalog.products["b"], 4)

        result = cart_service.migrate_on_sign_in(guest_session, "u1")

        assert sorted(result.migrated) == ["a", "b"]
        assert result.failed == []
        assert guest_session.identity.user_id == "u1"
        assert stored_remote(cart_service) == {"a": 2, "b": 4}
        assert {line.product_id: line.quantity for line in guest_session.lines} == {"a": 2, "b": 4}

    def test_overlapping_lines_sum(self, cart_service, catalog, guest_session, user_session):
        catalog.add(make_product("a", stock=5))
        cart_service.add_product(user_session, catalog.products["a"], 3)
        cart_service.add_product(guest_session, catalog.products["a"], 2)

        cart_service.migrate_on_sign_in(guest_session, "u1")

        assert stored_remote(cart_service) == {"a": 5}
        assert guest_session.quantity_of("a") == 5

    def test_guest_add_then_sign_in(self, cart_service, catalog, local_store, fake_redis, guest_session):
        catalog.add(make_product("x", stock=10))
        cart_service.add_product(guest_session, catalog.products["x"], 1)
        assert stored_local(local_store) == {"x": 1}

        cart_service.migrate_on_sign_in(guest_session, "u1")

        assert stored_remote(cart_service) == {"x": 1}
        assert local_store.key("guest-1") not in fake_redis.data
        assert local_store.read("guest-1") == []

    def test_partial_failure_is_reported_not_fatal(self, cart_service, catalog, guest_session, user_session):
        catalog.add(make_product("a", stock=10))
        catalog.add(make_product("b", stock=3))
        catalog.add(make_product("gone", stock=5))
        cart_service.add_product(user_session, catalog.products["b"], 2)
        cart_service.add_product(guest_session, catalog.products["a"], 1)
        cart_service.add_product(guest_session, catalog.products["b"], 2)
        cart_service.add_product(guest_session, catalog.products["gone"], 1)
        del catalog.products["gone"]

        result = cart_service.migrate_on_sign_in(guest_session, "u1")

        assert result.migrated == ["a"]
        assert {f.product_id for f in result.failed} == {"b", "gone"}
        assert stored_remote(cart_service) == {"a": 1, "b": 2}
        assert {line.product_id for line in guest_session.lines} == {"a", "b"}

    def test_empty_guest_cart_loads_user_cart(self, cart_service, catalog, guest_session, user_session):
        catalog.add(make_product("a"))
        cart_service.add_product(user_session, catalog.products["a"], 2)

        result = cart_service.migrate_on_sign_in(guest_session, "u1")

        assert result.migrated == []
        assert guest_session.quantity_of("a") == 2

    def test_failed_guest_clear_is_safe_to_retry(self, cart_service, catalog, local_store, guest_session, monkeypatch):
        catalog.add(make_product("a", stock=10))
        cart_service.add_product(guest_session, catalog.products["a"], 2)

        real_clear = local_store.clear
        calls = []

        def flaky_clear(guest_id):
            calls.append(guest_id)
            if len(calls) == 1:
                raise redis.ConnectionError("redis down")
            return real_clear(guest_id)

        monkeypatch.setattr(local_store, "clear", flaky_clear)

        with pytest.raises(CartWriteFailed):
            cart_service.migrate_on_sign_in(guest_session, "u1")

        assert stored_remote(cart_service) == {}
        assert not guest_session.identity.is_authenticated
        assert stored_local(local_store) == {"a": 2}

        cart_service.migrate_on_sign_in(guest_session, "u1")
        cart_service.migrate_on_sign_in(guest_session, "u1")

        assert stored_remote(cart_service) == {"a": 2}
        assert guest_session.quantity_of("a") == 2
        assert stored_local(local_store) == {}


class TestIdentity:
    def test_identity_is_immutable(self):
        identity = Identity.anonymous("g1")

        with pytest.raises(ValidationError):
            identity.user_id = "u1"

        assert not identity.is_authenticated
        assert Identity.authenticated("u1", "g1") == Identity(user_id="u1", guest_id="g1")
