import json

from tienda_gamer.schemas.cart_schema import ItemType
from tienda_gamer.services.cart_service import CartStore, cart_key

from conftest import BrokenCartStorage, make_entry


async def test_adding_same_id_twice_merges_into_one_line(cart):
    await cart.add_item(make_entry("p1", 10000))
    state = await cart.add_item(make_entry("p1", 10000))

    assert len(state.items) == 1
    assert state.items[0].quantity == 2


async def test_items_keep_insertion_order(cart):
    await cart.add_item(make_entry("b", 100))
    await cart.add_item(make_entry("a", 100, ItemType.COURSE))
    await cart.add_item(make_entry("b", 100))

    assert [item.id for item in cart.items] == ["b", "a"]


async def test_total_and_update_to_zero(filled_cart):
    assert filled_cart.total == 25000
    assert filled_cart.state.total == 25000

    state = await filled_cart.update_quantity("p1", 0)

    assert [(i.id, i.price, i.quantity) for i in state.items] == [("p2", 5000, 1)]
    assert state.total == 5000


async def test_negative_quantity_removes_item(filled_cart):
    state = await filled_cart.update_quantity("p2", -3)
    assert "p2" not in [item.id for item in state.items]


async def test_update_quantity_sets_value_without_stock_check(filled_cart):
    state = await filled_cart.update_quantity("p2", 40)
    assert state.total == 10000 * 2 + 5000 * 40


async def test_unknown_ids_are_noops(filled_cart):
    before = filled_cart.state
    await filled_cart.update_quantity("nope", 3)
    await filled_cart.remove_item("nope")
    assert filled_cart.state == before


async def test_total_matches_items_after_mixed_operations(cart):
    await cart.add_item(make_entry("p1", 1500))
    await cart.add_item(make_entry("c1", 90000, ItemType.COURSE))
    await cart.add_item(make_entry("s1", 30000, ItemType.SERVICE))
    await cart.update_quantity("p1", 4)
    await cart.add_item(make_entry("c1", 90000, ItemType.COURSE))
    await cart.remove_item("s1")

    expected = sum(item.price * item.quantity for item in cart.items)
    assert cart.total == expected == 1500 * 4 + 90000 * 2


async def test_clear_cart_is_idempotent(filled_cart, storage):
    await filled_cart.clear_cart()
    state = await filled_cart.clear_cart()

    assert state.items == []
    assert state.total == 0
    assert cart_key("sesion-1") not in storage.data


async def test_items_returned_are_copies(filled_cart):
    items = filled_cart.items
    items[0].quantity = 99
    assert filled_cart.items[0].quantity == 2


async def test_cart_is_persisted_and_rehydrated(filled_cart, storage):
    restored = await CartStore.load("sesion-1", storage)

    assert [(i.id, i.quantity) for i in restored.items] == [("p1", 2), ("p2", 1)]
    assert restored.total == 25000


async def test_other_sessions_do_not_share_the_cart(filled_cart, storage):
    other = await CartStore.load("sesion-2", storage)
    assert other.is_empty()


async def test_storage_failure_does_not_block_mutations():
    cart = CartStore("sesion-x", BrokenCartStorage())

    await cart.add_item(make_entry("p1", 2000))
    await cart.add_item(make_entry("p1", 2000))

    assert cart.total == 4000


async def test_load_with_broken_storage_returns_empty_cart():
    cart = await CartStore.load("sesion-x", BrokenCartStorage())
    assert cart.is_empty()
    await cart.add_item(make_entry("p1", 2000))
    assert cart.total == 2000


async def test_load_with_corrupt_payload_returns_empty_cart(storage):
    storage.data[cart_key("sesion-1")] = "{no es json"
    assert (await CartStore.load("sesion-1", storage)).is_empty()

    storage.data[cart_key("sesion-1")] = json.dumps([{"id": "p1", "quantity": 0}])
    assert (await CartStore.load("sesion-1", storage)).is_empty()


class FailingAdapterStorage:
    """Adaptador ajeno a Redis que falla con su propio tipo de error."""

    async def get(self, key):
        raise RuntimeError("adaptador roto")

    async def set(self, key, value):
        raise RuntimeError("adaptador roto")

    async def delete(self, key):
        raise RuntimeError("adaptador roto")


async def test_any_storage_adapter_error_is_contained():
    cart = await CartStore.load("sesion-y", FailingAdapterStorage())

    state = await cart.add_item(make_entry("p1", 3000))
    await cart.update_quantity("p1", 2)
    await cart.clear_cart()

    assert state.total == 3000
    assert cart.is_empty()
