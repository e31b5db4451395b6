import pytest

from medistore.domain.errors import ErrorKind, ServiceError
from medistore.services.inventory_service import InventoryService
from medistore.services.cart_snapshot import CartSnapshotReader

from conftest import stock_of


@pytest.fixture
def seller(make_user):
    return make_user("SELLER")


def test_reserve_decrements(db, seller, make_medicine):
    medicine = make_medicine(seller, stock=5)
    InventoryService(db).reserve(medicine.id, 3)
    db.commit()
    assert stock_of(db, medicine.id) == 2


def test_reserve_the_last_unit_then_refuse(db, seller, make_medicine):
    medicine = make_medicine(seller, stock=1)
    inventory = InventoryService(db)

    inventory.reserve(medicine.id, 1)
    with pytest.raises(ServiceError) as e:
        inventory.reserve(medicine.id, 1)
    db.commit()

    assert e.value.kind == ErrorKind.INSUFFICIENT_STOCK
    assert stock_of(db, medicine.id) == 0


def test_reserve_more_than_stock_leaves_it_untouched(db, seller, make_medicine):
    medicine = make_medicine(seller, stock=2)
    with pytest.raises(ServiceError) as e:
        InventoryService(db).reserve(medicine.id, 3)
    db.rollback()

    assert e.value.kind == ErrorKind.INSUFFICIENT_STOCK
    assert stock_of(db, medicine.id) == 2


def test_reserve_missing_medicine(db):
    with pytest.raises(ServiceError) as e:
        InventoryService(db).reserve(12345, 1)
    assert e.value.kind == ErrorKind.NOT_FOUND


@pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "2"])
def test_quantity_must_be_positive_int(db, seller, make_medicine, quantity):
    medicine = make_medicine(seller, stock=5)
    with pytest.raises(ServiceError) as e:
        InventoryService(db).reserve(medicine.id, quantity)
    assert e.value.kind == ErrorKind.VALIDATION


def test_restore_increments(db, seller, make_medicine):
    medicine = make_medicine(seller, stock=0)
    InventoryService(db).restore(medicine.id, 4)
    db.commit()
    assert stock_of(db, medicine.id) == 4


def test_set_level(db, seller, make_medicine):
    medicine = make_medicine(seller, stock=7)
    inventory = InventoryService(db)

    inventory.set_level(medicine.id, 0)
    db.commit()
    assert inventory.available(medicine.id) == 0

    with pytest.raises(ServiceError) as e:
        inventory.set_level(medicine.id, -1)
    assert e.value.kind == ErrorKind.VALIDATION


def test_cached_medicine_sees_new_stock(db, seller, make_medicine):
    medicine = make_medicine(seller, stock=5)
    InventoryService(db).reserve(medicine.id, 2)
    assert medicine.stock == 3


def test_stale_read_cannot_oversell(session_factory, make_user, make_medicine, add_to_cart):
    """Two checkouts both saw stock 1; the conditional update lets only one through."""
    seller = make_user("SELLER")
    medicine = make_medicine(seller, stock=1)
    first, second = make_user(), make_user()
    add_to_cart(first, medicine, 1)
    add_to_cart(second, medicine, 1)

    slow = session_factory()
    fast = session_factory()
    try:
        snapshot = CartSnapshotReader(slow).load(second.id)
        assert snapshot.lines[0].stock == 1

        InventoryService(fast).reserve(medicine.id, 1)
        fast.commit()

        with pytest.raises(ServiceError) as e:
            InventoryService(slow).reserve(medicine.id, 1)
        slow.rollback()
        assert e.value.kind == ErrorKind.INSUFFICIENT_STOCK
    finally:
        slow.close()
        fast.close()

    check = session_factory()
    try:
        assert stock_of(check, medicine.id) == 0
    finally:
        check.close()
