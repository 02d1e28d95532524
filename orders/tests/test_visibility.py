import pytest
from common.exceptions import OrderNotFound, PermissionDenied
from orders.selectors import get_order, list_deleted_orders, list_orders, visible_orders
from orders.services import mark_delivered, mark_paid, restore_order, soft_delete
from orders.tests.factories import OrderFactory
from users.tests.factories import UserFactory


@pytest.fixture
def admin(db):
    return UserFactory(role="admin")


@pytest.fixture
def manager(db):
    return UserFactory(role="manager")


@pytest.mark.django_db
def test_shoppers_only_see_their_own_orders(manager):
    alice, bob = UserFactory(), UserFactory()
    mine = OrderFactory(user=alice)
    OrderFactory(user=bob)

    assert list(list_orders(caller=alice)) == [mine]
    assert list_orders(caller=manager).count() == 2
    with pytest.raises(OrderNotFound):
        get_order(order_id=mine.order_id, caller=bob)


@pytest.mark.django_db
def test_soft_deleted_order_disappears_from_every_read(admin, manager):
    order = OrderFactory()
    soft_delete(order_id=order.order_id, caller=admin)

    order.refresh_from_db()
    assert order.deleted and order.deleted_at is not None
    for caller in (admin, manager, order.user):
        assert not visible_orders(caller).filter(pk=order.pk).exists()
        with pytest.raises(OrderNotFound):
            get_order(order_id=order.order_id, caller=caller)


@pytest.mark.django_db
def test_only_admins_can_opt_into_deleted_orders(admin, manager):
    order = OrderFactory(deleted=True)

    assert get_order(order_id=order.order_id, caller=admin, include_deleted=True).pk == order.pk
    assert list(list_deleted_orders(caller=admin)) == [order]
    with pytest.raises(OrderNotFound):
        get_order(order_id=order.order_id, caller=manager, include_deleted=True)
    with pytest.raises(PermissionDenied):
        list_deleted_orders(caller=manager)


@pytest.mark.django_db
def test_restore_brings_order_back(admin):
    order = OrderFactory(deleted=True)
    restored = restore_order(order_id=order.order_id, caller=admin)
    assert not restored.deleted and restored.deleted_at is None
    assert get_order(order_id=order.order_id, caller=order.user).pk == order.pk


@pytest.mark.django_db
def test_soft_delete_and_restore_are_admin_only(manager):
    order = OrderFactory()
    with pytest.raises(PermissionDenied):
        soft_delete(order_id=order.order_id, caller=manager)
    with pytest.raises(PermissionDenied):
        restore_order(order_id=order.order_id, caller=manager)


@pytest.mark.django_db
def test_staff_transitions_are_idempotent(manager):
    order = OrderFactory()
    paid = mark_paid(order_id=order.order_id, caller=manager)
    first_paid_at = paid.paid_at
    assert paid.is_paid
    assert mark_paid(order_id=order.order_id, caller=manager).paid_at == first_paid_at

    delivered = mark_delivered(order_id=order.order_id, caller=manager)
    assert delivered.is_delivered and delivered.delivered_at is not None


@pytest.mark.django_db
def test_shoppers_cannot_change_status():
    order = OrderFactory()
    with pytest.raises(PermissionDenied):
        mark_paid(order_id=order.order_id, caller=order.user)
    with pytest.raises(PermissionDenied):
        mark_delivered(order_id=order.order_id, caller=None)


@pytest.mark.django_db
def test_transitions_do_not_reach_deleted_orders(manager):
    order = OrderFactory(deleted=True)
    with pytest.raises(OrderNotFound):
        mark_delivered(order_id=order.order_id, caller=manager)
