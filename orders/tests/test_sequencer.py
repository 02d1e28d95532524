import threading
from decimal import Decimal
from unittest import mock

import pytest
from common.exceptions import IdGenerationExhausted
from django.db import IntegrityError, connection
from orders.models import Order
from orders.sequencer import ALPHABET, create_with_order_id, generate_order_id
from orders.tests.factories import ADDRESS, OrderFactory


def _builder(**overrides):
    def build(order_id):
        fields = dict(
            order_id=order_id,
            shipping_address=dict(ADDRESS),
            total_before_discount=Decimal("10.00"),
            total_after_discount=Decimal("10.00"),
        )
        fields.update(overrides)
        return Order.objects.create(**fields)

    return build


def _ids(*values):
    it = iter(values)
    return lambda: next(it)


def test_generated_ids_use_short_alphanumeric_alphabet(settings):
    settings.ORDER_ID_LENGTH = 6
    for _ in range(50):
        order_id = generate_order_id()
        assert len(order_id) == 6
        assert set(order_id) <= set(ALPHABET)
    assert len(generate_order_id(10)) == 10


@pytest.mark.django_db
def test_precheck_skips_existing_identifier():
    OrderFactory(order_id="AAAAAA", user=None)
    order = create_with_order_id(_builder(), id_factory=_ids("AAAAAA", "BBBBBB"))
    assert order.order_id == "BBBBBB"


@pytest.mark.django_db
def test_insert_collision_after_precheck_retries_with_fresh_id():
    # Simulates another placement inserting the same id between check and insert
    OrderFactory(order_id="AAAAAA", user=None)
    with mock.patch("orders.sequencer._order_id_taken", side_effect=[False, True, False]):
        order = create_with_order_id(_builder(), id_factory=_ids("AAAAAA", "BBBBBB"))
    assert order.order_id == "BBBBBB"
    assert Order.objects.filter(order_id="AAAAAA").count() == 1


@pytest.mark.django_db
def test_exhausted_attempts_raise_and_persist_nothing():
    OrderFactory(order_id="AAAAAA", user=None)
    with pytest.raises(IdGenerationExhausted):
        create_with_order_id(_builder(), attempts=3, id_factory=lambda: "AAAAAA")
    assert Order.objects.count() == 1


@pytest.mark.django_db
def test_unrelated_integrity_error_propagates():
    OrderFactory(order_id="AAAAAA", user=None, payment_reference="chk_1")
    with pytest.raises(IntegrityError):
        create_with_order_id(_builder(payment_reference="chk_1"), id_factory=_ids("CCCCCC", "DDDDDD"))


@pytest.mark.django_db(transaction=True)
def test_concurrent_placements_get_distinct_ids():
    if connection.vendor == "sqlite":
        pytest.skip("sqlite serializes writers; run against PostgreSQL")

    # Every thread draws the same first candidate, forcing real insert races
    results, errors = [], []
    barrier = threading.Barrier(4)

    def worker(n):
        candidates = iter(["RACE00", f"SOLO{n:02d}"] + [generate_order_id() for _ in range(3)])
        try:
            barrier.wait()
            results.append(create_with_order_id(_builder(), id_factory=lambda: next(candidates)).order_id)
        except Exception as exc:  # pragma: no cover
            errors.append(exc)
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    assert len(results) == len(set(results)) == 4
    assert results.count("RACE00") <= 1
