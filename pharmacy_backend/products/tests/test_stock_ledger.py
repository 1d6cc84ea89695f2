# products/tests/test_stock_ledger.py

import uuid
from unittest import mock

from django.core.exceptions import ValidationError
from django.db.models import F
from django.test import TestCase

from common.exceptions import (
    AlreadyReversed,
    ConsistencyError,
    InsufficientStock,
    InvalidLineItem,
    ItemNotFound,
)
from products.models import Item, StockMovement
from products.services import stock_ledger
from products.services.stock_ledger import (
    IN,
    OUT,
    StockLine,
    apply_movements,
    get_ledger_quantity,
    reconcile_item,
    record_opening_stock,
    reverse_movements,
)


def _item(sku, stock=0):
    item = Item.objects.create(sku=sku, name=f"Item {sku}")
    if stock:
        record_opening_stock(item=item, quantity=stock)
        item.refresh_from_db()
    return item


class StockLedgerTests(TestCase):
    """
    GUARANTEES:
    - on-hand changes only together with a movement
    - OUT checks every line before writing anything
    - reversal appends opposite movements, at most once
    - on-hand == sum of signed movements at all times
    - a stock version changed after locking aborts the apply
    """

    def setUp(self):
        self.ref = str(uuid.uuid4())
        self.item = _item("PCM-500", stock=100)

    def on_hand(self, item=None):
        item = item or self.item
        item.refresh_from_db()
        return item.quantity_on_hand

    def test_opening_stock_is_a_movement(self):
        self.assertEqual(self.on_hand(), 100)
        self.assertEqual(get_ledger_quantity(self.item), 100)
        self.assertEqual(self.item.stock_movements.count(), 1)

    def test_out_then_in(self):
        apply_movements(
            reference_type="sales_invoice",
            reference_id=self.ref,
            lines=[StockLine(item_id=self.item.pk, quantity=30)],
            movement_type=OUT,
        )
        self.assertEqual(self.on_hand(), 70)

        apply_movements(
            reference_type="purchase_invoice",
            reference_id=uuid.uuid4(),
            lines=[StockLine(item_id=self.item.pk, quantity=5, batch_number="B1")],
            movement_type=IN,
        )
        self.assertEqual(self.on_hand(), 75)
        self.assertTrue(reconcile_item(self.item).is_consistent)

    def test_repeated_item_lines_are_summed_for_the_check(self):
        with self.assertRaises(InsufficientStock) as ctx:
            apply_movements(
                reference_type="sales_invoice",
                reference_id=self.ref,
                lines=[
                    StockLine(item_id=self.item.pk, quantity=60),
                    StockLine(item_id=self.item.pk, quantity=41),
                ],
                movement_type=OUT,
            )

        self.assertEqual(ctx.exception.shortages[0]["requested"], 101)
        self.assertEqual(self.on_hand(), 100)

    def test_shortage_on_one_item_writes_nothing(self):
        other = _item("CTZ-10", stock=2)

        with self.assertRaises(InsufficientStock):
            apply_movements(
                reference_type="sales_invoice",
                reference_id=self.ref,
                lines=[
                    StockLine(item_id=self.item.pk, quantity=10),
                    StockLine(item_id=other.pk, quantity=3),
                ],
                movement_type=OUT,
            )

        self.assertEqual(self.on_hand(), 100)
        self.assertEqual(self.on_hand(other), 2)
        self.assertFalse(StockMovement.objects.filter(reference_id=self.ref).exists())

    def test_exact_stock_can_be_taken(self):
        apply_movements(
            reference_type="sales_invoice",
            reference_id=self.ref,
            lines=[StockLine(item_id=self.item.pk, quantity=100)],
            movement_type=OUT,
        )
        self.assertEqual(self.on_hand(), 0)

    def test_invalid_lines(self):
        with self.assertRaises(InvalidLineItem):
            apply_movements(reference_type="x", reference_id=self.ref, lines=[], movement_type=IN)

        with self.assertRaises(InvalidLineItem):
            apply_movements(
                reference_type="x",
                reference_id=self.ref,
                lines=[StockLine(item_id=self.item.pk, quantity=0)],
                movement_type=IN,
            )

        with self.assertRaises(ItemNotFound):
            apply_movements(
                reference_type="x",
                reference_id=self.ref,
                lines=[StockLine(item_id=uuid.uuid4(), quantity=1)],
                movement_type=IN,
            )

    def test_reverse_appends_opposites_once(self):
        apply_movements(
            reference_type="sales_invoice",
            reference_id=self.ref,
            lines=[StockLine(item_id=self.item.pk, quantity=30)],
            movement_type=OUT,
        )

        reversals = reverse_movements(reference_type="sales_invoice", reference_id=self.ref)

        self.assertEqual(len(reversals), 1)
        self.assertEqual(reversals[0].movement_type, IN)
        self.assertEqual(reversals[0].quantity, 30)
        self.assertEqual(self.on_hand(), 100)
        self.assertEqual(StockMovement.objects.filter(reference_id=self.ref).count(), 2)

        with self.assertRaises(AlreadyReversed):
            reverse_movements(reference_type="sales_invoice", reference_id=self.ref)

        self.assertTrue(reconcile_item(self.item).is_consistent)

    def test_reverse_without_movements_is_a_noop(self):
        self.assertEqual(reverse_movements(reference_type="sales_invoice", reference_id=self.ref), [])

    def test_strict_reverse_refuses_to_go_negative(self):
        apply_movements(
            reference_type="purchase_invoice",
            reference_id=self.ref,
            lines=[StockLine(item_id=self.item.pk, quantity=20)],
            movement_type=IN,
        )
        apply_movements(
            reference_type="sales_invoice",
            reference_id=uuid.uuid4(),
            lines=[StockLine(item_id=self.item.pk, quantity=110)],
            movement_type=OUT,
        )

        with self.assertRaises(InsufficientStock) as ctx:
            reverse_movements(reference_type="purchase_invoice", reference_id=self.ref, strict=True)

        self.assertEqual(ctx.exception.shortages[0]["available"], 10)
        self.assertEqual(self.on_hand(), 10)
        self.assertEqual(StockMovement.objects.filter(reference_id=self.ref).count(), 1)

    def test_stale_stock_version_aborts_without_writes(self):
        real_lock = stock_ledger._lock_items

        def lock_then_bump(item_ids):
            locked = real_lock(item_ids)
            Item.objects.filter(pk__in=list(item_ids)).update(stock_version=F("stock_version") + 1)
            return locked

        with mock.patch.object(stock_ledger, "_lock_items", side_effect=lock_then_bump):
            with self.assertRaises(ConsistencyError):
                apply_movements(
                    reference_type="sales_invoice",
                    reference_id=self.ref,
                    lines=[StockLine(item_id=self.item.pk, quantity=30)],
                    movement_type=OUT,
                )

        self.assertEqual(self.on_hand(), 100)
        self.assertFalse(StockMovement.objects.filter(reference_id=self.ref).exists())
        self.assertTrue(reconcile_item(self.item).is_consistent)


class StockInvariantTests(TestCase):
    """
    GUARANTEES:
    - stock columns cannot be edited outside the stock ledger
    - movements are immutable
    """

    def test_new_item_must_start_empty(self):
        with self.assertRaises(ValidationError):
            Item.objects.create(sku="X-1", name="X", quantity_on_hand=5)

    def test_on_hand_cannot_be_edited_directly(self):
        item = _item("X-2", stock=3)
        item.quantity_on_hand = 50

        with self.assertRaises(ValidationError):
            item.save()

    def test_regular_fields_still_editable(self):
        item = _item("X-3", stock=3)
        item.name = "Renamed"
        item.save()

        item.refresh_from_db()
        self.assertEqual(item.name, "Renamed")
        self.assertEqual(item.quantity_on_hand, 3)

    def test_movements_are_immutable(self):
        item = _item("X-4", stock=3)
        movement = item.stock_movements.get()

        movement.quantity = 99
        with self.assertRaises(ValidationError):
            movement.save()
        with self.assertRaises(ValidationError):
            movement.delete()

    def test_movement_needs_reference(self):
        item = _item("X-5")
        with self.assertRaises(ValidationError):
            StockMovement.objects.create(
                item=item,
                movement_type=IN,
                quantity=1,
                reference_type="",
                reference_id="",
            )
