from models.manufacturing import ManufacturingRecord, ManufacturingUpdate, ManufacturingUpdateLineItem
from models.order import OrderLineItem
from services.snapshots import RefreshResult, create_snapshot, refresh_snapshot


def _new_update(db, world):
    rec = ManufacturingRecord(order_id=world.order.id, manufacturer_id=world.maker_a.id)
    db.add(rec)
    db.flush()
    update = ManufacturingUpdate(manufacturing_id=rec.id, order_id=world.order.id,
                                 status=rec.status, updated_by=world.admin.id)
    db.add(update)
    db.flush()
    return update


def _rows(db, update_id):
    return (
        db.query(ManufacturingUpdateLineItem)
        .filter(ManufacturingUpdateLineItem.manufacturing_update_id == update_id)
        .order_by(ManufacturingUpdateLineItem.line_item_id)
        .all()
    )


def test_create_snapshot_copies_every_live_line_item(db_session, world):
    update = _new_update(db_session, world)

    rows = create_snapshot(db_session, update.id, world.order.id)

    assert len(rows) == 3
    assert {r.line_item_id for r in rows} == {world.tee.id, world.polo.id, world.blank.id}


def test_create_snapshot_is_idempotent(db_session, world):
    update = _new_update(db_session, world)

    first = create_snapshot(db_session, update.id, world.order.id)
    second = create_snapshot(db_session, update.id, world.order.id)

    assert len(second) == len(first)
    assert len(_rows(db_session, update.id)) == len(first)


def test_snapshot_field_fallbacks(db_session, world):
    update = _new_update(db_session, world)
    create_snapshot(db_session, update.id, world.order.id)
    rows = {r.line_item_id: r for r in _rows(db_session, update.id)}

    tee = rows[world.tee.id]
    assert tee.product_name == "Heavyweight Tee"
    assert tee.variant_code == "TEE-100-BLK"
    assert tee.variant_color == "Black"
    assert tee.image_url == "https://cdn.example.com/tee-black.png"
    assert (tee.s, tee.m, tee.l, tee.xl) == (10, 20, 5, 0)

    polo = rows[world.polo.id]
    assert polo.product_name == "Coach Polo"
    assert polo.image_url == "https://cdn.example.com/polo.png"

    blank = rows[world.blank.id]
    assert blank.product_name == "Unknown Product"
    assert blank.variant_code == ""
    assert blank.variant_color == ""
    assert blank.image_url is None
    assert blank.yxs == 0


def test_snapshot_workflow_fields_start_empty(db_session, world):
    update = _new_update(db_session, world)

    for row in create_snapshot(db_session, update.id, world.order.id):
        assert row.sizes_confirmed is False
        assert row.manufacturer_completed is False
        assert row.mockup_image_url is None
        assert row.actual_cost is None
        assert row.descriptors == []


def test_refresh_keeps_workflow_fields_and_updates_snapshot_fields(db_session, world):
    update = _new_update(db_session, world)
    create_snapshot(db_session, update.id, world.order.id)
    row = next(r for r in _rows(db_session, update.id) if r.line_item_id == world.polo.id)
    row.manufacturer_completed = True
    row.notes = "Thread colour matched"
    world.polo.item_name = "Coach Polo v2"
    world.polo.m = 4
    db_session.flush()

    result = refresh_snapshot(db_session, update.id, world.order.id)

    assert result == RefreshResult(updated_count=3, created_count=0)
    db_session.refresh(row)
    assert row.manufacturer_completed is True
    assert row.notes == "Thread colour matched"
    assert row.product_name == "Coach Polo v2"
    assert row.m == 4


def test_refresh_with_reset_clears_workflow_fields(db_session, world):
    update = _new_update(db_session, world)
    create_snapshot(db_session, update.id, world.order.id)
    row = _rows(db_session, update.id)[0]
    row.sizes_confirmed = True
    row.sizes_confirmed_by = world.admin.id
    row.actual_cost = 99.0
    db_session.flush()

    refresh_snapshot(db_session, update.id, world.order.id, reset_workflow=True)

    db_session.refresh(row)
    assert row.sizes_confirmed is False
    assert row.sizes_confirmed_by is None
    assert row.actual_cost is None


def test_refresh_creates_missing_rows_and_keeps_orphans(db_session, world):
    update = _new_update(db_session, world)
    create_snapshot(db_session, update.id, world.order.id)

    blank_id = world.blank.id
    added = OrderLineItem(order_id=world.order.id, item_name="Beanie", unit_price=4, xs=3)
    db_session.add(added)
    db_session.delete(world.blank)
    db_session.flush()

    result = refresh_snapshot(db_session, update.id, world.order.id)

    assert result.created_count == 1
    assert result.updated_count == 2
    line_item_ids = {r.line_item_id for r in _rows(db_session, update.id)}
    # the deleted line item's history stays
    assert line_item_ids == {world.tee.id, world.polo.id, blank_id, added.id}
