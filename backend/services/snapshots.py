# backend/services/snapshots.py
import logging
from datetime import datetime, timezone
from typing import List, NamedTuple

from sqlalchemy.orm import Session, joinedload

from models.manufacturing import ManufacturingUpdateLineItem
from models.order import SIZE_FIELDS, OrderLineItem
from models.product import ProductVariant

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown Product"


class RefreshResult(NamedTuple):
    updated_count: int
    created_count: int


def _live_line_items(db: Session, order_id: int) -> List[OrderLineItem]:
    return (
        db.query(OrderLineItem)
        .options(joinedload(OrderLineItem.variant).joinedload(ProductVariant.product))
        .filter(OrderLineItem.order_id == order_id)
        .order_by(OrderLineItem.id)
        .all()
    )


def _snapshot_fields(item: OrderLineItem) -> dict:
    """Descriptive copy of a live line item: names, image and the size grid."""
    variant = item.variant
    product = variant.product if variant is not None else None

    product_name = item.item_name or (product.name if product is not None else None) or UNKNOWN_PRODUCT
    fields = {
        "product_name": product_name,
        "variant_code": (variant.variant_code if variant is not None else None) or "",
        "variant_color": (variant.color if variant is not None else None) or "",
        "image_url": item.image_url or (variant.image_url if variant is not None else None) or None,
    }
    for size in SIZE_FIELDS:
        fields[size] = getattr(item, size) or 0
    return fields


def _reset_workflow_fields(row: ManufacturingUpdateLineItem):
    row.mockup_image_url = None
    row.mockup_uploaded_at = None
    row.mockup_uploaded_by = None
    row.actual_cost = None
    row.sizes_confirmed = False
    row.sizes_confirmed_at = None
    row.sizes_confirmed_by = None
    row.manufacturer_completed = False
    row.manufacturer_completed_at = None
    row.manufacturer_completed_by = None
    row.notes = None
    row.descriptors = []


def _new_row(update_id: int, item: OrderLineItem) -> ManufacturingUpdateLineItem:
    row = ManufacturingUpdateLineItem(
        manufacturing_update_id=update_id,
        line_item_id=item.id,
        **_snapshot_fields(item),
    )
    _reset_workflow_fields(row)
    return row


def _existing_rows(db: Session, update_id: int) -> List[ManufacturingUpdateLineItem]:
    return (
        db.query(ManufacturingUpdateLineItem)
        .filter(ManufacturingUpdateLineItem.manufacturing_update_id == update_id)
        .order_by(ManufacturingUpdateLineItem.id)
        .all()
    )


def create_snapshot(db: Session, update_id: int, order_id: int) -> List[ManufacturingUpdateLineItem]:
    """Copy every live line item of the order onto the update.

    Calling it again for an update that already has rows returns those rows
    and inserts nothing. Flushes but does not commit.
    """
    existing = _existing_rows(db, update_id)
    if existing:
        logger.info("Snapshot for update %s already exists (%d rows)", update_id, len(existing))
        return existing

    rows = [_new_row(update_id, item) for item in _live_line_items(db, order_id)]
    db.add_all(rows)
    db.flush()
    logger.info("Snapshot for update %s created from order %s (%d rows)", update_id, order_id, len(rows))
    return rows


def refresh_snapshot(db: Session, update_id: int, order_id: int, reset_workflow: bool = False) -> RefreshResult:
    """Re-copy descriptive fields from the live order onto an existing snapshot.

    Workflow fields survive unless `reset_workflow` is set. Rows whose live
    line item no longer exists are left as they are.
    """
    by_line_item = {row.line_item_id: row for row in _existing_rows(db, update_id)}
    updated = created = 0
    now = datetime.now(timezone.utc)

    for item in _live_line_items(db, order_id):
        row = by_line_item.get(item.id)
        if row is None:
            db.add(_new_row(update_id, item))
            created += 1
            continue

        for field, value in _snapshot_fields(item).items():
            setattr(row, field, value)
        if reset_workflow:
            _reset_workflow_fields(row)
        row.updated_at = now
        updated += 1

    db.flush()
    logger.info(
        "Snapshot for update %s refreshed: %d updated, %d created (reset_workflow=%s)",
        update_id, updated, created, reset_workflow,
    )
    return RefreshResult(updated_count=updated, created_count=created)
