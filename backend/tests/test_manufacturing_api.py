from models.log import Log
from models.manufacturing import ManufacturingUpdateLineItem


def _rows(db, update_id):
    return {
        r.line_item_id: r
        for r in db.query(ManufacturingUpdateLineItem)
        .filter(ManufacturingUpdateLineItem.manufacturing_update_id == update_id)
    }


def test_create_manufacturing_record_snapshots_order(client, world, auth):
    response = client.post("/manufacturing", json={"orderId": 42, "manufacturerId": world.maker_a.id,
                                                   "notes": "Kick-off"}, headers=auth(world.admin))

    assert response.status_code == 201
    body = response.json()
    assert body["manufacturing"]["status"] == "awaiting_admin_confirmation"
    assert body["manufacturing"]["order"]["orderCode"] == "ORD-42"
    assert body["update"]["notes"] == "Kick-off"
    assert len(body["update"]["lineItems"]) == 3


def test_create_manufacturing_record_rules(client, world, record, auth):
    duplicate = client.post("/manufacturing", json={"orderId": 42}, headers=auth(world.admin))
    missing = client.post("/manufacturing", json={"orderId": 4242}, headers=auth(world.ops))
    denied = client.post("/manufacturing", json={"orderId": 42}, headers=auth(world.maker_a_user))

    assert duplicate.status_code == 409
    assert missing.status_code == 404
    assert denied.status_code == 403


def test_record_scope_and_redaction(client, world, record, auth):
    own = client.get("/manufacturing", headers=auth(world.maker_a_user))
    other = client.get("/manufacturing", headers=auth(world.maker_b_user))
    detail = client.get(f"/manufacturing/{record.record.id}", headers=auth(world.maker_b_user))

    assert len(own.json()) == 1
    assert "total" not in own.json()[0]["order"]
    assert other.json() == []
    assert detail.status_code == 403


def test_archive_hides_record(client, world, record, auth, db_session):
    archived = client.post(f"/manufacturing/{record.record.id}/archive", headers=auth(world.admin))
    listed = client.get("/manufacturing", headers=auth(world.admin))
    with_archived = client.get("/manufacturing?includeArchived=true", headers=auth(world.admin))
    restored = client.post(f"/manufacturing/{record.record.id}/unarchive", headers=auth(world.admin))

    assert archived.json()["archived"] is True
    assert archived.json()["archivedBy"] == world.admin.id
    assert listed.json() == []
    assert len(with_archived.json()) == 1
    assert restored.json()["archived"] is False
    actions = [log.action for log in db_session.query(Log).order_by(Log.id)]
    assert actions == ["MANUFACTURING_ARCHIVE", "MANUFACTURING_UNARCHIVE"]


def test_update_status_must_be_public(client, world, record, auth):
    response = client.post("/manufacturing-updates",
                           json={"manufacturingId": record.record.id, "status": "bulk_qc"},
                           headers=auth(world.admin))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_update_cannot_contradict_job_status(client, world, record, job, auth, db_session):
    contradicting = client.post("/manufacturing-updates",
                                json={"manufacturingId": record.record.id, "status": "shipped"},
                                headers=auth(world.admin))
    agreeing = client.post("/manufacturing-updates",
                           json={"manufacturingId": record.record.id, "status": "awaiting_admin_confirmation",
                                 "notes": "Waiting on art", "progressPercentage": 5},
                           headers=auth(world.ops))

    assert contradicting.status_code == 409
    assert agreeing.status_code == 201
    assert agreeing.json()["progressPercentage"] == 5
    assert len(agreeing.json()["lineItems"]) == 3


def test_update_without_job_sets_record_status(client, world, record, auth, db_session):
    response = client.post("/manufacturing-updates",
                           json={"manufacturingId": record.record.id, "status": "confirmed_awaiting_manufacturing",
                                 "trackingNumber": "1Z999"},
                           headers=auth(world.admin))

    assert response.status_code == 201
    db_session.refresh(record.record)
    assert record.record.status == "confirmed_awaiting_manufacturing"
    assert record.record.tracking_number == "1Z999"


def test_list_updates_shows_only_assigned_rows_to_manufacturer(client, world, record, auth):
    maker = client.get(f"/manufacturing-updates?manufacturingId={record.record.id}",
                       headers=auth(world.maker_a_user))
    admin = client.get(f"/manufacturing-updates?manufacturingId={record.record.id}", headers=auth(world.admin))

    assert len(maker.json()[0]["lineItems"]) == 2
    assert len(admin.json()[0]["lineItems"]) == 3


def test_refresh_line_items(client, world, record, auth, db_session):
    row = _rows(db_session, record.update.id)[world.tee.id]
    row.manufacturer_completed = True
    world.tee.item_name = "Heavyweight Tee (Reprint)"
    db_session.commit()

    denied = client.post(f"/manufacturing-updates/{record.update.id}/refresh-line-items",
                         headers=auth(world.maker_a_user))
    kept = client.post(f"/manufacturing-updates/{record.update.id}/refresh-line-items", headers=auth(world.admin))

    assert denied.status_code == 403
    assert kept.json() == {"updatedCount": 3, "createdCount": 0}
    db_session.refresh(row)
    assert row.manufacturer_completed is True
    assert row.product_name == "Heavyweight Tee (Reprint)"

    reset = client.post(f"/manufacturing-updates/{record.update.id}/refresh-line-items?resetWorkflow=true",
                        headers=auth(world.admin))
    assert reset.status_code == 200
    db_session.refresh(row)
    assert row.manufacturer_completed is False


def test_line_items_are_scoped_and_redacted(client, world, record, auth, db_session):
    row = _rows(db_session, record.update.id)[world.tee.id]
    row.actual_cost = 5.5
    db_session.commit()

    maker = client.get(f"/manufacturing-update-line-items?manufacturingUpdateId={record.update.id}",
                       headers=auth(world.maker_a_user))
    admin = client.get(f"/manufacturing-update-line-items?manufacturingUpdateId={record.update.id}",
                       headers=auth(world.admin))

    assert {r["lineItemId"] for r in maker.json()} == {world.tee.id, world.polo.id}
    assert all("actualCost" not in r for r in maker.json())
    assert any(r["actualCost"] == 5.5 for r in admin.json())


def test_manufacturer_completes_assigned_line_item(client, world, record, auth):
    rows_url = f"/manufacturing-update-line-items?manufacturingUpdateId={record.update.id}"
    row_id = next(r["id"] for r in client.get(rows_url, headers=auth(world.admin)).json()
                  if r["lineItemId"] == world.tee.id)
    blank_id = next(r["id"] for r in client.get(rows_url, headers=auth(world.admin)).json()
                    if r["lineItemId"] == world.blank.id)
    headers = auth(world.maker_a_user)

    done = client.put(f"/manufacturing-update-line-items/{row_id}", json={"manufacturerCompleted": True},
                      headers=headers)
    not_mine = client.put(f"/manufacturing-update-line-items/{blank_id}", json={"manufacturerCompleted": True},
                          headers=headers)
    staff_field = client.put(f"/manufacturing-update-line-items/{row_id}", json={"actualCost": 1},
                             headers=headers)

    assert done.status_code == 200
    assert done.json()["manufacturerCompleted"] is True
    assert done.json()["manufacturerCompletedBy"] == world.maker_a_user.id
    assert done.json()["manufacturerCompletedAt"] is not None
    assert not_mine.status_code == 403
    assert staff_field.status_code == 403

    undone = client.put(f"/manufacturing-update-line-items/{row_id}", json={"manufacturerCompleted": False},
                        headers=headers)
    assert undone.json()["manufacturerCompletedBy"] is None
    assert undone.json()["manufacturerCompletedAt"] is None


def test_staff_confirms_sizes_and_uploads_mockup(client, world, record, auth, db_session):
    row = _rows(db_session, record.update.id)[world.polo.id]

    response = client.put(f"/manufacturing-update-line-items/{row.id}",
                          json={"sizesConfirmed": True, "mockupImageUrl": "https://cdn.example.com/m.png",
                                "actualCost": 9.75},
                          headers=auth(world.ops))

    assert response.status_code == 200
    body = response.json()
    assert body["sizesConfirmedBy"] == world.ops.id
    assert body["mockupUploadedBy"] == world.ops.id
    assert body["actualCost"] == 9.75


def test_manufacturer_workspace(client, world, record, auth):
    items = client.get("/manufacturer/line-items", headers=auth(world.maker_a_user))
    stats = client.get("/manufacturer/stats", headers=auth(world.maker_a_user))
    admin = client.get("/manufacturer/stats", headers=auth(world.admin))

    assert items.status_code == 200
    body = items.json()
    assert body["manufacturer"]["name"] == "Alpha Apparel"
    assert {i["lineItemId"] for i in body["lineItems"]} == {world.tee.id, world.polo.id}
    assert body["lineItems"][0]["orderCode"] == "ORD-42"
    assert "actualCost" not in body["lineItems"][0]
    assert stats.json() == {"totalItems": 2, "completedItems": 0, "pendingItems": 2}
    assert admin.status_code == 403


def test_logs_are_staff_only(client, world, auth):
    client.post("/manufacturing", json={"orderId": 42}, headers=auth(world.admin))

    staff = client.get("/logs", headers=auth(world.ops))
    maker = client.get("/logs", headers=auth(world.maker_a_user))

    assert staff.status_code == 200
    assert staff.json()["items"][0]["action"] == "MANUFACTURING_CREATE"
    assert staff.json()["total"] == 1
    assert maker.status_code == 403
