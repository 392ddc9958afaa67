"""
HTTP tests for the /api/v1 routes.

Requests authenticate with real bearer tokens; domain errors must come back
as ``{"detail", "code", ...context}`` with the matching status code.
"""

from school_inventory.core.config import settings
from school_inventory.models.inventory import InventoryItem
from school_inventory.models.item_request import ItemRequest

from tests.conftest import TEST_PASSWORD

API = settings.API_V1_STR


def _request_row(session_factory, request_id):
    with session_factory() as session:
        return session.get(ItemRequest, request_id)


class TestAuth:

    def test_login_and_me(self, client, users):
        response = client.post(
            f"{API}/auth/login",
            data={"username": "HEAD@school.test", "password": TEST_PASSWORD},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["role"] == "department_head"

        me = client.get(
            f"{API}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["email"] == "head@school.test"
        assert me.json()["department_name"] == "Science"

    def test_wrong_password(self, client, users):
        response = client.post(
            f"{API}/auth/login", data={"username": "head@school.test", "password": "nope"}
        )
        assert response.status_code == 401

    def test_bad_token(self, client, users):
        response = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_update_own_profile(self, client, auth_headers, users):
        headers = auth_headers("staff")

        response = client.put(
            f"{API}/auth/me",
            json={"full_name": "Samira Staff", "email": "Samira@School.test", "phone_number": None},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["full_name"] == "Samira Staff"
        assert response.json()["email"] == "samira@school.test"
        assert response.json()["role"] == "staff"

        taken = client.put(f"{API}/auth/me", json={"email": "head@school.test"}, headers=headers)
        assert taken.status_code == 409
        assert taken.json()["code"] == "CONFLICT"

        nulls = client.put(f"{API}/auth/me", json={"full_name": None, "email": None}, headers=headers)
        assert nulls.status_code == 200
        assert nulls.json()["full_name"] == "Samira Staff"

    def test_change_own_password(self, client, auth_headers, users):
        headers = auth_headers("staff")

        missing = client.put(f"{API}/auth/me", json={"new_password": "fresh-pass"}, headers=headers)
        assert missing.status_code == 400

        wrong = client.put(
            f"{API}/auth/me",
            json={"current_password": "guess", "new_password": "fresh-pass"},
            headers=headers,
        )
        assert wrong.status_code == 401

        changed = client.put(
            f"{API}/auth/me",
            json={"current_password": TEST_PASSWORD, "new_password": "fresh-pass"},
            headers=headers,
        )
        assert changed.status_code == 200

        old = client.post(
            f"{API}/auth/login", data={"username": "staff@school.test", "password": TEST_PASSWORD}
        )
        assert old.status_code == 401
        new = client.post(
            f"{API}/auth/login", data={"username": "staff@school.test", "password": "fresh-pass"}
        )
        assert new.status_code == 200

    def test_signup_creates_staff(self, client, departments, users):
        response = client.post(
            f"{API}/auth/signup",
            json={
                "email": "Newbie@school.test", "full_name": "Nia New",
                "password": "pw12345", "department_id": departments["arts"].id,
            },
        )
        assert response.status_code == 201
        assert response.json()["role"] == "staff"
        assert response.json()["department_name"] == "Arts"

        login = client.post(
            f"{API}/auth/login", data={"username": "newbie@school.test", "password": "pw12345"}
        )
        assert login.status_code == 200
        assert login.json()["role"] == "staff"

    def test_signup_rules(self, client, departments, users, monkeypatch):
        payload = {
            "email": "staff@school.test", "full_name": "Dup",
            "password": "pw12345", "department_id": departments["science"].id,
        }
        assert client.post(f"{API}/auth/signup", json=payload).status_code == 409

        payload["email"] = "fresh@school.test"
        assert client.post(f"{API}/auth/signup", json={**payload, "department_id": 999}).status_code == 404
        assert client.post(f"{API}/auth/signup", json={**payload, "role": "admin"}).json()["role"] == "staff"

        monkeypatch.setattr(settings, "ALLOW_SIGNUP", False)
        payload["email"] = "later@school.test"
        assert client.post(f"{API}/auth/signup", json=payload).status_code == 403


class TestInventoryRoutes:

    def test_stock_manager_adds_and_restocks(self, client, auth_headers):
        headers = auth_headers("stock_manager")

        created = client.post(
            f"{API}/inventory/",
            json={"name": "Microscopes", "category": "Lab", "quantity": 3},
            headers=headers,
        )
        assert created.status_code == 201
        item = created.json()
        assert item["status"] == "low_stock"

        restocked = client.post(
            f"{API}/inventory/{item['id']}/add-stock", json={"quantity": 7}, headers=headers
        )
        assert restocked.json()["quantity"] == 10
        assert restocked.json()["status"] == "available"

        movements = client.get(f"{API}/inventory/{item['id']}/movements", headers=headers)
        assert [m["quantity_delta"] for m in movements.json()] == [7, 3]

    def test_staff_cannot_change_inventory(self, client, auth_headers):
        response = client.post(
            f"{API}/inventory/",
            json={"name": "Microscopes", "category": "Lab", "quantity": 3},
            headers=auth_headers("staff"),
        )
        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_duplicate_item(self, client, auth_headers, make_item):
        make_item("Beakers")
        response = client.post(
            f"{API}/inventory/",
            json={"name": "beakers", "category": "Lab"},
            headers=auth_headers("admin"),
        )
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_ITEM"

    def test_withdraw_too_much(self, client, auth_headers, make_item):
        item = make_item(quantity=2)
        response = client.post(
            f"{API}/inventory/{item.id}/withdraw",
            json={"quantity": 5},
            headers=auth_headers("stock_manager"),
        )
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "INSUFFICIENT_STOCK"
        assert body["available"] == 2

    def test_browse_and_delete(self, client, auth_headers, make_item, session_factory):
        item = make_item("Beakers")
        make_item("Flasks")

        listing = client.get(f"{API}/inventory/", headers=auth_headers("staff"))
        assert [i["name"] for i in listing.json()] == ["Beakers", "Flasks"]

        deleted = client.delete(f"{API}/inventory/{item.id}", headers=auth_headers("admin"))
        assert deleted.json()["is_active"] is False

        listing = client.get(f"{API}/inventory/", headers=auth_headers("staff"))
        assert [i["name"] for i in listing.json()] == ["Flasks"]

        missing = client.get(f"{API}/inventory/999", headers=auth_headers("staff"))
        assert missing.status_code == 404
        assert missing.json()["code"] == "ITEM_NOT_FOUND"

    def test_update_ignores_null_name(self, client, auth_headers, make_item):
        item = make_item("Beakers", category="Lab")

        response = client.put(
            f"{API}/inventory/{item.id}",
            json={"name": None, "category": None, "location": "Store B"},
            headers=auth_headers("stock_manager"),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Beakers"
        assert response.json()["category"] == "Lab"
        assert response.json()["location"] == "Store B"

    def test_restock_deactivated_item(self, client, auth_headers, make_item):
        item = make_item()
        headers = auth_headers("stock_manager")
        client.delete(f"{API}/inventory/{item.id}", headers=headers)

        response = client.post(f"{API}/inventory/{item.id}/add-stock", json={"quantity": 2}, headers=headers)
        assert response.status_code == 404
        assert response.json()["code"] == "ITEM_NOT_FOUND"


class TestRequestRoutes:

    def test_full_workflow(self, client, auth_headers, make_item, session_factory):
        item = make_item(quantity=10)

        submitted = client.post(
            f"{API}/item-requests/",
            json={"item_id": item.id, "requested_quantity": 4, "notes": "Lab 3"},
            headers=auth_headers("staff"),
        )
        assert submitted.status_code == 201
        request_id = submitted.json()["id"]
        assert submitted.json()["status"] == "pending"

        dept = client.post(f"{API}/item-requests/{request_id}/approve", headers=auth_headers("head"))
        assert dept.json()["status"] == "department_approved"

        final = client.post(
            f"{API}/item-requests/{request_id}/transition",
            json={"action": "approve"},
            headers=auth_headers("stock_manager"),
        )
        assert final.json()["status"] == "approved"

        fulfilled = client.post(
            f"{API}/item-requests/{request_id}/fulfill",
            json={"quantity": 4},
            headers=auth_headers("stock_manager"),
        )
        assert fulfilled.status_code == 200
        assert fulfilled.json()["status"] == "fulfilled"
        assert fulfilled.json()["remaining_quantity"] == 0

        again = client.post(
            f"{API}/item-requests/{request_id}/fulfill",
            json={"quantity": 4},
            headers=auth_headers("stock_manager"),
        )
        assert again.status_code == 409
        assert again.json()["code"] == "OVER_FULFILLMENT"

        with session_factory() as session:
            assert session.get(InventoryItem, item.id).quantity == 6

    def test_zero_quantity_request(self, client, auth_headers, make_item, session_factory):
        item = make_item()

        response = client.post(
            f"{API}/item-requests/",
            json={"item_id": item.id, "requested_quantity": 0},
            headers=auth_headers("staff"),
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_QUANTITY"
        with session_factory() as session:
            assert session.query(ItemRequest).count() == 0

    def test_reject_requires_reason(self, client, auth_headers, make_item):
        item = make_item()
        request_id = client.post(
            f"{API}/item-requests/",
            json={"item_id": item.id, "requested_quantity": 1},
            headers=auth_headers("staff"),
        ).json()["id"]

        response = client.post(
            f"{API}/item-requests/{request_id}/reject",
            json={"reason": " "},
            headers=auth_headers("head"),
        )
        assert response.status_code == 422
        assert response.json()["code"] == "REASON_REQUIRED"

    def test_cancel_by_someone_else(self, client, auth_headers, make_item, session_factory):
        item = make_item()
        request_id = client.post(
            f"{API}/item-requests/",
            json={"item_id": item.id, "requested_quantity": 1},
            headers=auth_headers("staff"),
        ).json()["id"]

        response = client.post(
            f"{API}/item-requests/{request_id}/cancel", headers=auth_headers("other_staff")
        )
        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"
        assert _request_row(session_factory, request_id).status.value == "pending"

        own = client.post(f"{API}/item-requests/{request_id}/cancel", headers=auth_headers("staff"))
        assert own.json()["status"] == "cancelled"

    def test_reject_after_approval_is_invalid(self, client, auth_headers, approved_request, session_factory):
        request = approved_request()

        response = client.post(
            f"{API}/item-requests/{request.id}/transition",
            json={"action": "reject", "reason": "Changed mind"},
            headers=auth_headers("admin"),
        )

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "INVALID_TRANSITION"
        assert body["from_status"] == "approved"
        assert body["request_id"] == request.id
        assert _request_row(session_factory, request.id).rejection_reason is None

    def test_batch_and_scoped_listing(self, client, auth_headers, make_item):
        beakers = make_item("Beakers")
        flasks = make_item("Flasks")

        batch = client.post(
            f"{API}/item-requests/batch",
            json={"lines": [
                {"item_id": beakers.id, "requested_quantity": 2},
                {"item_id": flasks.id, "requested_quantity": 1},
            ]},
            headers=auth_headers("staff"),
        )
        assert batch.status_code == 201
        assert len(batch.json()) == 2

        empty = client.post(f"{API}/item-requests/batch", json={"lines": []}, headers=auth_headers("staff"))
        assert empty.status_code == 422

        assert len(client.get(f"{API}/item-requests/", headers=auth_headers("head")).json()) == 2
        assert client.get(f"{API}/item-requests/", headers=auth_headers("arts_head")).json() == []
        assert client.get(
            f"{API}/item-requests/", params={"scope": "mine"}, headers=auth_headers("head")
        ).json() == []

    def test_hidden_request(self, client, auth_headers, make_item):
        item = make_item()
        request_id = client.post(
            f"{API}/item-requests/",
            json={"item_id": item.id, "requested_quantity": 1},
            headers=auth_headers("staff"),
        ).json()["id"]

        assert client.get(f"{API}/item-requests/{request_id}", headers=auth_headers("arts_staff")).status_code == 403
        assert client.get(f"{API}/item-requests/4040", headers=auth_headers("admin")).status_code == 404


class TestAdminRoutes:

    def test_users_require_admin(self, client, auth_headers):
        assert client.get(f"{API}/users/", headers=auth_headers("stock_manager")).status_code == 403
        assert len(client.get(f"{API}/users/", headers=auth_headers("admin")).json()) == 7

    def test_create_user_rules(self, client, auth_headers, departments):
        headers = auth_headers("admin")

        no_department = client.post(
            f"{API}/users/",
            json={"email": "new@school.test", "full_name": "New", "role": "staff", "password": "pw12345"},
            headers=headers,
        )
        assert no_department.status_code == 409

        duplicate = client.post(
            f"{API}/users/",
            json={
                "email": "STAFF@school.test", "full_name": "Dup", "role": "staff",
                "department_id": departments["science"].id, "password": "pw12345",
            },
            headers=headers,
        )
        assert duplicate.status_code == 409

        created = client.post(
            f"{API}/users/",
            json={
                "email": "new@school.test", "full_name": "New", "role": "staff",
                "department_id": departments["arts"].id, "password": "pw12345",
            },
            headers=headers,
        )
        assert created.status_code == 201
        assert created.json()["department_name"] == "Arts"

    def test_null_fields_do_not_clear_user(self, client, auth_headers, users):
        response = client.put(
            f"{API}/users/{users['staff'].id}",
            json={"role": None, "email": None, "full_name": None, "is_active": None, "phone_number": "0700"},
            headers=auth_headers("admin"),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "staff"
        assert body["email"] == "staff@school.test"
        assert body["full_name"] == "Sam Staff"
        assert body["is_active"] is True
        assert body["phone_number"] == "0700"

    def test_department_with_users_cannot_be_deleted(self, client, auth_headers, departments):
        headers = auth_headers("admin")

        response = client.delete(f"{API}/departments/{departments['science'].id}", headers=headers)
        assert response.status_code == 409

        created = client.post(f"{API}/departments/", json={"name": "Music"}, headers=headers)
        assert created.status_code == 201
        removed = client.delete(f"{API}/departments/{created.json()['id']}", headers=headers)
        assert removed.status_code == 200

    def test_reports(self, client, auth_headers, make_item):
        make_item("Beakers", quantity=2)

        inventory = client.get(f"{API}/reports/inventory", headers=auth_headers("stock_manager"))
        assert inventory.json()["by_status"]["low_stock"] == 1
        assert client.get(f"{API}/reports/inventory", headers=auth_headers("staff")).status_code == 403

        requests = client.get(f"{API}/reports/requests", headers=auth_headers("staff"))
        assert requests.json()["total"] == 0

    def test_movement_report(self, client, auth_headers, make_item):
        make_item("Beakers", quantity=4)

        response = client.get(f"{API}/reports/movements", headers=auth_headers("admin"))

        assert response.status_code == 200
        assert [m["item_name"] for m in response.json()] == ["Beakers"]

    def test_deactivated_user_is_locked_out(self, client, auth_headers, users):
        staff_headers = auth_headers("staff")

        response = client.delete(f"{API}/users/{users['staff'].id}", headers=auth_headers("admin"))
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        assert client.get(f"{API}/auth/me", headers=staff_headers).status_code == 400
        own = client.delete(f"{API}/users/{users['admin'].id}", headers=auth_headers("admin"))
        assert own.status_code == 409
