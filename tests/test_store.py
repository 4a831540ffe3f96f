from tests.base import ApiTestCase

from repairhub.models.cart import Cart, CartStatus
from repairhub.models.notification import Notification
from repairhub.models.role import UserRole
from repairhub.models.store_item import StoreItem, StoreItemStatus

ITEM = {
    "name":          "Air filter",
    "description":   "Heavy duty air filter for Volvo FH",
    "price":         45.0,
    "originalPrice": 50.0,
    "stock":         5,
    "category":      "Filters",
    "partNumber":    "VF-21337",
}


class TestStore(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.employee = self.make_user(UserRole.EMPLOYEE)
        self.buyer = self.make_user()

    def add_item(self, **overrides) -> dict:
        res = self.client.post("/api/v1/store", json={**ITEM, **overrides}, headers=self.auth(self.employee))
        self.assertEqual(res.status_code, 201)
        return res.json()["data"]

    def test_staff_adds_item(self):
        item = self.add_item()
        self.assertTrue(item["isAvailable"])
        self.assertEqual(item["stockStatus"], "low-stock")

    def test_general_account_cannot_add(self):
        res = self.client.post("/api/v1/store", json=ITEM, headers=self.auth(self.buyer))
        self.assertEqual(res.status_code, 403)

    def test_price_above_original_rejected(self):
        res = self.client.post("/api/v1/store", json={**ITEM, "price": 60.0}, headers=self.auth(self.employee))
        self.assertEqual(res.status_code, 400)

    def test_duplicate_part_number(self):
        self.add_item()
        res = self.client.post("/api/v1/store", json=ITEM, headers=self.auth(self.employee))
        self.assertEqual(res.status_code, 400)

    def test_out_of_stock_is_unavailable(self):
        item = self.add_item(stock=0, partNumber="VF-0")
        self.assertFalse(item["isAvailable"])
        listed = self.client.get("/api/v1/store?availableOnly=true", headers=self.auth(self.buyer)).json()
        self.assertEqual(listed["meta"]["total"], 0)

    def test_cart_checkout_reserves_stock(self):
        item = self.add_item()
        headers = self.auth(self.buyer)

        self.client.post("/api/v1/cart/add", json={"productId": item["id"], "quantity": 2}, headers=headers)
        cart = self.client.post("/api/v1/cart/add", json={"productId": item["id"], "quantity": 1},
                                headers=headers).json()["data"]
        self.assertEqual(cart["items"][0]["quantity"], 3)
        self.assertEqual(cart["totalPrice"], 135.0)

        res = self.client.post("/api/v1/cart/checkout", headers=headers)

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["totalPrice"], 135.0)
        product = self.fetch(StoreItem, item["id"])
        self.assertEqual(product.stock, 2)
        self.assertEqual(product.salesCount, 3)
        self.assertEqual(self.fetch(Cart, cart["id"]).status, CartStatus.CHECKED_OUT)
        self.assertEqual(self.client.get("/api/v1/cart", headers=headers).json()["data"]["items"], [])

    def test_cannot_add_more_than_stock(self):
        item = self.add_item()
        res = self.client.post("/api/v1/cart/add", json={"productId": item["id"], "quantity": 6},
                               headers=self.auth(self.buyer))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "INSUFFICIENT_STOCK")

    def test_checkout_fails_when_stock_ran_out(self):
        item = self.add_item()
        headers = self.auth(self.buyer)
        self.client.post("/api/v1/cart/add", json={"productId": item["id"], "quantity": 4}, headers=headers)
        with self.Session() as db:
            db.get(StoreItem, item["id"]).stock = 3
            db.commit()

        res = self.client.post("/api/v1/cart/checkout", headers=headers)

        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.fetch(StoreItem, item["id"]).stock, 3)
        self.assertEqual(self.count(Cart, Cart.status == CartStatus.ACTIVE), 1)

    def test_empty_cart_checkout(self):
        res = self.client.post("/api/v1/cart/checkout", headers=self.auth(self.buyer))
        self.assertEqual(res.status_code, 400)

    def test_remove_and_clear(self):
        first = self.add_item()
        second = self.add_item(name="Oil filter", partNumber="VF-2")
        headers = self.auth(self.buyer)
        for item in (first, second):
            self.client.post("/api/v1/cart/add", json={"productId": item["id"], "quantity": 1}, headers=headers)

        cart = self.client.delete(f"/api/v1/cart/remove/{first['id']}", headers=headers).json()["data"]
        self.assertEqual([i["productId"] for i in cart["items"]], [second["id"]])
        self.assertEqual(cart["totalPrice"], 45.0)

        cart = self.client.delete("/api/v1/cart/clear", headers=headers).json()["data"]
        self.assertEqual(cart["items"], [])
        self.assertEqual(cart["totalPrice"], 0.0)

    def test_sold_item_cannot_be_deleted(self):
        item = self.add_item()
        headers = self.auth(self.buyer)
        self.client.post("/api/v1/cart/add", json={"productId": item["id"], "quantity": 1}, headers=headers)
        self.client.post("/api/v1/cart/checkout", headers=headers)

        res = self.client.delete(f"/api/v1/store/{item['id']}", headers=self.auth(self.employee))
        self.assertEqual(res.status_code, 400)

    def test_low_stock_report(self):
        self.add_item()
        self.add_item(name="Brake drum", partNumber="BD-1", stock=40, category="Brake System")
        res = self.client.get("/api/v1/store/low-stock", headers=self.auth(self.employee))
        self.assertEqual([i["partNumber"] for i in res.json()["data"]], ["VF-21337"])


class TestNotifications(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.user = self.make_user()
        with self.Session() as db:
            for text in ("Truck received", "Inspection done", "Ready soon"):
                db.add(Notification(userId=self.user.id, message=text))
            db.commit()

    def test_list_own_with_unread_count(self):
        other = self.make_user()
        with self.Session() as db:
            db.add(Notification(userId=other.id, message="Not yours"))
            db.commit()

        res = self.client.get("/api/v1/notifications", headers=self.auth(self.user))

        body = res.json()
        self.assertEqual(body["meta"]["total"], 3)
        self.assertEqual(body["unreadCount"], 3)

    def test_mark_all_read(self):
        res = self.client.put("/api/v1/notifications/mark-read", json={"markAll": True}, headers=self.auth(self.user))
        self.assertEqual(res.json()["data"]["updated"], 3)
        listed = self.client.get("/api/v1/notifications?status=unread", headers=self.auth(self.user)).json()
        self.assertEqual(listed["meta"]["total"], 0)

    def test_mark_read_needs_ids_or_flag(self):
        res = self.client.put("/api/v1/notifications/mark-read", json={}, headers=self.auth(self.user))
        self.assertEqual(res.status_code, 400)

    def test_delete_selected(self):
        ids = [n["id"] for n in self.client.get("/api/v1/notifications",
                                                headers=self.auth(self.user)).json()["data"]]
        res = self.client.request("DELETE", "/api/v1/notifications", json={"notificationIds": ids[:2]},
                                  headers=self.auth(self.user))
        self.assertEqual(res.json()["data"]["deleted"], 2)
        self.assertEqual(self.count(Notification, Notification.userId == self.user.id), 1)

    def test_only_admin_notifies_others(self):
        other = self.make_user()
        res = self.client.post("/api/v1/notifications", json={"userId": other.id, "message": "Hi"},
                               headers=self.auth(self.user))
        self.assertEqual(res.status_code, 403)

        admin = self.make_user(UserRole.ADMIN)
        res = self.client.post("/api/v1/notifications", json={"userId": other.id, "message": "Hi"},
                               headers=self.auth(admin))
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.json()["data"]["status"], "unread")


class TestTrending(ApiTestCase):

    def test_best_sellers_first_and_discontinued_left_out(self):
        employee = self.make_user(UserRole.EMPLOYEE)
        buyer = self.make_user()
        ids = {}
        for part in ("A-1", "B-1", "C-1"):
            res = self.client.post("/api/v1/store", json={**ITEM, "partNumber": part}, headers=self.auth(employee))
            ids[part] = res.json()["data"]["id"]

        headers = self.auth(buyer)
        self.client.post("/api/v1/cart/add", json={"productId": ids["B-1"], "quantity": 2}, headers=headers)
        self.client.post("/api/v1/cart/add", json={"productId": ids["A-1"], "quantity": 1}, headers=headers)
        self.client.post("/api/v1/cart/checkout", headers=headers)
        with self.Session() as db:
            db.get(StoreItem, ids["C-1"]).status = StoreItemStatus.DISCONTINUED
            db.commit()

        res = self.client.get("/api/v1/store/trending", headers=headers)

        self.assertEqual(res.status_code, 200)
        self.assertEqual([i["partNumber"] for i in res.json()["data"]], ["B-1", "A-1"])

    def test_limit(self):
        employee = self.make_user(UserRole.EMPLOYEE)
        for n in range(3):
            self.client.post("/api/v1/store", json={**ITEM, "partNumber": f"P-{n}"}, headers=self.auth(employee))
        res = self.client.get("/api/v1/store/trending?limit=2", headers=self.auth(employee))
        self.assertEqual(len(res.json()["data"]), 2)


class TestBroadcast(ApiTestCase):

    URL = "/api/v1/notifications/broadcast"

    def setUp(self):
        super().setUp()
        self.admin = self.make_user(UserRole.ADMIN)

    def test_broadcast_to_listed_accounts(self):
        first, second = self.make_user(), self.make_user()
        res = self.client.post(self.URL, json={"message": "Workshop closed Friday", "userIds": [first.id, second.id]},
                               headers=self.auth(self.admin))

        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.json()["data"]["recipientCount"], 2)
        self.assertEqual(self.count(Notification, Notification.type == "broadcast"), 2)
        listed = self.client.get("/api/v1/notifications", headers=self.auth(first)).json()
        self.assertEqual(listed["data"][0]["message"], "Workshop closed Friday")

    def test_broadcast_by_filter(self):
        employees = [self.make_user(UserRole.EMPLOYEE) for _ in range(2)]
        self.make_user()
        res = self.client.post(self.URL, json={"message": "Staff meeting", "filterCriteria": {"role": "employee"}},
                               headers=self.auth(self.admin))
        self.assertEqual(res.json()["data"]["recipientCount"], 2)
        for employee in employees:
            self.assertEqual(self.count(Notification, Notification.userId == employee.id), 1)

    def test_no_matching_accounts(self):
        res = self.client.post(self.URL, json={"message": "Anyone?", "filterCriteria": {"role": "truck_owner"}},
                               headers=self.auth(self.admin))
        self.assertEqual(res.status_code, 400)
        res = self.client.post(self.URL, json={"message": "Anyone?"}, headers=self.auth(self.admin))
        self.assertEqual(res.status_code, 400)

    def test_unknown_account_stores_nothing(self):
        user = self.make_user()
        res = self.client.post(self.URL, json={"message": "Hi", "userIds": [user.id, 9999]},
                               headers=self.auth(self.admin))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.count(Notification), 0)

    def test_admin_only(self):
        user = self.make_user()
        res = self.client.post(self.URL, json={"message": "Hi", "userIds": [user.id]},
                               headers=self.auth(self.make_user(UserRole.EMPLOYEE)))
        self.assertEqual(res.status_code, 403)
