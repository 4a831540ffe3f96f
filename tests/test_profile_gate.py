from tests.base import ApiTestCase

from repairhub.dependencies import enforce_complete_profile
from repairhub.models.company import ProfileStatus
from repairhub.models.driver import Driver
from repairhub.models.role import UserRole
from repairhub.models.truck import Truck
from repairhub.models.user import User
from repairhub.utils.exceptions import ProfileIncompleteException, NotFoundException

DRIVER = {
    "driverName":       "Ali Hassan",
    "driverPhone":      "0501112233",
    "driverIdNumber":   "784-1990-1234567-1",
    "licensePlate":     "DXB-4321",
    "truckNumber":      "T-17",
    "emergencyContact": {"name": "Mona Hassan", "phone": "0504445566", "relationship": "spouse"},
    "licenseInfo":      {"licenseNumber": "DL-998877", "licenseExpiry": "2099-12-31", "licenseType": "heavy"},
}


class TestProfileGate(ApiTestCase):

    def test_basic_company_is_told_to_add_bank_details(self):
        user, company = self.make_company_account(ProfileStatus.BASIC)
        truck = self.make_truck(self.make_user())

        res = self.client.put(f"/api/v1/companies/{company.id}/add-associations",
                              json={"associatedTrucks": [truck.id]}, headers=self.auth(user))

        self.assertEqual(res.status_code, 400)
        body = res.json()
        self.assertEqual(body["error"]["code"], "PROFILE_INCOMPLETE")
        self.assertEqual(body["requiredFields"], ["bankDetails"])
        self.assertEqual(body["completionEndpoint"], f"/api/v1/companies/{company.id}/complete-profile")
        self.assertIsNone(self.fetch(Truck, truck.id).companyId)

    def test_initial_company_lists_every_section(self):
        user, company = self.make_company_account(ProfileStatus.INITIAL)
        res = self.client.put(f"/api/v1/companies/{company.id}/add-associations",
                              json={"drivers": [1]}, headers=self.auth(user))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["requiredFields"], ["licenseDetails", "ownerDetails", "bankDetails"])

    def test_complete_company_passes(self):
        user, company = self.make_company_account(ProfileStatus.COMPLETE)
        truck = self.make_truck(self.make_user())

        res = self.client.put(f"/api/v1/companies/{company.id}/add-associations",
                              json={"associatedTrucks": [truck.id]}, headers=self.auth(user))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["associatedTrucks"], [truck.id])

    def test_completion_endpoint_is_never_blocked(self):
        user, company = self.make_company_account(ProfileStatus.BASIC)
        with self.Session() as db:
            path = f"/api/v1/companies/{company.id}/complete-profile"
            self.assertEqual(enforce_complete_profile(db, company.id, path).id, company.id)

    def test_gate_on_other_paths(self):
        _, company = self.make_company_account(ProfileStatus.BASIC)
        with self.Session() as db:
            with self.assertRaises(ProfileIncompleteException):
                enforce_complete_profile(db, company.id, "/api/v1/drivers")
            with self.assertRaises(NotFoundException):
                enforce_complete_profile(db, 9999, "/api/v1/drivers")

    def test_admin_update_of_incomplete_company_is_gated(self):
        company = self.make_company(ProfileStatus.BASIC)
        admin = self.make_user(UserRole.ADMIN)
        res = self.client.put(f"/api/v1/companies/{company.id}", json={"companyName": "Renamed"},
                              headers=self.auth(admin))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["requiredFields"], ["bankDetails"])

    def test_admin_update_of_complete_company(self):
        company = self.make_company(ProfileStatus.COMPLETE)
        admin = self.make_user(UserRole.ADMIN)
        res = self.client.put(f"/api/v1/companies/{company.id}", json={"companyName": "Renamed"},
                              headers=self.auth(admin))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["companyName"], "Renamed")

    def test_gated_route_for_unknown_company(self):
        admin = self.make_user(UserRole.ADMIN)
        res = self.client.put("/api/v1/companies/9999", json={"companyName": "Ghost"}, headers=self.auth(admin))
        self.assertEqual(res.status_code, 404)

    def test_company_creating_driver_needs_complete_profile(self):
        user, company = self.make_company_account(ProfileStatus.BASIC)
        res = self.client.post("/api/v1/drivers", json={**DRIVER, "associatedCompany": company.id},
                               headers=self.auth(user))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "PROFILE_INCOMPLETE")
        self.assertEqual(self.count(Driver), 0)

    def test_company_creating_truck_needs_complete_profile(self):
        user, _ = self.make_company_account(ProfileStatus.INITIAL)
        res = self.client.post("/api/v1/trucks", json={"licensePlate": "SHJ-100", "brand": "MAN"},
                               headers=self.auth(user))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.count(Truck), 0)

    def test_complete_company_creates_truck_for_itself(self):
        user, company = self.make_company_account(ProfileStatus.COMPLETE)
        res = self.client.post("/api/v1/trucks", json={"licensePlate": "SHJ-100", "brand": "MAN"},
                               headers=self.auth(user))
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.json()["data"]["companyId"], company.id)

    def test_admin_creating_driver_is_not_gated(self):
        company = self.make_company(ProfileStatus.INITIAL)
        admin = self.make_user(UserRole.ADMIN)
        res = self.client.post("/api/v1/drivers", json={**DRIVER, "associatedCompany": company.id},
                               headers=self.auth(admin))
        self.assertEqual(res.status_code, 201)


class TestAddAssociations(ApiTestCase):

    def _unregistered_driver(self):
        user = self.make_user()
        res = self.client.post("/api/v1/users/role-transition", headers=self.auth(user), json={
            "role": "unregistered_driver",
            "driverInfo": {"name": "Ali Hassan", "phoneNumber": "+971501239876"},
            "companyDetails": {"companyName": "Desert Haulage", "contactPerson": "Omar"},
        })
        self.assertEqual(res.status_code, 200)
        with self.Session() as db:
            return user, db.query(Driver).filter(Driver.userId == user.id).one().id

    def test_other_company_is_forbidden_before_the_gate(self):
        user, _ = self.make_company_account(ProfileStatus.BASIC)
        other = self.make_company(ProfileStatus.COMPLETE)
        truck = self.make_truck(self.make_user())

        res = self.client.put(f"/api/v1/companies/{other.id}/add-associations",
                              json={"associatedTrucks": [truck.id]}, headers=self.auth(user))

        self.assertEqual(res.status_code, 403)
        self.assertIsNone(self.fetch(Truck, truck.id).companyId)

    def test_external_driver_account_becomes_company_driver(self):
        user, company = self.make_company_account(ProfileStatus.COMPLETE)
        account, driver_id = self._unregistered_driver()

        res = self.client.put(f"/api/v1/companies/{company.id}/add-associations",
                              json={"drivers": [driver_id]}, headers=self.auth(user))

        self.assertEqual(res.status_code, 200)
        driver = self.fetch(Driver, driver_id)
        self.assertTrue(driver.isRegisteredCompanyDriver)
        self.assertEqual(driver.associatedCompanyId, company.id)
        self.assertIsNone(driver.externalCompanyDetails)
        stored = self.fetch(User, account.id)
        self.assertEqual(stored.role, UserRole.COMPANY_DRIVER)
        self.assertIsNone(stored.companyDetails)
