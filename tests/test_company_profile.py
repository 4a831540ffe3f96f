import itertools
import unittest

from tests.base import ApiTestCase, LICENSE, OWNER, BANK

from repairhub.models.company import Company, ProfileStatus
from repairhub.models.driver import Driver
from repairhub.models.job_card import JobCard
from repairhub.models.role import UserRole
from repairhub.models.user import User
from repairhub.services.company_service import derive_profile_status, missing_profile_fields


class TestDeriveProfileStatus(unittest.TestCase):

    def test_all_combinations(self):
        for bank, license_, owner in itertools.product([[], [BANK]], [[], [LICENSE]], [[], [OWNER]]):
            with self.subTest(bank=bool(bank), license=bool(license_), owner=bool(owner)):
                status = derive_profile_status(bank, license_, owner)
                if license_ and owner and bank:
                    self.assertEqual(status, ProfileStatus.COMPLETE)
                elif license_ and owner:
                    self.assertEqual(status, ProfileStatus.BASIC)
                else:
                    self.assertEqual(status, ProfileStatus.INITIAL)

    def test_bank_alone_is_not_enough(self):
        self.assertEqual(derive_profile_status([BANK], [], []), ProfileStatus.INITIAL)

    def test_missing_fields_follow_stored_sections(self):
        company = Company(bankDetails=[], licenseDetails=[LICENSE], ownerDetails=[OWNER])
        self.assertEqual(missing_profile_fields(company), ["bankDetails"])
        company = Company(bankDetails=[], licenseDetails=[], ownerDetails=[])
        self.assertEqual(missing_profile_fields(company), ["licenseDetails", "ownerDetails", "bankDetails"])


class TestCompleteProfile(ApiTestCase):

    def url(self, company_id):
        return f"/api/v1/companies/{company_id}/complete-profile"

    def test_license_and_owner_reach_basic(self):
        user, company = self.make_company_account(ProfileStatus.INITIAL)

        res = self.client.put(self.url(company.id), json={"licenseDetails": [LICENSE], "ownerDetails": [OWNER]},
                              headers=self.auth(user))

        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["profileStatus"], "basic")
        self.assertEqual(body["nextSteps"]["optionalFields"], ["bankDetails"])
        self.assertEqual(self.fetch(Company, company.id).profileStatus, ProfileStatus.BASIC)

    def test_all_three_reach_complete(self):
        user, company = self.make_company_account(ProfileStatus.INITIAL)
        res = self.client.put(self.url(company.id), json={
            "bankDetails": [BANK], "licenseDetails": [LICENSE], "ownerDetails": [OWNER],
        }, headers=self.auth(user))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["profileStatus"], "complete")
        self.assertIsNone(res.json()["nextSteps"])

    def test_omitted_bank_details_are_kept(self):
        user, company = self.make_company_account(ProfileStatus.COMPLETE)
        res = self.client.put(self.url(company.id), json={"licenseDetails": [LICENSE], "ownerDetails": [OWNER]},
                              headers=self.auth(user))
        self.assertEqual(res.json()["profileStatus"], "complete")

    def test_clearing_bank_details_regresses_to_basic(self):
        user, company = self.make_company_account(ProfileStatus.COMPLETE)
        res = self.client.put(self.url(company.id), json={
            "bankDetails": [], "licenseDetails": [LICENSE], "ownerDetails": [OWNER],
        }, headers=self.auth(user))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["profileStatus"], "basic")
        self.assertEqual(self.fetch(Company, company.id).bankDetails, [])

    def test_owner_details_required(self):
        user, company = self.make_company_account(ProfileStatus.INITIAL)
        res = self.client.put(self.url(company.id), json={"licenseDetails": [LICENSE]}, headers=self.auth(user))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.fetch(Company, company.id).profileStatus, ProfileStatus.INITIAL)

    def test_empty_license_list_rejected(self):
        user, company = self.make_company_account(ProfileStatus.INITIAL)
        res = self.client.put(self.url(company.id), json={"licenseDetails": [], "ownerDetails": [OWNER]},
                              headers=self.auth(user))
        self.assertEqual(res.status_code, 400)

    def test_invalid_iban_rejected(self):
        user, company = self.make_company_account(ProfileStatus.INITIAL)
        res = self.client.put(self.url(company.id), json={
            "bankDetails": [{**BANK, "iban": "not-an-iban"}],
            "licenseDetails": [LICENSE], "ownerDetails": [OWNER],
        }, headers=self.auth(user))
        self.assertEqual(res.status_code, 400)
        self.assertIn("bankDetails.0.iban", {d["field"] for d in res.json()["error"]["details"]})

    def test_expired_license_rejected(self):
        user, company = self.make_company_account(ProfileStatus.INITIAL)
        res = self.client.put(self.url(company.id), json={
            "licenseDetails": [{**LICENSE, "expiryDate": "2001-01-01"}], "ownerDetails": [OWNER],
        }, headers=self.auth(user))
        self.assertEqual(res.status_code, 400)

    def test_unknown_company(self):
        admin = self.make_user(UserRole.ADMIN)
        res = self.client.put(self.url(404), json={"licenseDetails": [LICENSE], "ownerDetails": [OWNER]},
                              headers=self.auth(admin))
        self.assertEqual(res.status_code, 404)

    def test_company_cannot_complete_another_company(self):
        user, _ = self.make_company_account(ProfileStatus.INITIAL)
        other = self.make_company()
        res = self.client.put(self.url(other.id), json={"licenseDetails": [LICENSE], "ownerDetails": [OWNER]},
                              headers=self.auth(user))
        self.assertEqual(res.status_code, 403)

    def test_general_account_forbidden(self):
        company = self.make_company()
        res = self.client.put(self.url(company.id), json={"licenseDetails": [LICENSE], "ownerDetails": [OWNER]},
                              headers=self.auth(self.make_user()))
        self.assertEqual(res.status_code, 403)

    def test_transition_then_completion(self):
        user = self.make_user()
        created = self.client.post("/api/v1/users/role-transition", json={"role": "company"},
                                   headers=self.auth(user)).json()
        company_id = created["company"]["id"]

        res = self.client.put(self.url(company_id), json={
            "bankDetails": [BANK], "licenseDetails": [LICENSE], "ownerDetails": [OWNER],
        }, headers=self.auth(self.fetch(User, user.id)))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["profileStatus"], "complete")


class TestCompanyCrud(ApiTestCase):

    def test_staff_registers_company(self):
        employee = self.make_user(UserRole.EMPLOYEE)
        res = self.client.post("/api/v1/companies", json={
            "companyName": "Gulf Fleet", "contactEmail": "Ops@GulfFleet.ae",
        }, headers=self.auth(employee))

        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertEqual(body["data"]["profileStatus"], "initial")
        self.assertEqual(body["data"]["contactEmail"], "ops@gulffleet.ae")
        self.assertEqual(body["nextSteps"]["requiredFields"], ["licenseDetails", "ownerDetails"])
        self.assertEqual(body["nextSteps"]["endpoint"],
                         f"/api/v1/companies/{body['data']['id']}/complete-profile")

    def test_duplicate_contact_email(self):
        self.make_company(contactEmail="ops@gulffleet.ae")
        res = self.client.post("/api/v1/companies", json={
            "companyName": "Other", "contactEmail": "ops@gulffleet.ae",
        }, headers=self.auth(self.make_user(UserRole.ADMIN)))
        self.assertEqual(res.status_code, 400)

    def test_company_account_cannot_list(self):
        user, _ = self.make_company_account()
        self.assertEqual(self.client.get("/api/v1/companies", headers=self.auth(user)).status_code, 403)

    def test_list_filters_by_profile_status(self):
        self.make_company(ProfileStatus.BASIC)
        self.make_company(ProfileStatus.COMPLETE)
        res = self.client.get("/api/v1/companies?profileStatus=basic",
                              headers=self.auth(self.make_user(UserRole.ADMIN)))
        self.assertEqual(res.json()["meta"]["total"], 1)
        self.assertEqual(res.json()["data"][0]["profileStatus"], "basic")

    def test_delete_detaches_drivers_and_accounts(self):
        user, company = self.make_company_account()
        with self.Session() as db:
            db.add(Driver(driverName="Ali", driverPhone="+971500000001", userId=user.id,
                          isRegisteredCompanyDriver=True, associatedCompanyId=company.id))
            db.commit()

        res = self.client.delete(f"/api/v1/companies/{company.id}",
                                 headers=self.auth(self.make_user(UserRole.ADMIN)))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(self.count(Company), 0)
        with self.Session() as db:
            driver = db.query(Driver).one()
            self.assertIsNone(driver.associatedCompanyId)
            self.assertFalse(driver.isRegisteredCompanyDriver)
            self.assertEqual(driver.externalCompanyDetails["companyName"], company.companyName)
            account = db.get(User, user.id)
            self.assertIsNone(account.companyId)
            self.assertEqual(account.role, UserRole.GENERAL)

    def test_delete_refused_with_job_cards(self):
        _, company = self.make_company_account()
        truck = self.make_truck(self.make_user())
        with self.Session() as db:
            db.add(JobCard(truckId=truck.id, description=[], driverName="Ali", driverPhone="0501234567",
                           companyId=company.id))
            db.commit()

        res = self.client.delete(f"/api/v1/companies/{company.id}",
                                 headers=self.auth(self.make_user(UserRole.ADMIN)))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.count(Company), 1)
