"""Budget endpoints."""

from decimal import Decimal

import pytest

from teampulse.models import UserRole

from .helpers import budget_for, error_message, notifications_for

pytestmark = pytest.mark.asyncio


class TestMyBudget:
    async def test_first_read_creates_empty_budget(self, client, db, make_user, auth_headers):
        alice = await make_user("Alice")

        response = await client.get("/api/budgets/me", headers=auth_headers(alice))
        assert response.status_code == 200
        budget = response.json()["budget"]
        assert budget["userId"] == str(alice.id)
        assert Decimal(budget["totalBudget"]) == 0
        assert Decimal(budget["availableBudget"]) == 0

        assert await budget_for(db, alice.id) is not None

    async def test_available_amounts(self, client, make_user, auth_headers):
        alice = await make_user("Alice", total=500, monthly=100, used=30)

        budget = (await client.get("/api/budgets/me", headers=auth_headers(alice))).json()["budget"]
        assert Decimal(budget["availableBudget"]) == Decimal("470")
        assert Decimal(budget["availableMonthlyBudget"]) == Decimal("70")

    async def test_manager_sets_own_caps(self, client, make_user, auth_headers):
        manager = await make_user("Manny", UserRole.MANAGER)

        response = await client.put(
            "/api/budgets/me",
            headers=auth_headers(manager),
            json={"totalBudget": "800", "monthlyBudget": "150"},
        )
        assert response.status_code == 200
        budget = response.json()["budget"]
        assert Decimal(budget["totalBudget"]) == Decimal("800")
        assert Decimal(budget["monthlyBudget"]) == Decimal("150")

    async def test_caps_cannot_drop_below_usage(self, client, db, make_user, auth_headers):
        """Lowering a cap under what is already spent is refused and nothing changes."""
        manager = await make_user("Manny", UserRole.MANAGER, total=100, monthly=100, used=50)

        response = await client.put(
            "/api/budgets/me", headers=auth_headers(manager), json={"totalBudget": "10"}
        )
        assert response.status_code == 400
        assert error_message(response) == "Total budget cannot be less than used budget"

        response = await client.put(
            "/api/budgets/me",
            headers=auth_headers(manager),
            json={"totalBudget": "500", "monthlyBudget": "20"},
        )
        assert response.status_code == 400
        assert error_message(response) == "Monthly budget cannot be less than used budget"

        budget = await budget_for(db, manager.id)
        assert budget.total_budget == Decimal("100")
        assert budget.monthly_budget == Decimal("100")
        assert budget.used_budget == Decimal("50")

        # Equal to usage is allowed
        response = await client.put(
            "/api/budgets/me", headers=auth_headers(manager), json={"totalBudget": "50"}
        )
        assert response.status_code == 200
        assert Decimal(response.json()["budget"]["availableBudget"]) == 0

    async def test_user_cannot_set_caps(self, client, make_user, auth_headers):
        alice = await make_user("Alice")

        response = await client.put("/api/budgets/me", headers=auth_headers(alice), json={"totalBudget": "1"})
        assert response.status_code == 403


class TestAllocation:
    async def test_allocate_adds_to_cap_and_notifies(self, client, db, make_user, auth_headers):
        manager = await make_user("Manny", UserRole.MANAGER)
        alice = await make_user("Alice", total=100, monthly=50)

        response = await client.post(
            "/api/budgets/allocate",
            headers=auth_headers(manager),
            json={"userId": str(alice.id), "amount": "25", "type": "monthly"},
        )
        assert response.status_code == 200, response.text
        budget = response.json()["budget"]
        assert Decimal(budget["monthlyBudget"]) == Decimal("75")
        assert Decimal(budget["totalBudget"]) == Decimal("100")

        notes = await notifications_for(db, alice.id)
        assert [(n.title, n.type) for n in notes] == [("Budget Allocated", "INFO")]
        assert "monthly budget" in notes[0].message

    async def test_allocate_creates_missing_budget(self, client, db, make_user, auth_headers):
        manager = await make_user("Manny", UserRole.MANAGER)
        alice = await make_user("Alice")

        response = await client.post(
            "/api/budgets/allocate",
            headers=auth_headers(manager),
            json={"userId": str(alice.id), "amount": "40", "type": "total"},
        )
        assert response.status_code == 200
        assert (await budget_for(db, alice.id)).total_budget == Decimal("40")

    async def test_allocate_unknown_user(self, client, make_user, auth_headers):
        manager = await make_user("Manny", UserRole.MANAGER)

        response = await client.post(
            "/api/budgets/allocate",
            headers=auth_headers(manager),
            json={"userId": "00000000-0000-0000-0000-000000000000", "amount": "40", "type": "total"},
        )
        assert response.status_code == 404
        assert error_message(response) == "User not found"

    async def test_bad_allocation_type(self, client, make_user, auth_headers):
        manager = await make_user("Manny", UserRole.MANAGER)
        alice = await make_user("Alice")

        response = await client.post(
            "/api/budgets/allocate",
            headers=auth_headers(manager),
            json={"userId": str(alice.id), "amount": "40", "type": "weekly"},
        )
        assert response.status_code == 400


class TestManagerViews:
    async def test_all_budgets_sorted_by_owner(self, client, make_user, auth_headers):
        manager = await make_user("Manny", UserRole.MANAGER)
        await make_user("Zed", total=10, monthly=10)
        await make_user("Amy", total=20, monthly=20)

        response = await client.get("/api/budgets/all", headers=auth_headers(manager))
        assert response.status_code == 200
        names = [b["user"]["name"] for b in response.json()["budgets"]]
        assert names == ["Amy", "Zed"]

    async def test_user_budget_lookup(self, client, make_user, auth_headers):
        manager = await make_user("Manny", UserRole.MANAGER)
        alice = await make_user("Alice", total=10, monthly=5)
        bob = await make_user("Bob")

        found = await client.get(f"/api/budgets/user/{alice.id}", headers=auth_headers(manager))
        assert Decimal(found.json()["budget"]["monthlyBudget"]) == Decimal("5")

        missing = await client.get(f"/api/budgets/user/{bob.id}", headers=auth_headers(manager))
        assert missing.status_code == 404
        assert error_message(missing) == "Budget not found"

    async def test_regular_user_denied(self, client, make_user, auth_headers):
        alice = await make_user("Alice")

        assert (await client.get("/api/budgets/all", headers=auth_headers(alice))).status_code == 403
