"""Kudos creation, budget spending and the approval workflow."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from teampulse.models import Comment, UserRole

from .helpers import add_tag, budget_for, error_message, notifications_for

pytestmark = pytest.mark.asyncio


async def _counters(client: AsyncClient, headers, user_id) -> tuple[int, int]:
    data = (await client.get(f"/api/users/{user_id}", headers=headers)).json()["user"]
    return data["totalKudosSent"], data["totalKudosReceived"]


class TestKudosCreation:
    """POST /api/kudos."""

    async def test_peer_kudos_is_approved_immediately(self, client, db, make_user, auth_headers):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        tag = await add_tag(db, "Teamwork")

        response = await client.post(
            "/api/kudos",
            headers=auth_headers(alice),
            json={"toUserId": str(bob.id), "message": "Thanks for the help!", "tagIds": [str(tag.id)]},
        )
        assert response.status_code == 201, response.text

        kudos = response.json()["kudos"]
        assert kudos["status"] == "APPROVED"
        assert kudos["fromUser"]["name"] == "Alice"
        assert kudos["toUser"]["name"] == "Bob"
        assert [t["name"] for t in kudos["tags"]] == ["Teamwork"]
        assert Decimal(kudos["monetaryAmount"]) == 0
        assert kudos["currency"] == "USD"

        assert await _counters(client, auth_headers(alice), alice.id) == (1, 0)
        assert await _counters(client, auth_headers(alice), bob.id) == (0, 1)

        notes = await notifications_for(db, bob.id)
        assert [(n.title, n.type) for n in notes] == [("New Kudos Received!", "SUCCESS")]
        assert notes[0].message == "You received kudos from Alice!"

    async def test_admin_to_user_is_pending_and_spends_budget(self, client, db, make_user, auth_headers):
        """Admin sends $50 to a USER: pending, budget spent, nothing counted yet."""
        admin = await make_user("Admin", UserRole.ADMIN, total=100, monthly=100)
        user = await make_user("Uma")

        response = await client.post(
            "/api/kudos",
            headers=auth_headers(admin),
            json={"toUserId": str(user.id), "message": "Great quarter", "monetaryAmount": 50},
        )
        assert response.status_code == 201, response.text
        assert response.json()["kudos"]["status"] == "PENDING"

        budget = await budget_for(db, admin.id)
        assert budget.used_budget == Decimal("50")
        assert await _counters(client, auth_headers(admin), admin.id) == (0, 0)
        assert await _counters(client, auth_headers(admin), user.id) == (0, 0)

        notes = await notifications_for(db, user.id)
        assert [n.title for n in notes] == ["Kudos Pending Approval"]
        assert "pending approval" in notes[0].message

    async def test_monthly_cap_rejects_without_spending(self, client, db, make_user, auth_headers):
        """$30 with only $20 left this month fails and leaves the budget alone."""
        alice = await make_user("Alice", total=100, monthly=20)
        bob = await make_user("Bob")

        response = await client.post(
            "/api/kudos",
            headers=auth_headers(alice),
            json={"toUserId": str(bob.id), "message": "Too generous", "monetaryAmount": 30},
        )
        assert response.status_code == 400
        assert "monthly budget" in error_message(response)

        budget = await budget_for(db, alice.id)
        assert budget.used_budget == Decimal("0")
        assert await notifications_for(db, bob.id) == []

    async def test_total_cap(self, client, make_user, auth_headers):
        alice = await make_user("Alice", total=100, monthly=100, used=90)
        bob = await make_user("Bob")

        response = await client.post(
            "/api/kudos",
            headers=auth_headers(alice),
            json={"toUserId": str(bob.id), "message": "Too much", "monetaryAmount": 20},
        )
        assert response.status_code == 400
        assert error_message(response) == "Insufficient budget. Available: $10.00, Required: $20.00"

    async def test_monetary_kudos_without_budget(self, client, make_user, auth_headers):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        response = await client.post(
            "/api/kudos",
            headers=auth_headers(alice),
            json={"toUserId": str(bob.id), "message": "Here you go", "monetaryAmount": 10},
        )
        assert response.status_code == 400
        assert error_message(response) == "No budget allocated. Please contact your manager."

    async def test_monthly_budget_resets_lazily(self, client, db, make_user, auth_headers):
        """A budget last reset in an earlier month is fresh again."""
        long_ago = datetime.now(timezone.utc) - timedelta(days=70)
        alice = await make_user("Alice", total=500, monthly=100, used=100, reset_date=long_ago)
        bob = await make_user("Bob")

        response = await client.post(
            "/api/kudos",
            headers=auth_headers(alice),
            json={"toUserId": str(bob.id), "message": "New month", "monetaryAmount": 40},
        )
        assert response.status_code == 201, response.text

        budget = await budget_for(db, alice.id)
        assert budget.used_budget == Decimal("40")

    async def test_self_kudos_rejected(self, client, make_user, auth_headers):
        alice = await make_user("Alice")

        response = await client.post(
            "/api/kudos",
            headers=auth_headers(alice),
            json={"toUserId": str(alice.id), "message": "Me!"},
        )
        assert response.status_code == 400
        assert error_message(response) == "You cannot send kudos to yourself"

    async def test_unknown_recipient(self, client, make_user, auth_headers):
        alice = await make_user("Alice")

        response = await client.post(
            "/api/kudos",
            headers=auth_headers(alice),
            json={"toUserId": "00000000-0000-0000-0000-000000000000", "message": "Hello?"},
        )
        assert response.status_code == 404
        assert error_message(response) == "User not found"

    async def test_unknown_tag(self, client, make_user, auth_headers):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        response = await client.post(
            "/api/kudos",
            headers=auth_headers(alice),
            json={
                "toUserId": str(bob.id),
                "message": "Tagged",
                "tagIds": ["00000000-0000-0000-0000-000000000001"],
            },
        )
        assert response.status_code == 400
        assert error_message(response) == "Unknown kudos tag"

    async def test_message_length_is_validated(self, client, make_user, auth_headers):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        response = await client.post(
            "/api/kudos",
            headers=auth_headers(alice),
            json={"toUserId": str(bob.id), "message": "x" * 501},
        )
        assert response.status_code == 400


class TestApprovalWorkflow:
    """POST /api/kudos/{id}/approve and /reject."""

    async def _pending(self, client, make_user, auth_headers):
        admin = await make_user("Admin", UserRole.ADMIN, total=100, monthly=100)
        user = await make_user("Uma")
        manager = await make_user("Manny", UserRole.MANAGER)
        response = await client.post(
            "/api/kudos",
            headers=auth_headers(admin),
            json={"toUserId": str(user.id), "message": "Pending one", "monetaryAmount": 50},
        )
        return admin, user, manager, response.json()["kudos"]

    async def test_manager_approves(self, client, db, make_user, auth_headers):
        admin, user, manager, kudos = await self._pending(client, make_user, auth_headers)

        response = await client.post(
            f"/api/kudos/{kudos['id']}/approve",
            headers=auth_headers(manager),
            json={"reason": "verified"},
        )
        assert response.status_code == 200, response.text
        data = response.json()["kudos"]
        assert data["status"] == "APPROVED"
        assert data["approvalReason"] == "verified"

        assert await _counters(client, auth_headers(manager), admin.id) == (1, 0)
        assert await _counters(client, auth_headers(manager), user.id) == (0, 1)
        titles = [n.title for n in await notifications_for(db, user.id)]
        assert "Kudos Approved!" in titles

    async def test_second_decision_is_rejected(self, client, db, make_user, auth_headers):
        admin, user, manager, kudos = await self._pending(client, make_user, auth_headers)
        await client.post(f"/api/kudos/{kudos['id']}/approve", headers=auth_headers(manager), json={})
        before = len(await notifications_for(db, user.id))

        for action in ("approve", "reject"):
            response = await client.post(f"/api/kudos/{kudos['id']}/{action}", headers=auth_headers(manager))
            assert response.status_code == 400
            assert error_message(response) == "Kudos is not pending approval"

        assert await _counters(client, auth_headers(manager), user.id) == (0, 1)
        assert len(await notifications_for(db, user.id)) == before
        assert len(await notifications_for(db, admin.id)) == 0

    async def test_reject_notifies_sender_and_keeps_budget_spent(self, client, db, make_user, auth_headers):
        admin, user, manager, kudos = await self._pending(client, make_user, auth_headers)

        response = await client.post(
            f"/api/kudos/{kudos['id']}/reject",
            headers=auth_headers(manager),
            json={"reason": "duplicate"},
        )
        assert response.status_code == 200
        assert response.json()["kudos"]["status"] == "REJECTED"

        notes = await notifications_for(db, admin.id)
        assert [(n.title, n.type) for n in notes] == [("Kudos Rejected", "WARNING")]
        assert notes[0].message == "Your kudos to Uma was rejected: duplicate"
        assert await _counters(client, auth_headers(manager), user.id) == (0, 0)
        assert (await budget_for(db, admin.id)).used_budget == Decimal("50")

    async def test_regular_user_cannot_approve(self, client, make_user, auth_headers):
        admin, user, manager, kudos = await self._pending(client, make_user, auth_headers)

        response = await client.post(f"/api/kudos/{kudos['id']}/approve", headers=auth_headers(user))
        assert response.status_code == 403

    async def test_approve_unknown_kudos(self, client, make_user, auth_headers):
        manager = await make_user("Manny", UserRole.MANAGER)

        response = await client.post(
            "/api/kudos/00000000-0000-0000-0000-000000000000/approve",
            headers=auth_headers(manager),
        )
        assert response.status_code == 404
        assert error_message(response) == "Kudos not found"


class TestKudosReadsAndEdits:
    """Listing visibility, detail, update and delete."""

    async def test_private_kudos_visibility(self, client, make_user, auth_headers):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")
        manager = await make_user("Manny", UserRole.MANAGER)

        public = await client.post(
            "/api/kudos", headers=auth_headers(alice), json={"toUserId": str(bob.id), "message": "Public"}
        )
        private = await client.post(
            "/api/kudos",
            headers=auth_headers(alice),
            json={"toUserId": str(bob.id), "message": "Private", "isPublic": False},
        )
        private_id = private.json()["kudos"]["id"]

        carol_view = (await client.get("/api/kudos", headers=auth_headers(carol))).json()
        assert [k["id"] for k in carol_view["kudos"]] == [public.json()["kudos"]["id"]]
        assert carol_view["pagination"] == {"page": 1, "limit": 20, "total": 1, "pages": 1}

        for viewer in (alice, bob, manager):
            listing = (await client.get("/api/kudos", headers=auth_headers(viewer))).json()
            assert private_id in [k["id"] for k in listing["kudos"]]

        assert (await client.get(f"/api/kudos/{private_id}", headers=auth_headers(carol))).status_code == 403
        assert (await client.get(f"/api/kudos/{private_id}", headers=auth_headers(bob))).status_code == 200

    async def test_private_kudos_thread_hidden_from_outsiders(self, client, make_user, auth_headers):
        """Comments on a private kudos follow the kudos' own visibility."""
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        eve = await make_user("Eve")
        manager = await make_user("Manny", UserRole.MANAGER)

        private_id = (
            await client.post(
                "/api/kudos",
                headers=auth_headers(alice),
                json={"toUserId": str(bob.id), "message": "Private", "isPublic": False},
            )
        ).json()["kudos"]["id"]
        reply = await client.post(
            "/api/comments", headers=auth_headers(bob), json={"kudosId": private_id, "message": "private reply"}
        )
        comment_id = reply.json()["comment"]["id"]

        listing = await client.get("/api/comments", headers=auth_headers(eve), params={"kudosId": private_id})
        assert listing.status_code == 403
        assert error_message(listing) == "Access denied"
        single = await client.get(f"/api/comments/{comment_id}", headers=auth_headers(eve))
        assert single.status_code == 403

        for viewer in (alice, bob, manager):
            listing = await client.get(
                "/api/comments", headers=auth_headers(viewer), params={"kudosId": private_id}
            )
            assert listing.status_code == 200
            assert [c["message"] for c in listing.json()["comments"]] == ["private reply"]
            single = await client.get(f"/api/comments/{comment_id}", headers=auth_headers(viewer))
            assert single.status_code == 200

    async def test_filters_and_pagination(self, client, make_user, auth_headers):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")
        for i in range(3):
            await client.post(
                "/api/kudos", headers=auth_headers(alice), json={"toUserId": str(bob.id), "message": f"#{i}"}
            )
        await client.post(
            "/api/kudos", headers=auth_headers(bob), json={"toUserId": str(carol.id), "message": "other"}
        )

        response = await client.get(
            "/api/kudos",
            headers=auth_headers(alice),
            params={"fromUserId": str(alice.id), "limit": 2, "page": 2},
        )
        data = response.json()
        assert len(data["kudos"]) == 1
        assert data["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}

        too_big = await client.get("/api/kudos", headers=auth_headers(alice), params={"limit": 101})
        assert too_big.status_code == 400

    async def test_detail_includes_comments(self, client, make_user, auth_headers):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        kudos = (
            await client.post(
                "/api/kudos", headers=auth_headers(alice), json={"toUserId": str(bob.id), "message": "Nice"}
            )
        ).json()["kudos"]
        await client.post(
            "/api/comments", headers=auth_headers(bob), json={"kudosId": kudos["id"], "message": "Thanks!"}
        )

        detail = (await client.get(f"/api/kudos/{kudos['id']}", headers=auth_headers(alice))).json()["kudos"]
        assert [c["message"] for c in detail["comments"]] == ["Thanks!"]
        assert detail["comments"][0]["fromUser"]["name"] == "Bob"

    async def test_only_sender_or_admin_edits(self, client, make_user, auth_headers):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        admin = await make_user("Admin", UserRole.ADMIN)
        kudos_id = (
            await client.post(
                "/api/kudos", headers=auth_headers(alice), json={"toUserId": str(bob.id), "message": "v1"}
            )
        ).json()["kudos"]["id"]

        denied = await client.put(f"/api/kudos/{kudos_id}", headers=auth_headers(bob), json={"message": "hacked"})
        assert denied.status_code == 403
        assert error_message(denied) == "You can only edit your own kudos"

        own = await client.put(
            f"/api/kudos/{kudos_id}", headers=auth_headers(alice), json={"message": "v2", "isPublic": False}
        )
        assert own.json()["kudos"]["message"] == "v2"
        assert own.json()["kudos"]["isPublic"] is False

        by_admin = await client.put(f"/api/kudos/{kudos_id}", headers=auth_headers(admin), json={"message": "v3"})
        assert by_admin.status_code == 200

    async def test_delete_approved_kudos_reverses_counters(self, client, db, make_user, auth_headers):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        kudos_id = (
            await client.post(
                "/api/kudos", headers=auth_headers(alice), json={"toUserId": str(bob.id), "message": "Oops"}
            )
        ).json()["kudos"]["id"]
        await client.post(
            "/api/comments", headers=auth_headers(bob), json={"kudosId": kudos_id, "message": "gone soon"}
        )

        denied = await client.delete(f"/api/kudos/{kudos_id}", headers=auth_headers(bob))
        assert denied.status_code == 403

        response = await client.delete(f"/api/kudos/{kudos_id}", headers=auth_headers(alice))
        assert response.status_code == 200
        assert await _counters(client, auth_headers(alice), alice.id) == (0, 0)
        assert await _counters(client, auth_headers(alice), bob.id) == (0, 0)

        assert (await client.get(f"/api/kudos/{kudos_id}", headers=auth_headers(alice))).status_code == 404
        comments = await client.get("/api/comments", headers=auth_headers(alice), params={"kudosId": kudos_id})
        assert comments.status_code == 404
        async with db() as session:
            assert await session.scalar(select(func.count()).select_from(Comment)) == 0

    async def test_tags_listed_by_name(self, client, db, make_user, auth_headers):
        alice = await make_user("Alice")
        await add_tag(db, "Leadership", "👑")
        await add_tag(db, "Innovation", "💡")

        response = await client.get("/api/kudos/tags", headers=auth_headers(alice))
        assert [t["name"] for t in response.json()["tags"]] == ["Innovation", "Leadership"]

        legacy = await client.get("/api/kudos/tags/all", headers=auth_headers(alice))
        assert legacy.json() == response.json()
