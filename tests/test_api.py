"""End-to-end tests through the HTTP routes."""

import pytest

from core.phases import Phase
from tests.conftest import auth_headers, make_award, make_user


@pytest.fixture
async def seeded(session_factory):
    async with session_factory() as session:
        admin = await make_user(session, "root", user_group="admin")
        una = await make_user(session, "una", user_group="staff")
        xavi = await make_user(session, "xavi", user_group="staff")
        yara = await make_user(session, "yara", user_group="staff")
        guest = await make_user(session, "gus", user_group="guest")
        award = await make_award(
            session,
            "Best Teammate",
            max_nominations=2,
            nomination_criteria={"groups": ["staff"]},
            voting_criteria={"groups": ["staff"]},
        )
        closed = await make_award(session, "Old Award", phase=Phase.CLOSED.value)
        await session.commit()
    return {
        "admin": admin, "una": una, "xavi": xavi, "yara": yara, "guest": guest,
        "award": award, "closed": closed,
    }


class TestAuth:
    async def test_missing_token(self, client, seeded):
        response = await client.get("/awards/")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_garbage_token(self, client, seeded):
        response = await client.get("/awards/", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401

    async def test_non_admin_rejected_from_admin_routes(self, client, seeded):
        headers = auth_headers(seeded["una"])
        assert (await client.get("/awards/all", headers=headers)).status_code == 403
        assert (await client.post("/admin/reset", headers=headers)).status_code == 403
        award_uuid = seeded["award"].uuid
        assert (await client.post(f"/awards/{award_uuid}/end-nomination", headers=headers)).status_code == 403


class TestAwardListing:
    async def test_non_admin_sees_eligible_open_awards(self, client, seeded):
        response = await client.get("/awards/", headers=auth_headers(seeded["una"]))
        assert response.status_code == 200
        assert [a["name"] for a in response.json()] == ["Best Teammate"]

    async def test_ineligible_user_sees_nothing(self, client, seeded):
        response = await client.get("/awards/", headers=auth_headers(seeded["guest"]))
        assert response.json() == []

    async def test_admin_sees_everything(self, client, seeded):
        response = await client.get("/awards/", headers=auth_headers(seeded["admin"]))
        assert {a["name"] for a in response.json()} == {"Best Teammate", "Old Award"}


class TestNominationFlow:
    async def test_nominate_then_listed_as_nominated(self, client, seeded):
        headers = auth_headers(seeded["una"])
        award_uuid = seeded["award"].uuid

        response = await client.post(
            f"/awards/{award_uuid}/nominations",
            json={"nominee_ids": [str(seeded["xavi"].uuid), str(seeded["yara"].uuid)]},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["changed"] is True

        listing = (await client.get("/awards/", headers=headers)).json()
        assert listing[0]["has_nominated"] is True
        assert listing[0]["has_voted"] is False

        mine = (await client.get("/me/nominations", headers=headers)).json()
        assert set(mine[0]["nominations"]) == {str(seeded["xavi"].uuid), str(seeded["yara"].uuid)}

    async def test_self_nomination_is_a_bad_request(self, client, seeded):
        response = await client.post(
            f"/awards/{seeded['award'].uuid}/nominations",
            json={"nominee_ids": [str(seeded["una"].uuid)]},
            headers=auth_headers(seeded["una"]),
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "You cannot nominate yourself"

    async def test_voting_during_nomination_is_forbidden(self, client, seeded):
        response = await client.post(
            f"/awards/{seeded['award'].uuid}/final-vote",
            json={"nominee_id": str(seeded["xavi"].uuid)},
            headers=auth_headers(seeded["una"]),
        )
        assert response.status_code == 403

    async def test_unknown_award(self, client, seeded):
        response = await client.get(
            "/awards/00000000-0000-0000-0000-000000000000/candidates",
            headers=auth_headers(seeded["una"]),
        )
        assert response.status_code == 404

    async def test_results_hidden_from_users_until_results_phase(self, client, seeded):
        url = f"/awards/{seeded['award'].uuid}/results"
        assert (await client.get(url, headers=auth_headers(seeded["una"]))).status_code == 403
        assert (await client.get(url, headers=auth_headers(seeded["admin"]))).status_code == 200


class TestFullCycle:
    async def test_nominate_vote_and_read_results(self, client, seeded):
        admin = auth_headers(seeded["admin"])
        una = auth_headers(seeded["una"])
        award_uuid = seeded["award"].uuid
        xavi_uuid = str(seeded["xavi"].uuid)

        await client.post(f"/awards/{award_uuid}/nominations", json={"nominee_ids": [xavi_uuid]}, headers=una)

        response = await client.post(f"/awards/{award_uuid}/end-nomination", headers=admin)
        assert response.json()["phase"] == "FINAL_VOTING"

        candidates = (await client.get(f"/awards/{award_uuid}/candidates", headers=una)).json()
        assert [c["user"]["uuid"] for c in candidates] == [xavi_uuid]

        response = await client.post(f"/awards/{award_uuid}/final-vote", json={"nominee_id": xavi_uuid}, headers=una)
        assert response.status_code == 200

        # Ending nominations again leaves the award where it is
        response = await client.post(f"/awards/{award_uuid}/end-nomination", headers=admin)
        assert response.json()["phase"] == "FINAL_VOTING"

        response = await client.post(f"/awards/{award_uuid}/end-voting", headers=admin)
        assert response.json()["phase"] == "RESULTS"

        results = (await client.get(f"/awards/{award_uuid}/results", headers=una)).json()
        assert [(r["nominee_id"], r["vote_count"]) for r in results] == [(xavi_uuid, 1)]

        votes = (await client.get("/me/final-votes", headers=una)).json()
        assert votes == [{"award_id": str(award_uuid), "nominee_id": xavi_uuid, "nomination_group_id": None}]


class TestAdminRoutes:
    async def test_create_award_validates_criteria(self, client, seeded):
        response = await client.post(
            "/awards/",
            json={"name": "Broken", "nomination_criteria": {"groups": "staff"}},
            headers=auth_headers(seeded["admin"]),
        )
        assert response.status_code == 422

    async def test_create_award_uses_default_finalist_count(self, client, seeded):
        response = await client.post("/awards/", json={"name": "New"}, headers=auth_headers(seeded["admin"]))
        assert response.status_code == 201
        assert response.json()["finalist_count"] == 4
        assert response.json()["phase"] == "NOMINATION"

    async def test_toggle_active_hides_award(self, client, seeded):
        award_uuid = seeded["award"].uuid
        response = await client.post(
            f"/awards/{award_uuid}/active", json={"active": False}, headers=auth_headers(seeded["admin"])
        )
        assert response.json()["active"] is False
        assert (await client.get("/awards/", headers=auth_headers(seeded["una"]))).json() == []

    async def test_bulk_phase(self, client, seeded):
        response = await client.post(
            "/admin/phase",
            json={"from_phase": "NOMINATION", "to_phase": "RESULTS"},
            headers=auth_headers(seeded["admin"]),
        )
        assert [a["name"] for a in response.json()] == ["Best Teammate"]

    async def test_reset(self, client, seeded):
        admin = auth_headers(seeded["admin"])
        response = await client.post("/admin/reset", headers=admin)
        assert response.status_code == 200
        phases = {a["phase"] for a in (await client.get("/awards/all", headers=admin)).json()}
        assert phases == {"NOMINATION"}

    async def test_award_nominations_page(self, client, seeded):
        award_uuid = seeded["award"].uuid
        await client.post(
            f"/awards/{award_uuid}/nominations",
            json={"nominee_ids": [str(seeded["xavi"].uuid)]},
            headers=auth_headers(seeded["una"]),
        )

        response = await client.get(f"/awards/{award_uuid}/nominations", headers=auth_headers(seeded["admin"]))

        page = response.json()
        assert page["total"] == 1
        assert page["items"][0]["nominee"]["username"] == "xavi"
        assert page["items"][0]["nominators"] == "Una"


class TestStorageFailures:
    async def test_failed_replace_keeps_previous_nominations(self, client, seeded, monkeypatch):
        from sqlalchemy.exc import SQLAlchemyError
        from sqlalchemy.ext.asyncio import AsyncSession

        headers = auth_headers(seeded["una"])
        url = f"/awards/{seeded['award'].uuid}/nominations"
        xavi_uuid = str(seeded["xavi"].uuid)
        await client.post(url, json={"nominee_ids": [xavi_uuid]}, headers=headers)

        async def failing_flush(self, objects=None):
            raise SQLAlchemyError("insert failed")

        # The old rows are already deleted when the new ones fail to flush
        monkeypatch.setattr(AsyncSession, "flush", failing_flush)
        response = await client.post(url, json={"nominee_ids": [str(seeded["yara"].uuid)]}, headers=headers)
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to submit nominations"
        mine = (await client.get("/me/nominations", headers=headers)).json()
        assert mine[0]["nominations"] == [xavi_uuid]

    async def test_me_storage_error(self, client, seeded, monkeypatch):
        from sqlalchemy.exc import SQLAlchemyError

        from crud.user_crud import user_crud

        async def failing_get(session, user_id):
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(user_crud, "get_user_by_id", failing_get)
        response = await client.get("/me/", headers=auth_headers(seeded["una"]))

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch your profile"

    async def test_nominations_page_served_without_startup(self, client, seeded):
        response = await client.get(
            f"/awards/{seeded['award'].uuid}/nominations", headers=auth_headers(seeded["admin"])
        )
        assert response.status_code == 200
        assert response.json()["items"] == []
