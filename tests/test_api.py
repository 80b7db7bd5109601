"""End-to-end API tests over the ASGI app."""
import pytest


def auth(user_id: int) -> dict:
    return {"X-User-Id": str(user_id)}


QUIZ_BODY = {
    "title": "Water Wise",
    "description": "Saving water at school",
    "questions": [
        {"prompt": "Turn off the tap while brushing?", "options": ["Yes", "No"], "correct_index": 0},
        {"prompt": "A dripping tap wastes?", "options": ["Nothing", "Litres a day"], "correct_index": 1, "points": 5},
    ],
}


class TestIdentity:

    async def test_register_then_fetch_profile(self, client):
        resp = await client.post("/users", json={
            "full_name": "Maya Chen", "username": "maya", "email": "maya@school.test", "grade": "5",
        })
        assert resp.status_code == 201
        profile = resp.json()
        assert profile["points"] == 0
        assert profile["role"] == "user"

        me = await client.get("/users/me", headers=auth(profile["id"]))
        assert me.status_code == 200
        assert me.json()["username"] == "maya"

    async def test_duplicate_registration(self, client, make_user):
        await make_user(username="taken", email="taken@school.test")
        resp = await client.post("/users", json={
            "full_name": "Someone", "username": "taken", "email": "new@school.test",
        })
        assert resp.status_code == 400

    @pytest.mark.parametrize("headers", [{}, {"X-User-Id": "abc"}, {"X-User-Id": "9999"}])
    async def test_unauthenticated(self, client, headers):
        resp = await client.get("/users/me", headers=headers)
        assert resp.status_code == 401

    async def test_update_profile(self, client, make_user):
        user_id = await make_user()
        resp = await client.put("/users/me", json={"school": "Oakwood High"}, headers=auth(user_id))
        assert resp.status_code == 200
        assert resp.json()["school"] == "Oakwood High"
        assert resp.json()["badges"] == ["First Steps"]

    async def test_profile_badges_follow_points_and_quizzes(self, client, make_user, make_lesson):
        educator_id = await make_user(role="educator")
        user_id = await make_user()

        me = (await client.get("/users/me", headers=auth(user_id))).json()
        assert me["badges"] == ["First Steps"]

        lesson_id = await make_lesson(points_reward=100)
        await client.post(f"/lessons/{lesson_id}/complete", headers=auth(user_id))
        quiz_id = (await client.post("/quizzes", json=QUIZ_BODY, headers=auth(educator_id))).json()["id"]
        for _ in range(3):
            await client.post(
                "/quizzes/submit", json={"quiz_id": quiz_id, "answers": [1, 0]}, headers=auth(user_id)
            )

        me = (await client.get("/users/me", headers=auth(user_id))).json()
        assert me["points"] == 100
        assert me["badges"] == ["First Steps", "Quiz Master", "Point Collector"]


class TestWateringFlow:

    async def test_submit_and_duplicate(self, client, make_user):
        user_id = await make_user()

        first = await client.post("/watering", json={"evidence": "plant.jpg"}, headers=auth(user_id))
        assert first.status_code == 201
        body = first.json()
        assert body["new_points"] == 15
        assert body["new_streak"] == 1
        assert body["record"]["verified"] is True

        second = await client.post("/watering", json={"evidence": "plant.jpg"}, headers=auth(user_id))
        assert second.status_code == 409
        assert second.json()["detail"] == "You have already submitted a watering record for today."

        history = await client.get("/watering", headers=auth(user_id))
        assert len(history.json()) == 1

    async def test_missing_evidence(self, client, make_user):
        user_id = await make_user()
        resp = await client.post("/watering", json={}, headers=auth(user_id))
        assert resp.status_code == 400
        assert "evidence" in resp.json()["detail"]

    async def test_dashboard_and_ledger(self, client, make_user):
        user_id = await make_user()
        await client.post("/watering", json={"evidence": "plant.jpg"}, headers=auth(user_id))

        dash = (await client.get("/users/me/dashboard", headers=auth(user_id))).json()
        assert dash["points"] == 15
        assert dash["stored_streak"] == 1
        assert dash["computed_streak"] == 1
        assert dash["watered_today"] is True
        assert dash["badges"] == ["First Steps"]
        assert [(m["name"], m["unlocked"], m["days_to_go"]) for m in dash["streak_milestones"]] == [
            ("Seedling Caretaker", False, 2),
            ("Green Thumb", False, 6),
            ("Plant Master", False, 29),
        ]

        ledger = (await client.get("/users/me/ledger", headers=auth(user_id))).json()
        assert [(e["kind"], e["delta"], e["balance_after"]) for e in ledger] == [("watering", 15, 15)]


class TestSubmissions:

    async def test_submit_activity(self, client, make_user):
        user_id = await make_user()
        resp = await client.post(
            "/submissions",
            json={"type": "Planting", "note": "Planted basil", "evidence": "basil.jpg"},
            headers=auth(user_id),
        )
        assert resp.status_code == 201
        assert resp.json()["new_points"] == 10
        assert resp.json()["submission"]["verified"] is False

    async def test_unknown_type_rejected_by_schema(self, client, make_user):
        user_id = await make_user()
        resp = await client.post(
            "/submissions",
            json={"type": "Skydiving", "note": "n", "evidence": "e"},
            headers=auth(user_id),
        )
        assert resp.status_code == 422

    async def test_missing_fields(self, client, make_user):
        user_id = await make_user()
        resp = await client.post("/submissions", json={"type": "Cleanup"}, headers=auth(user_id))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing required field(s): note, evidence"


class TestQuizzes:

    async def test_only_staff_can_create(self, client, make_user):
        user_id = await make_user()
        resp = await client.post("/quizzes", json=QUIZ_BODY, headers=auth(user_id))
        assert resp.status_code == 403

    async def test_create_view_and_submit(self, client, make_user):
        educator_id = await make_user(role="educator")
        player_id = await make_user()

        created = await client.post("/quizzes", json=QUIZ_BODY, headers=auth(educator_id))
        assert created.status_code == 201
        quiz_id = created.json()["id"]

        view = (await client.get(f"/quizzes/{quiz_id}", headers=auth(player_id))).json()
        assert [q["points"] for q in view["questions"]] == [10, 5]
        assert all("correct_index" not in q for q in view["questions"])

        result = await client.post(
            "/quizzes/submit",
            json={"quiz_id": quiz_id, "answers": [0, None]},
            headers=auth(player_id),
        )
        assert result.status_code == 200
        assert result.json()["total_points"] == 10
        assert result.json()["correct_answers"] == 1
        assert result.json()["total_questions"] == 2
        assert result.json()["new_points"] == 10

    async def test_unknown_quiz(self, client, make_user):
        user_id = await make_user()
        resp = await client.post("/quizzes/submit", json={"quiz_id": 31337, "answers": []}, headers=auth(user_id))
        assert resp.status_code == 404


class TestLessonsAndRedemptions:

    async def test_complete_lesson_once_then_redeem(self, client, make_user, make_lesson):
        user_id = await make_user()
        lesson_id = await make_lesson(points_reward=100)

        done = await client.post(f"/lessons/{lesson_id}/complete", headers=auth(user_id))
        assert done.status_code == 200
        assert done.json()["points_earned"] == 100

        again = await client.post(f"/lessons/{lesson_id}/complete", headers=auth(user_id))
        assert again.status_code == 409

        too_much = await client.post(
            "/redemptions", json={"reward_name": "Bike", "cost": 500}, headers=auth(user_id)
        )
        assert too_much.status_code == 400
        assert too_much.json()["detail"] == "Not enough points to redeem this reward."

        ok = await client.post(
            "/redemptions", json={"reward_name": "Seed kit", "cost": 60}, headers=auth(user_id)
        )
        assert ok.status_code == 201
        assert ok.json()["new_points"] == 40

        history = (await client.get("/redemptions", headers=auth(user_id))).json()
        assert [r["reward"] for r in history] == ["Seed kit"]

    async def test_unknown_lesson(self, client, make_user):
        user_id = await make_user()
        resp = await client.post("/lessons/404/complete", headers=auth(user_id))
        assert resp.status_code == 404

    async def test_educator_authors_lessons(self, client, make_user):
        educator_id = await make_user(role="educator")
        created = await client.post("/lessons", json={
            "title": "Composting 101", "type": "text", "content": "Greens and browns.", "points_reward": 15,
        }, headers=auth(educator_id))
        assert created.status_code == 201
        lesson_id = created.json()["id"]

        updated = await client.put(f"/lessons/{lesson_id}", json={"points_reward": 25}, headers=auth(educator_id))
        assert updated.json()["points_reward"] == 25
        assert updated.json()["title"] == "Composting 101"

        deleted = await client.delete(f"/lessons/{lesson_id}", headers=auth(educator_id))
        assert deleted.status_code == 200
        assert (await client.get(f"/lessons/{lesson_id}", headers=auth(educator_id))).status_code == 404


class TestAdminUsers:

    async def test_educator_cannot_grant_admin(self, client, make_user):
        educator_id = await make_user(role="educator")
        target_id = await make_user()

        resp = await client.put(f"/admin/users/{target_id}/role", json={"role": "admin"}, headers=auth(educator_id))
        assert resp.status_code == 403

        resp = await client.put(f"/admin/users/{target_id}/role", json={"role": "educator"}, headers=auth(educator_id))
        assert resp.status_code == 200
        assert resp.json()["role"] == "educator"

    async def test_admin_removes_user_and_their_records(self, client, make_user):
        admin_id = await make_user(role="admin")
        target_id = await make_user()
        await client.post("/watering", json={"evidence": "plant.jpg"}, headers=auth(target_id))

        resp = await client.delete(f"/admin/users/{target_id}", headers=auth(admin_id))
        assert resp.status_code == 200

        detail = await client.get(f"/admin/users/{target_id}", headers=auth(admin_id))
        assert detail.status_code == 404
        pending = await client.get("/admin/watering/pending", headers=auth(admin_id))
        assert pending.json() == []

    async def test_admin_cannot_remove_self(self, client, make_user):
        admin_id = await make_user(role="admin")
        resp = await client.delete(f"/admin/users/{admin_id}", headers=auth(admin_id))
        assert resp.status_code == 403

    async def test_educator_cannot_remove_users(self, client, make_user):
        educator_id = await make_user(role="educator")
        target_id = await make_user()
        resp = await client.delete(f"/admin/users/{target_id}", headers=auth(educator_id))
        assert resp.status_code == 403

    async def test_user_detail_and_analytics(self, client, make_user):
        admin_id = await make_user(role="admin")
        player_id = await make_user()
        await client.post("/watering", json={"evidence": "plant.jpg"}, headers=auth(player_id))
        await client.post(
            "/submissions",
            json={"type": "Recycling", "note": "Cans", "evidence": "cans.jpg"},
            headers=auth(player_id),
        )

        detail = (await client.get(f"/admin/users/{player_id}", headers=auth(admin_id))).json()
        assert detail["user"]["points"] == 25
        assert detail["computed_streak"] == 1
        assert len(detail["submissions"]) == 1

        stats = (await client.get("/admin/analytics", headers=auth(admin_id))).json()
        assert stats["total_users"] == 2
        assert stats["total_submissions"] == 1
        assert stats["verified_submissions"] == 0
        assert stats["total_watering_records"] == 1
        assert stats["total_points_awarded"] == 25


class TestSystem:

    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
        assert "X-Process-Time" in resp.headers

    async def test_ready_and_live(self, client):
        assert (await client.get("/ready")).json() == {"status": "ready"}
        assert (await client.get("/live")).json() == {"status": "alive"}

    async def test_api_description_lists_activity_types_and_redemption_rule(self, client):
        description = (await client.get("/openapi.json")).json()["info"]["description"]
        assert "Planting, Cleanup, Recycling, Conservation" in description
        assert "Redemptions never overdraw" in description
