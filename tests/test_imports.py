# -*- coding: utf-8 -*-

from __future__ import annotations

import base64
import unittest
from unittest import mock

from apptest import AppTestCase, completion

PNG_B64 = base64.b64encode(b"\x89PNG\r\n\x1a\n" + b"\x00" * 64).decode("ascii")

EXAM_ANSWER = {
    "exam_date": "2024-05-10",
    "markers": [
        {"marker_name": "Glicose", "value": 92, "unit": "mg/dL", "reference_range": "70 - 99", "ana_ref": "NORMAL"},
        {"marker_name": "Vitamina D", "value": "18,5", "unit": "ng/mL", "reference_range": "> 30"},
        {"marker_name": "PCR", "value": None, "unit": "mg/L", "reference_range": ""},
    ],
}


class TestExamImports(AppTestCase):
    def _stage(self, headers, answer=EXAM_ANSWER, **extra):
        body = {"file_base64": PNG_B64, "mime_type": "image/png", "filename": "exam.png"}
        body.update(extra)
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)):
            return self.client.post("/api/imports/exam", headers=headers, json=body)

    def test_stage_writes_only_the_draft(self) -> None:
        headers = self.register()
        resp = self._stage(headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        staged = resp.json()
        self.assertEqual(staged["kind"], "exam")
        self.assertEqual(staged["status"], "staged")
        self.assertEqual(staged["source_filename"], "exam.png")
        self.assertEqual(staged["payload"]["exam_date"], "2024-05-10")
        vit_d = staged["payload"]["markers"][1]
        self.assertEqual(vit_d["value"], 18.5)
        self.assertEqual(vit_d["ana_ref"], "LOW")
        self.assertEqual(len(staged["warnings"]), 1)

        self.assertEqual(self.client.get("/api/markers", headers=headers).json(), [])
        listed = self.client.get("/api/imports?status=staged", headers=headers).json()
        self.assertEqual([i["id"] for i in listed], [staged["id"]])

    def test_malformed_ai_json_writes_nothing(self) -> None:
        headers = self.register()
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value='{"exam_date": "2024-05-10", "markers": [ '):
            resp = self.client.post(
                "/api/imports/exam",
                headers=headers,
                json={"file_base64": PNG_B64, "mime_type": "image/png", "auto_commit": True},
            )
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(self.client.get("/api/imports", headers=headers).json(), [])
        self.assertEqual(self.client.get("/api/markers", headers=headers).json(), [])

    def test_gateway_failure_is_502(self) -> None:
        from healthtrack.ai.gateway import AIGatewayError

        headers = self.register()
        with mock.patch("healthtrack.ai.gateway.chat_completion", side_effect=AIGatewayError("AI API error: 503")):
            resp = self.client.post(
                "/api/imports/exam",
                headers=headers,
                json={"file_base64": PNG_B64, "mime_type": "image/png"},
            )
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(self.client.get("/api/imports", headers=headers).json(), [])

    def test_rejects_unsupported_upload(self) -> None:
        headers = self.register()
        with mock.patch("healthtrack.ai.gateway.chat_completion") as chat:
            resp = self.client.post(
                "/api/imports/exam",
                headers=headers,
                json={"file_base64": PNG_B64, "mime_type": "text/plain"},
            )
            self.assertEqual(resp.status_code, 400)
            resp = self.client.post(
                "/api/imports/exam",
                headers=headers,
                json={"file_base64": "not base64 at all!!", "mime_type": "image/png"},
            )
            self.assertEqual(resp.status_code, 400)
        chat.assert_not_called()

    def test_review_edits_then_commit(self) -> None:
        headers = self.register()
        staged = self._stage(headers).json()
        import_id = staged["id"]

        # fix the value the model could not read, drop glucose, add a marker by hand
        resp = self.client.patch(f"/api/imports/{import_id}/entries/2", headers=headers, json={"entry": {"value": 3.2}})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["payload"]["markers"][2]["unit"], "mg/L")
        resp = self.client.delete(f"/api/imports/{import_id}/entries/0", headers=headers)
        self.assertEqual([m["marker_name"] for m in resp.json()["payload"]["markers"]], ["Vitamina D", "PCR"])
        resp = self.client.post(
            f"/api/imports/{import_id}/entries",
            headers=headers,
            json={"entry": {"marker_name": "Ferritina", "value": 80, "unit": "ng/mL", "reference_range": "15 a 150"}},
        )
        self.assertEqual(len(resp.json()["payload"]["markers"]), 3)
        resp = self.client.delete(f"/api/imports/{import_id}/entries/9", headers=headers)
        self.assertEqual(resp.status_code, 404)
        resp = self.client.post(f"/api/imports/{import_id}/entries", headers=headers, json={"entry": {"value": -1}})
        self.assertEqual(resp.status_code, 422)

        resp = self.client.post(f"/api/imports/{import_id}/commit", headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        committed = resp.json()
        self.assertEqual(committed["status"], "committed")
        self.assertEqual(committed["result"]["values_created"], 3)
        self.assertEqual(sorted(committed["result"]["markers_created"]), ["Ferritina", "PCR", "Vitamina D"])

        markers = {m["name"]: m for m in self.client.get("/api/markers", headers=headers).json()}
        self.assertEqual(set(markers), {"Ferritina", "PCR", "Vitamina D"})
        self.assertEqual(markers["Vitamina D"]["min_reference"], 30)
        self.assertIsNone(markers["Vitamina D"]["max_reference"])
        self.assertEqual(markers["Vitamina D"]["status"], "LOW")
        self.assertEqual(markers["Ferritina"]["max_reference"], 150)
        self.assertEqual(markers["Ferritina"]["latest_value"]["measured_at"], "2024-05-10T00:00:00Z")

        resp = self.client.post(f"/api/imports/{import_id}/commit", headers=headers)
        self.assertEqual(resp.status_code, 409)
        resp = self.client.patch(f"/api/imports/{import_id}/entries/0", headers=headers, json={"entry": {"value": 1}})
        self.assertEqual(resp.status_code, 409)

    def test_commit_reuses_existing_marker_and_skips_missing_values(self) -> None:
        headers = self.register()
        resp = self.client.post(
            "/api/markers",
            headers=headers,
            json={"name": "Glicose", "unit": "mg/dL", "min_reference": 60, "max_reference": 100},
        )
        glucose = resp.json()
        staged = self._stage(headers).json()
        committed = self.client.post(f"/api/imports/{staged['id']}/commit", headers=headers).json()
        self.assertEqual(committed["result"]["skipped"], ["PCR"])
        self.assertEqual(committed["result"]["markers_created"], ["Vitamina D"])

        values = self.client.get(f"/api/markers/{glucose['id']}/values", headers=headers).json()
        self.assertEqual([v["value"] for v in values["values"]], [92])
        marker = self.client.get(f"/api/markers/{glucose['id']}", headers=headers).json()
        self.assertEqual(marker["min_reference"], 60)

    def test_failed_commit_writes_nothing(self) -> None:
        import sqlite3

        from fastapi.testclient import TestClient

        from healthtrack.imports import storage

        headers = self.register()
        staged = self._stage(headers).json()
        real_insert_value = storage.insert_value
        calls = []

        def fail_on_second(*args, **kwargs):
            calls.append(args)
            if len(calls) == 2:
                raise sqlite3.OperationalError("disk I/O error")
            return real_insert_value(*args, **kwargs)

        client = TestClient(self.app, raise_server_exceptions=False)
        with mock.patch("healthtrack.imports.storage.insert_value", side_effect=fail_on_second):
            resp = client.post(f"/api/imports/{staged['id']}/commit", headers=headers)
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(len(calls), 2)

        self.assertEqual(self.client.get("/api/markers", headers=headers).json(), [])
        current = self.client.get(f"/api/imports/{staged['id']}", headers=headers).json()
        self.assertEqual(current["status"], "staged")
        self.assertIsNone(current["result"])

        # the same draft commits cleanly once the failure is gone
        resp = self.client.post(f"/api/imports/{staged['id']}/commit", headers=headers)
        self.assertEqual(resp.json()["result"]["values_created"], 2)

    def test_replace_payload_and_discard(self) -> None:
        headers = self.register()
        staged = self._stage(headers).json()
        resp = self.client.put(
            f"/api/imports/{staged['id']}/payload",
            headers=headers,
            json={"payload": {"exam_date": "2024-05-11", "markers": [{"marker_name": "TSH", "value": 2.0}]}},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["payload"]["exam_date"], "2024-05-11")

        resp = self.client.put(
            f"/api/imports/{staged['id']}/payload",
            headers=headers,
            json={"payload": {"exam_date": "11/05/2024", "markers": []}},
        )
        self.assertEqual(resp.status_code, 422)

        resp = self.client.post(f"/api/imports/{staged['id']}/discard", headers=headers)
        self.assertEqual(resp.json()["status"], "discarded")
        self.assertEqual(self.client.post(f"/api/imports/{staged['id']}/commit", headers=headers).status_code, 409)
        self.assertEqual(self.client.get("/api/markers", headers=headers).json(), [])

    def test_auto_commit(self) -> None:
        headers = self.register()
        resp = self._stage(headers, auto_commit=True)
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["status"], "committed")
        self.assertEqual(len(self.client.get("/api/markers", headers=headers).json()), 2)

    def test_imports_are_private(self) -> None:
        alice = self.register()
        bob = self.register()
        staged = self._stage(alice).json()
        self.assertEqual(self.client.get(f"/api/imports/{staged['id']}", headers=bob).status_code, 404)
        self.assertEqual(self.client.post(f"/api/imports/{staged['id']}/commit", headers=bob).status_code, 404)


class TestWorkoutAndMealImports(AppTestCase):
    def test_workout_draft_commit(self) -> None:
        headers = self.register()
        answer = {
            "name": "Full body",
            "category": "strength",
            "difficulty": "beginner",
            "duration": 40,
            "week_days": ["monday", "thursday"],
            "exercises": [
                {"name": "Agachamento", "sets": 3, "reps": 12, "load": 20},
                {"name": "Remada", "sets": 3, "reps": 10, "load": 15},
            ],
        }
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)):
            resp = self.client.post("/api/imports/workout", headers=headers, json={"prompt": "treino de 40 min"})
        self.assertEqual(resp.status_code, 201, resp.text)
        staged = resp.json()
        self.assertEqual(staged["payload"]["difficulty_level"], "beginner")
        self.assertEqual(staged["payload"]["estimated_duration"], 40)
        self.assertEqual(self.client.get("/api/workouts", headers=headers).json(), [])

        self.client.patch(f"/api/imports/{staged['id']}/entries/1", headers=headers, json={"entry": {"sets": 4}})
        committed = self.client.post(f"/api/imports/{staged['id']}/commit", headers=headers).json()
        workout = self.client.get(f"/api/workouts/{committed['result']['workout_id']}", headers=headers).json()
        self.assertEqual(workout["week_days"], ["monday", "thursday"])
        self.assertEqual([(e["name"], e["sets"]) for e in workout["exercises"]], [("Agachamento", 3), ("Remada", 4)])

    def test_workout_draft_with_oversized_name(self) -> None:
        headers = self.register()
        answer = {"name": "x" * 300, "category": "c" * 80, "exercises": 5}
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)):
            resp = self.client.post("/api/imports/workout", headers=headers, json={"prompt": "treino"})
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(len(resp.json()["payload"]["name"]), 200)
        self.assertEqual(resp.json()["payload"]["exercises"], [])

    def test_meal_draft_commit_from_description(self) -> None:
        headers = self.register()
        answer = {
            "total_calories": 400,
            "protein_g": 30,
            "carbs_g": 45,
            "fat_g": 10,
            "items": [
                {"name": "Arroz", "calories": 200, "protein_g": 4, "carbs_g": 44, "fat_g": 0.5, "quantity": "150 g"},
                {"name": "Frango", "calories": 200, "protein_g": 26, "carbs_g": 1, "fat_g": 9.5, "quantity": "120 g"},
            ],
        }
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)):
            resp = self.client.post(
                "/api/imports/meal",
                headers=headers,
                json={"description": "arroz com frango", "category": "almoco", "eaten_at": "2024-06-01T12:30:00Z"},
            )
        self.assertEqual(resp.status_code, 201, resp.text)
        staged = resp.json()
        self.assertEqual(staged["payload"]["name"], "arroz com frango")

        self.client.delete(f"/api/imports/{staged['id']}/entries/1", headers=headers)
        committed = self.client.post(f"/api/imports/{staged['id']}/commit", headers=headers).json()
        self.assertEqual(committed["result"]["total_calories"], 200)

        meals = self.client.get("/api/nutrition/meals?date=2024-06-01", headers=headers).json()
        self.assertEqual(len(meals), 1)
        self.assertTrue(meals[0]["is_ai_generated"])
        self.assertEqual(meals[0]["category"], "almoco")
        self.assertEqual(meals[0]["protein_g"], 4)

    def test_meal_requires_a_source(self) -> None:
        headers = self.register()
        resp = self.client.post("/api/imports/meal", headers=headers, json={"name": "jantar"})
        self.assertEqual(resp.status_code, 422)


if __name__ == "__main__":
    unittest.main()
