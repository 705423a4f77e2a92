# -*- coding: utf-8 -*-

from __future__ import annotations

import base64
import unittest
from unittest import mock

from apptest import AppTestCase, completion

PDF_URL = "data:application/pdf;base64," + base64.b64encode(b"%PDF-1.4\n" + b"0" * 64).decode("ascii")


class TestFunctions(AppTestCase):
    def test_generate_workout_requires_prompt(self) -> None:
        headers = self.register()
        with mock.patch("healthtrack.ai.gateway.chat_completion") as chat:
            resp = self.client.post("/api/functions/generate-workout", headers=headers, json={"prompt": "   "})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Prompt is required"})
        chat.assert_not_called()

    def test_generate_workout(self) -> None:
        headers = self.register()
        answer = {
            "name": "HIIT",
            "difficulty_level": "advanced",
            "estimated_duration": "25 min",
            "week_days": ["Tuesday", "funday"],
            "exercises": [{"exercise": "Burpee", "sets": "4", "repetitions": 15}, {"name": ""}],
        }
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)):
            resp = self.client.post("/api/functions/generate-workout", headers=headers, json={"prompt": "hiit curto"})
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["name"], "HIIT")
        self.assertEqual(body["difficulty"], "advanced")
        self.assertEqual(body["duration"], 25)
        self.assertEqual(body["week_days"], ["tuesday"])
        self.assertEqual(body["exercises"], [{"name": "Burpee", "sets": 4, "reps": 15, "load": 0.0, "notes": None}])

    def test_generate_workout_gateway_error(self) -> None:
        from healthtrack.ai.gateway import AIGatewayError

        headers = self.register()
        with mock.patch("healthtrack.ai.gateway.chat_completion", side_effect=AIGatewayError("AI API error: 429")):
            resp = self.client.post("/api/functions/generate-workout", headers=headers, json={"prompt": "treino"})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "AI API error: 429"})

    def test_generate_workout_odd_shapes_still_answer_json(self) -> None:
        headers = self.register()
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion({"name": "x" * 300})):
            resp = self.client.post("/api/functions/generate-workout", headers=headers, json={"prompt": "treino"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(len(resp.json()["name"]), 200)

        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion({"name": "A", "exercises": 5})):
            resp = self.client.post("/api/functions/generate-workout", headers=headers, json={"prompt": "treino"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["exercises"], [])

    def test_unusable_ai_content_is_a_json_error(self) -> None:
        from healthtrack.ai.models import FoodEstimate

        headers = self.register()
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion({"items": []})), mock.patch(
            "healthtrack.ai.tasks.normalize_macros", side_effect=lambda parsed: FoodEstimate.model_validate(parsed)
        ):
            resp = self.client.post(
                "/api/functions/nutrition-ai",
                headers=headers,
                json={"type": "calculate-macros", "data": {"description": "pão"}},
            )
        self.assertEqual(resp.status_code, 500)
        self.assertIn("Invalid AI response content", resp.json()["error"])

    def test_nutrition_ai_invalid_type(self) -> None:
        headers = self.register()
        resp = self.client.post("/api/functions/nutrition-ai", headers=headers, json={"type": "magic", "data": {}})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Invalid type"})

    def test_nutrition_ai_calculate_macros(self) -> None:
        headers = self.register()
        answer = {"total_calories": 500, "protein_g": 30, "carbs_g": 50, "fat_g": 20, "items": []}
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)) as chat:
            resp = self.client.post(
                "/api/functions/nutrition-ai",
                headers=headers,
                json={"type": "calculate-macros", "data": {"description": "prato feito"}},
            )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["total_calories"], 500)
        self.assertEqual(chat.call_args[0][0][1]["content"], "Refeição: prato feito")

        resp = self.client.post(
            "/api/functions/nutrition-ai",
            headers=headers,
            json={"type": "calculate-macros", "data": {}},
        )
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "description is required"})

    def test_nutrition_ai_analyze(self) -> None:
        headers = self.register()
        answer = {"insights": "Dia equilibrado", "warnings": ["Pouca fibra"], "recommendations": []}
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)):
            resp = self.client.post(
                "/api/functions/nutrition-ai",
                headers=headers,
                json={"type": "analyze-nutrition", "data": {"calories": 1800}},
            )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json(), {"insights": ["Dia equilibrado"], "alerts": ["Pouca fibra"], "recommendations": []})

    def test_process_exam(self) -> None:
        headers = self.register()
        answer = {
            "date": "10/05/2024",
            "results": [{"name": "Hemoglobina", "result": "13,9 g/dL", "unit": "g/dL", "reference": "12 a 16"}],
        }
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)):
            resp = self.client.post("/api/functions/process-exam", headers=headers, json={"file": PDF_URL})
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["exam_date"], "2024-05-10")
        self.assertEqual(
            body["markers"],
            [{"name": "Hemoglobina", "value": 13.9, "unit": "g/dL", "reference_range": "12 a 16", "ana_ref": "NORMAL"}],
        )
        self.assertEqual(body["warnings"], [])
        # nothing is persisted by the function endpoints
        self.assertEqual(self.client.get("/api/markers", headers=headers).json(), [])

    def test_process_exam_failures(self) -> None:
        headers = self.register()
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value="```json\n{\"markers\": [\n```"):
            resp = self.client.post("/api/functions/process-exam", headers=headers, json={"file": PDF_URL})
        self.assertEqual(resp.status_code, 500)
        self.assertIn("error", resp.json())

        resp = self.client.post("/api/functions/process-exam", headers=headers, json={"file": "data:text/plain;base64,aGVsbG8="})
        self.assertEqual(resp.status_code, 500)
        self.assertIn("Unsupported file type", resp.json()["error"])

    def test_requires_auth(self) -> None:
        from fastapi.testclient import TestClient

        resp = TestClient(self.app).post("/api/functions/generate-workout", json={"prompt": "x"})
        self.assertEqual(resp.status_code, 401)


if __name__ == "__main__":
    unittest.main()
