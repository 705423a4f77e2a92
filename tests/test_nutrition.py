# -*- coding: utf-8 -*-

from __future__ import annotations

import base64
import unittest
from unittest import mock

from apptest import AppTestCase, completion

JPEG_B64 = base64.b64encode(b"\xff\xd8\xff\xe0" + b"\x00" * 64).decode("ascii")

LUNCH = {
    "name": "Almoço",
    "category": "almoco",
    "eaten_at": "2024-06-01T12:30:00Z",
    "items": [
        {"name": "Arroz", "quantity": "150 g", "calories": 195, "protein_g": 4, "carbs_g": 42.3, "fat_g": 0.4},
        {"name": "Feijão", "quantity": "100 g", "calories": 76, "protein_g": 4.8, "carbs_g": 13.6, "fat_g": 0.5},
        {"name": "Frango", "calories": 165.5, "protein_g": 31, "fat_g": 3.6},
    ],
}


class TestMealsAndWater(AppTestCase):
    def test_meal_totals_are_item_sums(self) -> None:
        headers = self.register()
        resp = self.client.post("/api/nutrition/meals", headers=headers, json=LUNCH)
        self.assertEqual(resp.status_code, 201, resp.text)
        meal = resp.json()
        self.assertEqual(meal["total_calories"], 436.5)
        self.assertEqual(meal["protein_g"], 39.8)
        self.assertEqual(meal["carbs_g"], 55.9)
        self.assertEqual(meal["fat_g"], 4.5)
        self.assertEqual([i["name"] for i in meal["items"]], ["Arroz", "Feijão", "Frango"])
        self.assertFalse(meal["is_ai_generated"])

    def test_category_defaults_and_validation(self) -> None:
        headers = self.register()
        resp = self.client.post("/api/nutrition/meals", headers=headers, json={"name": "Lanche"})
        self.assertEqual(resp.json()["category"], "livre")
        self.assertEqual(resp.json()["total_calories"], 0)
        bad = {**LUNCH, "category": "brunch"}
        self.assertEqual(self.client.post("/api/nutrition/meals", headers=headers, json=bad).status_code, 422)
        bad = {**LUNCH, "items": [{"name": "Pão", "calories": -10}]}
        self.assertEqual(self.client.post("/api/nutrition/meals", headers=headers, json=bad).status_code, 422)

    def test_meals_by_day_and_summary(self) -> None:
        headers = self.register()
        self.client.post("/api/nutrition/meals", headers=headers, json=LUNCH)
        self.client.post(
            "/api/nutrition/meals",
            headers=headers,
            json={"name": "Café", "category": "cafe-manha", "eaten_at": "2024-06-01T08:00:00Z",
                  "items": [{"name": "Ovos", "calories": 140, "protein_g": 12, "fat_g": 10}]},
        )
        self.client.post(
            "/api/nutrition/meals",
            headers=headers,
            json={"name": "Jantar", "category": "jantar", "eaten_at": "2024-06-02T20:00:00Z"},
        )
        self.client.post("/api/nutrition/water", headers=headers, json={"amount_ml": 500, "logged_at": "2024-06-01T09:00:00Z"})
        self.client.post("/api/nutrition/water", headers=headers, json={"amount_ml": 250, "logged_at": "2024-06-01T15:00:00Z"})
        self.client.post("/api/nutrition/water", headers=headers, json={"amount_ml": 300, "logged_at": "2024-06-02T09:00:00Z"})

        meals = self.client.get("/api/nutrition/meals?date=2024-06-01", headers=headers).json()
        self.assertEqual([m["name"] for m in meals], ["Café", "Almoço"])

        summary = self.client.get("/api/nutrition/summary?date=2024-06-01", headers=headers).json()
        self.assertEqual(summary["meal_count"], 2)
        self.assertEqual(summary["calories"], 576.5)
        self.assertEqual(summary["protein_g"], 51.8)
        self.assertEqual(summary["water_ml"], 750)

        water = self.client.get("/api/nutrition/water?date=2024-06-01", headers=headers).json()
        self.assertEqual([w["amount_ml"] for w in water], [500, 250])
        self.assertEqual(self.client.get("/api/nutrition/meals?date=01-06-2024", headers=headers).status_code, 400)

    def test_water_and_meal_deletion(self) -> None:
        headers = self.register()
        self.assertEqual(self.client.post("/api/nutrition/water", headers=headers, json={"amount_ml": 0}).status_code, 422)
        log = self.client.post("/api/nutrition/water", headers=headers, json={"amount_ml": 200}).json()
        self.assertEqual(self.client.delete(f"/api/nutrition/water/{log['id']}", headers=headers).status_code, 200)
        self.assertEqual(self.client.delete(f"/api/nutrition/water/{log['id']}", headers=headers).status_code, 404)

        meal = self.client.post("/api/nutrition/meals", headers=headers, json=LUNCH).json()
        other = self.register()
        self.assertEqual(self.client.get(f"/api/nutrition/meals/{meal['id']}", headers=other).status_code, 404)
        self.assertEqual(self.client.delete(f"/api/nutrition/meals/{meal['id']}", headers=headers).status_code, 200)
        self.assertEqual(self.client.get(f"/api/nutrition/meals/{meal['id']}", headers=headers).status_code, 404)


class TestNutritionAI(AppTestCase):
    def test_macros_from_description(self) -> None:
        headers = self.register()
        answer = {"calories": "350 kcal", "protein": "20", "carbs": 40, "fat": "12,5", "foods": [{"food": "Tapioca", "kcal": 350}]}
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)) as chat:
            resp = self.client.post("/api/nutrition/ai/macros", headers=headers, json={"description": "uma tapioca com queijo"})
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["total_calories"], 350)
        self.assertEqual(body["fat_g"], 12.5)
        self.assertEqual(body["items"][0]["name"], "Tapioca")
        messages = chat.call_args[0][0]
        self.assertEqual(messages[1]["content"], "uma tapioca com queijo")

    def test_photo_requires_supported_image(self) -> None:
        headers = self.register()
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion({"items": []})) as chat:
            resp = self.client.post("/api/nutrition/ai/photo", headers=headers, json={})
            self.assertEqual(resp.status_code, 422)
            resp = self.client.post(
                "/api/nutrition/ai/photo",
                headers=headers,
                json={"image_base64": JPEG_B64, "image_mime": "application/pdf"},
            )
            self.assertEqual(resp.status_code, 400)
            resp = self.client.post(
                "/api/nutrition/ai/photo",
                headers=headers,
                json={"image_base64": f"data:image/jpeg;base64,{JPEG_B64}"},
            )
            self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(chat.call_count, 1)
        image_part = chat.call_args[0][0][1]["content"][1]
        self.assertTrue(image_part["image_url"]["url"].startswith("data:image/jpeg;base64,"))

    def test_suggest_sends_the_day(self) -> None:
        headers = self.register()
        self.client.post("/api/nutrition/meals", headers=headers, json=LUNCH)
        workout = self.client.post("/api/workouts", headers=headers, json={"name": "Treino A"}).json()
        self.client.post(
            f"/api/workouts/{workout['id']}/checkins", headers=headers, json={"completed_at": "2024-06-01T07:00:00Z"}
        )
        answer = {"name": "Iogurte com frutas", "reasoning": "leve", "calories": 220, "protein_g": 12, "carbs_g": 30, "fat_g": 5}
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)) as chat:
            resp = self.client.post(
                "/api/nutrition/ai/suggest",
                headers=headers,
                json={"date": "2024-06-01", "data": {"goal": "hipertrofia"}},
            )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["name"], "Iogurte com frutas")
        sent = chat.call_args[0][0][1]["content"]
        self.assertIn("Almoço", sent)
        self.assertIn("hipertrofia", sent)
        self.assertIn('"workoutsToday": 1', sent)

    def test_analyze_stores_insights_and_alerts(self) -> None:
        headers = self.register()
        answer = {
            "insights": ["Boa ingestão de proteína"],
            "alerts": "Pouca água hoje",
            "recommendations": ["Beba mais 1 L"],
        }
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value=completion(answer)):
            resp = self.client.post("/api/nutrition/ai/analyze", headers=headers, json={"date": "2024-06-01"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["alerts"], ["Pouca água hoje"])

        logs = self.client.get("/api/nutrition/ai/logs", headers=headers).json()
        self.assertEqual(sorted(l["type"] for l in logs), ["alert", "insight"])
        alerts = self.client.get("/api/nutrition/ai/logs?type=alert", headers=headers).json()
        self.assertEqual([l["suggestion_text"] for l in alerts], ["Pouca água hoje"])

    def test_unparseable_analysis_stores_nothing(self) -> None:
        headers = self.register()
        with mock.patch("healthtrack.ai.gateway.chat_completion", return_value="sem JSON aqui"):
            resp = self.client.post("/api/nutrition/ai/analyze", headers=headers, json={})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(self.client.get("/api/nutrition/ai/logs", headers=headers).json(), [])


if __name__ == "__main__":
    unittest.main()
