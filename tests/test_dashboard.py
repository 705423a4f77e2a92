# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest
from datetime import datetime, timezone

from apptest import AppTestCase


class TestDashboard(AppTestCase):
    def test_empty_account(self) -> None:
        headers = self.register()
        resp = self.client.get("/api/dashboard/summary", headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["markers"], {"total": 0, "out_of_range": 0, "alerts": 0})
        self.assertEqual(body["active_supplements"], 0)
        self.assertEqual(body["supplement_adherence"], 0)
        self.assertEqual(body["workouts"], {"completed": 0, "planned": 0})
        self.assertEqual(body["nutrition"]["meal_count"], 0)
        self.assertIsNone(body["latest_body"])

    def test_summary_across_domains(self) -> None:
        headers = self.register()
        now = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

        marker = self.client.post(
            "/api/markers",
            headers=headers,
            json={"name": "Vitamina D", "unit": "ng/mL", "min_reference": 30, "max_reference": 100},
        ).json()
        for value, day in ((20, "2024-01-01"), (22, "2024-02-01"), (25, "2024-03-01")):
            self.client.post(f"/api/markers/{marker['id']}/values", headers=headers, json={"value": value, "measured_at": day})
        self.client.post("/api/markers", headers=headers, json={"name": "Peso", "unit": "kg"})

        sup = self.client.post("/api/supplements", headers=headers, json={"name": "Vitamina D3", "dosage": "2000 UI"}).json()
        self.client.post("/api/supplements", headers=headers, json={"name": "Ômega 3", "is_active": False})
        self.client.post(f"/api/supplements/{sup['id']}/logs", headers=headers, json={})

        workout = self.client.post(
            "/api/workouts", headers=headers, json={"name": "Treino A", "week_days": ["monday", "friday"]}
        ).json()
        self.client.post(f"/api/workouts/{workout['id']}/checkins", headers=headers, json={"completed_at": now})

        self.client.post(
            "/api/nutrition/meals",
            headers=headers,
            json={"name": "Almoço", "eaten_at": now, "items": [{"name": "Prato", "calories": 650, "protein_g": 40}]},
        )
        self.client.post("/api/nutrition/water", headers=headers, json={"amount_ml": 400, "logged_at": now})
        self.client.post("/api/body/measurements", headers=headers, json={"weight_kg": 78.5, "height_m": 1.75})

        body = self.client.get("/api/dashboard/summary", headers=headers).json()
        self.assertEqual(body["date"], now[:10])
        self.assertEqual(body["markers"], {"total": 2, "out_of_range": 1, "alerts": 1})
        self.assertEqual(body["active_supplements"], 1)
        self.assertEqual(body["supplement_adherence"], 14)
        self.assertEqual(body["workouts"], {"completed": 1, "planned": 2})
        self.assertEqual(body["nutrition"]["calories"], 650)
        self.assertEqual(body["nutrition"]["water_ml"], 400)
        self.assertEqual(body["latest_body"]["weight_kg"], 78.5)


if __name__ == "__main__":
    unittest.main()
