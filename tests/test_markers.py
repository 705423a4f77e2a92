# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from apptest import AppTestCase


class TestMarkers(AppTestCase):
    def _create(self, headers, **fields):
        body = {"name": "Vitamina D", "unit": "ng/mL", "min_reference": 30, "max_reference": 100}
        body.update(fields)
        resp = self.client.post("/api/markers", headers=headers, json=body)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def _add_value(self, headers, marker_id, value, measured_at):
        resp = self.client.post(
            f"/api/markers/{marker_id}/values",
            headers=headers,
            json={"value": value, "measured_at": measured_at},
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def test_marker_is_private_to_its_owner(self) -> None:
        alice = self.register()
        bob = self.register()
        marker = self._create(alice)

        self.assertEqual(self.client.get(f"/api/markers/{marker['id']}", headers=alice).status_code, 200)
        self.assertEqual(self.client.get(f"/api/markers/{marker['id']}", headers=bob).status_code, 404)
        self.assertEqual(self.client.delete(f"/api/markers/{marker['id']}", headers=bob).status_code, 404)
        resp = self.client.post(f"/api/markers/{marker['id']}/values", headers=bob, json={"value": 1})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(self.client.get("/api/markers", headers=bob).json(), [])

    def test_duplicate_name_and_bad_bounds(self) -> None:
        headers = self.register()
        self._create(headers, name="Ferritina")
        resp = self.client.post("/api/markers", headers=headers, json={"name": "Ferritina", "unit": "ng/mL"})
        self.assertEqual(resp.status_code, 409)

        resp = self.client.post(
            "/api/markers",
            headers=headers,
            json={"name": "TSH", "unit": "mUI/L", "min_reference": 5, "max_reference": 1},
        )
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post("/api/markers", headers=headers, json={"name": "B12", "unit": "pg/mL", "min_reference": -1})
        self.assertEqual(resp.status_code, 422)

    def test_latest_value_follows_measured_at(self) -> None:
        headers = self.register()
        marker = self._create(headers)
        self._add_value(headers, marker["id"], 45, "2024-03-01T08:00:00Z")
        # inserted later but measured earlier
        self._add_value(headers, marker["id"], 20, "2024-01-01T08:00:00Z")

        body = self.client.get(f"/api/markers/{marker['id']}", headers=headers).json()
        self.assertEqual(body["latest_value"]["value"], 45)
        self.assertEqual(body["status"], "NORMAL")

        values = self.client.get(f"/api/markers/{marker['id']}/values", headers=headers).json()
        self.assertEqual(values["count"], 2)
        self.assertEqual([v["value"] for v in values["values"]], [20, 45])

    def test_delete_value_removes_exactly_that_row(self) -> None:
        headers = self.register()
        marker = self._create(headers)
        first = self._add_value(headers, marker["id"], 40, "2024-01-01")
        second = self._add_value(headers, marker["id"], 50, "2024-02-01")
        third = self._add_value(headers, marker["id"], 60, "2024-03-01")

        resp = self.client.delete(f"/api/markers/{marker['id']}/values/{second['id']}", headers=headers)
        self.assertEqual(resp.status_code, 200)
        ids = [v["id"] for v in self.client.get(f"/api/markers/{marker['id']}/values", headers=headers).json()["values"]]
        self.assertEqual(ids, [first["id"], third["id"]])

        resp = self.client.delete(f"/api/markers/{marker['id']}/values/{second['id']}", headers=headers)
        self.assertEqual(resp.status_code, 404)

    def test_update_marker_partial(self) -> None:
        headers = self.register()
        marker = self._create(headers, name="Glicose", unit="mg/dL", min_reference=70, max_reference=99)
        resp = self.client.patch(f"/api/markers/{marker['id']}", headers=headers, json={"personal_goal": 85})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["personal_goal"], 85)
        self.assertEqual(body["min_reference"], 70)

        resp = self.client.patch(f"/api/markers/{marker['id']}", headers=headers, json={"min_reference": 120})
        self.assertEqual(resp.status_code, 400)

        for field in ("unit", "name"):
            resp = self.client.patch(f"/api/markers/{marker['id']}", headers=headers, json={field: None})
            self.assertEqual(resp.status_code, 400, field)
        self.assertEqual(self.client.get(f"/api/markers/{marker['id']}", headers=headers).json()["unit"], "mg/dL")

    def test_status_with_one_sided_bounds(self) -> None:
        headers = self.register()
        ldl = self._create(headers, name="LDL", unit="mg/dL", min_reference=None, max_reference=130)
        self._add_value(headers, ldl["id"], 150, "2024-01-01")
        hdl = self._create(headers, name="HDL", unit="mg/dL", min_reference=40, max_reference=None)
        self._add_value(headers, hdl["id"], 55, "2024-01-01")
        free = self._create(headers, name="Homocisteina", unit="umol/L", min_reference=None, max_reference=None)
        self._add_value(headers, free["id"], 9, "2024-01-01")

        status = {m["name"]: m["status"] for m in self.client.get("/api/markers", headers=headers).json()}
        self.assertEqual(status, {"HDL": "NORMAL", "Homocisteina": "UNKNOWN", "LDL": "HIGH"})

    def test_alerts(self) -> None:
        headers = self.register()
        marker = self._create(headers, personal_goal=60)
        for day, value in (("2024-01-01", 20), ("2024-02-01", 25), ("2024-03-01", 28)):
            self._add_value(headers, marker["id"], value, day)

        alerts = self.client.get(f"/api/markers/{marker['id']}/alerts", headers=headers).json()
        self.assertEqual(sorted(a["level"] for a in alerts), ["info", "warning"])
        warning = [a for a in alerts if a["level"] == "warning"][0]
        self.assertEqual(warning["values"], [20, 25, 28])

        # back in range: the warning clears, the goal is still missed
        self._add_value(headers, marker["id"], 45, "2024-04-01")
        alerts = self.client.get("/api/markers/alerts", headers=headers).json()
        self.assertEqual([a["level"] for a in alerts], ["info"])

    def test_delete_marker_cascades_values(self) -> None:
        headers = self.register()
        marker = self._create(headers)
        self._add_value(headers, marker["id"], 40, "2024-01-01")
        self.assertEqual(self.client.delete(f"/api/markers/{marker['id']}", headers=headers).status_code, 200)
        self.assertEqual(self.client.get(f"/api/markers/{marker['id']}/values", headers=headers).status_code, 404)
        self.assertEqual(self.client.get("/api/exams", headers=headers).json(), [])


if __name__ == "__main__":
    unittest.main()
