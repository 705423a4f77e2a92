# -*- coding: utf-8 -*-
"""App database — SQLite helpers and schema.

Every user-owned table carries ``user_id`` directly or reaches it through its
parent row; storage helpers always filter on it.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS profiles (
        user_id TEXT PRIMARY KEY,
        full_name TEXT,
        phone TEXT,
        avatar_url TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS health_markers (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        unit TEXT NOT NULL,
        min_reference REAL,
        max_reference REAL,
        personal_goal REAL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE(user_id, name),
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS health_marker_values (
        id TEXT PRIMARY KEY,
        marker_id TEXT NOT NULL,
        value REAL NOT NULL,
        measured_at TEXT NOT NULL,
        notes TEXT,
        supplement_intervention_id TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY(marker_id) REFERENCES health_markers(id) ON DELETE CASCADE,
        FOREIGN KEY(supplement_intervention_id) REFERENCES supplements(id) ON DELETE SET NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_marker_values_marker_measured ON health_marker_values(marker_id, measured_at);",
    """
    CREATE TABLE IF NOT EXISTS supplements (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        dosage TEXT,
        form TEXT,
        frequency TEXT,
        start_date TEXT,
        end_date TEXT,
        is_active INTEGER NOT NULL DEFAULT 1,
        linked_marker_id TEXT,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE(user_id, name),
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE,
        FOREIGN KEY(linked_marker_id) REFERENCES health_markers(id) ON DELETE SET NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS supplement_logs (
        id TEXT PRIMARY KEY,
        supplement_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        taken_at TEXT NOT NULL,
        dose TEXT,
        notes TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY(supplement_id) REFERENCES supplements(id) ON DELETE CASCADE,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_supplement_logs_user_taken ON supplement_logs(user_id, taken_at DESC);",
    """
    CREATE TABLE IF NOT EXISTS workouts (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        description TEXT,
        category TEXT,
        difficulty_level TEXT,
        estimated_duration INTEGER,
        week_days TEXT NOT NULL DEFAULT '[]',
        is_template INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS workout_exercises (
        id TEXT PRIMARY KEY,
        workout_id TEXT NOT NULL,
        name TEXT NOT NULL,
        sets INTEGER NOT NULL,
        reps INTEGER NOT NULL,
        load REAL,
        notes TEXT,
        order_index INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS workout_checkins (
        id TEXT PRIMARY KEY,
        workout_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        completed_at TEXT NOT NULL,
        notes TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE CASCADE,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_workout_checkins_user_completed ON workout_checkins(user_id, completed_at);",
    """
    CREATE TABLE IF NOT EXISTS nutrition_meals (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        category TEXT NOT NULL,
        eaten_at TEXT NOT NULL,
        total_calories REAL NOT NULL DEFAULT 0,
        protein_g REAL NOT NULL DEFAULT 0,
        carbs_g REAL NOT NULL DEFAULT 0,
        fat_g REAL NOT NULL DEFAULT 0,
        notes TEXT,
        image_url TEXT,
        is_ai_generated INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_nutrition_meals_user_eaten ON nutrition_meals(user_id, eaten_at);",
    """
    CREATE TABLE IF NOT EXISTS nutrition_items (
        id TEXT PRIMARY KEY,
        meal_id TEXT NOT NULL,
        name TEXT NOT NULL,
        quantity TEXT,
        calories REAL NOT NULL DEFAULT 0,
        protein_g REAL NOT NULL DEFAULT 0,
        carbs_g REAL NOT NULL DEFAULT 0,
        fat_g REAL NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        FOREIGN KEY(meal_id) REFERENCES nutrition_meals(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS water_logs (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        amount_ml INTEGER NOT NULL,
        logged_at TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS nutrition_ai_logs (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        type TEXT NOT NULL,
        suggestion_text TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS body_measurements (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        measured_at TEXT NOT NULL,
        weight_kg REAL NOT NULL,
        height_m REAL,
        imc REAL,
        fat_percent REAL,
        fat_weight_kg REAL,
        lean_mass_kg REAL,
        water_percent REAL,
        basal_metabolic_rate INTEGER,
        attachment_url TEXT,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_body_measurements_user_measured ON body_measurements(user_id, measured_at DESC);",
    """
    CREATE TABLE IF NOT EXISTS body_segments (
        id TEXT PRIMARY KEY,
        measurement_id TEXT NOT NULL,
        region TEXT NOT NULL,
        lean_mass_kg REAL,
        fat_mass_kg REAL,
        created_at TEXT NOT NULL,
        FOREIGN KEY(measurement_id) REFERENCES body_measurements(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS staged_imports (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        kind TEXT NOT NULL,
        status TEXT NOT NULL,
        payload_json TEXT NOT NULL,
        warnings_json TEXT NOT NULL DEFAULT '[]',
        source_filename TEXT,
        result_json TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        committed_at TEXT,
        FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_staged_imports_user_status_created ON staged_imports(user_id, status, created_at DESC);",
]


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def init_app_db(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        cur = conn.cursor()
        for statement in _SCHEMA:
            cur.execute(statement)
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Yield a connection; commit when the block succeeds.

    Closing without commit rolls back, so a block that raises leaves no partial writes.
    """
    conn = connect(db_path)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
