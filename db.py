import csv
import datetime
import os
import sqlite3
from contextlib import contextmanager
from typing import List, Optional, Tuple

from config import DEFAULT_DB_PATH, YamlConfig
from models import (
    AlertRow,
    AlertSeverity,
    AlertType,
    ExerciseCategory,
    ExerciseRecord,
    MuscleGroup,
    PersonalRecordRow,
    PRType,
    RIRResponse,
    SetRecord,
    WorkoutRecord,
)
from settings_schema import DEFAULT_SETTINGS, SettingsSchema, validate_settings
from algorithms.volume_balance import VolumeBalance


def _now() -> str:
    return datetime.datetime.now().isoformat(timespec="seconds")


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "exercises": (
            """CREATE TABLE exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    category TEXT NOT NULL,
                    is_compound INTEGER NOT NULL DEFAULT 1,
                    is_default_variation INTEGER NOT NULL DEFAULT 0,
                    muscle_group TEXT,
                    description TEXT,
                    created_at TEXT
                );""",
            [
                "id",
                "name",
                "category",
                "is_compound",
                "is_default_variation",
                "muscle_group",
                "description",
                "created_at",
            ],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    date TEXT NOT NULL,
                    program_name TEXT,
                    workout_type TEXT,
                    notes TEXT,
                    duration_minutes INTEGER,
                    completed INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT
                );""",
            [
                "id",
                "date",
                "program_name",
                "workout_type",
                "notes",
                "duration_minutes",
                "completed",
                "created_at",
            ],
        ),
        "sets": (
            """CREATE TABLE sets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id INTEGER NOT NULL,
                    exercise_id INTEGER NOT NULL,
                    set_number INTEGER NOT NULL,
                    weight REAL NOT NULL,
                    reps INTEGER NOT NULL,
                    rir_response TEXT,
                    target_reps INTEGER,
                    is_warmup INTEGER NOT NULL DEFAULT 0,
                    notes TEXT,
                    created_at TEXT,
                    FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE CASCADE,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id)
                );""",
            [
                "id",
                "workout_id",
                "exercise_id",
                "set_number",
                "weight",
                "reps",
                "rir_response",
                "target_reps",
                "is_warmup",
                "notes",
                "created_at",
            ],
        ),
        "personal_records": (
            """CREATE TABLE personal_records (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    exercise_id INTEGER NOT NULL,
                    workout_id INTEGER,
                    set_id INTEGER,
                    pr_type TEXT NOT NULL,
                    weight REAL NOT NULL,
                    reps INTEGER NOT NULL,
                    volume REAL,
                    date TEXT NOT NULL,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id),
                    FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE SET NULL,
                    FOREIGN KEY(set_id) REFERENCES sets(id) ON DELETE SET NULL
                );""",
            [
                "id",
                "exercise_id",
                "workout_id",
                "set_id",
                "pr_type",
                "weight",
                "reps",
                "volume",
                "date",
            ],
        ),
        "alerts": (
            """CREATE TABLE alerts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    exercise_id INTEGER NOT NULL,
                    alert_type TEXT NOT NULL,
                    severity TEXT NOT NULL,
                    message TEXT NOT NULL,
                    is_dismissed INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id)
                );""",
            [
                "id",
                "exercise_id",
                "alert_type",
                "severity",
                "message",
                "is_dismissed",
                "created_at",
            ],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    _INDEXES = (
        "CREATE INDEX IF NOT EXISTS idx_sets_exercise ON sets(exercise_id, is_warmup);",
        "CREATE INDEX IF NOT EXISTS idx_sets_workout ON sets(workout_id, set_number);",
        "CREATE INDEX IF NOT EXISTS idx_workouts_date ON workouts(date);",
        "CREATE INDEX IF NOT EXISTS idx_pr_exercise ON personal_records(exercise_id, pr_type);",
        "CREATE INDEX IF NOT EXISTS idx_alerts_exercise ON alerts(exercise_id, alert_type, is_dismissed);",
    )

    def __init__(self, db_path: str = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._ensure_indexes()
        self._import_default_exercises()
        self._backfill_muscle_groups()
        self._init_settings()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        connection.execute("PRAGMA foreign_keys=on;")
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            conn.execute("PRAGMA foreign_keys=on;")

    def _ensure_indexes(self) -> None:
        with self._connection() as conn:
            for sql in self._INDEXES:
                conn.execute(sql)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col in ("is_warmup", "is_dismissed", "is_default_variation"):
                        return "0"
                    if col in ("is_compound", "completed"):
                        return "1"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")

    def _import_default_exercises(self) -> None:
        csv_path = os.path.join(os.path.dirname(__file__), "default_exercises.csv")
        if not os.path.exists(csv_path):
            return
        with open(csv_path, newline="", encoding="utf-8") as csvfile:
            reader = csv.DictReader(csvfile)
            records = [
                (
                    row["Exercise Name"],
                    row["Category"],
                    int(row["Compound"] or 1),
                    int(row["Default Variation"] or 0),
                    row.get("Muscle Group") or None,
                    row.get("Description") or None,
                )
                for row in reader
            ]
        with self._connection() as conn:
            for name, category, compound, default, group, description in records:
                conn.execute(
                    "INSERT OR IGNORE INTO exercises (name, category, is_compound, is_default_variation, muscle_group, description, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?);",
                    (name, category, compound, default, group, description, _now()),
                )

    def _backfill_muscle_groups(self) -> None:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT id, name FROM exercises WHERE muscle_group IS NULL;"
            ).fetchall()
            for exercise_id, name in rows:
                conn.execute(
                    "UPDATE exercises SET muscle_group = ? WHERE id = ?;",
                    (VolumeBalance.resolve_muscle_group(name).value, exercise_id),
                )

    def _init_settings(self) -> None:
        with self._connection() as conn:
            for key, value in DEFAULT_SETTINGS.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, str(value)),
                )


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()


class ExerciseRepository(BaseRepository):
    """Repository for the exercise library."""

    _COLUMNS = "id, name, category, is_compound, is_default_variation, muscle_group, description"

    @staticmethod
    def _record(row: Tuple) -> ExerciseRecord:
        eid, name, category, compound, default, group, description = row
        return ExerciseRecord(
            id=int(eid),
            name=name,
            category=ExerciseCategory.parse(category),
            is_compound=bool(compound),
            is_default_variation=bool(default),
            muscle_group=MuscleGroup.parse(group) or MuscleGroup.OTHER,
            description=description,
        )

    def add(
        self,
        name: str,
        category: ExerciseCategory | str,
        is_compound: bool = True,
        is_default_variation: bool = False,
        description: Optional[str] = None,
        muscle_group: MuscleGroup | str | None = None,
    ) -> int:
        name = name.strip()
        if not name:
            raise ValueError("name must not be empty")
        category = ExerciseCategory(category)
        if muscle_group is None:
            group = VolumeBalance.resolve_muscle_group(name)
        else:
            group = MuscleGroup(muscle_group)
        if self.fetch_all("SELECT id FROM exercises WHERE name = ?;", (name,)):
            raise ValueError("exercise already exists")
        return self.execute(
            "INSERT INTO exercises (name, category, is_compound, is_default_variation, muscle_group, description, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?);",
            (
                name,
                category.value,
                int(is_compound),
                int(is_default_variation),
                group.value,
                description,
                _now(),
            ),
        )

    def find(self, exercise_id: int) -> Optional[ExerciseRecord]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM exercises WHERE id = ?;", (exercise_id,)
        )
        return self._record(rows[0]) if rows else None

    def fetch_detail(self, exercise_id: int) -> ExerciseRecord:
        record = self.find(exercise_id)
        if record is None:
            raise ValueError("exercise not found")
        return record

    def fetch_category(self, exercise_id: int) -> Optional[ExerciseCategory]:
        """Return the parsed category, ``None`` for unknown ids or categories."""
        rows = self.fetch_all(
            "SELECT category FROM exercises WHERE id = ?;", (exercise_id,)
        )
        return ExerciseCategory.parse(rows[0][0]) if rows else None

    def fetch_all_exercises(self) -> List[ExerciseRecord]:
        rows = self.fetch_all(f"SELECT {self._COLUMNS} FROM exercises ORDER BY name;")
        return [self._record(r) for r in rows]

    def fetch_names_and_ids(self) -> List[Tuple[int, str]]:
        return [
            (int(eid), name)
            for eid, name in self.fetch_all("SELECT id, name FROM exercises ORDER BY name;")
        ]

    def fetch_by_category(self, category: ExerciseCategory | str) -> List[ExerciseRecord]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM exercises WHERE category = ? ORDER BY name;",
            (ExerciseCategory(category).value,),
        )
        return [self._record(r) for r in rows]

    def fetch_defaults(self) -> List[ExerciseRecord]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM exercises WHERE is_default_variation = 1 ORDER BY id;"
        )
        return [self._record(r) for r in rows]


class WorkoutRepository(BaseRepository):
    """Repository for workout table operations."""

    _COLUMNS = "w.id, w.date, w.program_name, w.workout_type, w.notes, w.duration_minutes, w.completed"

    @staticmethod
    def _record(row: Tuple) -> WorkoutRecord:
        wid, date, program, wtype, notes, duration, completed = row
        return WorkoutRecord(
            id=int(wid),
            date=date,
            program_name=program,
            workout_type=wtype,
            notes=notes,
            duration_minutes=duration,
            completed=bool(completed),
        )

    def create(
        self,
        date: str,
        program_name: Optional[str] = None,
        workout_type: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        datetime.date.fromisoformat(date)
        return self.execute(
            "INSERT INTO workouts (date, program_name, workout_type, notes, completed, created_at) "
            "VALUES (?, ?, ?, ?, 0, ?);",
            (date, program_name, workout_type, notes, _now()),
        )

    def complete(self, workout_id: int, duration_minutes: Optional[int] = None) -> None:
        self.execute(
            "UPDATE workouts SET completed = 1, duration_minutes = ? WHERE id = ?;",
            (duration_minutes, workout_id),
        )

    def fetch_detail(self, workout_id: int) -> WorkoutRecord:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workouts w WHERE w.id = ?;", (workout_id,)
        )
        if not rows:
            raise ValueError("workout not found")
        return self._record(rows[0])

    def fetch_recent(self, limit: int = 10) -> List[WorkoutRecord]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workouts w ORDER BY w.date DESC, w.id DESC LIMIT ?;",
            (limit,),
        )
        return [self._record(r) for r in rows]

    def fetch_today(self, today: Optional[datetime.date] = None) -> Optional[WorkoutRecord]:
        day = (today or datetime.date.today()).isoformat()
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workouts w WHERE w.date = ? ORDER BY w.id DESC LIMIT 1;",
            (day,),
        )
        return self._record(rows[0]) if rows else None

    def fetch_recent_for_exercise(self, exercise_id: int, limit: int) -> List[WorkoutRecord]:
        """Distinct workouts with a working set of the exercise, newest first."""
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workouts w "
            "WHERE EXISTS (SELECT 1 FROM sets s WHERE s.workout_id = w.id "
            "AND s.exercise_id = ? AND s.is_warmup = 0) "
            "ORDER BY w.date DESC, w.id DESC LIMIT ?;",
            (exercise_id, limit),
        )
        return [self._record(r) for r in rows]


class SetRepository(BaseRepository):
    """Repository for sets table operations. Sets are append-only."""

    _COLUMNS = (
        "s.id, s.workout_id, s.exercise_id, s.set_number, s.weight, s.reps, "
        "s.rir_response, s.target_reps, s.is_warmup, w.date"
    )

    @staticmethod
    def _record(row: Tuple) -> SetRecord:
        sid, wid, eid, number, weight, reps, rir, target, warmup, date = row
        return SetRecord(
            id=int(sid),
            workout_id=int(wid),
            exercise_id=int(eid),
            set_number=int(number),
            weight=float(weight),
            reps=int(reps),
            rir_response=RIRResponse.parse(rir),
            target_reps=int(target) if target is not None else None,
            is_warmup=bool(warmup),
            date=date,
        )

    def add(
        self,
        workout_id: int,
        exercise_id: int,
        set_number: int,
        weight: float,
        reps: int,
        rir_response: RIRResponse | str | None,
        target_reps: Optional[int] = None,
        is_warmup: bool = False,
        notes: Optional[str] = None,
    ) -> int:
        if set_number < 1:
            raise ValueError("set_number must be at least 1")
        if reps < 0:
            raise ValueError("reps must be non-negative")
        if weight < 0:
            raise ValueError("weight must be non-negative")
        rir = RIRResponse(rir_response).value if rir_response is not None else None
        if rir is None and not is_warmup:
            raise ValueError("rir_response is required for working sets")
        return self.execute(
            "INSERT INTO sets (workout_id, exercise_id, set_number, weight, reps, rir_response, target_reps, is_warmup, notes, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);",
            (
                workout_id,
                exercise_id,
                set_number,
                weight,
                reps,
                rir,
                target_reps,
                int(is_warmup),
                notes,
                _now(),
            ),
        )

    def next_set_number(self, workout_id: int, exercise_id: int) -> int:
        rows = self.fetch_all(
            "SELECT COALESCE(MAX(set_number), 0) + 1 FROM sets WHERE workout_id = ? AND exercise_id = ?;",
            (workout_id, exercise_id),
        )
        return int(rows[0][0]) if rows else 1

    def best_reps_at_weight(
        self, exercise_id: int, weight: float, exclude_set_id: Optional[int] = None
    ) -> Optional[int]:
        """Most reps logged in a working set at exactly ``weight``."""
        rows = self.fetch_all(
            "SELECT MAX(reps) FROM sets WHERE exercise_id = ? AND weight = ? "
            "AND is_warmup = 0 AND (? IS NULL OR id != ?);",
            (exercise_id, weight, exclude_set_id, exclude_set_id),
        )
        return int(rows[0][0]) if rows and rows[0][0] is not None else None

    def fetch_for_workout(self, workout_id: int) -> List[SetRecord]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM sets s JOIN workouts w ON s.workout_id = w.id "
            "WHERE s.workout_id = ? ORDER BY s.exercise_id, s.set_number;",
            (workout_id,),
        )
        return [self._record(r) for r in rows]

    def fetch_recent_for_exercise(self, exercise_id: int, limit: int = 50) -> List[SetRecord]:
        """Working sets, newest workout first, set number ascending within it."""
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM sets s JOIN workouts w ON s.workout_id = w.id "
            "WHERE s.exercise_id = ? AND s.is_warmup = 0 "
            "ORDER BY w.date DESC, w.id DESC, s.set_number ASC LIMIT ?;",
            (exercise_id, limit),
        )
        return [self._record(r) for r in rows]

    def count_by_muscle_group(self, start_date: str, end_date: str) -> dict[str, int]:
        """Working-set counts per stored muscle group between two dates."""
        rows = self.fetch_all(
            "SELECT e.muscle_group, COUNT(*) FROM sets s "
            "JOIN workouts w ON s.workout_id = w.id "
            "JOIN exercises e ON s.exercise_id = e.id "
            "WHERE s.is_warmup = 0 AND w.date >= ? AND w.date <= ? "
            "GROUP BY e.muscle_group;",
            (start_date, end_date),
        )
        return {group or MuscleGroup.OTHER.value: int(count) for group, count in rows}


class PersonalRecordRepository(BaseRepository):
    """Append-only store of personal records."""

    _COLUMNS = (
        "pr.id, pr.exercise_id, pr.workout_id, pr.set_id, pr.pr_type, pr.weight, "
        "pr.reps, pr.volume, pr.date"
    )

    @staticmethod
    def _record(row: Tuple) -> PersonalRecordRow:
        pid, eid, wid, sid, pr_type, weight, reps, volume, date, *rest = row
        return PersonalRecordRow(
            id=int(pid),
            exercise_id=int(eid),
            workout_id=wid,
            set_id=sid,
            pr_type=PRType(pr_type),
            weight=float(weight),
            reps=int(reps),
            volume=float(volume) if volume is not None else None,
            date=date,
            exercise_name=rest[0] if rest else None,
        )

    def add(
        self,
        exercise_id: int,
        workout_id: Optional[int],
        set_id: Optional[int],
        pr_type: PRType | str,
        weight: float,
        reps: int,
        date: Optional[str] = None,
    ) -> int:
        return self.execute(
            "INSERT INTO personal_records (exercise_id, workout_id, set_id, pr_type, weight, reps, volume, date) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?);",
            (
                exercise_id,
                workout_id,
                set_id,
                PRType(pr_type).value,
                weight,
                reps,
                weight * reps,
                date or _now(),
            ),
        )

    def fetch_for_exercise(self, exercise_id: int) -> List[PersonalRecordRow]:
        """All records for an exercise, newest first."""
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM personal_records pr WHERE pr.exercise_id = ? "
            "ORDER BY pr.date DESC, pr.id DESC;",
            (exercise_id,),
        )
        return [self._record(r) for r in rows]

    def fetch_recent(self, limit: int = 50) -> List[PersonalRecordRow]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS}, e.name FROM personal_records pr "
            "JOIN exercises e ON pr.exercise_id = e.id "
            "ORDER BY pr.date DESC, pr.id DESC LIMIT ?;",
            (limit,),
        )
        return [self._record(r) for r in rows]


class AlertRepository(BaseRepository):
    """Repository for coaching alerts."""

    _COLUMNS = (
        "a.id, a.exercise_id, a.alert_type, a.severity, a.message, a.is_dismissed, "
        "a.created_at, e.name"
    )

    @staticmethod
    def _record(row: Tuple) -> AlertRow:
        aid, eid, alert_type, severity, message, dismissed, created, name = row
        return AlertRow(
            id=int(aid),
            exercise_id=int(eid),
            alert_type=AlertType(alert_type),
            severity=AlertSeverity(severity),
            message=message,
            is_dismissed=bool(dismissed),
            created_at=created,
            exercise_name=name,
        )

    def add(
        self,
        exercise_id: int,
        alert_type: AlertType | str,
        severity: AlertSeverity | str,
        message: str,
        created_at: Optional[str] = None,
    ) -> int:
        return self.execute(
            "INSERT INTO alerts (exercise_id, alert_type, severity, message, is_dismissed, created_at) "
            "VALUES (?, ?, ?, ?, 0, ?);",
            (
                exercise_id,
                AlertType(alert_type).value,
                AlertSeverity(severity).value,
                message,
                created_at or _now(),
            ),
        )

    def has_active(self, exercise_id: int, alert_type: AlertType | str) -> bool:
        rows = self.fetch_all(
            "SELECT COUNT(*) FROM alerts WHERE exercise_id = ? AND alert_type = ? AND is_dismissed = 0;",
            (exercise_id, AlertType(alert_type).value),
        )
        return bool(rows and rows[0][0] > 0)

    def fetch_active(self) -> List[AlertRow]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM alerts a LEFT JOIN exercises e ON a.exercise_id = e.id "
            "WHERE a.is_dismissed = 0 ORDER BY a.created_at DESC, a.id DESC;"
        )
        return [self._record(r) for r in rows]

    def fetch_for_exercise(self, exercise_id: int) -> List[AlertRow]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM alerts a LEFT JOIN exercises e ON a.exercise_id = e.id "
            "WHERE a.exercise_id = ? AND a.is_dismissed = 0 ORDER BY a.created_at DESC, a.id DESC;",
            (exercise_id,),
        )
        return [self._record(r) for r in rows]

    def dismiss(self, alert_id: int) -> None:
        self.execute("UPDATE alerts SET is_dismissed = 1 WHERE id = ?;", (alert_id,))

    def delete_dismissed_before(self, cutoff: str) -> None:
        self.execute(
            "DELETE FROM alerts WHERE is_dismissed = 1 AND created_at < ?;", (cutoff,)
        )


class SettingsRepository(BaseRepository):
    """Repository for application settings synchronized with YAML."""

    def __init__(
        self, db_path: str = DEFAULT_DB_PATH, yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        raw = {k: v for k, v in rows}
        known = {k: raw[k] for k in SettingsSchema.model_fields if k in raw}
        result: dict = dict(raw)
        result.update(SettingsSchema(**known).model_dump())
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, str(value)),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def get_float(self, key: str, default: float) -> float:
        try:
            return float(self.get_text(key, str(default)))
        except ValueError:
            return default

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(float(self.get_text(key, str(default))))
        except ValueError:
            return default

    def get_bool(self, key: str, default: bool) -> bool:
        return self.get_text(key, "1" if default else "0") in {
            "1",
            "true",
            "True",
            "1.0",
        }

    def set_text(self, key: str, value: str) -> None:
        if key in SettingsSchema.model_fields:
            current = {k: v for k, v in self._raw_all_settings().items() if k in SettingsSchema.model_fields}
            current[key] = value
            validate_settings(current)
        self.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, value),
        )
        self._sync_to_yaml()

    def set_int(self, key: str, value: int) -> None:
        self.set_text(key, str(value))

    def set_float(self, key: str, value: float) -> None:
        self.set_text(key, str(value))

    def set_bool(self, key: str, value: bool) -> None:
        self.set_text(key, "1" if value else "0")

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()
