"""SQLite snapshot store for people and their relations."""

from pathlib import Path
import sqlite3

from familyforest.models import (
    Gender,
    ParentChildKind,
    ParentChildRelation,
    Person,
    SpousalKind,
    SpousalRelation,
)
from familyforest.parsing import GENDER_ALIASES, enum_value


def create_database(db_path: Path | str) -> sqlite3.Connection:
    """Create SQLite database with person, relationship and spouse_relation tables."""
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA foreign_keys = ON")
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS person (
            id TEXT PRIMARY KEY,
            first_name TEXT NOT NULL,
            last_name TEXT,
            birth_date TEXT,
            death_date TEXT,
            gender TEXT NOT NULL DEFAULT 'unknown',
            bio TEXT,
            image_url TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS relationship (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            parent_id TEXT NOT NULL,
            child_id TEXT NOT NULL,
            type TEXT NOT NULL DEFAULT 'biological',
            UNIQUE (parent_id, child_id),
            CHECK (parent_id <> child_id),
            FOREIGN KEY (parent_id) REFERENCES person(id) ON DELETE CASCADE,
            FOREIGN KEY (child_id) REFERENCES person(id) ON DELETE CASCADE
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS spouse_relation (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            spouse1_id TEXT NOT NULL,
            spouse2_id TEXT NOT NULL,
            type TEXT NOT NULL DEFAULT 'married',
            start_date TEXT,
            end_date TEXT,
            CHECK (spouse1_id <> spouse2_id),
            FOREIGN KEY (spouse1_id) REFERENCES person(id) ON DELETE CASCADE,
            FOREIGN KEY (spouse2_id) REFERENCES person(id) ON DELETE CASCADE
        )
    """)

    # One row per unordered pair, whichever way round it was stored
    cursor.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS spouse_pair
        ON spouse_relation (min(spouse1_id, spouse2_id), max(spouse1_id, spouse2_id))
    """)

    conn.commit()
    return conn


def store_data(
    conn: sqlite3.Connection,
    persons: list[Person],
    parent_child: list[ParentChildRelation],
    spousal: list[SpousalRelation],
) -> int:
    """
    Insert people and relations into the database.

    Relations that break a table constraint (unknown person, self reference,
    duplicate) are skipped. Returns the number of relations skipped.
    """
    cursor = conn.cursor()

    cursor.executemany(
        """
        INSERT INTO person
        (id, first_name, last_name, birth_date, death_date, gender, bio, image_url)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT (id) DO UPDATE SET
            first_name = excluded.first_name,
            last_name = excluded.last_name,
            birth_date = excluded.birth_date,
            death_date = excluded.death_date,
            gender = excluded.gender,
            bio = excluded.bio,
            image_url = excluded.image_url
        """,
        [
            (
                p.id,
                p.first_name,
                p.last_name,
                p.birth_date,
                p.death_date,
                p.gender.value,
                p.bio,
                p.image_url,
            )
            for p in persons
        ],
    )

    known = {row[0] for row in cursor.execute("SELECT id FROM person")}
    pc_rows = [
        (r.parent_id, r.child_id, r.kind.value)
        for r in parent_child
        if r.parent_id in known and r.child_id in known
    ]
    sp_rows = [
        (r.spouse1_id, r.spouse2_id, r.kind.value, r.start_date, r.end_date)
        for r in spousal
        if r.spouse1_id in known and r.spouse2_id in known
    ]

    # OR IGNORE covers the UNIQUE and CHECK constraints
    before = conn.total_changes
    cursor.executemany(
        """
        INSERT OR IGNORE INTO relationship (parent_id, child_id, type)
        VALUES (?, ?, ?)
        """,
        pc_rows,
    )
    cursor.executemany(
        """
        INSERT OR IGNORE INTO spouse_relation (spouse1_id, spouse2_id, type, start_date, end_date)
        VALUES (?, ?, ?, ?, ?)
        """,
        sp_rows,
    )
    inserted = conn.total_changes - before

    conn.commit()
    return len(parent_child) + len(spousal) - inserted


def delete_person(conn: sqlite3.Connection, person_id: str) -> bool:
    """Delete a person; their relations go with them. Returns False if no such person."""
    conn.execute("PRAGMA foreign_keys = ON")
    cursor = conn.execute("DELETE FROM person WHERE id = ?", (person_id,))
    conn.commit()
    return cursor.rowcount > 0


def load_snapshot(
    conn: sqlite3.Connection,
) -> tuple[list[Person], list[ParentChildRelation], list[SpousalRelation]]:
    """Read all three tables inside one transaction so they agree with each other."""
    cursor = conn.cursor()
    if not conn.in_transaction:
        cursor.execute("BEGIN")
    try:
        cursor.execute("""
            SELECT id, first_name, last_name, birth_date, death_date, gender, bio, image_url
            FROM person ORDER BY created_at, rowid
        """)
        persons = [
            Person(
                id=row[0],
                first_name=row[1],
                last_name=row[2],
                birth_date=row[3],
                death_date=row[4],
                gender=enum_value(Gender, row[5], Gender.UNKNOWN, GENDER_ALIASES),
                bio=row[6],
                image_url=row[7],
            )
            for row in cursor.fetchall()
        ]

        cursor.execute("SELECT parent_id, child_id, type FROM relationship ORDER BY id")
        parent_child = [
            ParentChildRelation(
                parent_id=row[0],
                child_id=row[1],
                kind=enum_value(ParentChildKind, row[2], ParentChildKind.BIOLOGICAL),
            )
            for row in cursor.fetchall()
        ]

        cursor.execute(
            "SELECT spouse1_id, spouse2_id, type, start_date, end_date FROM spouse_relation ORDER BY id"
        )
        spousal = [
            SpousalRelation(
                spouse1_id=row[0],
                spouse2_id=row[1],
                kind=enum_value(SpousalKind, row[2], SpousalKind.MARRIED),
                start_date=row[3],
                end_date=row[4],
            )
            for row in cursor.fetchall()
        ]
    finally:
        conn.commit()

    return persons, parent_child, spousal
