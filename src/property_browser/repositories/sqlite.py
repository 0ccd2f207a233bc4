"""SQLite repositories for listings and saved properties."""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Final

import aiosqlite
from pydantic import ValidationError

from property_browser.logging import get_logger
from property_browser.models import Property, SavedProperty
from property_browser.repositories.base import (
    PropertyRepository,
    RepositoryError,
    SavedPropertyRepository,
    snake_keys,
)
from property_browser.repositories.mock_data import MOCK_PROPERTIES, MOCK_SAVED_PROPERTIES

logger = get_logger(__name__)

_PROPERTY_COLUMNS: Final = (
    "name",
    "address",
    "city",
    "state",
    "zip_code",
    "price",
    "property_type",
    "status",
    "bedrooms",
    "bathrooms",
    "square_feet",
    "year_built",
    "description",
    "features",
    "images",
    "listing_date",
)


def _property_row(prop: Property) -> dict[str, Any]:
    """Column values for a property (lists newline-joined, dates ISO)."""
    row: dict[str, Any] = prop.model_dump(include=set(_PROPERTY_COLUMNS))
    row["features"] = "\n".join(prop.features)
    row["images"] = "\n".join(prop.images)
    row["listing_date"] = prop.listing_date.isoformat()
    return row


def _row_to_property(row: aiosqlite.Row) -> Property:
    return Property.model_validate(dict(row))


def _row_to_saved(row: aiosqlite.Row) -> SavedProperty:
    return SavedProperty.model_validate(dict(row))


class SqliteDatabase:
    """Owns the SQLite connection and schema shared by both repositories."""

    def __init__(self, db_path: str) -> None:
        """Initialize with a database path.

        Args:
            db_path: Path to SQLite database file, or ":memory:" for in-memory.
        """
        self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connection(self) -> aiosqlite.Connection:
        """Get or create the database connection."""
        if self._conn is None:
            self._conn = await aiosqlite.connect(self.db_path)
            self._conn.row_factory = aiosqlite.Row
            await self._conn.execute("PRAGMA journal_mode=WAL")
            await self._conn.execute("PRAGMA busy_timeout=5000")
        return self._conn

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def initialize(
        self,
        *,
        seed: Iterable[Property] | None = None,
        seed_saved: Iterable[SavedProperty] = (),
    ) -> None:
        """Create tables and, if the listings table is empty, load seed data.

        Args:
            seed: Listings inserted into an empty database (ids kept).
            seed_saved: Bookmarks inserted alongside the seed listings.
        """
        conn = await self.connection()
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS properties (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL DEFAULT '',
                address TEXT NOT NULL DEFAULT '',
                city TEXT NOT NULL DEFAULT '',
                state TEXT NOT NULL DEFAULT '',
                zip_code TEXT NOT NULL DEFAULT '',
                price REAL NOT NULL DEFAULT 0,
                property_type TEXT NOT NULL DEFAULT '',
                status TEXT NOT NULL DEFAULT 'For Sale',
                bedrooms INTEGER NOT NULL DEFAULT 0,
                bathrooms REAL NOT NULL DEFAULT 0,
                square_feet INTEGER NOT NULL DEFAULT 0,
                year_built INTEGER NOT NULL DEFAULT 0,
                description TEXT NOT NULL DEFAULT '',
                features TEXT NOT NULL DEFAULT '',
                images TEXT NOT NULL DEFAULT '',
                listing_date TEXT NOT NULL
            )
        """)
        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_properties_listing_date
            ON properties(listing_date)
        """)
        # Bookmarks may outlive the listing they point at
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS saved_properties (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                property_id INTEGER NOT NULL,
                saved_date TEXT NOT NULL,
                notes TEXT NOT NULL DEFAULT '',
                name TEXT NOT NULL DEFAULT ''
            )
        """)
        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_saved_properties_saved_date
            ON saved_properties(saved_date)
        """)
        await conn.commit()

        if seed is None:
            return
        try:
            await self._seed(conn, list(seed), list(seed_saved))
        except aiosqlite.Error as e:
            logger.error("database_seed_failed", path=self.db_path, error=str(e))
            raise RepositoryError("failed to seed database") from e

    async def _table_is_empty(self, conn: aiosqlite.Connection, table: str) -> bool:
        async with conn.execute(f"SELECT COUNT(*) FROM {table}") as cursor:
            row = await cursor.fetchone()
        return row is None or row[0] == 0

    async def _seed(
        self,
        conn: aiosqlite.Connection,
        listings: list[Property],
        bookmarks: list[SavedProperty],
    ) -> None:
        # Bookmarks can outlive their listings, so each table is checked on its own
        if not await self._table_is_empty(conn, "properties"):
            return
        columns = ("id", *_PROPERTY_COLUMNS)
        await conn.executemany(
            f"INSERT INTO properties ({', '.join(columns)}) "
            f"VALUES ({', '.join(':' + c for c in columns)})",
            [{"id": p.id, **_property_row(p)} for p in listings],
        )
        seeded_bookmarks = 0
        if await self._table_is_empty(conn, "saved_properties"):
            await conn.executemany(
                "INSERT INTO saved_properties (id, property_id, saved_date, notes, name) "
                "VALUES (:id, :property_id, :saved_date, :notes, :name)",
                [{**s.model_dump(), "saved_date": s.saved_date.isoformat()} for s in bookmarks],
            )
            seeded_bookmarks = len(bookmarks)
        await conn.commit()
        logger.info(
            "database_seeded",
            listings=len(listings),
            saved=seeded_bookmarks,
            path=self.db_path,
        )


class SqlitePropertyRepository(PropertyRepository):
    """Listings stored in the local ``properties`` table."""

    def __init__(self, db: SqliteDatabase) -> None:
        self._db = db

    async def close(self) -> None:
        await self._db.close()

    async def get_all(self) -> list[Property]:
        try:
            conn = await self._db.connection()
            async with conn.execute(
                "SELECT * FROM properties ORDER BY listing_date DESC, id DESC"
            ) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error("property_fetch_failed", error=str(e), exc_info=True)
            raise RepositoryError("failed to read properties") from e
        properties: list[Property] = []
        for row in rows:
            try:
                properties.append(_row_to_property(row))
            except ValidationError:
                logger.warning("property_row_skipped", property_id=row["id"], exc_info=True)
        return properties

    async def get_by_id(self, property_id: int) -> Property | None:
        try:
            conn = await self._db.connection()
            async with conn.execute(
                "SELECT * FROM properties WHERE id = ?", (property_id,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error:
            logger.error("property_lookup_failed", property_id=property_id, exc_info=True)
            return None
        if row is None:
            return None
        try:
            return _row_to_property(row)
        except ValidationError:
            logger.warning("property_row_invalid", property_id=property_id, exc_info=True)
            return None

    async def create(self, data: Mapping[str, Any]) -> Property:
        # Validate with a placeholder id; SQLite assigns the real one.
        draft = Property.model_validate({**snake_keys(data), "id": 0})
        row = _property_row(draft)
        try:
            conn = await self._db.connection()
            cursor = await conn.execute(
                f"INSERT INTO properties ({', '.join(_PROPERTY_COLUMNS)}) "
                f"VALUES ({', '.join(':' + c for c in _PROPERTY_COLUMNS)})",
                row,
            )
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error("property_create_failed", error=str(e))
            raise RepositoryError("failed to create property") from e
        new_id = cursor.lastrowid
        if new_id is None:
            raise RepositoryError("failed to create property")
        logger.info("property_created", property_id=new_id, backend="sqlite")
        return draft.model_copy(update={"id": new_id})

    async def update(self, property_id: int, changes: Mapping[str, Any]) -> Property | None:
        existing = await self.get_by_id(property_id)
        if existing is None:
            return None
        updated = Property.model_validate(
            {**existing.model_dump(), **snake_keys(changes), "id": property_id}
        )
        row = _property_row(updated)
        assignments = ", ".join(f"{c} = :{c}" for c in _PROPERTY_COLUMNS)
        try:
            conn = await self._db.connection()
            await conn.execute(
                f"UPDATE properties SET {assignments} WHERE id = :id",
                {**row, "id": property_id},
            )
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error("property_update_failed", property_id=property_id, error=str(e))
            raise RepositoryError("failed to update property") from e
        return updated

    async def delete(self, property_id: int) -> bool:
        try:
            conn = await self._db.connection()
            cursor = await conn.execute("DELETE FROM properties WHERE id = ?", (property_id,))
            await conn.commit()
        except aiosqlite.Error:
            logger.error("property_delete_failed", property_id=property_id, exc_info=True)
            return False
        return cursor.rowcount > 0


class SqliteSavedPropertyRepository(SavedPropertyRepository):
    """Bookmarks stored in the local ``saved_properties`` table."""

    def __init__(self, db: SqliteDatabase) -> None:
        self._db = db

    async def close(self) -> None:
        await self._db.close()

    async def get_all(self) -> list[SavedProperty]:
        try:
            conn = await self._db.connection()
            async with conn.execute(
                "SELECT * FROM saved_properties ORDER BY saved_date DESC, id DESC"
            ) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error("saved_property_fetch_failed", error=str(e), exc_info=True)
            raise RepositoryError("failed to read saved properties") from e
        bookmarks: list[SavedProperty] = []
        for row in rows:
            try:
                bookmarks.append(_row_to_saved(row))
            except ValidationError:
                logger.warning("saved_property_row_skipped", saved_id=row["id"], exc_info=True)
        return bookmarks

    async def get_by_id(self, saved_id: int) -> SavedProperty | None:
        try:
            conn = await self._db.connection()
            async with conn.execute(
                "SELECT * FROM saved_properties WHERE id = ?", (saved_id,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error:
            logger.error("saved_property_lookup_failed", saved_id=saved_id, exc_info=True)
            return None
        if row is None:
            return None
        try:
            return _row_to_saved(row)
        except ValidationError:
            logger.warning("saved_property_row_invalid", saved_id=saved_id, exc_info=True)
            return None

    async def create(self, property_id: int, notes: str | None = None) -> SavedProperty:
        saved_date = datetime.now(UTC)
        try:
            conn = await self._db.connection()
            cursor = await conn.execute(
                "INSERT INTO saved_properties (property_id, saved_date, notes) VALUES (?, ?, ?)",
                (property_id, saved_date.isoformat(), notes or ""),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error("saved_property_create_failed", property_id=property_id, error=str(e))
            raise RepositoryError("failed to save property") from e
        if cursor.lastrowid is None:
            raise RepositoryError("failed to save property")
        return SavedProperty(
            id=cursor.lastrowid,
            property_id=property_id,
            saved_date=saved_date,
            notes=notes or "",
        )

    async def update(self, saved_id: int, *, notes: str) -> SavedProperty | None:
        try:
            conn = await self._db.connection()
            cursor = await conn.execute(
                "UPDATE saved_properties SET notes = ? WHERE id = ?", (notes, saved_id)
            )
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error("saved_property_update_failed", saved_id=saved_id, error=str(e))
            raise RepositoryError("failed to update saved property") from e
        if cursor.rowcount == 0:
            return None
        return await self.get_by_id(saved_id)

    async def delete(self, saved_id: int) -> bool:
        try:
            conn = await self._db.connection()
            cursor = await conn.execute("DELETE FROM saved_properties WHERE id = ?", (saved_id,))
            await conn.commit()
        except aiosqlite.Error:
            logger.error("saved_property_delete_failed", saved_id=saved_id, exc_info=True)
            return False
        return cursor.rowcount > 0


async def open_sqlite(
    db_path: str, *, seed_mock_data: bool = True
) -> tuple[SqliteDatabase, SqlitePropertyRepository, SqliteSavedPropertyRepository]:
    """Open a database, create the schema and build both repositories."""
    db = SqliteDatabase(db_path)
    if seed_mock_data:
        await db.initialize(seed=MOCK_PROPERTIES, seed_saved=MOCK_SAVED_PROPERTIES)
    else:
        await db.initialize()
    return db, SqlitePropertyRepository(db), SqliteSavedPropertyRepository(db)
