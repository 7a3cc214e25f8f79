# wishcart/database.py
"""
Simple file-backed DB layer using CSV (preferred) or Excel (xlsx) as storage.
Provides basic CRUD primitives per table name. Uses file locking to avoid
simultaneous writes corrupting files.

This is the stand-in for the commerce platform's persistence layer: catalog,
customers, carts and wishlists are all plain tables here.

Usage:
    from wishcart.database import db
    db.list_records("products")
    db.get_record("products", "sku", "ABC123")
    db.create_record("wishlists", {"customer_id": "42"})
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import uuid

import pandas as pd
from filelock import FileLock

from wishcart.config import settings


class FileBackedDB:
    """
    Manages CSV / Excel files inside a data directory.
    Table name corresponds to a file name in settings (or you may pass full filename).
    When no directory is given the current `settings.DATA_DIR` is used on every call,
    so tests can repoint it after import.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        self._data_dir = Path(data_dir) if data_dir is not None else None

    @property
    def data_dir(self) -> Path:
        return self._data_dir if self._data_dir is not None else Path(settings.DATA_DIR)

    @data_dir.setter
    def data_dir(self, value) -> None:
        self._data_dir = Path(value) if value is not None else None

    def _file_path(self, table: str) -> Path:
        """
        Resolve table -> file path. If table looks like a filename (has .csv/.xlsx),
        use it directly (relative to data_dir). Otherwise try config mapping,
        else fallback to table + .csv
        """
        if table.endswith(".csv") or table.endswith(".xlsx"):
            return self.data_dir / Path(table)

        mapping = {
            "products": settings.PRODUCTS_FILE,
            "customers": settings.CUSTOMERS_FILE,
            "carts": settings.CARTS_FILE,
            "wishlists": settings.WISHLISTS_FILE,
            "wishlist_items": settings.WISHLIST_ITEMS_FILE,
        }
        filename = mapping.get(table, f"{table}.csv")
        return self.data_dir / Path(filename)

    def _lock_for(self, path: Path) -> FileLock:
        path.parent.mkdir(parents=True, exist_ok=True)
        return FileLock(str(path) + ".lock")

    def _read_df(self, table: str) -> pd.DataFrame:
        path = self._file_path(table)
        if not path.exists():
            return pd.DataFrame()
        if path.suffix.lower() in (".xls", ".xlsx"):
            return pd.read_excel(path, dtype=str).fillna("")
        try:
            return pd.read_csv(path, dtype=str).fillna("")
        except pd.errors.EmptyDataError:
            return pd.DataFrame()

    def _write_df_nolock(self, path: Path, df: pd.DataFrame) -> None:
        """
        Write DataFrame to `path` WITHOUT acquiring file lock.
        Use this only when the caller already holds the lock.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in (".xls", ".xlsx"):
            df.to_excel(path, index=False)
        else:
            df.to_csv(path, index=False)

    @staticmethod
    def _row_to_dict(row: Dict[str, Any]) -> Dict[str, Any]:
        return {k: (None if pd.isna(v) else v) for k, v in row.items()}

    @staticmethod
    def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
        return {k: ("" if v is None else v) for k, v in data.items()}

    # --- high-level CRUD primitives ---

    def list_records(self, table: str) -> List[Dict[str, Any]]:
        df = self._read_df(table)
        if df.empty:
            return []
        return [self._row_to_dict(r) for r in df.to_dict(orient="records")]

    def find_records(self, table: str, key: str, value: Any) -> List[Dict[str, Any]]:
        """Return every row where df[key] == value, in file order."""
        df = self._read_df(table)
        if df.empty or key not in df.columns:
            return []
        mask = df[key].astype(str) == str(value)
        return [self._row_to_dict(r) for r in df[mask].to_dict(orient="records")]

    def get_record(self, table: str, key: str, value: Any) -> Optional[Dict[str, Any]]:
        df = self._read_df(table)
        if df.empty or key not in df.columns:
            return None
        # treat everything as string for comparison simplicity
        mask = df[key].astype(str) == str(value)
        if not mask.any():
            return None
        return self._row_to_dict(df[mask].iloc[0].to_dict())

    def create_record(self, table: str, data: Dict[str, Any], id_field: str = "id") -> Dict[str, Any]:
        """
        Create a new record. If id_field not present in `data`, one will be generated (uuid4 hex).
        Returns the saved record (with id).
        """
        if id_field not in data or not data.get(id_field):
            data[id_field] = uuid.uuid4().hex
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            new_row = pd.DataFrame([self._normalize(data)])
            df = new_row if df.empty else pd.concat([df, new_row], ignore_index=True, sort=False)
            self._write_df_nolock(path, df)
        return data

    def update_record(self, table: str, key: str, value: Any, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update rows where df[key] == value with fields in updates. Returns the updated first row dict or None.
        """
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            if df.empty or key not in df.columns:
                return None
            mask = df[key].astype(str) == str(value)
            if not mask.any():
                return None
            for k, v in self._normalize(updates).items():
                if k not in df.columns:
                    df[k] = ""
                df.loc[mask, k] = str(v)
            self._write_df_nolock(path, df)
            return self._row_to_dict(df[mask].iloc[0].to_dict())

    def upsert_record(self, table: str, key: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Update the row whose `key` matches data[key], or append `data` as a new row."""
        updated = self.update_record(table, key, data[key], data)
        if updated is not None:
            return updated
        return self.create_record(table, data, id_field=key)

    def replace_records(self, table: str, key: str, value: Any, rows: List[Dict[str, Any]]) -> None:
        """
        Replace every row where df[key] == value with `rows`, under a single lock.
        Rows belonging to other owners keep their position.
        """
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            if not df.empty and key in df.columns:
                df = df[df[key].astype(str) != str(value)]
            new_rows = pd.DataFrame([self._normalize(r) for r in rows])
            if df.empty and new_rows.empty:
                if path.exists():
                    self._write_df_nolock(path, df)
                return
            if df.empty:
                df = new_rows
            elif not new_rows.empty:
                df = pd.concat([df, new_rows], ignore_index=True, sort=False)
            self._write_df_nolock(path, df)


# module-level singleton for convenience
db = FileBackedDB()
