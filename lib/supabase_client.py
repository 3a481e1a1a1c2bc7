# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides generic record operations keyed by table + id:
# - fetch / list records for public pages and admin forms
# - insert / update / upsert records
# - delete records
#
# Not-found is a value (None), not an exception: callers decide whether a
# missing row is an error (projects) or an empty default (the profile row).
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   project = SupabaseClient.fetch_record("projects", project_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages: errors should tell HOW to fix,
    not just WHAT failed.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods, so the class itself
    can be handed to services as their record store.

    Example:
        projects = SupabaseClient.list_records("projects", order_by="created_at")
        cert = SupabaseClient.update_record("certificates", cert_id, {"is_published": False})
        if cert is None:
            ...  # no such certificate
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_record(cls, table: str, record_id: str | int) -> dict[str, Any] | None:
        """
        Fetch a single record by id.

        Args:
            table: Table name ("profile", "projects", "certificates")
            record_id: Primary key value

        Returns:
            Record dict with all columns, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select("*")
                .eq("id", record_id)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch record: {e}",
                code="FETCH_RECORD_FAILED",
                suggestion=f"Check that the {table} table is accessible",
                details={"table": table, "id": str(record_id)}
            )

    @classmethod
    def list_records(
        cls,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = "created_at",
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        """
        List records of a table.

        Args:
            table: Table name
            filters: Column -> value equality filters (all must match)
            order_by: Column to sort on (None keeps store order)
            descending: Sort direction (newest first by default)

        Returns:
            List of record dicts (empty if none)

        Raises:
            SupabaseClientError: If query fails

        Example:
            published = SupabaseClient.list_records(
                "certificates",
                filters={"is_published": True},
            )
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("*")
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            if order_by:
                query = query.order(order_by, desc=descending)

            response = query.execute()
            records = response.data or []

            logger.debug(f"Fetched {len(records)} records from {table}")
            return records

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list records: {e}",
                code="LIST_RECORDS_FAILED",
                details={"table": table, "filters": filters or {}}
            )

    @classmethod
    def any_record_holds(
        cls,
        table: str,
        column: str,
        values: list[str],
        array: bool = False,
    ) -> bool:
        """
        Check whether any row's column holds one of the given values.

        Filters server-side and asks for at most one row, so the answer
        does not depend on the table size or the max-rows cap.

        Args:
            table: Table name
            column: Column to match
            values: Accepted values (a key and its legacy URL form)
            array: True for text[] columns (overlap instead of IN)

        Raises:
            SupabaseClientError: If query fails

        Example:
            SupabaseClient.any_record_holds("projects", "file_paths", ["3f1c-a.png"], array=True)
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("id")
            query = query.ov(column, values) if array else query.in_(column, values)
            response = query.limit(1).execute()
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to check references: {e}",
                code="REFERENCE_CHECK_FAILED",
                details={"table": table, "column": column}
            )

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    @classmethod
    def insert_record(cls, table: str, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a new record.

        Returns:
            Inserted record dict with generated id and created_at

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .insert(fields)
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"table": table}
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert record: {e}",
                code="INSERT_RECORD_FAILED",
                details={"table": table, "fields": sorted(fields)}
            )

    @classmethod
    def update_record(
        cls,
        table: str,
        record_id: str | int,
        fields: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update some columns of a record.

        Columns absent from `fields` are left untouched by PostgREST.

        Returns:
            Updated record dict, or None if no row has this id

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .update(fields)
                .eq("id", record_id)
                .execute()
            )

            if response.data:
                return response.data[0]
            return None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update record: {e}",
                code="UPDATE_RECORD_FAILED",
                details={"table": table, "id": str(record_id), "fields": sorted(fields)}
            )

    @classmethod
    def upsert_record(cls, table: str, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Insert or update a record by its id (used for singleton rows).

        `fields` must contain "id".

        Raises:
            SupabaseClientError: If upsert fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .upsert(fields, on_conflict="id")
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Upsert returned no data",
                code="UPSERT_NO_DATA",
                details={"table": table}
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to upsert record: {e}",
                code="UPSERT_RECORD_FAILED",
                details={"table": table, "id": str(fields.get("id"))}
            )

    @classmethod
    def delete_record(cls, table: str, record_id: str | int) -> dict[str, Any] | None:
        """
        Delete a record.

        Returns:
            The deleted record dict, or None if no row had this id

        Raises:
            SupabaseClientError: If delete fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .delete()
                .eq("id", record_id)
                .execute()
            )

            if response.data:
                logger.info(f"Deleted record {record_id} from {table}")
                return response.data[0]
            return None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete record: {e}",
                code="DELETE_RECORD_FAILED",
                details={"table": table, "id": str(record_id)}
            )
