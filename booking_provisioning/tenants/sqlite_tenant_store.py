# booking_provisioning/tenants/sqlite_tenant_store.py
import sqlite3
import logging
import json
from decimal import Decimal
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone

from .storage_interfaces import AbstractTenantStore, TenantStoreError, TenantStoreIntegrityError
from .models import (
    TenantInDB, TenantCreate, TenantUpdate, TenantStatus, ServiceCatalogEntry,
    StaffMember, PhoneNumberAssignment, ForwardingRules
)

logger = logging.getLogger(__name__)

TENANT_COLUMNS = (
    "id, slug, email, business_name, phone, business_category, tier, flow, status, "
    "trial_ends_at, cancellation_token_hash, routing_secret_encrypted, payment_customer_ref, "
    "phone_number, assistant_id, assistant_kind, failure_reason, warnings_json, "
    "created_at, updated_at"
)


def _parse_dt(value: Any) -> datetime:
    # SQLite may hand back a string or a datetime depending on adapters
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value


class SQLiteTenantStore(AbstractTenantStore):
    """SQLite implementation of the tenant storage interface."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    async def initialize(self) -> None:
        logger.info("SQLiteTenantStore initialized.")

    async def teardown(self) -> None:
        """Connection lifetime is owned by the application lifespan."""
        logger.info("SQLiteTenantStore teardown.")

    async def ping(self) -> None:
        await self._execute_query("SELECT 1", commit=False)

    async def _execute_query(self, query: str, params: tuple = (), commit: bool = True) -> sqlite3.Cursor:
        """
        Execute a SQL query with error translation and transaction management.

        Raises:
            TenantStoreIntegrityError: On a unique constraint violation
            TenantStoreError: On any other SQLite error
        """
        cursor = self.conn.cursor()
        try:
            cursor.execute(query, params)
            if commit:
                self.conn.commit()
        except sqlite3.IntegrityError as e:
            logger.warning(f"SQLite integrity error: {e}")
            if commit:
                self.conn.rollback()
            raise TenantStoreIntegrityError(str(e)) from e
        except sqlite3.Error as e:
            logger.error(f"SQLite error executing query '{query.strip()}': {e}", exc_info=True)
            if commit:
                self.conn.rollback()
            raise TenantStoreError(str(e)) from e
        return cursor

    async def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchone()

    async def _fetchall(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        cursor = await self._execute_query(query, params, commit=False)
        return cursor.fetchall()

    def _row_to_tenant_in_db(self, row: Optional[sqlite3.Row]) -> Optional[TenantInDB]:
        if not row:
            return None
        warnings = json.loads(row["warnings_json"]) if row["warnings_json"] else []
        return TenantInDB(
            id=row["id"],
            slug=row["slug"],
            email=row["email"],
            business_name=row["business_name"],
            phone=row["phone"],
            business_category=row["business_category"],
            tier=row["tier"],
            flow=row["flow"],
            status=row["status"],
            trial_ends_at=_parse_dt(row["trial_ends_at"]),
            cancellation_token_hash=row["cancellation_token_hash"],
            routing_secret_encrypted=row["routing_secret_encrypted"],
            payment_customer_ref=row["payment_customer_ref"],
            phone_number=row["phone_number"],
            assistant_id=row["assistant_id"],
            assistant_kind=row["assistant_kind"],
            failure_reason=row["failure_reason"],
            warnings=warnings,
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    async def create_tenant(self, tenant_create: TenantCreate) -> TenantInDB:
        now_iso = datetime.now(timezone.utc).isoformat()
        query = """
            INSERT INTO tenants (
                id, slug, email, business_name, phone, business_category, tier, flow, status,
                trial_ends_at, cancellation_token_hash, routing_secret_encrypted,
                payment_customer_ref, warnings_json, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            tenant_create.id,
            tenant_create.slug,
            tenant_create.email,
            tenant_create.business_name,
            tenant_create.phone,
            tenant_create.business_category,
            tenant_create.tier.value,
            tenant_create.flow.value,
            TenantStatus.PENDING.value,
            tenant_create.trial_ends_at.isoformat(),
            tenant_create.cancellation_token_hash,
            tenant_create.routing_secret_encrypted,
            tenant_create.payment_customer_ref,
            json.dumps([]),
            now_iso,
            now_iso,
        )
        await self._execute_query(query, params)

        created = await self.get_tenant(tenant_create.id)
        if created is None:
            raise TenantStoreError(f"Tenant '{tenant_create.id}' not readable after insert.")
        return created

    async def get_tenant(self, tenant_id: str) -> Optional[TenantInDB]:
        query = f"SELECT {TENANT_COLUMNS} FROM tenants WHERE id = ?"
        row = await self._fetchone(query, (tenant_id,))
        return self._row_to_tenant_in_db(row)

    async def list_tenants(self, skip: int = 0, limit: int = 100) -> List[TenantInDB]:
        query = f"""
            SELECT {TENANT_COLUMNS}
            FROM tenants
            ORDER BY created_at DESC
            LIMIT ? OFFSET ?
        """
        rows = await self._fetchall(query, (limit, skip))
        return [self._row_to_tenant_in_db(row) for row in rows]

    async def update_tenant(self, tenant_id: str, tenant_update: TenantUpdate) -> Optional[TenantInDB]:
        current_tenant = await self.get_tenant(tenant_id)
        if not current_tenant:
            return None

        update_fields: Dict[str, Any] = tenant_update.model_dump(exclude_unset=True, mode="json")
        if not update_fields:
            return current_tenant

        set_clauses = []
        params = []
        for key, value in update_fields.items():
            if key == "warnings":
                set_clauses.append("warnings_json = ?")
                params.append(json.dumps(value or []))
            else:
                set_clauses.append(f"{key} = ?")
                params.append(value)
        set_clauses.append("updated_at = ?")
        params.append(datetime.now(timezone.utc).isoformat())

        query = f"UPDATE tenants SET {', '.join(set_clauses)} WHERE id = ?"
        params.append(tenant_id)

        await self._execute_query(query, tuple(params))
        return await self.get_tenant(tenant_id)

    async def add_catalog_entries(
        self, tenant_id: str, entries: List[ServiceCatalogEntry]
    ) -> List[ServiceCatalogEntry]:
        now_iso = datetime.now(timezone.utc).isoformat()
        query = """
            INSERT OR IGNORE INTO service_catalog_entries
                (tenant_id, name, duration_minutes, price, is_active, created_at)
            SELECT ?, ?, ?, ?, ?, ?
            WHERE EXISTS (SELECT 1 FROM tenants WHERE id = ? AND status = 'pending')
        """
        cursor = self.conn.cursor()
        try:
            cursor.executemany(query, [
                (tenant_id, e.name, e.duration_minutes, str(e.price), int(e.is_active), now_iso, tenant_id)
                for e in entries
            ])
            self.conn.commit()
        except sqlite3.Error as e:
            logger.error(f"SQLite error seeding catalog for tenant '{tenant_id}': {e}", exc_info=True)
            self.conn.rollback()
            raise TenantStoreError(str(e)) from e
        return await self.list_catalog_entries(tenant_id)

    async def list_catalog_entries(self, tenant_id: str) -> List[ServiceCatalogEntry]:
        query = """
            SELECT name, duration_minutes, price, is_active
            FROM service_catalog_entries
            WHERE tenant_id = ?
            ORDER BY rowid
        """
        rows = await self._fetchall(query, (tenant_id,))
        return [
            ServiceCatalogEntry(
                name=row["name"],
                duration_minutes=row["duration_minutes"],
                price=Decimal(row["price"]),
                is_active=bool(row["is_active"]),
            )
            for row in rows
        ]

    async def add_staff_member(self, staff_member: StaffMember) -> StaffMember:
        query = """
            INSERT OR IGNORE INTO staff_members
                (tenant_id, first_name, last_name, email, phone, role, is_active, created_at)
            SELECT ?, ?, ?, ?, ?, ?, ?, ?
            WHERE EXISTS (SELECT 1 FROM tenants WHERE id = ? AND status = 'pending')
        """
        params = (
            staff_member.tenant_id,
            staff_member.first_name,
            staff_member.last_name,
            staff_member.email,
            staff_member.phone,
            staff_member.role,
            int(staff_member.is_active),
            datetime.now(timezone.utc).isoformat(),
            staff_member.tenant_id,
        )
        await self._execute_query(query, params)
        return staff_member

    async def list_staff_members(self, tenant_id: str) -> List[StaffMember]:
        query = """
            SELECT tenant_id, first_name, last_name, email, phone, role, is_active
            FROM staff_members
            WHERE tenant_id = ?
            ORDER BY rowid
        """
        rows = await self._fetchall(query, (tenant_id,))
        return [
            StaffMember(
                tenant_id=row["tenant_id"],
                first_name=row["first_name"],
                last_name=row["last_name"],
                email=row["email"],
                phone=row["phone"],
                role=row["role"],
                is_active=bool(row["is_active"]),
            )
            for row in rows
        ]

    async def save_phone_assignment(self, assignment: PhoneNumberAssignment) -> PhoneNumberAssignment:
        created_at = assignment.created_at or datetime.now(timezone.utc)
        rules_json = (
            json.dumps(assignment.forwarding_rules.model_dump())
            if assignment.forwarding_rules else None
        )
        query = """
            INSERT OR REPLACE INTO phone_number_assignments
                (tenant_id, kind, number, platform_phone_id, forwarding_rules_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """
        params = (
            assignment.tenant_id,
            assignment.kind.value,
            assignment.number,
            assignment.platform_phone_id,
            rules_json,
            created_at.isoformat(),
        )
        await self._execute_query(query, params)
        return assignment.model_copy(update={"created_at": created_at})

    async def get_phone_assignment(self, tenant_id: str) -> Optional[PhoneNumberAssignment]:
        query = """
            SELECT tenant_id, kind, number, platform_phone_id, forwarding_rules_json, created_at
            FROM phone_number_assignments
            WHERE tenant_id = ?
        """
        row = await self._fetchone(query, (tenant_id,))
        if not row:
            return None
        rules = row["forwarding_rules_json"]
        return PhoneNumberAssignment(
            tenant_id=row["tenant_id"],
            kind=row["kind"],
            number=row["number"],
            platform_phone_id=row["platform_phone_id"],
            forwarding_rules=ForwardingRules(**json.loads(rules)) if rules else None,
            created_at=_parse_dt(row["created_at"]),
        )
