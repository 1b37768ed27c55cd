"""
💾 PROFILE STORE
================
Read-only access to the upstream records the engines score.

Two implementations share the ProfileStore protocol:
- InMemoryProfileStore: dict-backed, loadable from a JSON fixture file
- SupabaseProfileStore: reads the profile, health and intel tables with retries

The engines never write through this interface.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from loguru import logger
from supabase import Client, create_client
from tenacity import retry, stop_after_attempt, wait_exponential

from config.settings import DatabaseSettings, settings
from models.errors import NotFound
from models.profiles import CompetitiveIntel, EntityProfile, HealthSnapshot


class ProfileStore(Protocol):
    def get_profile(self, entity_id: str) -> EntityProfile: ...

    def get_health_snapshot(self, entity_id: str) -> HealthSnapshot: ...

    def get_competitive_intelligence(self, entity_id: str) -> Optional[CompetitiveIntel]: ...

    def list_prospect_ids(self) -> List[str]: ...

    def list_customer_ids(self) -> List[str]: ...


class InMemoryProfileStore:
    """
    Dict-backed store for tests, local runs and one-shot scoring.

    Usage:
        store = InMemoryProfileStore.from_json("data/entities.json")
        profile = store.get_profile("acme")
    """

    def __init__(self):
        self._profiles: Dict[str, EntityProfile] = {}
        self._health: Dict[str, HealthSnapshot] = {}
        self._intel: Dict[str, CompetitiveIntel] = {}

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "InMemoryProfileStore":
        """
        Load a file shaped like {"profiles": [...], "health": [...], "intel": [...]}.
        Each list holds raw records keyed by `entity_id`.
        """
        with open(path, "r") as f:
            data = json.load(f)

        store = cls()
        for row in data.get("profiles", []):
            store.add_profile(EntityProfile.model_validate(row))
        for row in data.get("health", []):
            store.add_health_snapshot(HealthSnapshot.model_validate(row))
        for row in data.get("intel", []):
            store.add_competitive_intelligence(CompetitiveIntel.model_validate(row))

        logger.info(
            f"📂 Loaded {len(store._profiles)} profiles, {len(store._health)} health snapshots, "
            f"{len(store._intel)} intel records from {path}"
        )
        return store

    def add_profile(self, profile: EntityProfile):
        self._profiles[profile.entity_id] = profile

    def add_health_snapshot(self, snapshot: HealthSnapshot):
        self._health[snapshot.entity_id] = snapshot

    def add_competitive_intelligence(self, intel: CompetitiveIntel):
        self._intel[intel.entity_id] = intel

    def get_profile(self, entity_id: str) -> EntityProfile:
        try:
            return self._profiles[entity_id]
        except KeyError:
            raise NotFound("profile", entity_id) from None

    def get_health_snapshot(self, entity_id: str) -> HealthSnapshot:
        try:
            return self._health[entity_id]
        except KeyError:
            raise NotFound("health snapshot", entity_id) from None

    def get_competitive_intelligence(self, entity_id: str) -> Optional[CompetitiveIntel]:
        return self._intel.get(entity_id)

    def list_prospect_ids(self) -> List[str]:
        return list(self._profiles)

    def list_customer_ids(self) -> List[str]:
        return list(self._health)


class SupabaseProfileStore:
    """
    Profile store backed by Supabase tables.

    Each table holds one row per entity keyed by `entity_id`; nested profile
    sections are JSON columns. Reads are retried with exponential backoff.

    Usage:
        store = SupabaseProfileStore()
        health = store.get_health_snapshot("acme")
    """

    def __init__(self, db_settings: Optional[DatabaseSettings] = None, client: Optional[Client] = None):
        self.db_settings = db_settings or settings.database
        self._client = client

    @property
    def client(self) -> Client:
        """Get the Supabase client, initializing if needed."""
        if self._client is None:
            if not self.db_settings.is_configured:
                raise RuntimeError("Supabase credentials not configured (set SUPABASE_URL and SUPABASE_KEY)")
            try:
                self._client = create_client(self.db_settings.url, self.db_settings.key)
                logger.info("✅ Connected to Supabase successfully")
            except Exception as e:
                logger.error(f"❌ Failed to connect to Supabase: {e}")
                raise
        return self._client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10)
    )
    def _fetch_one(self, table: str, entity_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = (
                self.client
                .table(table)
                .select("*")
                .eq("entity_id", entity_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Query error in {table} for {entity_id}: {e}")
            raise
        return response.data[0] if response.data else None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10)
    )
    def _fetch_ids(self, table: str) -> List[str]:
        try:
            response = self.client.table(table).select("entity_id").execute()
        except Exception as e:
            logger.error(f"Query error in {table}: {e}")
            raise
        return [row["entity_id"] for row in response.data or []]

    def get_profile(self, entity_id: str) -> EntityProfile:
        row = self._fetch_one(self.db_settings.profiles_table, entity_id)
        if row is None:
            raise NotFound("profile", entity_id)
        return EntityProfile.model_validate(row)

    def get_health_snapshot(self, entity_id: str) -> HealthSnapshot:
        row = self._fetch_one(self.db_settings.health_table, entity_id)
        if row is None:
            raise NotFound("health snapshot", entity_id)
        return HealthSnapshot.model_validate(row)

    def get_competitive_intelligence(self, entity_id: str) -> Optional[CompetitiveIntel]:
        row = self._fetch_one(self.db_settings.intel_table, entity_id)
        return CompetitiveIntel.model_validate(row) if row else None

    def list_prospect_ids(self) -> List[str]:
        return self._fetch_ids(self.db_settings.profiles_table)

    def list_customer_ids(self) -> List[str]:
        return self._fetch_ids(self.db_settings.health_table)
