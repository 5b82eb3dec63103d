"""
Measurement persistence over the Supabase REST API
"""
import logging
from typing import Any, Dict, Optional, Sequence

import requests

from ..exceptions import PersistenceError
from ..models.schemas import CapturedSnapshot, MeasurementRecord

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES = {'units': 'inches', 'fit': 'regular'}


class SupabaseMeasurementStore:
    """
    Stores profiles and measurements in the `profiles` and `measurements` tables

    Connection parameters are passed in explicitly; nothing is read from the environment here.
    """

    def __init__(self, url: Optional[str], service_key: Optional[str], timeout: float = 10.0):
        self.url = url.rstrip('/') if url else None
        self.service_key = service_key
        self.timeout = timeout
        self.session = requests.Session()
        if service_key:
            self.session.headers.update({
                'apikey': service_key,
                'Authorization': f'Bearer {service_key}',
                'Content-Type': 'application/json',
                'Prefer': 'return=representation',
            })

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.service_key)

    def _insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored"""
        if not self.is_configured:
            raise PersistenceError("Measurement store is not configured")

        endpoint = f"{self.url}/rest/v1/{table}"
        try:
            response = self.session.post(endpoint, json=row, timeout=self.timeout)
            response.raise_for_status()
            rows = response.json()
        except requests.RequestException as e:
            logger.warning(f"Insert into {table} failed: {e}")
            raise PersistenceError(f"Failed to write to {table}: {e}") from e
        except ValueError as e:
            raise PersistenceError(f"Invalid response from {table}: {e}") from e

        if isinstance(rows, list):
            rows = rows[0] if rows else None
        if not rows or 'id' not in rows:
            raise PersistenceError(f"Store did not return the inserted {table} row")
        return rows

    def create_or_reuse_profile(
        self,
        existing_id: Optional[str] = None,
        name: str = 'Anonymous User',
        email: Optional[str] = None,
        preferences: Optional[Dict[str, str]] = None,
    ) -> str:
        """
        Get the profile to attach measurements to

        Args:
            existing_id: Profile id to reuse; no request is made when given
            name: Display name for a new profile
            email: Optional email for a new profile
            preferences: Unit and fit preferences, defaults to inches/regular

        Returns:
            Profile id
        """
        if existing_id:
            return existing_id

        row = {'name': name, 'preferences': preferences or DEFAULT_PREFERENCES}
        if email:
            row['email'] = email
        profile = self._insert('profiles', row)
        logger.info(f"Created profile {profile['id']}")
        return str(profile['id'])

    def insert_measurement(
        self,
        profile_id: str,
        record: MeasurementRecord,
        raw_snapshots: Sequence[CapturedSnapshot],
    ) -> str:
        """
        Store a measurement record together with its raw pose snapshots

        Returns:
            Measurement id
        """
        row = {
            'profile_id': profile_id,
            'measurements': record.model_dump(mode='json', by_alias=True, exclude_none=True),
            'raw_landmarks': [
                s.model_dump(mode='json', by_alias=True, exclude_none=True) for s in raw_snapshots
            ],
            'confidence': record.confidence,
        }
        measurement = self._insert('measurements', row)
        logger.info(f"Saved measurement {measurement['id']} for profile {profile_id}")
        return str(measurement['id'])

    def save(
        self,
        record: MeasurementRecord,
        raw_snapshots: Sequence[CapturedSnapshot],
        profile_id: Optional[str] = None,
        **profile_fields,
    ) -> Dict[str, str]:
        """
        Create or reuse a profile and store the measurements under it

        Raises:
            PersistenceError: store not configured, unavailable, or rejected a write
        """
        profile_id = self.create_or_reuse_profile(profile_id, **profile_fields)
        measurement_id = self.insert_measurement(profile_id, record, raw_snapshots)
        return {'measurementId': measurement_id, 'profileId': profile_id}
