"""Client repository - business context lookup for the agent."""

import json
from typing import Optional
from .base import BaseRepository
from ..database_models.client import ClientDO


class ClientRepository(BaseRepository):
    """Repository for client metadata."""

    def get(self, client_id: str) -> Optional[ClientDO]:
        """
        Get client by ID.

        Args:
            client_id: Client ID

        Returns:
            ClientDO instance or None
        """
        try:
            result = self.conn.execute("""
                SELECT id, name, gsc_site_url, ga4_property_id, analytics_summary, snapshot_insights
                FROM clients
                WHERE id = ?
            """, [client_id]).fetchone()

            if result:
                insights = result[5]
                return ClientDO(
                    id=result[0],
                    name=result[1],
                    gsc_site_url=result[2],
                    ga4_property_id=result[3],
                    analytics_summary=result[4],
                    snapshot_insights=json.loads(insights) if isinstance(insights, str) else (insights or {})
                )
            return None
        except Exception as e:
            self.logger.error(f"Failed to get client {client_id}: {e}")
            return None

    def upsert(self, client: ClientDO) -> None:
        """
        Insert or replace a client record.

        Args:
            client: ClientDO instance
        """
        try:
            self.conn.execute("""
                INSERT OR REPLACE INTO clients (id, name, gsc_site_url, ga4_property_id, analytics_summary, snapshot_insights)
                VALUES (?, ?, ?, ?, ?, ?)
            """, [
                client.id,
                client.name,
                client.gsc_site_url,
                client.ga4_property_id,
                client.analytics_summary,
                json.dumps(client.snapshot_insights or {})
            ])
            self.conn.commit()
            self.logger.info(f"Upserted client record: {client.id}")
        except Exception as e:
            self.logger.error(f"Failed to upsert client: {e}")
            raise
