import logging
from datetime import datetime, timezone

import requests

from deployer.errors import StorageError

logger = logging.getLogger(__name__)


class SupabaseStore:
    """Minimal client for the Supabase REST (PostgREST) interface."""

    def __init__(self, url, anon_key, session=None, timeout=10):
        self.base_url = f"{url.rstrip('/')}/rest/v1" if url else None
        self.timeout = timeout
        self.session = session or requests.Session()
        if anon_key:
            self.session.headers.update({
                "apikey": anon_key,
                "Authorization": f"Bearer {anon_key}",
            })

    @property
    def enabled(self):
        return self.base_url is not None

    def select(self, table, params):
        resp = self.session.get(f"{self.base_url}/{table}", params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def insert(self, table, row):
        resp = self.session.post(
            f"{self.base_url}/{table}",
            json=row,
            headers={"Prefer": "return=minimal"},
            timeout=self.timeout,
        )
        resp.raise_for_status()

    def list_projects(self):
        if not self.enabled:
            return []
        try:
            return self.select("projects", {"select": "title,description,created_at"})
        except requests.RequestException as e:
            raise StorageError(f"Could not load projects: {e}")


class VisitorTracker:
    """Records at most one visit per IP address per calendar day (UTC)."""

    def __init__(self, store):
        self.store = store

    def record_visit(self, ip_address, user_agent, now=None):
        if not self.store.enabled or not ip_address:
            return False

        now = now or datetime.now(timezone.utc)
        try:
            seen = self.store.select("visitors", {
                "select": "id",
                "ip_address": f"eq.{ip_address}",
                "timestamp": f"gte.{now.date().isoformat()}",
            })
            if seen:
                return False
            self.store.insert("visitors", {
                "ip_address": ip_address,
                "user_agent": user_agent,
                "timestamp": now.isoformat(),
            })
        except requests.RequestException as e:
            # visits are best effort, never fail the page for them
            logger.error(f"Failed to record visitor: {e}")
            return False
        return True


def client_ip(request):
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr
