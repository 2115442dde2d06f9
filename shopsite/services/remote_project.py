"""
REST client for a client's hosted Supabase project
Used by the deployment helper to probe connectivity and replay the schema script
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

PROBE_TABLE = "_test_connection"

# Errors that prove the REST endpoint answered and authenticated us, just without the probe table
MISSING_TABLE_CODES = {"42P01", "PGRST200", "PGRST205"}
MISSING_TABLE_MARKERS = ("does not exist", "schema cache", "could not find")


@dataclass
class ProbeResult:
    reachable: bool
    status_code: int
    message: Optional[str] = None


def classify_probe_response(status_code: int, body: Optional[dict]) -> ProbeResult:
    """
    Decide whether a probe response means the project is reachable.

    Success, or an error saying the probe table is missing, means reachable.
    Auth failures and any other error mean unreachable.
    """
    if 200 <= status_code < 300:
        return ProbeResult(reachable=True, status_code=status_code)

    body = body or {}
    message = str(body.get("message") or body.get("msg") or body.get("error") or f"HTTP {status_code}")

    if status_code in (401, 403):
        return ProbeResult(reachable=False, status_code=status_code, message=message)

    code = str(body.get("code") or "")
    if code in MISSING_TABLE_CODES or any(m in message.lower() for m in MISSING_TABLE_MARKERS):
        return ProbeResult(reachable=True, status_code=status_code, message=message)

    return ProbeResult(reachable=False, status_code=status_code, message=message)


class RemoteProjectClient:
    def __init__(self, url: str, anon_key: str, service_role_key: str, timeout: float = 15.0):
        self.base_url = url.rstrip("/")
        self.anon_key = anon_key
        self.service_role_key = service_role_key
        self.timeout = timeout

    def _headers(self) -> dict:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Content-Type": "application/json",
        }

    async def probe(self) -> ProbeResult:
        """Raises httpx.HTTPError when the host cannot be reached at all"""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                f"{self.base_url}/rest/v1/{PROBE_TABLE}",
                params={"select": "*", "limit": "1"},
                headers=self._headers(),
            )
        try:
            body = response.json()
        except ValueError:
            body = None
        result = classify_probe_response(response.status_code, body if isinstance(body, dict) else None)
        logger.info(f"📡 Probe {self.base_url}: HTTP {response.status_code}, reachable={result.reachable}")
        return result

    async def exec_statements(self, statements: list[str]) -> tuple[int, list[str]]:
        """
        Run each statement through the exec_sql RPC.
        A failing statement is logged and skipped.

        Returns:
            (executed_count, failed_statements)
        """
        executed = 0
        failed: list[str] = []
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for statement in statements:
                try:
                    response = await client.post(
                        f"{self.base_url}/rest/v1/rpc/exec_sql",
                        json={"query": statement},
                        headers=self._headers(),
                    )
                    if response.status_code >= 400:
                        logger.warning(
                            f"⚠️ Statement failed (HTTP {response.status_code}): {statement[:80]}... {response.text[:200]}"
                        )
                        failed.append(statement)
                        continue
                    executed += 1
                except httpx.HTTPError as e:
                    logger.warning(f"⚠️ Statement failed ({e}): {statement[:80]}...")
                    failed.append(statement)
        return executed, failed
