import logging

import httpx

logger = logging.getLogger(__name__)


def fetch_vault_secret(*, addr: str, token: str, mount: str, path: str, timeout: float = 5.0) -> dict[str, str]:
    """Read a KV v2 secret and return its inner ``data`` mapping."""
    url = f"{addr.rstrip('/')}/v1/{mount}/data/{path.lstrip('/')}"
    with httpx.Client(timeout=timeout) as client:
        resp = client.get(url, headers={"X-Vault-Token": token})
        resp.raise_for_status()
        body = resp.json()
    secret = (body.get("data") or {}).get("data") or {}
    logger.info("vault.secret_loaded", extra={"mount": mount, "path": path, "keys": sorted(secret)})
    return secret
