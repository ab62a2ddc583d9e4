import logging
from typing import Any, Optional

import requests
from pydantic import BaseModel

logger = logging.getLogger(__name__)

class Result(BaseModel):
    """Uniform outcome of a data-access call: exactly one of data/error is meaningful."""
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

class ApiClient:
    def __init__(self, base_url: str, timeout: float = 10.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # anything with a requests-style .request(method, url, ...) works here
        self.session = session or requests.Session()

    def headers(self):
        return {"Accept": "application/json"}

    def request(self, method: str, path: str, json=None, params=None):
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        return self.session.request(
            method,
            f"{self.base_url}{path}",
            json=json,
            params=params or None,
            headers=self.headers(),
            timeout=self.timeout,
        )

    def get(self, path: str, params=None):
        return self.request("GET", path, params=params)

    def post(self, path: str, json=None):
        return self.request("POST", path, json=json)

    def put(self, path: str, json=None):
        return self.request("PUT", path, json=json)

    def delete(self, path: str):
        return self.request("DELETE", path)

    def call(self, method: str, path: str, json=None, params=None) -> Result:
        """
        Like request(), but never raises: transport failures, non-2xx answers
        and unreadable bodies all come back as Result(error=...).
        """
        try:
            r = self.request(method, path, json=json, params=params)
        except requests.RequestException as ex:
            logger.error("%s %s failed: %s", method, path, ex)
            return Result(error="Network error")

        try:
            body = r.json()
        except ValueError:
            body = None

        if not 200 <= r.status_code < 300:
            message = body.get("error") if isinstance(body, dict) else None
            logger.warning("%s %s -> %s %s", method, path, r.status_code, message)
            return Result(error=message or f"HTTP {r.status_code}")
        return Result(data=body)
