"""Minimal Home Assistant REST client."""

import json
import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class HassError(Exception):
    """Raised when a Home Assistant request fails."""


class HassClient:
    """Reads states and calls services through the Home Assistant REST API."""

    def __init__(self, base_url: str, token: str, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            }
        )

    def _request(self, method: str, path: str, timeout: Optional[int] = None, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=timeout or self.timeout, **kwargs)
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            raise HassError(f"{method} {path} failed: {e}") from e

    def get_states(self) -> Dict[str, dict]:
        """Fetch all entity states, keyed by entity id."""
        response = self._request("GET", "/api/states")
        states = {}
        for state_obj in response.json():
            entity_id = state_obj.get("entity_id")
            if entity_id:
                states[entity_id] = {
                    "state": state_obj.get("state"),
                    "attributes": state_obj.get("attributes") or {},
                }
        logger.debug(f"Fetched {len(states)} states")
        return states

    def device_entities(self, device_id: str) -> List[str]:
        """Entity ids belonging to a device, resolved with a template."""
        template = "{{ device_entities(%s) | tojson }}" % json.dumps(device_id)
        response = self._request("POST", "/api/template", json={"template": template})
        try:
            entity_ids = json.loads(response.text)
        except ValueError as e:
            raise HassError(f"Unexpected template result for device {device_id}: {e}") from e
        return [str(e) for e in entity_ids or []]

    def generate_data(self, instructions: str, task_name: str, entity_id: Optional[str] = None) -> Any:
        """Run an AI task and return its service response."""
        payload = {"task_name": task_name, "instructions": instructions}
        if entity_id:
            payload["entity_id"] = entity_id
        response = self._request(
            "POST",
            "/api/services/ai_task/generate_data?return_response",
            timeout=max(self.timeout, 60),
            json=payload,
        )
        return response.json().get("service_response", {})
