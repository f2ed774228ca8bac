import logging
from typing import Any
from urllib.parse import urljoin

import requests
from pydantic import BaseModel, NonNegativeInt, StrictBool, ValidationError, field_validator

from skyportal.config.logging_config import mask_value
from skyportal.config.settings import EnvironmentConfig
from skyportal.errors import APIError
from skyportal.portal_params import PortalParameters

logger = logging.getLogger(__name__)

API_BASE_URL = "https://skyadmin.io/api/"
REGISTRATION_SUCCESSFUL = "Successful"


class PortalRegistrationStatus(BaseModel):
    registration_status: str = ""
    property_id: NonNegativeInt
    vlan_id: NonNegativeInt

    @field_validator("registration_status", mode="before")
    @classmethod
    def blank_status(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_registered(self) -> bool:
        return self.registration_status == REGISTRATION_SUCCESSFUL


class RegistrationOutcome(BaseModel):
    registration_status: str = ""
    url: str = ""
    error: str = ""

    @field_validator("registration_status", "url", "error", mode="before")
    @classmethod
    def blank_fields(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def succeeded(self) -> bool:
        return self.registration_status == REGISTRATION_SUCCESSFUL


class _StatusEnvelope(BaseModel):
    data: PortalRegistrationStatus


class _PinData(BaseModel):
    pin_required: StrictBool


class _PinEnvelope(BaseModel):
    data: _PinData


class RegistrationApiClient:
    """Registration API calls made with one credential.

    A client never changes its token; the workflow builds a fresh client for
    each cycle once it knows which credential that cycle uses.
    """

    def __init__(
        self,
        session: requests.Session,
        env: EnvironmentConfig,
        api_token: str,
        base_url: str = API_BASE_URL,
        timeout: int = 10,
        status_path: str = "portals",
        pin_path: str = "portals",
        register_path: str = "portalregistrations",
    ) -> None:
        self.session = session
        self.env = env
        self.api_token = api_token
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.status_path = status_path
        self.pin_path = pin_path
        self.register_path = register_path

    def check_registration_status(self, params: PortalParameters) -> PortalRegistrationStatus:
        payload = {
            "vlan": params.get("PORT", self.env.vlan),
            "mac_address": params.get("MA", self.env.mac_address),
            "ip_address": params.get("SIP", self.env.ip_address),
            "nseid": params.get("UI", self.env.nseid),
        }
        data = self._post(self.status_path, payload, "registration status check")
        return self._decode(_StatusEnvelope, data, "registration status check").data

    def check_pin_required(self, property_id: int) -> bool:
        """Look the guest up by last name and room; also proves the stay exists."""
        payload = {
            "property_id": property_id,
            "lastname": self.env.last_name,
            "roomnumber": self.env.room_number,
        }
        data = self._post(self.pin_path, payload, "PIN check")
        return self._decode(_PinEnvelope, data, "PIN check").data.pin_required

    def register_device(
        self,
        params: PortalParameters,
        property_id: int,
        vlan_id: int,
    ) -> RegistrationOutcome:
        payload = {
            "nseid": params.get("UI", self.env.nseid),
            "property_id": property_id,
            "vlan_id": vlan_id,
            "mac_address": params.get("MA", self.env.mac_address),
            "ip_address": params.get("SIP", self.env.ip_address),
            "registration_method_id": self.env.registration_method_id,
            "rateplan_id": self.env.rateplan_id,
            "last_name": self.env.last_name,
            "room_number": self.env.room_number,
        }
        data = self._post(self.register_path, payload, "registration")
        return self._decode(RegistrationOutcome, data, "registration")

    def _post(self, path: str, payload: dict, operation: str) -> Any:
        url = urljoin(self.base_url, path)
        headers = {"api-token": self.api_token}
        logger.debug(
            "POST operation=%s url=%s token=%s payload=%s",
            operation,
            url,
            mask_value(self.api_token),
            payload,
        )
        try:
            response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise APIError(f"{operation} request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise APIError(
                f"{operation} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise APIError(
                f"{operation} response is not JSON",
                status_code=response.status_code,
                body=response.text,
            ) from exc

    @staticmethod
    def _decode(model: type, data: Any, operation: str) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise APIError(f"failed to decode {operation} response: {exc}") from exc


def build_api_client(
    session: requests.Session,
    env: EnvironmentConfig,
    api_token: str,
    config: dict,
) -> RegistrationApiClient:
    api_config = config.get("api", {})
    return RegistrationApiClient(
        session,
        env,
        api_token,
        base_url=config.get("api_base_url", API_BASE_URL),
        timeout=int(config.get("http", {}).get("timeout_seconds", 10)),
        status_path=api_config.get("status_path", "portals"),
        pin_path=api_config.get("pin_path", "portals"),
        register_path=api_config.get("register_path", "portalregistrations"),
    )
