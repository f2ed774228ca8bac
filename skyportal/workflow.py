import logging
import time
from enum import Enum
from typing import Optional

import requests

from skyportal.api_client import RegistrationApiClient, build_api_client
from skyportal.config.logging_config import mask_value
from skyportal.config.settings import DEFAULT_CONFIG, EnvironmentConfig
from skyportal.errors import APIError, SkyportalError, UnexpectedDomainError
from skyportal.http import build_session
from skyportal.portal_params import PortalParameters
from skyportal.probe import PortalDetection, check_device_status
from skyportal.token import discover_api_token

logger = logging.getLogger(__name__)


class CycleOutcome(str, Enum):
    PROBE_FAILED = "probe_failed"
    UNEXPECTED_DOMAIN = "unexpected_domain"
    ONLINE = "online"
    STATUS_CHECK_FAILED = "status_check_failed"
    ALREADY_REGISTERED = "already_registered"
    PIN_CHECK_FAILED = "pin_check_failed"
    NOT_ELIGIBLE = "not_eligible"
    REGISTRATION_FAILED = "registration_failed"
    REGISTERED = "registered"

    @property
    def connected(self) -> bool:
        return self in (
            CycleOutcome.ONLINE,
            CycleOutcome.ALREADY_REGISTERED,
            CycleOutcome.REGISTERED,
        )


class PortalAgent:
    """Runs the probe -> token -> status -> PIN -> register pipeline once per tick.

    Every step either hands its result to the next one or ends the cycle; nothing
    is retried inside a cycle. The next tick starts again from the probe.
    """

    def __init__(
        self,
        env: EnvironmentConfig,
        config: Optional[dict] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.env = env
        self.config = config or DEFAULT_CONFIG
        http_config = self.config.get("http", {})
        self.timeout = int(http_config.get("timeout_seconds", 10))
        self.session = session or build_session(
            user_agent=http_config.get("user_agent", ""),
            retries=int(http_config.get("retries", 3)),
            backoff_seconds=float(http_config.get("backoff_seconds", 2)),
        )

    def resolve_api_token(self, detection: PortalDetection) -> str:
        """Prefer a token scraped from the portal over the configured default."""
        dynamic_token = discover_api_token(
            self.session, detection.url, detection.body, self.timeout
        )
        if dynamic_token:
            return dynamic_token
        logger.info("Using configured API token token=%s", mask_value(self.env.api_token))
        return self.env.api_token

    def run_cycle(self) -> CycleOutcome:
        logger.info("Checking device status...")
        try:
            detection = check_device_status(
                self.session,
                self.config.get("check_url", DEFAULT_CONFIG["check_url"]),
                self.config.get("portal_host", DEFAULT_CONFIG["portal_host"]),
                self.timeout,
            )
        except UnexpectedDomainError as exc:
            logger.warning("Device check failed, will retry on next cycle host=%s", exc.host)
            return CycleOutcome.UNEXPECTED_DOMAIN
        except SkyportalError as exc:
            logger.warning("Device check failed, will retry on next cycle error=%s", exc)
            return CycleOutcome.PROBE_FAILED

        if detection is None:
            logger.debug("Device online; no captive portal detected")
            return CycleOutcome.ONLINE

        logger.info(
            "Captive portal detected; attempting registration flow status=%s params=%s",
            detection.status_code,
            dict(detection.params),
        )
        api_token = self.resolve_api_token(detection)
        client = build_api_client(self.session, self.env, api_token, self.config)
        return self.register(client, detection.params)

    def register(self, client: RegistrationApiClient, params: PortalParameters) -> CycleOutcome:
        try:
            status = client.check_registration_status(params)
        except APIError as exc:
            logger.error("Portal registration check failed error=%s", exc)
            return CycleOutcome.STATUS_CHECK_FAILED

        if status.is_registered:
            logger.info("Device is already authenticated; registration complete")
            return CycleOutcome.ALREADY_REGISTERED

        logger.debug(
            "Registration status=%r property_id=%s vlan_id=%s",
            status.registration_status,
            status.property_id,
            status.vlan_id,
        )
        try:
            pin_required = client.check_pin_required(status.property_id)
        except APIError as exc:
            logger.error("Failed to check if PIN is required error=%s", exc)
            return CycleOutcome.PIN_CHECK_FAILED

        if not pin_required:
            logger.error(
                "User lookup failed or PIN not required last_name=%s room=%s property_id=%s",
                self.env.last_name,
                self.env.room_number,
                status.property_id,
            )
            return CycleOutcome.NOT_ELIGIBLE

        try:
            outcome = client.register_device(params, status.property_id, status.vlan_id)
        except APIError as exc:
            logger.error("User registration failed error=%s", exc)
            return CycleOutcome.REGISTRATION_FAILED

        if outcome.succeeded:
            logger.info("User registration successful url=%s", outcome.url)
            return CycleOutcome.REGISTERED
        logger.error(
            "Registration failed status=%r error=%s",
            outcome.registration_status,
            outcome.error,
        )
        return CycleOutcome.REGISTRATION_FAILED

    def run_forever(self, interval: float, max_cycles: Optional[int] = None) -> int:
        """Run cycles back to back, one at a time, starting one every ``interval`` seconds."""
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            started = time.monotonic()
            try:
                outcome = self.run_cycle()
                logger.debug("Cycle finished outcome=%s", outcome.value)
            except Exception:
                logger.exception("Unexpected error during check cycle")
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            elapsed = time.monotonic() - started
            time.sleep(max(0.0, interval - elapsed))
        return cycles
