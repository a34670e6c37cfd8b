"""Detecting whether the active credential supports arbitrary base currencies."""

from __future__ import annotations

from dataclasses import dataclass

from openfx.errors import AuthenticationError
from openfx.models import PlanTier, RateResult, UpstreamError, normalize_currency
from openfx.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_ANCHOR = "USD"
AUTH_ERROR_CODES = frozenset({"invalid_app_id", "missing_app_id"})
NOT_ALLOWED = "not_allowed"


@dataclass(frozen=True, slots=True)
class PlanPolicy:
    """Derive the :class:`PlanTier` from the construction probe.

    A probe that succeeded with a non-anchor base proves the plan is capable.
    Requesting the anchor itself is ambiguous and falls back to emulation,
    which is always safe because rebasing to the anchor is a no-op.
    """

    anchor: str = DEFAULT_ANCHOR

    def determine(self, probe: RateResult, requested_base: str) -> PlanTier:
        requested_base = normalize_currency(requested_base)
        if isinstance(probe, UpstreamError):
            if probe.message in AUTH_ERROR_CODES:
                detail = f": {probe.description}" if probe.description else ""
                raise AuthenticationError(f"Upstream rejected the app_id ({probe.message}){detail}")
            if probe.message == NOT_ALLOWED:
                LOGGER.info(
                    "Base %s not allowed for this plan; emulating via %s", requested_base, self.anchor
                )
            else:
                LOGGER.warning(
                    "Probe for base %s failed with %s; emulating via %s",
                    requested_base,
                    probe.message,
                    self.anchor,
                )
            return PlanTier.EMULATED
        if requested_base != self.anchor:
            LOGGER.info("Upstream accepted base %s natively", requested_base)
            return PlanTier.CAPABLE
        return PlanTier.EMULATED


__all__ = ["AUTH_ERROR_CODES", "DEFAULT_ANCHOR", "NOT_ALLOWED", "PlanPolicy"]
