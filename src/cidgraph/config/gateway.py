"""Content gateway and schema manifest configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, optional_positive_float_env_var
from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_GATEWAY_URL = "https://gateway.pinata.cloud/ipfs"
DEFAULT_MANIFEST_URL = "https://lexicon.elephant.xyz/json-schemas/schema-manifest.json"
USER_AGENT = "cidgraph/1.0"


@dataclass(frozen=True, slots=True)
class GatewayConfig:
    resilience: ResilienceConfig
    manifest_url: str = DEFAULT_MANIFEST_URL

    @property
    def base_url(self) -> str:
        return self.resilience.base_url or DEFAULT_GATEWAY_URL


def build_gateway_resilience(
    base_url: str,
    *,
    max_requests_per_second: float | None = None,
) -> ResilienceConfig:
    """Gateway client settings; requests are spaced evenly when a rate is given."""

    ratelimit = (
        RateLimit(max_calls=1, per_seconds=1.0 / max_requests_per_second)
        if max_requests_per_second is not None
        else None
    )
    return ResilienceConfig(
        name="gateway",
        base_url=base_url.rstrip("/"),
        ratelimit=ratelimit,
        default_headers={"User-Agent": USER_AGENT},
    )


def get_gateway_config(
    *,
    gateway_url: str | None = None,
    max_requests_per_second: float | None = None,
) -> GatewayConfig:
    base_url = gateway_url or optional_env_var("CIDGRAPH_GATEWAY_URL", DEFAULT_GATEWAY_URL)
    manifest_url = optional_env_var("CIDGRAPH_MANIFEST_URL", DEFAULT_MANIFEST_URL)
    if max_requests_per_second is None:
        max_requests_per_second = optional_positive_float_env_var("CIDGRAPH_GATEWAY_MAX_RPS")
    return GatewayConfig(
        resilience=build_gateway_resilience(
            base_url,
            max_requests_per_second=max_requests_per_second,
        ),
        manifest_url=manifest_url,
    )
