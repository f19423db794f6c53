"""GCM adapter – Android delivery (requires httpx)."""
from push_dispatch.adapters.gcm.config import GCM_ENDPOINT, GCMCredential
from push_dispatch.adapters.gcm.payload import GCM_TIME_TO_LIVE_MAX, build_gcm_payload
from push_dispatch.adapters.gcm.sender import GCM_REGISTRATION_TOKENS_MAX, GCM_RETRIES, GCMSender
from push_dispatch.adapters.gcm.transport import GCMResponse, GCMTransport

__all__ = [
    "GCM_ENDPOINT",
    "GCM_REGISTRATION_TOKENS_MAX",
    "GCM_RETRIES",
    "GCM_TIME_TO_LIVE_MAX",
    "GCMCredential",
    "GCMResponse",
    "GCMSender",
    "GCMTransport",
    "build_gcm_payload",
]
