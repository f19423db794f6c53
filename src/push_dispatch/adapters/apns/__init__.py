"""APNs adapter – iOS delivery (requires httpx[http2] and PyJWT[crypto])."""
from push_dispatch.adapters.apns.config import APNS_PRODUCTION_URL, APNS_SANDBOX_URL, APNSCredential
from push_dispatch.adapters.apns.payload import apns_headers, build_apns_payload
from push_dispatch.adapters.apns.sender import APNS_RETRIES, APNSSender
from push_dispatch.adapters.apns.transport import APNSResponse, APNSTransport

__all__ = [
    "APNS_PRODUCTION_URL",
    "APNS_RETRIES",
    "APNS_SANDBOX_URL",
    "APNSCredential",
    "APNSResponse",
    "APNSSender",
    "APNSTransport",
    "apns_headers",
    "build_apns_payload",
]
