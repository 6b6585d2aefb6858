from .client import PaymentLink, TilopayGateway
from .fields import GatewayFields, dedup_key, extract_gateway_fields
from .outcome import Verdict, classify_outcome
from .signature import compute_signature, verify_signature

__all__ = [
    "GatewayFields",
    "PaymentLink",
    "TilopayGateway",
    "Verdict",
    "classify_outcome",
    "compute_signature",
    "dedup_key",
    "extract_gateway_fields",
    "verify_signature",
]
