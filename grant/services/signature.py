"""
Interaction signature verification.

The platform signs `timestamp + body` with Ed25519 and sends the hex
signature and the timestamp as headers. Verification failure must stop
the request before the body is parsed.
"""
import binascii
import logging

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


def verify_signature(public_key_hex: str, timestamp: str, body: bytes, signature_hex: str) -> bool:
    """
    Return True iff `signature_hex` is a valid Ed25519 signature by
    `public_key_hex` over `timestamp + body`.

    Empty inputs and undecodable hex are rejected without doing any
    cryptographic work.
    """
    if not public_key_hex or not timestamp or not signature_hex:
        return False

    try:
        public_key = binascii.unhexlify(public_key_hex)
        signature = binascii.unhexlify(signature_hex)
    except (binascii.Error, ValueError):
        return False

    message = timestamp.encode("utf-8") + body
    try:
        VerifyKey(public_key).verify(message, signature)
    except BadSignatureError:
        return False
    except ValueError:
        # Wrong key or signature length
        logger.warning("Malformed Ed25519 key or signature (key=%d bytes, sig=%d bytes)",
                       len(public_key), len(signature))
        return False
    return True
