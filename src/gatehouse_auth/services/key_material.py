"""RSA key material for signing access tokens.

The private key is loaded once at startup and shared read-only. The public
half is published as a JSON Web Key Set so other services can verify access
tokens without ever seeing the private key.
"""

import base64
import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from gatehouse_auth.exceptions import KeyMaterialError

logger = logging.getLogger(__name__)

SIGNING_ALGORITHM = "RS256"
MIN_KEY_SIZE = 2048


def _jwk_thumbprint(jwk: dict[str, Any]) -> str:
    """RFC 7638 thumbprint of an RSA JWK (base64url SHA-256, no padding)."""
    canonical = json.dumps(
        {"e": jwk["e"], "kty": jwk["kty"], "n": jwk["n"]},
        separators=(",", ":"),
        sort_keys=True,
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


@dataclass(frozen=True)
class SigningKeyMaterial:
    """Immutable RSA key pair used by the access token signer.

    Examples
    --------
    >>> material = SigningKeyMaterial.from_file(Path("certs/private.pem"))
    >>> material.jwks()["keys"][0]["kid"] == material.key_id
    True
    """

    private_key: rsa.RSAPrivateKey = field(repr=False)
    key_id: str

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        return self.private_key.public_key()

    @classmethod
    def from_pem(
        cls,
        pem: str | bytes,
        key_id: str | None = None,
    ) -> "SigningKeyMaterial":
        """Load key material from PEM-encoded private key text.

        Raises
        ------
        KeyMaterialError
            If the PEM is empty, unparsable, not RSA, or too small
        """
        if not pem:
            raise KeyMaterialError

        data = pem.encode("utf-8") if isinstance(pem, str) else pem
        try:
            private_key = serialization.load_pem_private_key(data, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            msg = f"Could not load signing key: {e}"
            raise KeyMaterialError(msg) from e

        if not isinstance(private_key, rsa.RSAPrivateKey):
            msg = "Signing key must be an RSA private key"
            raise KeyMaterialError(msg)

        if private_key.key_size < MIN_KEY_SIZE:
            msg = f"Signing key must be at least {MIN_KEY_SIZE} bits"
            raise KeyMaterialError(msg)

        return cls._build(private_key, key_id)

    @classmethod
    def from_file(
        cls,
        path: Path,
        key_id: str | None = None,
    ) -> "SigningKeyMaterial":
        """Load key material from a PEM file on disk."""
        try:
            pem = path.read_bytes()
        except OSError as e:
            msg = f"Could not read signing key file {path}: {e}"
            raise KeyMaterialError(msg) from e
        logger.info("Loaded access token signing key from %s", path)
        return cls.from_pem(pem, key_id=key_id)

    @classmethod
    def generate(
        cls,
        key_size: int = MIN_KEY_SIZE,
        key_id: str | None = None,
    ) -> "SigningKeyMaterial":
        """Generate a fresh RSA key pair."""
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
        return cls._build(private_key, key_id)

    @classmethod
    def _build(
        cls,
        private_key: rsa.RSAPrivateKey,
        key_id: str | None,
    ) -> "SigningKeyMaterial":
        if key_id is None:
            jwk = RSAAlgorithm.to_jwk(private_key.public_key(), as_dict=True)
            key_id = _jwk_thumbprint(jwk)
        return cls(private_key=private_key, key_id=key_id)

    def private_pem(self) -> bytes:
        """Serialise the private key as unencrypted PKCS#8 PEM."""
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def public_jwk(self) -> dict[str, Any]:
        """Public half as a JWK suitable for publication."""
        jwk = RSAAlgorithm.to_jwk(self.public_key, as_dict=True)
        jwk.update({"kid": self.key_id, "use": "sig", "alg": SIGNING_ALGORITHM})
        return jwk

    def jwks(self) -> dict[str, list[dict[str, Any]]]:
        """Public key set containing this key."""
        return {"keys": [self.public_jwk()]}
