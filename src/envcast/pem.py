"""PEM block decoding for the ``pem`` conversion type.

``decode_pem`` only splits and base64-decodes the blocks; turning them into
key and certificate objects is done on demand with ``cryptography``.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import re
from typing import Any, Literal

from cryptography import x509
from cryptography.hazmat.primitives import serialization

PemKind = Literal["certificate", "private_key", "public_key", "other"]

_BLOCK = re.compile(
    r"-----BEGIN (?P<label>[A-Z0-9 ]+)-----\r?\n"
    r"(?P<body>.*?)"
    r"-----END (?P=label)-----",
    re.DOTALL,
)

_CERTIFICATE_LABELS = frozenset(
    {"CERTIFICATE", "X509 CERTIFICATE", "TRUSTED CERTIFICATE"}
)


@dataclasses.dataclass(frozen=True, slots=True)
class PemEntry:
    """One decoded PEM block."""

    kind: PemKind
    label: str
    der: bytes
    encrypted: bool
    pem: str


def decode_pem(text: str) -> list[PemEntry]:
    """Split ``text`` into its PEM blocks, ignoring anything between them.

    Args:
        text: PEM-encoded data, possibly with several blocks.

    Returns:
        The blocks in input order; empty if there are none.

    Raises:
        ValueError: If a block body is not valid base64.
    """
    entries = []
    for match in _BLOCK.finditer(text):
        label = match.group("label")
        headers, body = _split_headers(match.group("body"))
        try:
            der = base64.b64decode("".join(body.split()), validate=True)
        except binascii.Error as e:
            raise ValueError(f"invalid base64 in PEM block {label!r}") from e

        encrypted = label == "ENCRYPTED PRIVATE KEY" or "ENCRYPTED" in headers.get(
            "Proc-Type", ""
        )
        entries.append(
            PemEntry(
                kind=_kind(label),
                label=label,
                der=der,
                encrypted=encrypted,
                pem=match.group(0),
            )
        )
    return entries


def load_certificate(entry: PemEntry) -> x509.Certificate:
    """Load a certificate entry.

    Raises:
        ValueError: If the entry is not a valid certificate.
    """
    return x509.load_der_x509_certificate(entry.der)


def load_private_key(entry: PemEntry) -> Any:
    """Load an unencrypted private key entry.

    Raises:
        ValueError: If the entry is not a valid private key.
    """
    return serialization.load_pem_private_key(entry.pem.encode("ascii"), password=None)


def _kind(label: str) -> PemKind:
    if label in _CERTIFICATE_LABELS:
        return "certificate"
    if label.endswith("PRIVATE KEY"):
        return "private_key"
    if label.endswith("PUBLIC KEY"):
        return "public_key"
    return "other"


def _split_headers(body: str) -> tuple[dict[str, str], str]:
    # RFC 1421 headers ("Proc-Type: 4,ENCRYPTED") end at the first blank line.
    if ":" not in body.split("\n", 1)[0]:
        return {}, body
    parts = re.split(r"\r?\n\r?\n", body, maxsplit=1)
    if len(parts) != 2:
        return {}, body
    head, rest = parts
    headers = {}
    for line in head.splitlines():
        key, sep, value = line.partition(":")
        if sep:
            headers[key.strip()] = value.strip()
    return headers, rest
