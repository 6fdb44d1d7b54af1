"""Fingerprinter: digests content variants with a selectable backend.

Backends differ in speed only. ``hashlib`` goes through OpenSSL, which uses
SHA extensions where the CPU has them; ``pycryptodome`` is the portable
reference. Every backend must produce bit-identical digests.
"""

from __future__ import annotations

import hashlib
import importlib
from collections.abc import Callable
from importlib.util import find_spec
from typing import Any

from snipscan.core.errors import ConfigError
from snipscan.snippets.models import Fingerprint, HashAlgorithm, HashBackend

_HASHLIB_NAMES = {
    HashAlgorithm.SHA_256: "sha256",
    HashAlgorithm.SHA_512: "sha512",
}

_PYCRYPTODOME_MODULES = {
    HashAlgorithm.SHA_256: "Crypto.Hash.SHA256",
    HashAlgorithm.SHA_512: "Crypto.Hash.SHA512",
}


def is_backend_available(backend: HashBackend) -> bool:
    if backend is HashBackend.HASHLIB:
        return True
    return find_spec("Crypto") is not None


def _hashlib_digester(algorithm: HashAlgorithm) -> Callable[[bytes], bytes]:
    name = _HASHLIB_NAMES[algorithm]

    def digest(content: bytes) -> bytes:
        return hashlib.new(name, content).digest()

    return digest


def _pycryptodome_digester(algorithm: HashAlgorithm) -> Callable[[bytes], bytes]:
    if not is_backend_available(HashBackend.PYCRYPTODOME):
        raise ConfigError.backend_unavailable(HashBackend.PYCRYPTODOME.value, "Crypto")
    module: Any = importlib.import_module(_PYCRYPTODOME_MODULES[algorithm])

    def digest(content: bytes) -> bytes:
        return bytes(module.new(content).digest())

    return digest


_DIGESTERS = {
    HashBackend.HASHLIB: _hashlib_digester,
    HashBackend.PYCRYPTODOME: _pycryptodome_digester,
}


class Fingerprinter:
    """Computes fingerprints for one (algorithm, backend) pair.

    Raises ConfigError at construction if the backend is not installed.
    """

    __slots__ = ("algorithm", "backend", "_digest")

    def __init__(
        self,
        algorithm: HashAlgorithm = HashAlgorithm.SHA_256,
        backend: HashBackend = HashBackend.HASHLIB,
    ) -> None:
        self.algorithm = algorithm
        self.backend = backend
        self._digest = _DIGESTERS[backend](algorithm)

    def fingerprint(self, content: bytes) -> Fingerprint:
        return Fingerprint(algorithm=self.algorithm, digest=self._digest(content))

    def __repr__(self) -> str:
        return f"Fingerprinter({self.algorithm.value}, {self.backend.value})"
