"""
===============================================================================
TARJETA CRC — identity/passwords.py
===============================================================================

Módulo:
    Hashing de passwords (Argon2) + contraseñas temporales

Responsabilidades:
    - Hashear/verificar passwords con Argon2 (salt por hash, costo adaptativo).
    - Generar contraseñas temporales (alta de usuario / reset admin).

Colaboradores:
    - argon2-cffi (PasswordHasher)
    - secrets (CSPRNG)

Notas:
    - Operación CPU-bound: los endpoints que la usan son `def` (threadpool de
      FastAPI), nunca `async def`.
    - verify_password nunca lanza: hash corrupto o mismatch => False.
===============================================================================
"""

from __future__ import annotations

import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

# R: alfabeto sin caracteres ambiguos (0/O, 1/l/I).
TEMP_PASSWORD_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz23456789"
TEMP_PASSWORD_LENGTH = 12

_password_hasher = PasswordHasher()

# R: hash de referencia para igualar tiempos cuando el usuario no existe.
_DUMMY_HASH = _password_hasher.hash(secrets.token_urlsafe(16))


def hash_password(password: str) -> str:
    """Hashea un password usando Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica password vs hash almacenado."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def burn_verification_time(password: str) -> None:
    """Verificación contra un hash dummy (mismo costo que un login real)."""
    verify_password(password, _DUMMY_HASH)


def generate_temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    if length <= 0:
        raise ValueError("length must be > 0")
    return "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length))
