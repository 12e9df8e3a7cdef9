"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/verification_token.py
============================================================
Class: PostgresVerificationTokenRepository

Responsibilities:
  - Emitir tokens de verificación de email; invalidar los previos
    no verificados (expires_at = now, la fila queda para la cuota).
  - Consumir un token y marcar users.email_verified en UNA sentencia
    (CTE UPDATE ... WHERE verified_at IS NULL AND expires_at > now): dos
    requests concurrentes con el mismo token no pueden verificar ambos, y
    nunca queda un token consumido con el email sin verificar.
  - Contar emisiones recientes (cuota de reenvío).

Collaborators:
  - postgres.base.PostgresRepository
  - domain.entities.EmailVerificationToken
============================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from ....domain.entities import EmailVerificationToken
from .base import PostgresRepository

_TOKEN_COLUMNS = "id, user_id, token, expires_at, created_at, verified_at"


def _row_to_token(row: tuple) -> EmailVerificationToken:
    return EmailVerificationToken(
        id=row[0],
        user_id=row[1],
        token=row[2],
        expires_at=row[3],
        created_at=row[4],
        verified_at=row[5],
    )


class PostgresVerificationTokenRepository(PostgresRepository):
    def invalidate_unverified_for_user(self, user_id: UUID, now: datetime) -> int:
        return self._execute(
            query="""
                UPDATE email_verification_tokens
                SET expires_at = %s
                WHERE user_id = %s AND verified_at IS NULL AND expires_at > %s
            """,
            params=(now, user_id, now),
            context_msg="PostgresVerificationTokenRepository: invalidate_unverified failed",
            extra={"user_id": str(user_id)},
        )

    def create_token(
        self, *, user_id: UUID, token: str, expires_at: datetime
    ) -> EmailVerificationToken:
        row = self._fetchone(
            query=f"""
                INSERT INTO email_verification_tokens (id, user_id, token, expires_at)
                VALUES (%s, %s, %s, %s)
                RETURNING {_TOKEN_COLUMNS}
            """,
            params=(uuid4(), user_id, token, expires_at),
            context_msg="PostgresVerificationTokenRepository: create_token failed",
            extra={"user_id": str(user_id)},
        )
        return _row_to_token(row)

    def consume_token(self, token: str, now: datetime) -> Optional[UUID]:
        row = self._fetchone(
            query="""
                WITH consumed AS (
                    UPDATE email_verification_tokens
                    SET verified_at = %s
                    WHERE token = %s AND verified_at IS NULL AND expires_at > %s
                    RETURNING user_id
                )
                UPDATE users
                SET email_verified = TRUE, updated_at = now()
                FROM consumed
                WHERE users.id = consumed.user_id
                RETURNING users.id
            """,
            params=(now, token, now),
            context_msg="PostgresVerificationTokenRepository: consume_token failed",
            extra={},
        )
        return row[0] if row else None

    def count_created_since(self, user_id: UUID, since: datetime) -> int:
        row = self._fetchone(
            query="""
                SELECT COUNT(*)
                FROM email_verification_tokens
                WHERE user_id = %s AND created_at >= %s
            """,
            params=(user_id, since),
            context_msg="PostgresVerificationTokenRepository: count_created_since failed",
            extra={"user_id": str(user_id)},
        )
        return int(row[0]) if row else 0
