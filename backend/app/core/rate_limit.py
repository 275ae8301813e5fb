from __future__ import annotations

import ipaddress
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Tuple

from fastapi import Request

from app.core.errors import AppHTTPException
from app.core.settings import settings

"""
Core Rate Limit.

Rôle (fonctionnel) :
- Limite les rafales de mises à jour d’apostas (PUT /apostas/{id}).
- Implémentation “in-memory” par IP + route (method + gabarit de route), fenêtre fixe configurable.
- Conçu pour un seul process : derrière plusieurs workers, une implémentation
  distribuée (ex : Redis) serait nécessaire.

Activation via settings :
- RATE_LIMIT_ENABLED : active/désactive le rate limiting.
- BET_UPDATE_RATE_LIMIT / BET_UPDATE_RATE_WINDOW_S : requêtes max par fenêtre.
- BET_UPDATE_RATE_SKIP_SUCCESSFUL : seules les requêtes en échec sont comptées.
"""


@dataclass
class _Bucket:
    """État minimal d’un compteur sur une fenêtre fixe."""
    window_start: float
    count: int


def _valid_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def client_ip(request: Request) -> str:
    """IP client : 1re entrée valide de X-Forwarded-For, puis X-Real-IP, puis socket."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if _valid_ip(first):
            return first

    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip and _valid_ip(real_ip):
        return real_ip

    return request.client.host if request.client else "unknown"


def route_key(request: Request) -> str:
    """METHOD + gabarit de route ("PUT /apostas/{aposta_id}") ; chemin brut hors routeur."""
    route = request.scope.get("route")
    template = getattr(route, "path", None) or request.url.path
    return f"{request.method} {template}"


class InMemoryRateLimiter:
    """
    Rate limiter en mémoire (best-effort).

    Principe :
    - Stocke un compteur par clé (IP, "METHOD /gabarit") sur une fenêtre de `window_s` secondes :
      toutes les apostas partagent donc le même quota pour un client.
    - Réinitialise le compteur à chaque nouvelle fenêtre.
    - Lève AppHTTPException(429) quand le quota de la fenêtre est consommé.
    - skip_successful=True : seules les requêtes en échec consomment le quota
      (record_failure, appelé par la dépendance après la route).
    """

    # Au-delà, les fenêtres expirées sont purgées à la création d’un compteur
    MAX_TRACKED_KEYS = 10_000

    def __init__(
        self,
        *,
        limit: int,
        window_s: float,
        message: str,
        skip_successful: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._lock = Lock()
        self._buckets: Dict[Tuple[str, str], _Bucket] = {}
        self.limit = limit
        self.window_s = window_s
        self.message = message
        self.skip_successful = skip_successful
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return settings.RATE_LIMIT_ENABLED and self.limit > 0

    def tracked_keys(self) -> int:
        return len(self._buckets)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def _key(self, request: Request) -> Tuple[str, str]:
        return client_ip(request), route_key(request)

    def _bucket(self, key: Tuple[str, str], now: float) -> _Bucket:
        # Appelé sous self._lock
        bucket = self._buckets.get(key)
        if bucket is None or (now - bucket.window_start) >= self.window_s:
            if bucket is None and len(self._buckets) >= self.MAX_TRACKED_KEYS:
                self._buckets = {
                    k: b for k, b in self._buckets.items() if (now - b.window_start) < self.window_s
                }
            bucket = _Bucket(window_start=now, count=0)
            self._buckets[key] = bucket
        return bucket

    def check(self, request: Request) -> None:
        """Vérifie le quota (IP + route). Lève 429 s’il est consommé."""
        if not self.enabled:
            return

        key = self._key(request)
        now = self._clock()

        with self._lock:
            bucket = self._bucket(key, now)

            if bucket.count >= self.limit:
                retry_after = int(self.window_s - (now - bucket.window_start)) + 1
                raise AppHTTPException(
                    429,
                    "RATE_LIMITED",
                    self.message,
                    details={"limit": self.limit, "retryAfter": retry_after},
                )

            if not self.skip_successful:
                bucket.count += 1

    def record_failure(self, request: Request) -> None:
        """Compte une requête en échec (mode skip_successful uniquement)."""
        if not self.enabled or not self.skip_successful:
            return

        key = self._key(request)
        now = self._clock()
        with self._lock:
            self._bucket(key, now).count += 1


bet_update_limiter = InMemoryRateLimiter(
    limit=settings.BET_UPDATE_RATE_LIMIT,
    window_s=settings.BET_UPDATE_RATE_WINDOW_S,
    message="Muitas requisições de atualização. Aguarde alguns minutos antes de tentar novamente.",
    skip_successful=settings.BET_UPDATE_RATE_SKIP_SUCCESSFUL,
)


async def limit_bet_updates(request: Request):
    """
    Dépendance FastAPI branchée sur PUT /apostas/{id}.

    Vérifie le quota avant la route ; une erreur levée par la route (404, 400…)
    est comptée puis propagée telle quelle.
    """
    bet_update_limiter.check(request)
    try:
        yield
    except Exception:
        bet_update_limiter.record_failure(request)
        raise
