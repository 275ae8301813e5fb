from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, List, Literal, Optional

from fastapi import Request

"""
Core Events (bus des apostas).

Rôle (fonctionnel) :
- Canal publish/subscribe unique pour les événements “aposta créée / mise à jour / supprimée”.
- Consommé par le stream SSE (/apostas/stream) pour rafraîchir le front en temps réel.

Contrat :
- Nombre d’abonnés illimité.
- publish() est synchrone : livraison inline, dans l’ordre d’inscription, aux seuls abonnés
  présents au moment de la publication (pas de buffer, pas de retry, au plus une fois).
- Une exception levée par un abonné remonte à l’appelant de publish().
- Cycle de vie explicite : 1 bus par application (créé au démarrage, close() à l’arrêt),
  exposé via app.state.bet_events et injectable (get_bet_bus) pour les tests.
"""

logger = logging.getLogger("app.events")

BetEventType = Literal["created", "updated", "deleted"]


@dataclass(frozen=True)
class BetEvent:
    """Événement transitoire : jamais persisté, jeté après livraison."""
    user_id: str
    type: BetEventType
    payload: Optional[Dict[str, Any]] = None


BetListener = Callable[[BetEvent], None]


class BetEventBus:
    """
    Bus d’événements en mémoire (process unique).

    Responsabilités :
    - Gérer les abonnés (subscribe / unsubscribe).
    - Diffuser un BetEvent à chacun, dans l’ordre d’inscription.
    """

    def __init__(self) -> None:
        self._listeners: List[BetListener] = []
        self._close_callbacks: List[Callable[[], None]] = []
        self._lock = Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: BetListener) -> Callable[[], None]:
        """Inscrit un abonné et renvoie la fonction de désinscription."""
        with self._lock:
            if not self._closed:
                self._listeners.append(listener)

        def _unsubscribe() -> None:
            self.unsubscribe(listener)

        return _unsubscribe

    def unsubscribe(self, listener: BetListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def on_close(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Enregistre un callback appelé par close() (flux ouverts) ; renvoie la fonction de retrait."""
        with self._lock:
            if not self._closed:
                self._close_callbacks.append(callback)

        def _remove() -> None:
            with self._lock:
                if callback in self._close_callbacks:
                    self._close_callbacks.remove(callback)

        return _remove

    def publish(self, event: BetEvent) -> None:
        # Snapshot : un abonné ajouté pendant la livraison ne reçoit pas cet event
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            listener(event)

    def close(self) -> None:
        """Arrêt : retire tous les abonnés, prévient les flux ouverts ; les publications suivantes sont ignorées."""
        with self._lock:
            self._closed = True
            dropped = len(self._listeners)
            self._listeners.clear()
            callbacks = list(self._close_callbacks)
            self._close_callbacks.clear()

        for callback in callbacks:
            callback()
        if dropped:
            logger.info("bet event bus closed (%s listeners dropped)", dropped)


def emit_bet_event(
    bus: BetEventBus,
    user_id: str,
    event_type: BetEventType,
    payload: Optional[Dict[str, Any]] = None,
) -> BetEvent:
    """Construit et publie un BetEvent ; renvoie l’event publié."""
    event = BetEvent(user_id=user_id, type=event_type, payload=payload)
    bus.publish(event)
    logger.debug("bet_event", extra={"user_id": user_id, "event_type": event_type})
    return event


def get_bet_bus(request: Request) -> BetEventBus:
    """Dépendance FastAPI : bus partagé de l’application (override possible en test)."""
    return request.app.state.bet_events
