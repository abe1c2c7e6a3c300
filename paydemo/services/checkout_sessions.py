"""
Almacén en memoria de sesiones de checkout.

Cada sesión guarda su propio CheckoutState. No hay persistencia: una
sesión vive hasta que se descarta, hasta que pasa CHECKOUT_SESSION_TTL
sin usarse o hasta que el almacén se llena y es la más antigua.
"""

import secrets
import time
from collections import OrderedDict
from typing import Callable

import structlog

from paydemo.config import settings
from paydemo.services.shipping_service import CheckoutState
from paydemo.utils.exceptions import CheckoutSessionNotFoundError


logger = structlog.get_logger(__name__)


class CheckoutSessionStore:
    """
    Registro de CheckoutState por ID de sesión.
    
    Las sesiones caducan tras ttl_seconds sin actividad y, si se supera
    max_sessions, se expulsa la usada hace más tiempo.
    
    NO USAR EN PRODUCCIÓN - no es persistente ni distribuido.
    """
    
    def __init__(
        self,
        ttl_seconds: float = 1800,
        max_sessions: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl_seconds = ttl_seconds
        self._max_sessions = max_sessions
        self._clock = clock
        # session_id -> (último uso, estado); orden = del menos al más reciente
        self._sessions: OrderedDict[str, tuple[float, CheckoutState]] = OrderedDict()
    
    def _purge_expired(self, now: float) -> None:
        while self._sessions:
            session_id, (last_used, _) = next(iter(self._sessions.items()))
            if now - last_used < self._ttl_seconds:
                break
            del self._sessions[session_id]
            logger.info("Checkout session expired")
    
    def create(self, state: CheckoutState) -> str:
        """Registra una sesión nueva y retorna su ID."""
        now = self._clock()
        self._purge_expired(now)
        
        while len(self._sessions) >= self._max_sessions:
            self._sessions.popitem(last=False)
            logger.warning("Checkout session evicted", max_sessions=self._max_sessions)
        
        session_id = secrets.token_hex(32)
        self._sessions[session_id] = (now, state)
        logger.info("Checkout session started", base_amount=state.base_amount)
        return session_id
    
    def get(self, session_id: str) -> CheckoutState:
        """
        Obtiene el estado de una sesión y renueva su caducidad.
        
        Raises:
            CheckoutSessionNotFoundError: Si la sesión no existe o caducó
        """
        now = self._clock()
        self._purge_expired(now)
        
        entry = self._sessions.get(session_id)
        if entry is None:
            raise CheckoutSessionNotFoundError(session_id)
        
        state = entry[1]
        self._sessions[session_id] = (now, state)
        self._sessions.move_to_end(session_id)
        return state
    
    def discard(self, session_id: str) -> bool:
        """Descarta una sesión. Retorna False si no existía."""
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("Checkout session discarded")
        return removed
    
    def clear(self) -> None:
        self._sessions.clear()
    
    def __len__(self) -> int:
        return len(self._sessions)


_session_store: CheckoutSessionStore | None = None


def get_session_store() -> CheckoutSessionStore:
    """Obtiene o crea el almacén de sesiones del proceso."""
    global _session_store
    
    if _session_store is None:
        _session_store = CheckoutSessionStore(
            ttl_seconds=settings.CHECKOUT_SESSION_TTL_SECONDS,
            max_sessions=settings.CHECKOUT_SESSION_MAX,
        )
    
    return _session_store
