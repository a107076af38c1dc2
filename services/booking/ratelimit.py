# ============================================================
# ratelimit.py — Anti-spam des avis (IP -> dernier envoi)
# ------------------------------------------------------------
# État en mémoire du processus, remis à zéro au redémarrage.
# La table est bornée : au-delà de max_entries, les IP les plus
# anciennes sont oubliées. Pour plusieurs instances il faudrait
# un cache partagé.
# ============================================================
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional


class CooldownLimiter:
    def __init__(self, cooldown_seconds: float, max_entries: int = 10000,
                 clock: Callable[[], float] = time.monotonic):
        self.cooldown = cooldown_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._last: "OrderedDict[str, float]" = OrderedDict()
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        """True si `key` peut soumettre maintenant (et enregistre l'envoi)."""
        now = self._clock()
        with self._lock:
            last = self._last.get(key)
            if last is not None and now - last < self.cooldown:
                return False
            self._last[key] = now
            self._last.move_to_end(key)
            self._evict(now)
            return True

    def retry_after(self, key: str) -> Optional[float]:
        with self._lock:
            last = self._last.get(key)
        if last is None:
            return None
        remaining = self.cooldown - (self._clock() - last)
        return remaining if remaining > 0 else None

    def _evict(self, now: float):
        # entrées expirées en tête (ordre d'insertion), puis la taille
        while self._last:
            key, ts = next(iter(self._last.items()))
            if now - ts >= self.cooldown or len(self._last) > self.max_entries:
                self._last.popitem(last=False)
            else:
                break

    def reset(self):
        with self._lock:
            self._last.clear()

    def __len__(self):
        return len(self._last)
