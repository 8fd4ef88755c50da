"""
Pending Selection Store

Одноразовый "почтовый ящик": ссылка ждёт, пока пользователь выберет формат.
Токен выдаётся при регистрации и может быть погашен ровно один раз.
"""
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional

from .base import ContentReference
from .exceptions import StaleSelection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingSelection:
    """Зарегистрированная, ещё не обработанная ссылка"""
    token: str
    reference: ContentReference
    created_at: float


class PendingSelectionStore:
    """
    In-memory хранилище ожидающих выбора ссылок

    Старые записи удаляются по TTL при каждом обращении, а при
    достижении max_entries вытесняется самая старая запись.
    """

    def __init__(
        self,
        namespace: str = "link",
        ttl_seconds: float = 3600,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.time,
    ):
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, PendingSelection]" = OrderedDict()
        self._last_token_value = 0
        self.lock = Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, token: str) -> bool:
        return token in self._entries

    def _next_token(self) -> str:
        # Наносекундная метка, сдвигается вперёд при совпадении
        value = max(time.time_ns(), self._last_token_value + 1)
        while format(value, "x") in self._entries:
            value += 1
        self._last_token_value = value
        return format(value, "x")

    def register(self, reference: ContentReference) -> str:
        """
        Регистрирует ссылку

        Args:
            reference: Ссылка на контент

        Returns:
            Уникальный токен
        """
        with self.lock:
            now = self._clock()
            self._sweep_locked(now)

            while len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.warning(f"[{self.namespace}] Pending store full, evicted {evicted}")

            token = self._next_token()
            self._entries[token] = PendingSelection(token, reference, now)

        logger.debug(f"[{self.namespace}] Registered {token}")
        return token

    def consume(self, token: str) -> ContentReference:
        """
        Забирает и удаляет ссылку по токену

        Raises:
            StaleSelection: токен уже погашен, устарел или неизвестен
        """
        with self.lock:
            self._sweep_locked(self._clock())
            entry = self._entries.pop(token, None)

        if entry is None:
            raise StaleSelection(token)

        logger.debug(f"[{self.namespace}] Consumed {token}")
        return entry.reference

    def sweep(self, now: Optional[float] = None) -> int:
        """Удаляет просроченные записи. Возвращает количество удалённых."""
        with self.lock:
            return self._sweep_locked(self._clock() if now is None else now)

    def _sweep_locked(self, now: float) -> int:
        removed = 0
        # Записи упорядочены по времени создания
        while self._entries:
            token, entry = next(iter(self._entries.items()))
            if now - entry.created_at < self.ttl_seconds:
                break
            del self._entries[token]
            removed += 1

        if removed:
            logger.info(f"[{self.namespace}] Swept {removed} expired selections")
        return removed
