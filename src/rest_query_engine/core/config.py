"""
Система конфигурации для REST query engine.

Все конфиги immutable (frozen dataclasses): один EngineConfig
разделяется всеми одновременными вызовами execute_query.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union, TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .logging import LoggingConfig

# Жёсткий лимит на редиректы и digest повторы одного вызова
MAX_REDIRECTS = 5

# Маркер типа данных ответа в сериализованных заголовках
RESPONSE_DATA_TYPE_HEADER = "X-OPENBLOCKS-RESPONSE-DATA-TYPE"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Конфигурация таймаутов исходящих запросов.

    Args:
        connect: Таймаут подключения (сек)
        read: Таймаут чтения данных (сек)
        write: Таймаут отправки тела (сек)
        pool: Ожидание свободного соединения в пуле (сек, опционально)

    Examples:
        >>> TimeoutConfig(connect=5, read=30)
        >>> TimeoutConfig(connect=3, read=60, write=60, pool=10)
    """
    connect: float = 5.0
    read: float = 30.0
    write: float = 30.0
    pool: Optional[float] = None

    def __post_init__(self):
        """Валидация."""
        if self.connect <= 0:
            raise ValueError("connect timeout must be positive")
        if self.read <= 0:
            raise ValueError("read timeout must be positive")
        if self.write <= 0:
            raise ValueError("write timeout must be positive")
        if self.pool is not None and self.pool <= 0:
            raise ValueError("pool timeout must be positive")

    def as_httpx(self) -> httpx.Timeout:
        """Вернуть как httpx.Timeout."""
        return httpx.Timeout(
            connect=self.connect,
            read=self.read,
            write=self.write,
            pool=self.pool,
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# POOL CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class PoolConfig:
    """
    Конфигурация общего пула для исходящих запросов.

    Args:
        max_concurrency: Максимум одновременных отправок (семафор)
        max_connections: Максимум соединений в httpx пуле
        max_keepalive_connections: Максимум keep-alive соединений

    Examples:
        >>> PoolConfig(max_concurrency=8)
        >>> PoolConfig(max_concurrency=64, max_connections=200)
    """
    max_concurrency: int = 32
    max_connections: int = 100
    max_keepalive_connections: int = 20

    def __post_init__(self):
        """Валидация."""
        if self.max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive")
        if self.max_connections <= 0:
            raise ValueError("max_connections must be positive")
        if self.max_keepalive_connections < 0:
            raise ValueError("max_keepalive_connections must be non-negative")

    def as_httpx_limits(self) -> httpx.Limits:
        """Вернуть как httpx.Limits."""
        return httpx.Limits(
            max_connections=self.max_connections,
            max_keepalive_connections=self.max_keepalive_connections,
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SECURITY CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class SecurityConfig:
    """
    Конфигурация безопасности.

    Args:
        max_response_size: Максимальный размер буферизуемого ответа (байты)
        verify_ssl: Проверять SSL сертификаты

    Examples:
        >>> SecurityConfig(max_response_size=50*1024*1024)  # 50MB
        >>> SecurityConfig(verify_ssl=False)  # Для тестов
    """
    max_response_size: int = 10 * 1024 * 1024  # 10MB
    verify_ssl: bool = True

    def __post_init__(self):
        """Валидация."""
        if self.max_response_size <= 0:
            raise ValueError("max_response_size must be positive")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class EngineConfig:
    """
    Главная конфигурация RestApiEngine.

    Args:
        timeout: Конфигурация таймаутов
        pool: Конфигурация общего пула
        security: Конфигурация безопасности
        max_redirects: Лимит попыток (редиректы + digest повтор)
        response_data_type_header: Ключ маркера типа данных ответа
        logging: Конфигурация логирования (None = только NullHandler)

    Examples:
        >>> config = EngineConfig()
        >>> config = EngineConfig.create(timeout=60, max_concurrency=8)
    """
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    pool: PoolConfig = field(default_factory=PoolConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    max_redirects: int = MAX_REDIRECTS
    response_data_type_header: str = RESPONSE_DATA_TYPE_HEADER
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Валидация."""
        if self.max_redirects <= 0:
            raise ValueError("max_redirects must be positive")
        if not self.response_data_type_header.strip():
            raise ValueError("response_data_type_header must not be blank")

    @classmethod
    def create(
        cls,
        timeout: Union[float, Tuple[float, float], TimeoutConfig] = 30,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        max_concurrency: Optional[int] = None,
        max_connections: Optional[int] = None,
        max_response_size: Optional[int] = None,
        verify_ssl: bool = True,
        logging: Optional['LoggingConfig'] = None,
        **kwargs
    ) -> 'EngineConfig':
        """
        Удобный конструктор конфигурации.

        Args:
            timeout: Таймаут (число, (connect, read) или TimeoutConfig)
            connect_timeout: Таймаут подключения (переопределяет timeout)
            read_timeout: Таймаут чтения (переопределяет timeout)
            max_concurrency: Максимум одновременных исходящих запросов
            max_connections: Максимум соединений в пуле
            max_response_size: Лимит размера ответа (байты)
            verify_ssl: Проверять SSL
            logging: Конфигурация логирования

        Returns:
            EngineConfig instance

        Examples:
            >>> config = EngineConfig.create(timeout=60)
            >>> config = EngineConfig.create(timeout=(5, 60), max_concurrency=4)
        """
        timeout_cfg = _to_timeout_config(timeout, connect_timeout, read_timeout)

        pool_kwargs = {}
        if max_concurrency is not None:
            pool_kwargs['max_concurrency'] = max_concurrency
        if max_connections is not None:
            pool_kwargs['max_connections'] = max_connections
        pool_cfg = PoolConfig(**pool_kwargs) if pool_kwargs else PoolConfig()

        security_kwargs = {'verify_ssl': verify_ssl}
        if max_response_size is not None:
            security_kwargs['max_response_size'] = max_response_size
        security_cfg = SecurityConfig(**security_kwargs)

        return cls(
            timeout=timeout_cfg,
            pool=pool_cfg,
            security=security_cfg,
            logging=logging,
            **kwargs
        )

    def with_timeout(self, timeout: Union[float, Tuple[float, float], TimeoutConfig]) -> 'EngineConfig':
        """
        Создать новый конфиг с изменённым timeout.

        Example:
            >>> new_config = config.with_timeout(60)
        """
        return replace(self, timeout=_to_timeout_config(timeout))

    def with_max_response_size(self, max_response_size: int) -> 'EngineConfig':
        """Создать новый конфиг с другим лимитом размера ответа."""
        return replace(
            self,
            security=replace(self.security, max_response_size=max_response_size),
        )


def _to_timeout_config(
    timeout: Union[float, Tuple[float, float], TimeoutConfig],
    connect_timeout: Optional[float] = None,
    read_timeout: Optional[float] = None,
) -> TimeoutConfig:
    if isinstance(timeout, TimeoutConfig):
        return timeout
    if connect_timeout is not None or read_timeout is not None:
        read = read_timeout or 30
        return TimeoutConfig(connect=connect_timeout or 5, read=read, write=read)
    if isinstance(timeout, tuple):
        return TimeoutConfig(connect=timeout[0], read=timeout[1], write=timeout[1])
    return TimeoutConfig(connect=5, read=timeout, write=timeout)
