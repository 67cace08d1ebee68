"""
Snowflake database connection management.

Provides connection factory and context manager for Snowflake operations.
Mock mode (see mock.py) keeps rows in memory for local development.

Most code never touches this module directly - it goes through the
repositories, which handle the translation between domain models and
database rows.
"""

import base64
import logging
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import Generator, Optional, Protocol

logger = logging.getLogger(__name__)


class SnowflakeConnectionError(Exception):
    """Raised when Snowflake connection fails."""
    pass


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Using a protocol means tests can provide a mock without
    importing the actual snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...
    def close(self) -> None: ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_base64: Optional[str] = None
    database: str = "STYLEAI"
    schema: str = "WARDROBE"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


def _load_private_key(pem_data: bytes) -> bytes:
    """
    Convert a PEM private key into the DER bytes snowflake-connector expects.
    """
    from cryptography.hazmat.backends import default_backend
    from cryptography.hazmat.primitives import serialization

    private_key = serialization.load_pem_private_key(
        pem_data,
        password=None,
        backend=default_backend()
    )

    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


def _resolve_private_key(config: SnowflakeConfig) -> Optional[bytes]:
    """Load the key from a file path, or from base64 for deployments without a key file."""
    if config.private_key_path:
        with open(config.private_key_path, 'rb') as key_file:
            return _load_private_key(key_file.read())
    if config.private_key_base64:
        return _load_private_key(base64.b64decode(config.private_key_base64))
    return None


@contextmanager
def get_snowflake_connection(config: SnowflakeConfig) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide Snowflake connection with automatic cleanup.

    Supports both password and key-pair authentication:
    - If a private key (path or base64) is set, uses key-pair auth
    - Otherwise, uses password auth

    Usage:
        with get_snowflake_connection(config) as conn:
            cursor = conn.cursor()
            # do work
            conn.commit()
    """
    try:
        import snowflake.connector
    except ImportError:
        raise ImportError(
            "snowflake-connector-python is required. "
            "Install with: pip install snowflake-connector-python"
        )

    connect_params = {
        'account': config.account,
        'user': config.user,
        'database': config.database,
        'schema': config.schema,
        'warehouse': config.warehouse,
        'role': config.role,
        'client_session_keep_alive': True,
    }

    private_key = _resolve_private_key(config)
    if private_key:
        logger.info("Using key-pair authentication for Snowflake")
        connect_params['private_key'] = private_key
    elif config.password:
        logger.info("Using password authentication for Snowflake")
        connect_params['password'] = config.password
    else:
        raise SnowflakeConnectionError(
            "Either password or a private key must be provided"
        )

    try:
        conn = snowflake.connector.connect(**connect_params)
    except snowflake.connector.errors.DatabaseError as e:
        logger.error(
            "Snowflake connection failed",
            extra={"error": str(e), "account": config.account}
        )
        raise SnowflakeConnectionError(f"Database connection failed: {e}")

    logger.debug(
        "Established Snowflake connection",
        extra={
            "account": config.account,
            "database": config.database,
            "schema": config.schema,
        }
    )

    try:
        yield conn
    finally:
        try:
            conn.close()
            logger.debug("Closed Snowflake connection")
        except Exception as e:
            logger.warning(
                "Error closing Snowflake connection",
                extra={"error": str(e)}
            )


class LazySnowflakeConnection:
    """
    Connects on first use rather than on construction.

    Connection failures then surface inside repository calls, where
    each route reports them with its own message.
    """

    def __init__(self, config: SnowflakeConfig) -> None:
        self._config = config
        self._stack = ExitStack()
        self._conn: Optional[SnowflakeConnection] = None

    def _connection(self) -> SnowflakeConnection:
        if self._conn is None:
            self._conn = self._stack.enter_context(get_snowflake_connection(self._config))
        return self._conn

    def cursor(self):
        return self._connection().cursor()

    def commit(self) -> None:
        if self._conn is not None:
            self._conn.commit()

    def close(self) -> None:
        self._conn = None
        self._stack.close()


def check_connection(conn: SnowflakeConnection) -> None:
    """Run a trivial query; raises if the database can't serve it."""
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT 1")
        cursor.fetchone()
    finally:
        cursor.close()


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

@contextmanager
def create_snowflake_connection(
    config: Optional[SnowflakeConfig] = None,
) -> Generator[SnowflakeConnection, None, None]:
    """
    Open a real Snowflake connection from configuration.

    Mock mode is handled by the API dependency, which shares one
    in-memory connection across requests.
    """
    if config is None:
        raise ValueError("config is required")

    with get_snowflake_connection(config) as conn:
        yield conn
