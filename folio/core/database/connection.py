"""Cassandra session lifecycle for the document store.

Uses cassandra-asyncio-driver, whose sessions expose ``aexecute()`` on top
of the regular cassandra-driver API. Installed with the ``cassandra`` extra
and imported only when ``storage_backend`` is ``cassandra``.
"""

import structlog
from cassandra.auth import PlainTextAuthProvider
from cassandra.policies import DCAwareRoundRobinPolicy, TokenAwarePolicy
from cassandra_asyncio.cluster import Cluster

from folio.config.settings import Settings, get_settings

from .cassandra import DOCUMENT_TABLES_CQL


logger = structlog.get_logger(__name__)


def build_cluster(settings: Settings) -> Cluster:
    """Create an (unconnected) cluster from settings."""
    auth_provider = None
    if settings.cassandra_username and settings.cassandra_password:
        auth_provider = PlainTextAuthProvider(
            username=settings.cassandra_username,
            password=settings.cassandra_password,
        )

    return Cluster(
        contact_points=settings.cassandra_hosts,
        port=settings.cassandra_port,
        auth_provider=auth_provider,
        protocol_version=settings.cassandra_protocol_version,
        load_balancing_policy=TokenAwarePolicy(DCAwareRoundRobinPolicy()),
        connect_timeout=settings.cassandra_connect_timeout,
    )


def keyspace_cql(settings: Settings) -> str:
    """CREATE KEYSPACE statement; replicated three ways only in production."""
    if settings.is_production:
        replication = "'class': 'NetworkTopologyStrategy', 'datacenter1': 3"
    else:
        replication = "'class': 'SimpleStrategy', 'replication_factor': 1"

    return (
        f"CREATE KEYSPACE IF NOT EXISTS {settings.cassandra_keyspace} "
        f"WITH replication = {{{replication}}} AND durable_writes = true"
    )


class CassandraConnection:
    """Process-wide cluster and session holder."""

    _cluster: Cluster | None = None
    _session = None  # cassandra_asyncio session

    @classmethod
    def connect(cls, settings: Settings | None = None):
        """Return the shared session, connecting on first use.

        Raises:
            ConnectionError: If the cluster cannot be reached
        """
        if cls._session is not None:
            return cls._session

        settings = settings or get_settings()
        cls._cluster = build_cluster(settings)

        try:
            cls._session = cls._cluster.connect()
        except Exception as e:
            logger.error("cassandra_connection_failed", error=str(e))
            cls._cluster.shutdown()
            cls._cluster = None
            raise ConnectionError(f"Failed to connect to Cassandra: {e}") from e

        cls._session.default_timeout = settings.cassandra_request_timeout
        logger.info(
            "cassandra_connected",
            hosts=settings.cassandra_hosts,
            port=settings.cassandra_port,
            protocol_version=settings.cassandra_protocol_version,
        )
        return cls._session

    @classmethod
    def disconnect(cls) -> None:
        if cls._session is not None:
            cls._session.shutdown()
            cls._session = None
        if cls._cluster is not None:
            cls._cluster.shutdown()
            cls._cluster = None
            logger.info("cassandra_disconnected")

    @classmethod
    def is_connected(cls) -> bool:
        return cls._session is not None and not cls._session.is_shutdown


async def init_schema(session, settings: Settings) -> None:
    """Create the keyspace and the shared documents table."""
    keyspace = settings.cassandra_keyspace
    await session.aexecute(keyspace_cql(settings))
    for cql_template in DOCUMENT_TABLES_CQL:
        await session.aexecute(cql_template.format(keyspace=keyspace))
    logger.info("cassandra_schema_ready", keyspace=keyspace)


async def init_async_cassandra(settings: Settings | None = None):
    """Connect, ensure the schema exists and select the keyspace."""
    settings = settings or get_settings()

    session = CassandraConnection.connect(settings)
    await init_schema(session, settings)
    session.set_keyspace(settings.cassandra_keyspace)
    return session


async def shutdown_async_cassandra() -> None:
    CassandraConnection.disconnect()
