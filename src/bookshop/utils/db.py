from protean.domain import Domain
from sqlalchemy import create_engine

SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for _, provider in domain.providers.items():
        if provider.conn_info["provider"] in SQL_PROVIDERS:
            yield provider


def setup_db(domain: Domain):
    """Create tables for every aggregate and entity stored in a SQL provider.

    The memory provider needs no schema, so nothing happens for it.
    """
    with domain.domain_context():
        for provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])

            # Touching ``_dao`` registers the model with SQLAlchemy's metadata
            for records in (domain.registry.aggregates, domain.registry.entities):
                for _, record in records.items():
                    if record.cls.meta_.provider == provider.name:
                        domain.repository_for(record.cls)._dao  # noqa: B018

            provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    """Drop every table created by ``setup_db``."""
    with domain.domain_context():
        for provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
