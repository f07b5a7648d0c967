"""
zoompay_services.bootstrap -- Wire the engine, stores and service from config.

Responsibility:
    Turn an ``AppConfig`` into running collaborators: logging, the database
    engine and schema, the configured blob store, and a
    ``VoucherLifecycleService`` bound to a session.

Architecture position:
    Services layer.  The one place that reads ``AppConfig`` sections and
    picks adapter implementations; entrypoints and scripts call it instead
    of constructing adapters themselves.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from zoompay_config.schema import AppConfig, StorageSettings
from zoompay_kernel.db.engine import init_engine_from_url
from zoompay_kernel.domain.clock import Clock
from zoompay_kernel.logging_config import configure_logging, get_logger
from zoompay_kernel.storage.blob_store import BlobStore, LocalBlobStore
from zoompay_modules._orm_registry import create_all_tables, make_document_store
from zoompay_modules.vouchers.config import VoucherConfig
from zoompay_modules.vouchers.service import VoucherLifecycleService

logger = get_logger("services.bootstrap")


def make_blob_store(settings: StorageSettings) -> BlobStore:
    """The blob store named by ``settings.backend``."""
    if settings.backend == "s3":
        from zoompay_kernel.storage.s3 import S3BlobStore

        return S3BlobStore(
            settings.bucket,
            prefix=settings.prefix,
            region=settings.region,
            endpoint_url=settings.endpoint_url,
        )
    return LocalBlobStore(settings.root)


def init_database(config: AppConfig, create_schema: bool = True) -> Engine:
    configure_logging(level=config.log_level)
    db = config.database
    engine = init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
    )
    if create_schema:
        create_all_tables()
    return engine


def make_lifecycle_service(
    session: Session,
    config: AppConfig,
    blob_store: BlobStore | None = None,
    clock: Clock | None = None,
) -> VoucherLifecycleService:
    """A lifecycle service over ``session`` configured from ``config``."""
    service = VoucherLifecycleService(
        make_document_store(session),
        blob_store or make_blob_store(config.storage),
        clock=clock,
        config=VoucherConfig.from_dict(dict(config.workflow)),
    )
    logger.debug(
        "lifecycle_service_built",
        extra={"storage_backend": config.storage.backend, "config_checksum": config.checksum},
    )
    return service
