"""
Domain layer: persistence gateways, the data context and its read views.
"""
from webgestor.data.context import DataContext  # noqa: F401
from webgestor.data.gateway import DataStoreGateway, Gateway, StorageGateway  # noqa: F401
