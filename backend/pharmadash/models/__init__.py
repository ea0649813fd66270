from pharmadash.models.client_storage import ClientStorageEntry

__all__ = ["ClientStorageEntry"]
