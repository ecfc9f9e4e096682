"""存储服务模块"""

from app.services.storage.blob_store import Blob, BlobInfo, BlobStore, make_key

__all__ = ["Blob", "BlobInfo", "BlobStore", "make_key"]
