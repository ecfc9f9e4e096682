"""商品目录服务

把目录 Repository、CSV 编解码和图片存储组合成编辑器使用的操作。
"""

from app.core.logging import get_logger
from app.repositories.catalog import CatalogRepository
from app.schemas.product import CsvImportResult, Product, ProductDraft, ProductFields, build_product
from app.services.catalog_csv import export_csv, import_csv
from app.services.storage.blob_store import Blob, BlobInfo, BlobStore

logger = get_logger("services.catalog")


class CatalogService:
    """目录服务"""

    def __init__(self, repository: CatalogRepository, blobs: BlobStore):
        self.repository = repository
        self.blobs = blobs

    # ========== 商品 ==========

    async def list_products(self) -> list[Product]:
        return await self.repository.get_all()

    async def get_product(self, product_id: int) -> Product:
        return await self.repository.get(product_id)

    async def upsert_product(self, draft: ProductDraft) -> Product:
        return await self.repository.upsert(draft)

    async def patch_product(self, product_id: int, fields: ProductFields) -> Product:
        return await self.repository.patch(product_id, fields)

    async def delete_product(self, product_id: int) -> Product:
        return await self.repository.delete(product_id)

    async def replace_all(self, drafts: list[ProductDraft]) -> list[Product]:
        """用编辑器提交的完整列表替换目录

        带 id 的记录保留 id，已存在的记录保留原可售提示；
        不带 id 的记录在所有已知 id 之后依次分配。
        """
        snapshot = await self.repository.load()
        notes = {p.id: p.availability_note for p in snapshot.products}
        given_ids = [d.id for d in drafts if d.id is not None]
        next_id = max(given_ids + [p.id for p in snapshot.products] + [snapshot.id_watermark, 0]) + 1

        products: list[Product] = []
        for draft in drafts:
            if draft.id is None:
                product_id = next_id
                next_id += 1
            else:
                product_id = draft.id
            product = build_product(draft, product_id)
            if product_id in notes:
                product = product.model_copy(update={"availability_note": notes[product_id]})
            products.append(product)
        return await self.repository.replace_all(products)

    # ========== CSV ==========

    async def export_csv_text(self) -> str:
        products = await self.repository.get_all()
        logger.info("导出目录 CSV", count=len(products))
        return export_csv(products)

    async def import_csv_text(self, text: str) -> CsvImportResult:
        """导入 CSV 并整体写回目录"""
        snapshot = await self.repository.load()
        result = import_csv(text, snapshot.products, id_watermark=snapshot.id_watermark)
        await self.repository.replace_all(result.products)
        logger.info(
            "目录 CSV 导入完成",
            added=result.added,
            updated=result.updated,
            total=len(result.products),
        )
        return result

    # ========== 图片 ==========

    async def upload_image(
        self,
        product_id: str | int | None,
        data: bytes,
        mime_type: str | None,
    ) -> BlobInfo:
        return await self.blobs.upload_product_image(product_id, data, mime_type)

    async def get_image(self, key: str) -> Blob:
        return await self.blobs.get(key)
