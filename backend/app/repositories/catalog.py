"""商品目录 Repository

整个目录保存在 KV 的单个 key 中：

    {"products": [...], "idWatermark": 12}

- idWatermark 记录曾经分配过的最大 id，删除最大 id 的商品后也不会复用
- 读取时兼容旧版的裸 JSON 数组
- 商品名称不区分大小写唯一（CSV 导入按名称合并依赖这一点）
- 每次变更都是对该 key 的"读-改-写"，后写覆盖先写
"""

import json
from dataclasses import dataclass, field

from pydantic import ValidationError

from app.core.config import settings
from app.core.db.kv import KeyValueStore
from app.core.errors import BackingStoreUnavailableError, InvalidInputError, NotFoundError
from app.core.logging import get_logger
from app.schemas.product import (
    Product,
    ProductDraft,
    ProductFields,
    build_product,
    merge_product,
)

logger = get_logger("repository.catalog")


@dataclass
class CatalogSnapshot:
    """一次读取得到的目录快照"""

    products: list[Product] = field(default_factory=list)
    id_watermark: int = 0

    def next_id(self) -> int:
        """下一个可分配的 id: max(现有 id, 水位) + 1"""
        return max([p.id for p in self.products] + [self.id_watermark, 0]) + 1

    def index_of(self, product_id: int) -> int | None:
        for i, product in enumerate(self.products):
            if product.id == product_id:
                return i
        return None

    def ensure_name_available(self, name: str, skip_index: int | None = None) -> None:
        """名称不区分大小写唯一，重名时拒绝写入"""
        folded = name.casefold()
        for i, product in enumerate(self.products):
            if i != skip_index and product.name.casefold() == folded:
                raise InvalidInputError(
                    f'A product named "{product.name}" already exists',
                    data={"field": "name", "id": product.id},
                )


class CatalogRepository:
    """目录数据访问"""

    def __init__(self, kv: KeyValueStore, key: str | None = None):
        self.kv = kv
        self.key = key or settings.CATALOG_KV_KEY

    # ========== 读写原语 ==========

    async def load(self) -> CatalogSnapshot:
        """读取目录快照，未写入过时返回空目录"""
        raw = await self.kv.get(self.key)
        if raw is None:
            return CatalogSnapshot()
        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("目录文档无法解析", key=self.key, error=str(e))
            raise BackingStoreUnavailableError(
                "Catalog document is corrupt", data={"key": self.key}
            ) from e

        if isinstance(doc, list):
            items, watermark = doc, 0
        elif isinstance(doc, dict):
            items = doc.get("products") or []
            watermark = doc.get("idWatermark") or 0
        else:
            items, watermark = [], 0

        products: list[Product] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                products.append(Product.from_document(item))
            except ValidationError as e:
                logger.warning("跳过无法解析的商品记录", id=item.get("id"), error=str(e))
        if not isinstance(watermark, int):
            watermark = 0
        return CatalogSnapshot(products=products, id_watermark=watermark)

    async def save(self, snapshot: CatalogSnapshot) -> None:
        """整体写回目录（单次 put）"""
        highest = max((p.id for p in snapshot.products), default=0)
        snapshot.id_watermark = max(snapshot.id_watermark, highest)
        doc = {
            "products": [p.to_document() for p in snapshot.products],
            "idWatermark": snapshot.id_watermark,
        }
        await self.kv.put(self.key, json.dumps(doc, ensure_ascii=False))

    # ========== 查询 ==========

    async def get_all(self) -> list[Product]:
        """获取全部商品（按存储顺序）"""
        return (await self.load()).products

    async def get(self, product_id: int) -> Product:
        """按 id 获取商品"""
        snapshot = await self.load()
        index = snapshot.index_of(product_id)
        if index is None:
            raise NotFoundError(f"Product {product_id} not found", data={"id": product_id})
        return snapshot.products[index]

    # ========== 变更 ==========

    async def replace_all(self, products: list[Product]) -> list[Product]:
        """整体替换目录

        id 重复或名称（不区分大小写）重复时拒绝写入；水位只增不减。
        """
        seen: set[int] = set()
        names: set[str] = set()
        for product in products:
            if product.id in seen:
                raise InvalidInputError(
                    f"Duplicate product id {product.id}", data={"id": product.id}
                )
            if product.name.casefold() in names:
                raise InvalidInputError(
                    f'Duplicate product name "{product.name}"',
                    data={"field": "name", "id": product.id},
                )
            seen.add(product.id)
            names.add(product.name.casefold())

        current = await self.load()
        snapshot = CatalogSnapshot(products=list(products), id_watermark=current.id_watermark)
        await self.save(snapshot)
        logger.info("目录已整体替换", count=len(products), watermark=snapshot.id_watermark)
        return snapshot.products

    async def upsert(self, draft: ProductDraft) -> Product:
        """新建或合并商品

        id 为空或未知时分配新 id 并追加；否则合并提供的字段。
        """
        snapshot = await self.load()
        index = snapshot.index_of(draft.id) if draft.id is not None else None

        if index is None:
            product = build_product(draft, snapshot.next_id())
            snapshot.ensure_name_available(product.name)
            snapshot.products.append(product)
            await self.save(snapshot)
            logger.info("商品已创建", id=product.id, name=product.name)
            return product

        product = merge_product(snapshot.products[index], draft)
        snapshot.ensure_name_available(product.name, skip_index=index)
        snapshot.products[index] = product
        await self.save(snapshot)
        logger.info("商品已更新", id=product.id)
        return product

    async def patch(self, product_id: int, fields: ProductFields) -> Product:
        """只合并提供的字段"""
        snapshot = await self.load()
        index = snapshot.index_of(product_id)
        if index is None:
            raise NotFoundError(f"Product {product_id} not found", data={"id": product_id})

        current = snapshot.products[index]
        product = merge_product(current, fields)
        if product is current:
            return current
        snapshot.ensure_name_available(product.name, skip_index=index)
        snapshot.products[index] = product
        await self.save(snapshot)
        logger.info("商品已局部更新", id=product_id, fields=sorted(fields.model_fields_set))
        return product

    async def delete(self, product_id: int) -> Product:
        """删除商品（不级联删除图片）"""
        snapshot = await self.load()
        index = snapshot.index_of(product_id)
        if index is None:
            raise NotFoundError(f"Product {product_id} not found", data={"id": product_id})
        removed = snapshot.products.pop(index)
        await self.save(snapshot)
        logger.info("商品已删除", id=product_id, watermark=snapshot.id_watermark)
        return removed
