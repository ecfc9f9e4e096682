"""商品相关 Schema

目录文档中的商品以 camelCase 存储（与编辑器前端一致），
Python 侧统一使用 snake_case 字段名。

图片字段是一个带标签的联合类型：
- ImageUrl: 外部托管的图片地址
- ImageBlob: Blob Store 中的 key（img_*）
- None: 无图片

兼容旧数据：输入中的 imageUrl / imageKey 会被归一化为 image，
两者同时出现时以载荷中靠后的字段为准。
"""

from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from app.core.config import settings
from app.core.errors import InvalidInputError


class ImageUrl(BaseModel):
    """外部图片地址"""

    kind: Literal["url"] = "url"
    url: str


class ImageBlob(BaseModel):
    """Blob Store 中的图片"""

    kind: Literal["blob"] = "blob"
    key: str


ProductImage = Annotated[ImageUrl | ImageBlob, Field(discriminator="kind")]

# 旧版扁平字段 -> 联合类型分支
_LEGACY_IMAGE_FIELDS = {
    "imageUrl": "url",
    "image_url": "url",
    "imageKey": "blob",
    "image_key": "blob",
}

# 合并时允许显式置空的字段
NULLABLE_FIELDS = frozenset(
    {"vendor", "image", "video_url", "protein", "fat", "fiber", "best_for", "featured"}
)


def blob_url(key: str) -> str:
    """Blob key 对应的服务地址"""
    return f"{settings.IMAGE_ROUTE_PREFIX}{key}"


def image_src(image: ImageUrl | ImageBlob | None) -> str | None:
    """浏览器可直接加载的图片地址"""
    if isinstance(image, ImageBlob):
        return blob_url(image.key)
    if isinstance(image, ImageUrl):
        return image.url
    return None


def parse_image_reference(value: str | None) -> ImageUrl | ImageBlob | None:
    """把一个图片字符串解析为联合类型

    指向 Blob 服务路由的地址会还原为 ImageBlob。
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    blob_prefix = settings.IMAGE_ROUTE_PREFIX + settings.IMAGE_KEY_PREFIX
    if value.startswith(blob_prefix):
        return ImageBlob(key=value[len(settings.IMAGE_ROUTE_PREFIX):])
    return ImageUrl(url=value)


class ProductFields(BaseModel):
    """商品可编辑字段（全部可选）

    用作局部更新（patch）的载荷；字段是否"被提供"通过 model_fields_set 判断。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = None
    category: str | None = None
    vendor: str | None = None
    price: Decimal | None = Field(None, ge=0, description="价格（非负）")
    in_stock: bool | None = None
    description: str | None = None
    image: ProductImage | None = None
    video_url: str | None = None
    protein: str | None = None
    fat: str | None = None
    fiber: str | None = None
    best_for: str | None = None
    features: list[str] | None = None
    featured: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_legacy_image(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        legacy = [(k, v) for k, v in data.items() if k in _LEGACY_IMAGE_FIELDS]
        if not legacy:
            return data
        data = {k: v for k, v in data.items() if k not in _LEGACY_IMAGE_FIELDS}
        if "image" in data:
            return data

        image: dict[str, str] | None = None
        for field_name, raw in legacy:
            if not isinstance(raw, str) or not raw.strip():
                continue
            if _LEGACY_IMAGE_FIELDS[field_name] == "url":
                image = {"kind": "url", "url": raw.strip()}
            else:
                image = {"kind": "blob", "key": raw.strip()}
        data["image"] = image
        return data

    @field_validator("image", mode="after")
    @classmethod
    def _blob_route_to_key(cls, value: ImageUrl | ImageBlob | None) -> ImageUrl | ImageBlob | None:
        if isinstance(value, ImageUrl):
            return parse_image_reference(value.url)
        return value

    @field_validator("name", mode="after")
    @classmethod
    def _strip_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("vendor", "video_url", "protein", "fat", "fiber", "best_for", mode="before")
    @classmethod
    def _trim_optional(cls, value: Any) -> Any:
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("category", mode="after")
    @classmethod
    def _default_category(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or settings.DEFAULT_CATEGORY

    @field_validator("description", mode="after")
    @classmethod
    def _blank_description(cls, value: str | None) -> str | None:
        # 只有空白的描述等同于没有描述，其余原样保留
        if value is not None and not value.strip():
            return ""
        return value

    @field_validator("features", mode="before")
    @classmethod
    def _clean_features(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(";")
        if not isinstance(value, list):
            return value
        cleaned = []
        for item in value:
            if not isinstance(item, str):
                cleaned.append(item)
                continue
            item = item.strip()
            if not item:
                continue
            if ";" in item:
                raise ValueError(f"feature may not contain ';': {item!r}")
            cleaned.append(item)
        return cleaned


class ProductDraft(ProductFields):
    """创建 / 更新商品请求

    id 为空或不存在于目录中时视为新建，否则合并到已有记录。
    availabilityNote 不接受外部输入。
    """

    id: int | None = None


class Product(ProductFields):
    """目录中的商品记录"""

    id: int
    name: str
    category: str = Field(default_factory=lambda: settings.DEFAULT_CATEGORY)
    price: Decimal = Field(Decimal("0"), ge=0)
    in_stock: bool = True
    description: str = ""
    features: list[str] = Field(default_factory=list)
    availability_note: str | None = None

    @computed_field(alias="imageSrc")
    @property
    def image_src(self) -> str | None:
        return image_src(self.image)

    def to_document(self) -> dict[str, Any]:
        """序列化为目录文档中的存储形式"""
        return self.model_dump(mode="json", by_alias=True, exclude={"image_src"})

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Product":
        """从目录文档还原，兼容旧数据中的 null 与空价格"""
        cleaned = {k: v for k, v in doc.items() if v is not None}
        if cleaned.get("price") == "":
            cleaned.pop("price")
        return cls.model_validate(cleaned)


class CatalogReplaceRequest(BaseModel):
    """整体替换目录请求"""

    products: list[ProductDraft]


class CsvImportResult(BaseModel):
    """CSV 导入结果"""

    products: list[Product]
    added: int = 0
    updated: int = 0


class CsvImportSummary(BaseModel):
    """CSV 导入接口响应"""

    success: bool = True
    added: int
    updated: int
    total: int


class ImageUploadResponse(BaseModel):
    """图片上传响应"""

    success: bool = True
    key: str
    url: str
    size: int
    content_type: str
    width: int | None = None
    height: int | None = None


# ========== 构建与合并 ==========


def describe_validation_error(exc: ValidationError) -> str:
    """把校验错误压缩成一行可读信息"""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def _supplied(fields: ProductFields) -> dict[str, Any]:
    """提取调用方实际提供的字段（必填字段的 null 视为未提供）"""
    supplied = fields.model_dump(exclude_unset=True, exclude={"id"})
    return {k: v for k, v in supplied.items() if v is not None or k in NULLABLE_FIELDS}


def build_product(fields: ProductFields, product_id: int) -> Product:
    """用新分配的 id 创建商品，并打上可售提示"""
    supplied = _supplied(fields)
    if not supplied.get("name"):
        raise InvalidInputError("Product name is required", data={"field": "name"})
    try:
        return Product.model_validate(
            {**supplied, "id": product_id, "availability_note": settings.AVAILABILITY_NOTE}
        )
    except ValidationError as e:
        raise InvalidInputError(describe_validation_error(e)) from e


def merge_product(record: Product, fields: ProductFields) -> Product:
    """把提供的字段合并到已有记录，id 与 availabilityNote 保持不变"""
    supplied = _supplied(fields)
    if not supplied:
        return record
    merged = record.model_dump(exclude={"image_src"})
    merged.update(supplied)
    merged["id"] = record.id
    merged["availability_note"] = record.availability_note
    try:
        return Product.model_validate(merged)
    except ValidationError as e:
        raise InvalidInputError(describe_validation_error(e)) from e
