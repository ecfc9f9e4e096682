"""商品目录管理 API

编辑器使用的目录 CRUD、CSV 导入导出与图片上传。
"""

from datetime import date

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from app.core.config import settings
from app.core.dependencies import get_catalog_service
from app.core.errors import raise_bad_request
from app.core.logging import get_logger
from app.schemas.product import (
    CatalogReplaceRequest,
    CsvImportSummary,
    ImageUploadResponse,
    Product,
    ProductDraft,
    ProductFields,
)
from app.services.catalog import CatalogService

logger = get_logger("routers.catalog")

router = APIRouter(prefix="/admin/api/catalog", tags=["catalog"])


@router.get("", response_model=list[Product])
async def list_products(service: CatalogService = Depends(get_catalog_service)) -> list[Product]:
    """获取全部商品"""
    return await service.list_products()


@router.put("", response_model=list[Product])
async def replace_catalog(
    body: CatalogReplaceRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> list[Product]:
    """整体替换目录（编辑器"全部保存"）"""
    return await service.replace_all(body.products)


@router.post("", response_model=Product)
async def upsert_product(
    draft: ProductDraft,
    service: CatalogService = Depends(get_catalog_service),
) -> Product:
    """新建或更新商品"""
    return await service.upsert_product(draft)


# ========== CSV ==========


@router.get("/export")
async def export_catalog(service: CatalogService = Depends(get_catalog_service)) -> Response:
    """导出目录 CSV"""
    text = await service.export_csv_text()
    filename = f"british-feed-catalog-{date.today().isoformat()}.csv"
    return Response(
        content=text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=CsvImportSummary)
async def import_catalog(
    file: UploadFile = File(...),
    service: CatalogService = Depends(get_catalog_service),
) -> CsvImportSummary:
    """导入 CSV（按名称合并）"""
    raw = await file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise_bad_request("invalid_encoding", "CSV file must be UTF-8 encoded")

    result = await service.import_csv_text(text)
    logger.info(
        "CSV 导入完成",
        filename=file.filename,
        added=result.added,
        updated=result.updated,
    )
    return CsvImportSummary(
        added=result.added,
        updated=result.updated,
        total=len(result.products),
    )


# ========== 图片 ==========


@router.post("/upload-image", response_model=ImageUploadResponse)
async def upload_image(
    image: UploadFile = File(...),
    product_id: str | None = Form(None, alias="productId"),
    service: CatalogService = Depends(get_catalog_service),
) -> ImageUploadResponse:
    """上传商品图片

    图片以 img_<productId> 为 key 保存，新商品（无 id）使用时间戳。
    """
    content_type = image.content_type or "application/octet-stream"
    if content_type not in settings.image_allowed_types_list:
        raise_bad_request(
            "unsupported_image_type",
            f"Unsupported image type: {content_type}",
            data={"allowed_types": settings.image_allowed_types_list},
        )

    # 只多读 1 字节，足以判断是否超限
    data = await image.read(settings.image_max_size_bytes + 1)
    info = await service.upload_image(product_id, data, content_type)
    return ImageUploadResponse(
        key=info.key,
        url=info.url,
        size=info.size,
        content_type=info.mime_type,
        width=info.width,
        height=info.height,
    )


@router.get("/image/{key}")
async def get_image(
    key: str,
    service: CatalogService = Depends(get_catalog_service),
) -> Response:
    """读取图片原始字节"""
    blob = await service.get_image(key)
    return Response(
        content=blob.data,
        media_type=blob.mime_type,
        headers={"Cache-Control": f"public, max-age={settings.IMAGE_CACHE_MAX_AGE}"},
    )


# ========== 单个商品 ==========


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> Product:
    """获取单个商品"""
    return await service.get_product(product_id)


@router.patch("/{product_id}", response_model=Product)
async def patch_product(
    product_id: int,
    fields: ProductFields,
    service: CatalogService = Depends(get_catalog_service),
) -> Product:
    """局部更新商品"""
    return await service.patch_product(product_id, fields)


@router.delete("/{product_id}", response_model=Product)
async def delete_product(
    product_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> Product:
    """删除商品（不删除图片）"""
    return await service.delete_product(product_id)
