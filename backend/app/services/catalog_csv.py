"""商品目录 CSV 编解码

导出：固定表头，所有字段加引号，内部引号双写，行尾 \\n。
导入：按列名（而非列序）识别字段，名称不区分大小写匹配已有商品：
- 命中：把非空单元格合并进已有记录（保留 id 与名称写法），计为 updated
- 未命中：按 max+1 规则分配 id、打上可售提示，计为 added
ID 列在导入时忽略。
"""

import csv
import io
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError

from app.core.errors import InvalidInputError
from app.core.logging import get_logger
from app.schemas.product import (
    CsvImportResult,
    Product,
    ProductFields,
    build_product,
    describe_validation_error,
    image_src,
    merge_product,
)

logger = get_logger("services.catalog_csv")

CSV_HEADERS = [
    "ID",
    "Name",
    "Category",
    "Vendor",
    "Price",
    "InStock",
    "Description",
    "ImageURL",
    "VideoURL",
    "Protein",
    "Fat",
    "Fiber",
    "BestFor",
    "Features",
    "Featured",
]

FEATURE_SEPARATOR = "; "

# 归一化后的列名 -> 规范列名
_HEADER_ALIASES = {
    "stock": "instock",
    "image": "imageurl",
    "imagesrc": "imageurl",
    "video": "videourl",
}

_FALSE_WORDS = frozenset({"no", "n", "false", "0", "out of stock"})
_TRUE_WORDS = frozenset({"yes", "y", "true", "1"})


def _normalize_header(header: str) -> str:
    key = header.strip().lower().replace(" ", "").replace("_", "")
    return _HEADER_ALIASES.get(key, key)


def _yes_no(value: bool | None) -> str:
    if value is None:
        return ""
    return "Yes" if value else "No"


def _format_price(price: Decimal) -> str:
    return format(price, "f")


# ========== 导出 ==========


def export_csv(products: list[Product]) -> str:
    """把商品集合导出为 CSV 文本"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for p in products:
        writer.writerow(
            [
                p.id,
                p.name,
                p.category,
                p.vendor or "",
                _format_price(p.price),
                "Yes" if p.in_stock else "No",
                p.description,
                image_src(p.image) or "",
                p.video_url or "",
                p.protein or "",
                p.fat or "",
                p.fiber or "",
                p.best_for or "",
                FEATURE_SEPARATOR.join(p.features),
                _yes_no(p.featured),
            ]
        )
    return buffer.getvalue()


# ========== 导入 ==========


def _parse_bool(value: str) -> bool:
    return value.strip().lower() not in _FALSE_WORDS


def _parse_featured(value: str) -> bool | None:
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return None


def _parse_price(value: str, row_number: int) -> Decimal:
    try:
        price = Decimal(value.strip().lstrip("$").replace(",", ""))
    except InvalidOperation as e:
        raise InvalidInputError(
            f"Row {row_number}: price {value!r} is not a number",
            data={"row": row_number, "field": "price"},
        ) from e
    if not price.is_finite():
        raise InvalidInputError(
            f"Row {row_number}: price {value!r} is not a number",
            data={"row": row_number, "field": "price"},
        )
    if price < 0:
        raise InvalidInputError(
            f"Row {row_number}: price must not be negative",
            data={"row": row_number, "field": "price"},
        )
    return price


def _row_values(cells: dict[str, str], row_number: int) -> dict[str, Any]:
    """把一行中非空的单元格转换为商品字段

    首尾空白的裁剪交给 ProductFields，与 API 写入走同一套规则。
    """
    values: dict[str, Any] = {}

    def present(column: str) -> str | None:
        cell = cells.get(column)
        if cell is None or not cell.strip():
            return None
        return cell

    for column, field_name in (
        ("name", "name"),
        ("category", "category"),
        ("vendor", "vendor"),
        ("description", "description"),
        ("videourl", "video_url"),
        ("protein", "protein"),
        ("fat", "fat"),
        ("fiber", "fiber"),
        ("bestfor", "best_for"),
    ):
        if (cell := present(column)) is not None:
            values[field_name] = cell
    if (price := present("price")) is not None:
        values["price"] = _parse_price(price, row_number)
    if (stock := present("instock")) is not None:
        values["in_stock"] = _parse_bool(stock)
    if (image := present("imageurl")) is not None:
        values["imageUrl"] = image
    if (features := present("features")) is not None:
        values["features"] = [f.strip() for f in features.split(";") if f.strip()]
    if (featured := present("featured")) is not None:
        parsed = _parse_featured(featured)
        if parsed is not None:
            values["featured"] = parsed
    return values


def import_csv(
    text: str,
    existing: list[Product],
    *,
    id_watermark: int = 0,
) -> CsvImportResult:
    """解析 CSV 并合并到已有商品集合

    Args:
        text: CSV 文本（UTF-8，可带 BOM）
        existing: 当前目录
        id_watermark: 目录曾分配过的最大 id

    Returns:
        合并后的商品集合与新增/更新计数
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    try:
        rows = list(csv.reader(io.StringIO(text, newline="")))
    except csv.Error as e:
        raise InvalidInputError(f"CSV could not be parsed: {e}") from e

    skipped = 0
    # 表头之前的空行不计入
    while rows and not any(cell.strip() for cell in rows[0]):
        rows.pop(0)
        skipped += 1

    if not rows:
        raise InvalidInputError('CSV must have a "Name" column', data={"field": "name"})

    headers = [_normalize_header(h) for h in rows[0]]
    if "name" not in headers:
        raise InvalidInputError('CSV must have a "Name" column', data={"field": "name"})

    products = list(existing)
    next_id = max([p.id for p in products] + [id_watermark, 0]) + 1
    by_name = {p.name.casefold(): i for i, p in enumerate(products)}
    added = updated = 0

    # 行号按文件计，表头之后一行起算
    for row_number, row in enumerate(rows[1:], start=2 + skipped):
        cells: dict[str, str] = {}
        for header, cell in zip(headers, row):
            # 重复列名以第一次出现为准
            cells.setdefault(header, cell)
        name = (cells.get("name") or "").strip()
        if not name:
            continue

        index = by_name.get(name.casefold())
        values = _row_values(cells, row_number)
        if index is not None:
            # 命中时沿用已有记录的名称写法
            values.pop("name", None)

        try:
            fields = ProductFields.model_validate(values)
            if index is not None:
                products[index] = merge_product(products[index], fields)
                updated += 1
                continue
            product = build_product(fields, next_id)
        except ValidationError as e:
            raise InvalidInputError(
                f"Row {row_number}: {describe_validation_error(e)}", data={"row": row_number}
            ) from e
        except InvalidInputError as e:
            raise InvalidInputError(f"Row {row_number}: {e.message}", data={"row": row_number}) from e

        by_name[name.casefold()] = len(products)
        products.append(product)
        next_id += 1
        added += 1

    logger.info("CSV 解析完成", rows=len(rows) - 1, added=added, updated=updated)
    return CsvImportResult(products=products, added=added, updated=updated)
