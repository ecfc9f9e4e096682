"""商品导入脚本 - 把 CSV 导入到当前配置的目录存储

用法:
    python scripts/import_products.py data/products.csv
"""

import asyncio
import sys
from pathlib import Path

# 添加项目根目录到 Python 路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.config import settings
from app.core.database import init_db
from app.core.db.provider import close_database_provider
from app.core.dependencies import get_kv_context
from app.core.errors import DomainError
from app.repositories.catalog import CatalogRepository
from app.services.catalog import CatalogService
from app.services.storage.blob_store import BlobStore


async def import_products(csv_path: str) -> None:
    """导入商品 CSV"""
    print(f"[import] 开始导入商品数据: {csv_path}")

    text = Path(csv_path).read_text(encoding="utf-8-sig")

    if settings.KV_BACKEND == "database":
        await init_db()
    try:
        async with get_kv_context() as kv:
            service = CatalogService(CatalogRepository(kv), BlobStore(kv))
            result = await service.import_csv_text(text)
    finally:
        if settings.KV_BACKEND == "database":
            await close_database_provider()

    print(f"[import] 新增 {result.added} 个，更新 {result.updated} 个，目录共 {len(result.products)} 个商品")


def main():
    """主函数"""
    if len(sys.argv) < 2:
        # 默认使用 data/products.csv
        csv_path = Path(__file__).parent.parent / "data" / "products.csv"
    else:
        csv_path = Path(sys.argv[1])

    if not csv_path.exists():
        print(f"[error] 文件不存在: {csv_path}")
        print("[info] CSV 至少需要 Name 列，例如:")
        print('''
Name,Category,Price
"SafeChoice Senior","Grain & Feed",28.50
''')
        sys.exit(1)

    try:
        asyncio.run(import_products(str(csv_path)))
    except KeyboardInterrupt:
        print("\n[import] 导入已取消")
        sys.exit(1)
    except DomainError as e:
        print(f"\n[error] 导入失败: {e.message}")
        sys.exit(1)
    print("[import] 程序正常退出")


if __name__ == "__main__":
    main()
