"""图片 Blob 存储

图片以 data URL（data:<mime>;base64,<payload>）的形式写入 KV，
key 必须以 img_ 开头。读取时同样校验前缀，防止通过该接口读出其它 KV 值。
"""

import base64
import binascii
import re
import time
from dataclasses import dataclass
from io import BytesIO

from PIL import Image

from app.core.config import settings
from app.core.db.kv import KeyValueStore
from app.core.errors import InvalidInputError, NotFoundError, TooLargeError
from app.core.logging import get_logger

logger = get_logger("services.storage.blob")

DEFAULT_MIME_TYPE = "image/jpeg"

_MIME_RE = re.compile(r"^[A-Za-z0-9][\w.+-]*/[A-Za-z0-9][\w.+-]*$")
_DATA_URL_RE = re.compile(r"^data:([^;,]+);base64,(.*)$", re.DOTALL)


@dataclass(frozen=True)
class BlobInfo:
    """写入结果"""

    key: str
    mime_type: str
    size: int
    width: int | None = None
    height: int | None = None

    @property
    def url(self) -> str:
        return f"{settings.IMAGE_ROUTE_PREFIX}{self.key}"


@dataclass(frozen=True)
class Blob:
    """读取结果"""

    data: bytes
    mime_type: str


def make_key(token: str | int | None = None) -> str:
    """生成图片 key: img_<token>，无 token 时使用毫秒时间戳"""
    if token is None or str(token).strip() == "":
        token = int(time.time() * 1000)
    return f"{settings.IMAGE_KEY_PREFIX}{str(token).strip()}"


def probe_dimensions(data: bytes) -> tuple[int, int] | None:
    """用 Pillow 探测图片尺寸，失败返回 None"""
    try:
        with Image.open(BytesIO(data)) as img:
            return img.size
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning("获取图片尺寸失败", error=str(e))
        return None


class BlobStore:
    """基于 KV 的图片存储

    只提供 put / get，覆盖写通过相同 key 的 put 完成，不提供删除。
    """

    def __init__(self, kv: KeyValueStore, max_bytes: int | None = None):
        self.kv = kv
        self.max_bytes = max_bytes if max_bytes is not None else settings.image_max_size_bytes

    def _is_blob_key(self, key: str) -> bool:
        return isinstance(key, str) and key.startswith(settings.IMAGE_KEY_PREFIX)

    async def put(self, key: str, data: bytes, mime_type: str | None = None) -> BlobInfo:
        """写入图片

        大小检查在任何 I/O 之前完成；上限包含边界值。
        """
        size = len(data)
        if size > self.max_bytes:
            raise TooLargeError(
                f"Image too large. Maximum size is {self.max_bytes // 1024}KB.",
                data={"size": size, "max_size": self.max_bytes},
            )
        if size == 0:
            raise InvalidInputError("Image payload is empty")
        if not self._is_blob_key(key):
            raise InvalidInputError(
                f"Blob key must start with {settings.IMAGE_KEY_PREFIX}", data={"key": key}
            )

        mime_type = (mime_type or "").strip().lower() or DEFAULT_MIME_TYPE
        if not _MIME_RE.match(mime_type):
            raise InvalidInputError(f"Malformed MIME type: {mime_type}", data={"mime_type": mime_type})

        width = height = None
        if mime_type.startswith("image/"):
            dimensions = probe_dimensions(data)
            if dimensions:
                width, height = dimensions

        encoded = base64.b64encode(data).decode("ascii")
        await self.kv.put(key, f"data:{mime_type};base64,{encoded}")

        logger.info(
            "图片写入成功",
            key=key,
            size=size,
            mime_type=mime_type,
            dimensions=f"{width}x{height}" if width else None,
        )
        return BlobInfo(key=key, mime_type=mime_type, size=size, width=width, height=height)

    async def get(self, key: str) -> Blob:
        """读取图片，非 img_ 前缀、不存在或无法解码时均视为不存在"""
        if not self._is_blob_key(key):
            raise NotFoundError("Image not found", data={"key": key})

        raw = await self.kv.get(key)
        if raw is None:
            raise NotFoundError("Image not found", data={"key": key})

        match = _DATA_URL_RE.match(raw)
        if not match:
            logger.warning("图片数据格式异常", key=key)
            raise NotFoundError("Image not found", data={"key": key})
        try:
            data = base64.b64decode(match.group(2), validate=True)
        except (binascii.Error, ValueError) as e:
            logger.warning("图片数据解码失败", key=key, error=str(e))
            raise NotFoundError("Image not found", data={"key": key}) from e
        return Blob(data=data, mime_type=match.group(1))

    async def upload_product_image(
        self,
        product_id: str | int | None,
        data: bytes,
        mime_type: str | None = None,
    ) -> BlobInfo:
        """上传商品图片，key 为 img_<商品 id>，新商品使用时间戳"""
        return await self.put(make_key(product_id), data, mime_type)
