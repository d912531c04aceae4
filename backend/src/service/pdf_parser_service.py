import io
import re
from typing import BinaryIO, Union

from pypdf import PdfReader


def sanitize_text_for_postgres(text: str) -> str:
    """
    清理文本中 PostgreSQL 不支持的字符。

    主要处理：
    - NULL 字符 (\u0000) - PostgreSQL 不支持
    - 其他不可打印的控制字符
    """
    if not text:
        return text

    # 移除 NULL 字符（\u0000）
    text = text.replace('\u0000', '')

    # 保留: \t (0x09), \n (0x0A), \r (0x0D)
    # 移除: 0x00-0x08, 0x0B, 0x0C, 0x0E-0x1F
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f]', '', text)

    return text


def looks_like_pdf(content: bytes, content_type: str | None = None) -> bool:
    """
    判断是不是 PDF，而不是 CAPTCHA / 登录页 HTML
    """
    if content.startswith(b"%PDF-"):
        return True

    if content_type and "application/pdf" in content_type.lower():
        return True

    return False


def extract_pdf_text(source: Union[bytes, str, BinaryIO]) -> str:
    """
    从 PDF（字节、路径或文件对象）提取文本并清理不安全字符。
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)

    reader = PdfReader(source)
    raw_text = "\n".join([page.extract_text() or "" for page in reader.pages])
    return sanitize_text_for_postgres(raw_text)
