"""
llm_service.py

提供：
- litellm 初始化
- 单轮 LLM 调用（卡片分析使用）
- 文本 embedding（chunk 相关性排序）

依赖：
    pip install litellm
"""

from __future__ import annotations

import logging
from typing import List, Optional

import litellm
from litellm import completion, embedding

from ..config import Config
from ..exceptions import CompletionFailure

logger = logging.getLogger(__name__)


def init_litellm():
    litellm.api_key = Config.chat_litellm.api_key
    litellm.api_base = Config.chat_litellm.api_base


def current_model() -> str:
    return Config.chat_litellm.model


# =========================================================
# 🔹 基础 LLM 封装
# =========================================================

def llm_completion(
    prompt: str,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> str:
    """
    单轮对话。失败或空回复时抛出 CompletionFailure，不做重试。
    """
    try:
        resp = completion(
            model=Config.chat_litellm.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=Config.analysis.temperature if temperature is None else temperature,
            max_tokens=Config.analysis.max_tokens if max_tokens is None else max_tokens,
            timeout=Config.chat_litellm.timeout,
        )
    except Exception as e:
        raise CompletionFailure(f"LLM call failed: {e}") from e

    content = resp.choices[0].message.content if resp.choices else None
    if not content or not content.strip():
        raise CompletionFailure("LLM returned an empty reply")
    return content.strip()


# =========================================================
# 🔹 Embedding（chunk 检索）
# =========================================================

def _field(item, name: str):
    # provider responses come back as dicts or as objects
    return item[name] if isinstance(item, dict) else getattr(item, name)


def llm_embedding(texts: List[str]) -> List[List[float]]:
    """
    批量 embedding，按 Config.embedding.batch_size 分批请求。
    返回的向量顺序与输入一致。
    """
    cfg = Config.embedding
    vectors: List[List[float]] = []
    for start in range(0, len(texts), cfg.batch_size):
        batch = texts[start:start + cfg.batch_size]
        resp = embedding(
            model=cfg.embedding_model,
            input=batch,
            api_key=cfg.embedding_api_key,
            api_base=cfg.embedding_api_base,
            timeout=Config.chat_litellm.timeout,
        )
        data = sorted(resp.data, key=lambda d: _field(d, "index"))
        vectors.extend([list(_field(d, "embedding")) for d in data])
    return vectors
