"""提示词统一管理模块

- defaults: 代码级默认模板与映射表
- assembler: 顾问系统提示词组装（纯函数）
"""

from app.prompts.assembler import build_system_prompt, fallback_reply

__all__ = ["build_system_prompt", "fallback_reply"]
