"""Plain-text rendering of backend status reports."""

from __future__ import annotations

from typing import List, Sequence

from constants import MAX_BACKENDS
from models import BackendResult, BackendTarget, Variant

__all__ = [
    "NOT_CONFIGURED_MESSAGE",
    "format_backend_block",
    "render_report",
    "trim_message",
]

NOT_CONFIGURED_MESSAGE = "未配置后端地址，请设置 BACKEND_URLS 环境变量。"

_TYPE_LABELS = {
    Variant.EXTENDED: "✨ SubConverter-Extended",
    Variant.STANDARD: "🧩 subconverter",
    Variant.UNKNOWN: "❓ unknown",
}
_VARIANTS_BY_VALUE = {variant.value: variant for variant in Variant}


def format_backend_block(index: int, display: str, result: BackendResult) -> str:
    """Render the lines describing one backend; `index` is 1-based."""
    lines = [f"🔗 [{index}] {display}"]

    if not result["ok"]:
        lines.append("类型: ❓ 未知")
        lines.append("状态: ❌ 离线")
        if result.get("error"):
            lines.append(f"错误: ⚠️ {result['error']}")
        return "\n".join(lines)

    raw_variant = result.get("variant")
    if isinstance(raw_variant, Variant):
        raw_variant = raw_variant.value
    variant = _VARIANTS_BY_VALUE.get(raw_variant, Variant.UNKNOWN)  # type: ignore[arg-type]
    info = result.get("info") or {}
    lines.append(f"类型: {_TYPE_LABELS[variant]}")
    lines.append("状态: ✅ 在线")

    if variant is Variant.EXTENDED:
        if info.get("version"):
            lines.append(f"🔖 Version: {info['version']}")
        if info.get("build"):
            lines.append(f"🧱 Build: {info['build']}")
        if info.get("build_date"):
            lines.append(f"📅 Build Date: {info['build_date']}")
    elif variant is Variant.STANDARD:
        if info.get("version"):
            lines.append(f"🔖 版本: {info['version']}")
    elif info.get("snippet"):
        lines.append(f"📝 内容: {info['snippet']}")

    return "\n".join(lines)


def render_report(
    targets: Sequence[BackendTarget],
    results: Sequence[BackendResult],
    truncated: bool = False,
) -> str:
    """Assemble the title line and per-backend blocks into one message."""
    if len(targets) != len(results):
        raise ValueError(
            f"targets and results must align ({len(targets)} != {len(results)})"
        )

    blocks: List[str] = []
    online = 0
    for position, (target, result) in enumerate(zip(targets, results), start=1):
        if result["ok"]:
            online += 1
        blocks.append(format_backend_block(position, target.display, result))

    title = f"📡 后端状态 ({len(results)}) ✅ {online} / ❌ {len(results) - online}"
    if truncated:
        title += f" - 仅显示前 {MAX_BACKENDS} 个"

    return title + "\n\n" + "\n\n".join(blocks)


def trim_message(text: str, limit: int) -> str:
    """Cut `text` to `limit` characters, marking the cut with an ellipsis."""
    if not text or len(text) <= limit:
        return text
    return text[:limit] + "..."
