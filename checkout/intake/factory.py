"""
工厂函数：根据来源字符串返回对应 Adapter 类。

新增表单格式只需：
  1. 在 adapters.py 新建 Adapter 类
  2. 在此处 _build_registry() 加一行
  不需要修改任何业务代码。
"""

from ..exceptions import ValidationError
from .base import BaseIntakeAdapter

DEFAULT_SOURCE = "storefront"


# key: source 字符串（来自 HTTP Header X-Order-Source，缺省 storefront）
# value: Adapter 类（未实例化）
def _build_registry() -> dict[str, type[BaseIntakeAdapter]]:
    from .adapters import ApiAdapter, StorefrontAdapter

    return {
        "storefront": StorefrontAdapter,
        "api":        ApiAdapter,
    }


def get_adapter(source, raw_body, content_type: str = "") -> BaseIntakeAdapter:
    """
    根据 source 返回已实例化的 Adapter。

    Args:
        source:       表单来源标识，例如 "storefront"、"api"；为空时用 storefront
        raw_body:     原始请求体（bytes / str / 已解析的 dict）
        content_type: HTTP Content-Type，Adapter 内部可按需使用

    Raises:
        ValidationError: 未知的 source
    """
    source = (source or DEFAULT_SOURCE).strip().lower()
    registry = _build_registry()
    adapter_cls = registry.get(source)

    if adapter_cls is None:
        raise ValidationError(
            message=f"Unknown order source: {source!r}.",
            code="UNKNOWN_SOURCE",
            detail={"known_sources": list(registry.keys())},
        )

    return adapter_cls(raw_body=raw_body, content_type=content_type)
