from .clang_format import ClangFormat
from .thirdparty import ThirdParty


def check_all_requirements(config: dict | None = None) -> list[str]:
    result = []
    output_cfg = (config or {}).get("output", {})
    if output_cfg.get("clang_format", False):
        result.extend(ClangFormat.check_requirements())
    return result


__all__ = [
    'ClangFormat',
    'ThirdParty',
    'check_all_requirements',
]
