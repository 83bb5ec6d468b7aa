# hexo_llm_translate/exceptions.py
"""
本模块定义了翻译插件中所有自定义的、语义化的异常类型。

只有编排器的公共入口会捕获这些异常并回退到原文，其余组件一律向上抛出，
以便调用方根据异常类型决定是否重试。
"""


class HexoTranslateError(Exception):
    """所有自定义异常的通用基类。"""

    pass


class ConfigurationError(HexoTranslateError):
    """加载、解析或验证配置时发生的错误。"""

    pass


class TransportError(HexoTranslateError):
    """
    与翻译后端交互失败，且重试次数已耗尽。
    最后一次尝试的原始异常保存在 ``__cause__`` 中。
    """

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class ResponseFormatError(HexoTranslateError):
    """后端返回内容缺少约定的分隔标记或正文为空。重试无济于事。"""

    pass


class TranslationValidationError(HexoTranslateError):
    """译文未通过结构校验，不允许进入构建产物。"""

    pass


class MalformedHtmlError(TranslationValidationError):
    """译文中出现了残缺的 HTML 属性，例如 ``class=xxx">``。"""

    pass


class TagMismatchError(TranslationValidationError):
    """模板标签的开闭数量不一致。"""

    def __init__(self, tag: str, open_count: int, close_count: int):
        super().__init__(
            f"Mismatched template tag: {tag} (open: {open_count}, close: {close_count})"
        )
        self.tag = tag
        self.open_count = open_count
        self.close_count = close_count


class StorageError(HexoTranslateError):
    """持久化层（本地文件或远程数据库）的读写错误。只记录，不影响构建。"""

    pass
