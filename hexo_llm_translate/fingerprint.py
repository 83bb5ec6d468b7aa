# hexo_llm_translate/fingerprint.py
"""为文章内容生成用于缓存失效判断的指纹。"""

import hashlib

# 修改包装或校验逻辑后递增此版本号，可让全部旧缓存同时失效
SCHEMA_VERSION = "2"


def fingerprint(body: str, title: str, schema_version: str = SCHEMA_VERSION) -> str:
    """返回正文、标题与结构版本拼接后的 MD5 十六进制摘要。"""
    if not isinstance(body, str) or not isinstance(title, str):
        raise TypeError("body 和 title 必须是字符串")
    payload = "\x00".join([body, title, str(schema_version)])
    return hashlib.md5(payload.encode("utf-8")).hexdigest()
